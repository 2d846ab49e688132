"""
Two-phase response decoding.

A response is first checked for a SOAP fault, then decoded against a
`ResponseShape` with ElementTree, navigating by local name from the SOAP Body.
Vendors routinely move, rename or re-prefix elements, so any field the
structured phase leaves empty is looked up again with the namespace-agnostic
scanner in `xmlscan`, trying every known spelling of the field. Only when both
phases come up empty for a required field is a DecodeError raised.

Field paths are slash-separated local names relative to the response element
(or to a record, for list shapes) with an optional trailing ``@attribute``:
``MediaUri/Uri``, ``@token``, ``VideoEncoderConfiguration@token``.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from . import xmlscan
from .errors import DecodeError, TransportError
from .faults import classify
from .interfaces import RawResponse
from .util import _getLogger

_log = _getLogger(__name__)


@dataclass(frozen=True)
class Field:
    """One value to decode: result key, candidate paths, whether it must be present."""
    name: str
    paths: Tuple[str, ...]
    required: bool = False
    convert: Optional[Callable[[str], Any]] = None


@dataclass(frozen=True)
class ResponseShape:
    """
    Expected layout of a response. `response` is the local name of the
    element directly under the SOAP Body. List responses set `records` to the
    possible local names of the repeated element.
    """
    name: str
    response: str
    fields: Tuple[Field, ...]
    records: Tuple[str, ...] = ()

    @property
    def is_list(self) -> bool:
        return bool(self.records)


def _local(tag) -> str:
    if not isinstance(tag, str):
        # comments and processing instructions
        return ''
    return tag.rsplit('}', 1)[-1]


def _child(element, name: str):
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _split_path(path: str) -> Tuple[List[str], str]:
    element_path, _, attribute = path.partition('@')
    names = element_path.split('/') if element_path else []
    return names, attribute


def _structured_value(context, path: str) -> Optional[str]:
    names, attribute = _split_path(path)
    element = context
    for name in names:
        element = _child(element, name)
        if element is None:
            return None
    if attribute:
        for key, value in element.attrib.items():
            if _local(key) == attribute:
                return value.strip()
        return None
    return (element.text or '').strip()


def _scanned_value(inner: str, attributes: Dict[str, str], path: str) -> Optional[str]:
    names, attribute = _split_path(path)
    if attribute and not names:
        value = attributes.get(attribute)
        return value.strip() if value is not None else None
    scope = inner
    for name in names[:-1]:
        scope = xmlscan.extract(scope, name)
        if scope is None:
            return None
    if attribute:
        value = xmlscan.extract_attribute(scope, names[-1], attribute)
        return value.strip() if value is not None else None
    value = xmlscan.extract(scope, names[-1])
    if value is None:
        return None
    return xmlscan.text_content(value).strip()


def _convert(field: Field, value: Optional[str]) -> Any:
    if not value:
        return None
    if field.convert is None:
        return value
    try:
        return field.convert(value)
    except ValueError:
        _log.debug("Ignoring unconvertible value %r for %s", value, field.name)
        return None


def _missing(result: Dict[str, Any], shape: ResponseShape) -> List[str]:
    return [f.name for f in shape.fields if f.required and result.get(f.name) in (None, '')]


def _decode_with(lookup: Callable[[str], Optional[str]], shape: ResponseShape,
                 partial: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    result = dict(partial or {})
    for field in shape.fields:
        if result.get(field.name) not in (None, ''):
            continue
        result[field.name] = None
        for path in field.paths:
            value = _convert(field, lookup(path))
            if value is not None:
                result[field.name] = value
                break
    return result


def _response_element(body: bytes, shape: ResponseShape):
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        _log.debug("Structured decode of %s failed: %s", shape.name, exc)
        return None
    if _local(root.tag) == shape.response:
        return root
    soap_body = _child(root, 'Body')
    if soap_body is None:
        return None
    return _child(soap_body, shape.response)


def parse_structured(body: Union[bytes, str], shape: ResponseShape) -> Optional[Any]:
    """
    ElementTree phase. Returns None when the document doesn't parse or the
    response element isn't where the schema puts it; otherwise a dict (or a
    list of dicts) whose missing values are None.
    """
    if isinstance(body, str):
        body = body.encode('utf-8')
    response = _response_element(body, shape)
    if response is None:
        return None
    if not shape.is_list:
        return _decode_with(lambda path: _structured_value(response, path), shape)

    records = []
    for child in response:
        if _local(child.tag) in shape.records:
            records.append(_decode_with(lambda path, c=child: _structured_value(c, path), shape))
    return records


def parse_fallback(text: Union[bytes, str], shape: ResponseShape,
                   partial: Optional[Dict[str, Any]] = None) -> Optional[Any]:
    """
    Scanner phase. Searches inside the response element when it can be found
    anywhere in the text, else the whole text. For list shapes, returns None if
    the response element can't be located; records lacking a required field are
    dropped.
    """
    if isinstance(text, bytes):
        text = text.decode('utf-8', errors='replace')
    container = xmlscan.find_element(text, shape.response)

    if not shape.is_list:
        if container is not None:
            inner, attributes = container.inner, container.attributes
        else:
            inner, attributes = text, {}
        return _decode_with(lambda path: _scanned_value(inner, attributes, path), shape, partial)

    if container is None:
        return None
    records = []
    for record_name in shape.records:
        for element in xmlscan.iter_elements(container.inner, record_name):
            record = _decode_with(
                lambda path, e=element: _scanned_value(e.inner, e.attributes, path), shape)
            missing = _missing(record, shape)
            if missing:
                _log.debug("Skipping %s record without %s", record_name, missing[0])
                continue
            records.append(record)
        if records:
            break
    return records


def _unpack(response: Union[RawResponse, bytes, str]) -> Tuple[int, bytes]:
    if isinstance(response, RawResponse):
        return response.status, response.body
    if isinstance(response, str):
        return 200, response.encode('utf-8')
    return 200, response


def parse(response: Union[RawResponse, bytes, str], shape: ResponseShape) -> Any:
    """
    Decode `response` into `shape`.

    Raises ProtocolFault if the body is a SOAP fault, TransportError if the
    HTTP status is an error without a fault to explain it, and DecodeError if
    required data can't be found by either phase.
    """
    status, body = _unpack(response)

    fault = classify(body)
    if fault is not None:
        raise fault
    if status >= 400:
        raise TransportError(f"HTTP {status}", status=status, body=body)

    structured = parse_structured(body, shape)

    if shape.is_list:
        if structured and not any(_missing(r, shape) for r in structured):
            return structured
        records = parse_fallback(body, shape)
        if records is None:
            if structured is not None:
                return [r for r in structured if not _missing(r, shape)]
            raise DecodeError(f"{shape.name}: {shape.response} element not found",
                              shape=shape.name)
        return records

    if structured is not None and not _missing(structured, shape):
        return structured
    _log.debug("Falling back to tag scanning for %s", shape.name)
    result = parse_fallback(body, shape, structured)
    missing = _missing(result, shape)
    if missing:
        raise DecodeError(f"{shape.name}: {missing[0]} not found in response",
                          shape=shape.name, field=missing[0])
    return result

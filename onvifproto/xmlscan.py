"""
Namespace-agnostic element lookup over raw XML text.

Devices disagree about namespace prefixes (``tds:User``, ``tt:User``,
``User``) and frequently drift from the published schema, so the helpers here
work on the raw text with a small tokenizer that understands tag boundaries:
start tags (with or without attributes), end tags, self-closing tags,
comments, CDATA sections, processing instructions and declarations. No
validation is performed and malformed input never raises; anything that
can't be matched is reported as absent.

Contract:

* Elements are matched by local name; any prefix (or none) is accepted.
* A start tag is closed by the next end tag with the *same qualified name*
  at the same depth, so nested elements sharing the local name under a
  different prefix do not end the match early.
* A self-closing element (``<tt:OSD token="x"/>``) is present with empty
  content.
* A start tag with no matching end tag before the end of the text is
  absent; the scanner never consumes to end-of-text.
"""

import re
from typing import Dict, Iterator, NamedTuple, Optional, Union

from .util import unescape_xml

START, END, EMPTY = 'start', 'end', 'empty'

_TOKEN_RE = re.compile(
    r'<!--.*?-->'
    r'|<!\[CDATA\[.*?\]\]>'
    r'|<\?.*?\?>'
    r'|<!.*?>'
    r'|<(?P<close>/)?(?:(?P<prefix>[\w.\-]+):)?(?P<local>[\w.\-]+)'
    r'(?P<attrs>(?:\s(?:[^>"\'/]|/(?!>)|"[^"]*"|\'[^\']*\')*)?)'
    r'(?P<empty>/)?>',
    re.DOTALL,
)

_ATTR_RE = re.compile(
    r'(?:[\w.\-]+:)?(?P<name>[\w.\-]+)\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\')'
)

_CDATA_RE = re.compile(r'<!\[CDATA\[(.*?)\]\]>', re.DOTALL)


class _Tag(NamedTuple):
    kind: str
    prefix: str
    local_name: str
    attrs: str
    start: int
    end: int

    @property
    def qname(self):
        if self.prefix:
            return '%s:%s' % (self.prefix, self.local_name)
        return self.local_name


class Element(NamedTuple):
    """A located element: its name, raw attribute text and source offsets."""
    prefix: str
    local_name: str
    attrs: str
    start: int
    inner_start: int
    inner_end: int
    end: int
    inner: str

    @property
    def attributes(self) -> Dict[str, str]:
        """Attribute values keyed by local name (prefixes dropped)."""
        return parse_attributes(self.attrs)


def _as_text(xml: Union[str, bytes]) -> str:
    if isinstance(xml, bytes):
        return xml.decode('utf-8', errors='replace')
    return xml


def _iter_tags(text: str, pos: int = 0) -> Iterator[_Tag]:
    for match in _TOKEN_RE.finditer(text, pos):
        local_name = match.group('local')
        if local_name is None:
            # comment, CDATA, processing instruction or declaration
            continue
        if match.group('close'):
            kind = END
        elif match.group('empty'):
            kind = EMPTY
        else:
            kind = START
        yield _Tag(kind, match.group('prefix') or '', local_name,
                   match.group('attrs') or '', match.start(), match.end())


def parse_attributes(attrs: str) -> Dict[str, str]:
    result = {}
    for match in _ATTR_RE.finditer(attrs):
        value = match.group('dq')
        if value is None:
            value = match.group('sq')
        result.setdefault(match.group('name'), unescape_xml(value))
    return result


def find_element(xml: Union[str, bytes], local_name: str, start: int = 0) -> Optional[Element]:
    """Locate the first element named `local_name` at or after offset `start`."""
    text = _as_text(xml)
    tags = _iter_tags(text, start)
    for tag in tags:
        if tag.kind == END or tag.local_name != local_name:
            continue
        if tag.kind == EMPTY:
            return Element(tag.prefix, tag.local_name, tag.attrs, tag.start,
                           tag.end, tag.end, tag.end, '')
        depth = 1
        for inner in tags:
            if inner.qname != tag.qname:
                continue
            if inner.kind == START:
                depth += 1
            elif inner.kind == END:
                depth -= 1
                if depth == 0:
                    return Element(tag.prefix, tag.local_name, tag.attrs, tag.start,
                                   tag.end, inner.start, inner.end,
                                   text[tag.end:inner.start])
        return None
    return None


def has_element(xml: Union[str, bytes], local_name: str) -> bool:
    """True if any start or self-closing tag named `local_name` appears."""
    return any(
        tag.kind != END and tag.local_name == local_name
        for tag in _iter_tags(_as_text(xml))
    )


def extract(xml: Union[str, bytes], local_name: str) -> Optional[str]:
    """Return the raw inner text of the first `local_name` element, or None."""
    element = find_element(xml, local_name)
    if element is None:
        return None
    return element.inner


def extract_path(xml: Union[str, bytes], path: str) -> Optional[str]:
    """
    Follow a slash-separated path of local names, each searched for inside
    the previous match, e.g. ``extract_path(body, 'Reason/Text')``.
    """
    text = _as_text(xml)
    for name in path.split('/'):
        text = extract(text, name)
        if text is None:
            return None
    return text


def extract_attribute(xml: Union[str, bytes], local_name: str, attribute: str) -> Optional[str]:
    element = find_element(xml, local_name)
    if element is None:
        return None
    return element.attributes.get(attribute)


def iter_elements(xml: Union[str, bytes], local_name: str) -> Iterator[Element]:
    """
    Yield successive `local_name` elements. Each yielded element's `inner`
    slice is one record; scanning resumes after its closing tag.
    """
    text = _as_text(xml)
    pos = 0
    while True:
        element = find_element(text, local_name, pos)
        if element is None:
            return
        yield element
        pos = element.end


def text_content(inner: str) -> str:
    """
    Character data of an extracted slice: CDATA sections are replaced by their
    literal content and entities are decoded everywhere else.
    """
    parts = []
    pos = 0
    for match in _CDATA_RE.finditer(inner):
        parts.append(unescape_xml(inner[pos:match.start()]))
        parts.append(match.group(1))
        pos = match.end()
    parts.append(unescape_xml(inner[pos:]))
    return ''.join(parts)

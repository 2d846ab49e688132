import logging
from xml.sax.saxutils import escape, unescape


def _getLogger(name):
    """
    Retrieve a logger instance. The library never installs handlers of its
    own; configuring output is left to the application.
    """
    return logging.getLogger(name)


def first_address(address_list: str) -> str:
    """Return the first whitespace-separated address of an XAddrs-style list."""
    addresses = address_list.split()
    if addresses:
        return addresses[0]
    return ""


def escape_xml(value: str) -> str:
    """Escape a value for use as XML character data or an attribute."""
    return escape(value, {'"': "&quot;", "'": "&apos;"})


def unescape_xml(value: str) -> str:
    return unescape(value, {"&quot;": '"', "&apos;": "'"})

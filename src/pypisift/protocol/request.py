"""XML-RPC search request parser.

Parses the ``search`` calls emitted by ``pip search``. The request grammar is
small and fixed, so the whole document is loaded as a tree and queried by
path. Only the subset pip produces is accepted::

    <methodCall>
      <methodName>search</methodName>
      <params>
        <param><value><struct>
          <member>
            <name>name</name>
            <value><array><data>
              <value><string>django</string></value>
            </data></array></value>
          </member>
        </struct></value></param>
        <param><value><string>or</string></value></param>
      </params>
    </methodCall>
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, fromstring

from pypisift.models.query import SEARCH_FIELDS, QueryIntent
from pypisift.protocol.exceptions import MalformedDocument, UnsupportedOperation

logger = logging.getLogger(__name__)

METHOD_NAME_PATH = "methodName"
SEARCH_OPERATOR_PATH = "params/param/value/string"
MEMBER_STRUCT_PATH = "params/param/value/struct"
PARAMETER_NAME_PATH = "name"
PARAMETER_VALUE_PATH = "value/array/data/value/string"


def parse_search_request(repository: str, raw: bytes | str) -> QueryIntent:
    """Parse an XML-RPC search request into a validated ``QueryIntent``.

    Args:
        repository: Repository the search is scoped to. Carried through, not validated.
        raw: The request document.

    Returns:
        The validated search intent.

    Raises:
        MalformedDocument: If the document cannot be parsed or lacks a required element.
        UnsupportedOperation: If the method, operator or a search key is not supported.
    """
    root = _load(raw)
    if root.tag != "methodCall":
        raise MalformedDocument(f"Expected methodCall root element, found: {root.tag}")

    # Only pip's search call is supported; any other XML-RPC method is refused.
    method_name = _required(root, METHOD_NAME_PATH)
    if method_name != "search":
        raise UnsupportedOperation("method", method_name)

    # pip only ever combines terms with "or".
    operator = _required(root, SEARCH_OPERATOR_PATH)
    if operator != "or":
        raise UnsupportedOperation("operator", operator)

    struct = root.find(MEMBER_STRUCT_PATH)
    if struct is None:
        raise MalformedDocument(f"Missing required element: {MEMBER_STRUCT_PATH}")

    terms: dict[str, list[str]] = {}
    for member in struct.findall("member"):
        name = _required(member, PARAMETER_NAME_PATH)
        if name not in SEARCH_FIELDS:
            raise UnsupportedOperation("key", name)
        values = terms.setdefault(name, [])
        values.extend(_text(value) for value in member.findall(PARAMETER_VALUE_PATH))

    logger.debug("Parsed search request for %s: %s", repository, terms)
    return QueryIntent(repository=repository, terms=terms)


def _load(raw: bytes | str) -> Element:
    try:
        return fromstring(raw, forbid_dtd=True, forbid_entities=True, forbid_external=True)
    except (ParseError, DefusedXmlException) as e:
        raise MalformedDocument(f"Unparsable search request: {e}") from e


def _required(parent: Element, path: str) -> str:
    element = parent.find(path)
    if element is None:
        raise MalformedDocument(f"Missing required element: {path}")
    return _text(element)


def _text(element: Element) -> str:
    return "".join(element.itertext())

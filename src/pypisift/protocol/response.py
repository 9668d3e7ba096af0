"""XML-RPC search response codec.

Writes search results in the response format legacy ``pip search`` clients
expect, and parses such responses coming back from other servers so results
from several repositories can be merged.

Responses from other servers can be arbitrarily large, so they are parsed as a
stream of SAX events instead of being loaded as a tree.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable
from typing import BinaryIO
from xml.sax import SAXException
from xml.sax.handler import ContentHandler
from xml.sax.saxutils import XMLGenerator
from xml.sax.xmlreader import AttributesImpl

import defusedxml.sax
from defusedxml import DefusedXmlException

from pypisift.models.result import SearchResult
from pypisift.protocol.exceptions import MalformedDocument

logger = logging.getLogger(__name__)

ORDERING_MEMBER = "_pypi_ordering"

_NO_ATTRIBUTES = AttributesImpl({})

# Characters outside the XML 1.0 Char production; no parser accepts them, escaped or not.
_INVALID_XML_CHARS = re.compile(r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

# ═══════════════════════════════════════════════════════════════════════════════
# Write path
# ═══════════════════════════════════════════════════════════════════════════════


class SearchResponseWriter:
    """Streams a ``methodResponse`` carrying an array of result structs.

    Use as a context manager; the underlying buffer is released on exit,
    whether or not writing completed::

        with SearchResponseWriter() as writer:
            writer.write_prologue()
            writer.write_entry(result)
            writer.write_epilogue()
            body = writer.getvalue()
    """

    def __init__(self) -> None:
        self._buffer = io.StringIO()
        self._xml = XMLGenerator(self._buffer, encoding="utf-8", short_empty_elements=False)

    def __enter__(self) -> SearchResponseWriter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the output buffer."""
        self._buffer.close()

    def getvalue(self) -> bytes:
        """Return the document written so far, UTF-8 encoded."""
        return self._buffer.getvalue().encode("utf-8")

    def write_prologue(self) -> None:
        self._xml.startDocument()
        for tag in ("methodResponse", "params", "param", "value", "array", "data"):
            self._start(tag)

    def write_entry(self, result: SearchResult) -> None:
        self._start("value")
        self._start("struct")
        self._write_member("name", "string", result.name)
        self._write_member("version", "string", result.version)
        self._write_member("summary", "string", result.summary)
        self._write_member(ORDERING_MEMBER, "boolean", "0")
        self._end("struct")
        self._end("value")

    def write_epilogue(self) -> None:
        for tag in ("data", "array", "value", "param", "params", "methodResponse"):
            self._end(tag)
        self._xml.endDocument()

    def _write_member(self, name: str, value_type: str, value: str) -> None:
        self._start("member")
        self._element("name", name)
        self._start("value")
        self._element(value_type, value)
        self._end("value")
        self._end("member")

    def _element(self, tag: str, text: str) -> None:
        self._start(tag)
        self._xml.characters(_INVALID_XML_CHARS.sub("", text))
        self._end(tag)

    def _start(self, tag: str) -> None:
        self._xml.startElement(tag, _NO_ATTRIBUTES)

    def _end(self, tag: str) -> None:
        self._xml.endElement(tag)


def build_search_response(results: Iterable[SearchResult]) -> bytes:
    """Serialize search results as an XML-RPC ``methodResponse`` document.

    An empty iterable yields a well-formed response with an empty array.
    Characters XML 1.0 cannot represent, such as most control characters,
    are dropped from the written values.
    """
    with SearchResponseWriter() as writer:
        writer.write_prologue()
        for result in results:
            writer.write_entry(result)
        writer.write_epilogue()
        return writer.getvalue()


# ═══════════════════════════════════════════════════════════════════════════════
# Parse path
# ═══════════════════════════════════════════════════════════════════════════════


class SearchResponseHandler(ContentHandler):
    """SAX handler extracting ``SearchResult`` entries from a search response.

    Result structs do not nest, so a single character buffer and one set of
    struct slots are enough. A ``fault`` element invalidates the whole
    response: every later event is ignored and no results are reported.
    """

    def __init__(self) -> None:
        super().__init__()
        self._results: list[SearchResult] = []
        self._name = ""
        self._version = ""
        self._summary = ""
        self._member_name: str | None = None
        self._member_value: str | None = None
        self._characters: list[str] | None = None
        self.fault = False

    @property
    def results(self) -> list[SearchResult]:
        if self.fault:
            return []
        return list(self._results)

    def startElement(self, name: str, attrs: object) -> None:  # noqa: N802
        if self.fault:
            return
        if name == "fault":
            self.fault = True
        elif name == "struct":
            self._clear_slots()
        elif name == "member":
            self._member_name = None
            self._member_value = None
        elif name in ("name", "string", "boolean"):
            self._characters = []

    def endElement(self, name: str) -> None:  # noqa: N802
        if self.fault:
            return
        if name == "struct":
            self._results.append(SearchResult(name=self._name, version=self._version, summary=self._summary))
            self._clear_slots()
        elif name == "member":
            self._store(self._member_name, self._member_value)
            self._member_name = None
            self._member_value = None
        elif name == "name":
            self._member_name = self._take_characters()
        elif name in ("string", "boolean"):
            self._member_value = self._take_characters()

    def characters(self, content: str) -> None:
        if not self.fault and self._characters is not None:
            self._characters.append(content)

    def _take_characters(self) -> str | None:
        if self._characters is None:
            return None
        text = "".join(self._characters)
        self._characters = None
        return text

    def _clear_slots(self) -> None:
        self._name = ""
        self._version = ""
        self._summary = ""

    def _store(self, name: str | None, value: str | None) -> None:
        if value is None:
            return
        if name == "name":
            self._name = value
        elif name == "version":
            self._version = value
        elif name == "summary":
            self._summary = value
        # Other members some servers send (author, _pypi_ordering, ...) are ignored.


def parse_search_response(raw: bytes | BinaryIO) -> list[SearchResult]:
    """Parse an XML-RPC search response into search results.

    Args:
        raw: The response document, as bytes or a binary stream.

    Returns:
        The results in document order. A fault response yields an empty list.

    Raises:
        MalformedDocument: If the document is not well-formed.
    """
    handler = SearchResponseHandler()
    options = {"forbid_dtd": True, "forbid_entities": True, "forbid_external": True}
    try:
        if isinstance(raw, bytes | bytearray):
            defusedxml.sax.parseString(bytes(raw), handler, **options)
        else:
            defusedxml.sax.parse(raw, handler, **options)
    except (SAXException, DefusedXmlException) as e:
        raise MalformedDocument(f"Unparsable search response: {e}") from e

    if handler.fault:
        logger.info("Search response carried a fault, discarding its results")
    return handler.results

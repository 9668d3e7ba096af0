"""Legacy PyPI XML-RPC search protocol — request parsing, query translation and response codec."""

from pypisift.protocol.exceptions import MalformedDocument, ProtocolError, UnsupportedOperation
from pypisift.protocol.projector import project
from pypisift.protocol.request import parse_search_request
from pypisift.protocol.response import build_search_response, parse_search_response
from pypisift.protocol.translator import translate

__all__ = [
    "MalformedDocument",
    "ProtocolError",
    "UnsupportedOperation",
    "build_search_response",
    "parse_search_request",
    "parse_search_response",
    "project",
    "translate",
]

"""XML-RPC protocol exceptions."""


class ProtocolError(Exception):
    """Base exception for XML-RPC protocol errors."""


class MalformedDocument(ProtocolError):
    """Raised when a document is not well-formed or lacks a required element."""


class UnsupportedOperation(ProtocolError):
    """Raised for a well-formed request outside the supported feature set.

    Attributes:
        kind: What was rejected: ``"method"``, ``"operator"`` or ``"key"``.
        actual: The value found in the request.
    """

    def __init__(self, kind: str, actual: str) -> None:
        self.kind = kind
        self.actual = actual
        super().__init__(f"Unsupported {kind}: {actual!r}")

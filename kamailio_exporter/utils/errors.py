"""Exception hierarchy shared by the transport, parsers and collectors."""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConnectError(ExporterError):
    """The control socket could not be reached. Aborts the whole poll cycle."""


class ProtocolError(ExporterError):
    """A BINRPC exchange failed or produced an invalid packet."""


class TruncatedError(ProtocolError):
    """Fewer bytes were available than the packet or record declared."""


class CookieMismatchError(ProtocolError):
    """The reply cookie does not match the request that triggered it."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"reply cookie {received:#x} does not match request cookie {expected:#x}")
        self.expected = expected
        self.received = received


class FaultError(ProtocolError):
    """The server answered with a fault reply."""

    def __init__(self, code: int, message: str):
        super().__init__(f"fault {code}: {message}")
        self.code = code
        self.message = message


class DeadlineExceededError(ProtocolError):
    """The session deadline passed before the exchange completed."""


class TransportError(ProtocolError):
    """The underlying stream failed or the session is no longer usable."""


class TypeMismatchError(ExporterError):
    """A record was read through an accessor that does not match its type."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"expected {expected} record, got {actual}")
        self.expected = expected
        self.actual = actual


class StructureError(ExporterError):
    """A nested reply does not have the expected shape."""


class NoDataError(ExporterError):
    """The server returned a well-formed but empty result."""


class ValueParseError(ExporterError):
    """A single stat value could not be parsed as a number."""

class DispatchError(Exception):
    """Base class for failures raised by the dispatcher."""

class TransportError(DispatchError):
    """
    The request never got a response: DNS failure, refused or reset
    connection, TLS failure, or a timeout before the response headers.
    A non-2xx status is NOT a TransportError; it comes back as a normal handle.
    """

class StreamInterruptedError(DispatchError):
    """
    The connection dropped while a streamed body was being consumed.
    Chunks delivered before the failure remain valid.
    """

class MissingDatasetError(DispatchError, ValueError):
    """Knowledge-base call made without a dataset id configured."""

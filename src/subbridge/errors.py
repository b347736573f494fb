"""Exception types raised inside the subtitle pipeline."""


class SubbridgeError(Exception):
    """Base class for subbridge errors."""


class ParseError(SubbridgeError):
    """No subtitle cues could be recovered from the input."""


class BatchMismatchError(SubbridgeError):
    """Model output could not be aligned with the cues of a batch."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Translation count mismatch: got {received}, expected {expected}"
        )
        self.expected = expected
        self.received = received


class ModelCallError(SubbridgeError):
    """The language model call failed (network, auth or malformed response)."""


class CacheUnavailable(SubbridgeError):
    """The translation cache could not serve the request."""


class ConfigurationError(SubbridgeError):
    """Required configuration (usually an API key) is missing."""

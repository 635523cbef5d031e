"""Error taxonomy for the summarization flow.

Only SummarizationFailedError is meant to cross into the HTTP layer; the
others are raised and logged inside the core.
"""

GENERIC_FAILURE_MESSAGE = "Failed to summarize reviews. Please try again later."


class SummarizerError(Exception):
    """Base class for every error raised by review_insights."""


class ConfigurationError(SummarizerError):
    """Required configuration (the API credential) is missing."""


class ValidationError(SummarizerError, ValueError):
    """Reviews handed to the prompt builder are malformed."""


class EmptyOutputError(SummarizerError):
    """The model answered without a usable `summary` field."""


class TransportError(SummarizerError):
    """The model service could not be reached or returned an error status."""


class SummarizationFailedError(SummarizerError):
    """User-facing failure; carries a fixed message and no internal detail."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)
        self.message = message

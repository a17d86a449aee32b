"""Exception taxonomy shared by the adapter, orchestrator and HTTP boundary."""


class AirPulseError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(AirPulseError):
    """A required setting (usually an API key) is missing."""


class InputValidationError(AirPulseError):
    """The caller omitted or mangled a required input."""


class UpstreamUnavailable(AirPulseError):
    """The weather provider could not be reached or returned unusable data.

    Only raised inside the adapter, which turns it into a fallback payload.
    """

    def __init__(self, query: str, reason: str):
        self.query = query
        self.reason = reason
        super().__init__(f"Upstream unavailable for '{query}': {reason}")


GENERIC_ERROR_MESSAGE = "Sorry, I'm having trouble processing your request. Please try again."

"""Typed failures raised by the AI gateway."""


class GatewayError(RuntimeError):
    """Base class for every AI gateway failure."""


class MalformedResponse(GatewayError):
    """Structured generation returned text that is not the expected JSON object."""


class EmptyResponse(GatewayError):
    """Chat continuation returned no text."""


class NoAudioData(GatewayError):
    """Speech synthesis returned no inline audio payload."""


class TransportFailure(GatewayError):
    """The provider call itself failed (network, auth, rate limit, server error)."""

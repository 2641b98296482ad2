"""Exceptions raised by the generative AI gateway."""


class GatewayError(Exception):
    """Base class for every failure reported by the gateway."""


class GatewayConfigError(GatewayError):
    """Raised when the gateway is missing required configuration."""


class SegmentationError(GatewayError):
    pass


class SynthesisError(GatewayError):
    pass


class ChatError(GatewayError):
    pass

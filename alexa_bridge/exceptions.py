"""
Custom exceptions for the bridge.

Domain validation failures (thermostat setpoints, unsupported modes) are not
exceptions; they are sent back to the caller as ErrorResponse envelopes.
"""


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    pass


class UnsupportedAxisError(BridgeError):
    """Raised when a range controller is built for an axis the device lacks."""

    def __init__(self, axis: str):
        self.axis = axis
        super().__init__(f"{axis.capitalize()} not supported")


class SignalingUsageError(BridgeError):
    """Raised when a signaling session is used in a way Alexa cannot support."""

    pass


class DuplicateHandlerError(BridgeError):
    """Raised when a second handler is registered for the same directive."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Directive handler already registered: {key}")


class DuplicateAdapterError(BridgeError):
    """Raised when a second adapter is registered for the same device type."""

    def __init__(self, device_type: str):
        self.device_type = device_type
        super().__init__(f"Capability adapter already registered: {device_type}")


class InvalidDirectiveError(BridgeError):
    """Raised when an inbound envelope is not a well-formed directive."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid directive: {reason}")

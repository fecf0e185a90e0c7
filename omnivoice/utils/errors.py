"""Custom exception classes for the OmniVoice assistant."""


class VoiceAssistantError(Exception):
    """Base exception for all OmniVoice errors."""
    pass


class ConfigurationError(VoiceAssistantError):
    """Raised when there's a configuration error."""
    pass


class ValidationError(VoiceAssistantError):
    """Raised when data validation fails."""
    pass


class InvalidTransitionError(VoiceAssistantError):
    """Raised when a command or payment status would move backwards."""
    pass


class CommandNotFoundError(VoiceAssistantError):
    """Raised when a command id is not present in the history log."""
    pass


class PaymentRequestNotFoundError(VoiceAssistantError):
    """Raised when a payment request id is not registered."""
    pass

class SaunaFlowError(Exception):
    """Base class for every error raised by saunaflow."""
    pass


class InvalidTransitionError(SaunaFlowError):
    """Exception raised when an operation is invoked from a state that does not allow it."""
    pass


class SessionFinishedError(InvalidTransitionError):
    """Exception raised when a finished or abandoned session is driven again."""
    pass


class ProtocolValidationError(SaunaFlowError, ValueError):
    """Exception raised when a stage, protocol or custom draft value is invalid."""
    pass


class NoStagesEnabledError(ProtocolValidationError):
    """Exception raised when a custom ritual is built with every stage turned off."""
    pass


class ProtocolNotFoundError(SaunaFlowError, KeyError):
    """Exception raised when a protocol id is not in the catalog."""
    pass


class SuggestionError(SaunaFlowError):
    """Exception raised when the suggestion provider fails or answers with garbage."""
    pass


class StorageError(SaunaFlowError):
    """Exception raised when the storage adapter cannot read or write."""
    pass


class OnboardingError(SaunaFlowError, ValueError):
    """Exception raised when onboarding is completed without a usable name or goal."""
    pass

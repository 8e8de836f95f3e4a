class ButtonInputError(Exception):
    """Base exception for button input handling."""


class ButtonConfigurationError(ButtonInputError):
    """Raised when input device configuration is invalid."""


class ButtonDependencyError(ButtonInputError):
    """Raised when the input device library is missing."""


class ButtonDeviceError(ButtonInputError):
    """Raised when the input device cannot be opened or read."""

class ActionError(Exception):
    """Base exception for external action scripts."""


class ActionConfigurationError(ActionError):
    """Raised when action script configuration is invalid."""


class ActionLaunchError(ActionError):
    """Raised when an action script cannot be started."""

"""Exception types shared by the workflow core and its collaborators."""


class WorkflowError(Exception):
    """Base class for workflow controller errors."""


class InvalidTransition(WorkflowError):
    """An operation was requested in a state that does not offer it."""


class IdentityRequired(WorkflowError):
    """Saving to history needs a signed-in user."""


class AcquisitionError(Exception):
    """Image acquisition failed (device unavailable, unreadable file, ...)."""


class DetectionError(Exception):
    """The detection service failed to produce a result."""


class DetectionTimeout(DetectionError):
    """The detection call did not finish before its deadline."""


class DetectionCancelled(DetectionError):
    """The detection call was cancelled by the caller."""


class BackendError(Exception):
    """The hosted backend rejected or failed a request."""


class ConfigError(Exception):
    """Invalid application configuration."""

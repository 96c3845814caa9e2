class PathError(Exception):
    """Base class for path configuration and usage errors."""


class InvalidPathConfiguration(PathError, ValueError):
    """The waypoint sequence breaks a legality rule, or a path file is malformed."""


class NotInitialized(PathError, RuntimeError):
    """Path.loop or automatic following was called before Path.init."""


class MissingConfiguration(PathError, RuntimeError):
    """Automatic mode requested without a drive actuator or pose source bound."""

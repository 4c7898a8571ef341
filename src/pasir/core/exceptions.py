"""Exceptions raised by the pasir model components."""


class ConfigurationError(ValueError):
    """A required parameter is missing or has an invalid value."""


class GeometryError(ValueError):
    """The bed profile does not cross a required elevation."""


def check_required(config, required, component):
    """
    Raise ConfigurationError if any required field is absent.

    Args:
        config: Mapping (or object) holding parameter values
        required: Iterable of required field names
        component: Name used in the error message
    """
    if isinstance(config, dict):
        missing = [key for key in required if config.get(key) is None]
    else:
        missing = [key for key in required if getattr(config, key, None) is None]

    if missing:
        raise ConfigurationError(
            f"One or more parameters missing in {component}. "
            f"Required: {', '.join(required)}. Missing: {', '.join(missing)}."
        )

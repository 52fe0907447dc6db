class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class InvalidInputError(ShortLinksError):
    """Base exception for malformed client input."""

    error_code = 'input:invalid_input_error'


class InvalidURLError(InvalidInputError):
    """Raised when a submitted URL cannot be parsed into scheme and host."""

    error_code = 'input:invalid_url_error'


class InvalidIdError(InvalidInputError):
    """Raised when a record id is not a valid UUID."""

    error_code = 'input:invalid_id_error'


class ForbiddenTargetError(ShortLinksError):
    """Raised when a URL targets a private network address or a blacklisted host."""

    error_code = 'input:forbidden_target_error'


class ExpiredOrInactiveError(ShortLinksError):
    """Raised when a short URL exists but is expired or deactivated."""

    error_code = 'link:expired_or_inactive_error'


class RandomSourceError(ShortLinksError):
    """Raised when the OS entropy source is unavailable."""

    error_code = 'shortcode:random_source_error'


class GenerationExhaustedError(ShortLinksError):
    """Raised when no unused shortcode was found within the attempt ceiling."""

    error_code = 'shortcode:generation_exhausted_error'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'

"""Error hints for configuration validation errors.

Provides user-friendly hints with actionable remediation steps
for common validation errors.
"""

from typing import Final


# Mapping of error types to user-friendly hints
ERROR_HINTS: Final[dict[str, str]] = {
    "bool_type": "This field must be true or false.",
    "float_type": "This field must be a number.",
    "greater_than": "The value is too small. It must be positive.",
    "less_than_equal": "The value is too large. Check the maximum allowed.",
    "string_too_short": "The value must not be empty.",
    "path_type": "This field must be a file path.",
    "extra_forbidden": "Unknown setting. Check the spelling of the option.",
    "value_error": "Check the value format.",
}

# Field-specific hints for more context
FIELD_HINTS: Final[dict[str, str]] = {
    "puppetdb_url": "Must be an HTTP/HTTPS URL (e.g., 'https://puppetdb:8081/pdb/query').",
    "scrape_interval": "Use a duration such as '5s', '1m' or '1m30s'.",
    "unreported_threshold": "Use a duration such as '2h', '90m' or '1h30m'.",
    "categories": "Use a comma-separated list (e.g., 'resources,time,changes,events').",
    "listen_address": "Use host:port (e.g., ':9635' or '127.0.0.1:9635').",
    "metrics_path": "Must start with '/' (e.g., '/metrics').",
    "cert_file": "Provide both --cert-file and --key-file, or neither.",
    "key_file": "Provide both --cert-file and --key-file, or neither.",
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Get a user-friendly hint for a validation error.

    Args:
        error_type: The Pydantic error type (e.g., 'missing', 'value_error').
        field_name: Optional field name for field-specific hints.

    Returns:
        A user-friendly hint string.
    """
    if field_name:
        simple_field = field_name.split(".")[-1]
        if simple_field in FIELD_HINTS:
            return FIELD_HINTS[simple_field]

    return ERROR_HINTS.get(
        error_type, "Check the exporter documentation for valid values."
    )


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a validation error with optional hint.

    Args:
        location: The error location (e.g., 'scrape_interval').
        message: The original error message.
        error_type: The error type.
        include_hint: Whether to include a hint.

    Returns:
        Formatted error string.
    """
    base = f"{location}: {message}"
    if include_hint:
        hint = get_error_hint(error_type, location)
        return f"{base}\n    Hint: {hint}"
    return base

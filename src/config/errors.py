"""Configuration errors."""


class ConfigError(ValueError):
    """Raised when exporter configuration is malformed.

    Configuration errors are fatal: the reconciliation loop is never
    started with a configuration that failed to assemble.
    """

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            errors: Optional per-field validation error details.
        """
        self.errors = errors or []
        super().__init__(message)

"""Assemble the effective exporter configuration."""

import time
from collections.abc import Mapping

import structlog
from pydantic import ValidationError

from src.config.constants import COMPONENT_CONFIG
from src.config.errors import ConfigError
from src.config.models import ExporterConfig
from src.settings.app import AppSettings


logger = structlog.get_logger()


def load_config(
    settings: AppSettings | None = None,
    overrides: Mapping[str, object] | None = None,
) -> ExporterConfig:
    """Merge environment settings and CLI overrides into an ExporterConfig.

    Precedence is CLI overrides, then environment/.env settings, then
    model defaults. ``None`` values never override anything.

    Args:
        settings: Environment-backed settings.
        overrides: Values given explicitly on the command line.

    Returns:
        Validated, immutable configuration.

    Raises:
        ConfigError: If any value fails validation.
    """
    log = logger.bind(component=COMPONENT_CONFIG)
    start = time.perf_counter()

    raw: dict[str, object] = {}
    if settings is not None:
        raw.update(settings.as_config_values())
    if overrides:
        raw.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = ExporterConfig.model_validate(raw)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(part) for part in err["loc"]) or "config",
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        log.warning("config_validation_failed", errors=errors)
        msg = f"Invalid configuration: {len(errors)} error(s)"
        raise ConfigError(msg, errors=errors) from e

    log.info(
        "config_loaded",
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
        **config.to_display_dict(),
    )
    return config

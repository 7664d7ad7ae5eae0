"""Exporter configuration: durations, validated settings and loading."""

from src.config.durations import format_duration, parse_duration
from src.config.errors import ConfigError
from src.config.loader import load_config
from src.config.models import ExporterConfig, parse_categories


__all__ = [
    "ConfigError",
    "ExporterConfig",
    "format_duration",
    "load_config",
    "parse_categories",
    "parse_duration",
]

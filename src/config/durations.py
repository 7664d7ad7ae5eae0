"""Duration strings in the Go ``time.Duration`` notation.

The unreported threshold ends up inside the ``reason`` label of exported
gauges, so its rendering must match the notation operators already query
for (``2h0m0s``, ``1m30s``, ``500ms``).
"""

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from src.config.errors import ConfigError


_NANOSECONDS_PER_UNIT: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND
_NS_PER_HOUR = 60 * _NS_PER_MINUTE

# Largest duration Go can represent (int64 nanoseconds)
_MAX_DURATION_NS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration string such as ``"1h30m"`` or ``"1.5s"``.

    Args:
        text: Duration string: an optional sign followed by one or more
            decimal numbers each with a unit suffix. ``"0"`` is accepted
            without a unit.

    Returns:
        The parsed duration, truncated to microsecond resolution.

    Raises:
        ConfigError: If the string is not a valid duration.
    """
    original = text
    text = text.strip()
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        msg = f"invalid duration {original!r}"
        raise ConfigError(msg)

    total_ns = Decimal(0)
    position = 0
    for match in _COMPONENT_PATTERN.finditer(text):
        if match.start() != position:
            break
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as e:
            msg = f"invalid duration {original!r}"
            raise ConfigError(msg) from e
        total_ns += amount * _NANOSECONDS_PER_UNIT[match.group(2)]
        position = match.end()

    if position != len(text) or total_ns > _MAX_DURATION_NS:
        msg = f"invalid duration {original!r}"
        raise ConfigError(msg)

    microseconds = int(total_ns // 1000)
    return timedelta(microseconds=sign * microseconds)


def _format_fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(precision, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(duration: timedelta) -> str:
    """Render a duration the way Go's ``Duration.String`` does.

    Args:
        duration: Duration to render.

    Returns:
        Canonical string, e.g. ``"2h0m0s"``, ``"1m30s"``, ``"250ms"``, ``"0s"``.
    """
    total_us = (duration.days * 86_400 + duration.seconds) * 1_000_000
    total_ns = (total_us + duration.microseconds) * 1_000

    prefix = "-" if total_ns < 0 else ""
    total_ns = abs(total_ns)

    if total_ns == 0:
        return "0s"

    if total_ns < _NS_PER_SECOND:
        if total_ns < 1_000:
            return f"{prefix}{total_ns}ns"
        if total_ns < 1_000_000:
            return f"{prefix}{_format_fraction(total_ns, 3)}µs"
        return f"{prefix}{_format_fraction(total_ns, 6)}ms"

    hours, remainder = divmod(total_ns, _NS_PER_HOUR)
    minutes, second_ns = divmod(remainder, _NS_PER_MINUTE)
    seconds = f"{_format_fraction(second_ns, 9)}s"

    if hours:
        return f"{prefix}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{prefix}{minutes}m{seconds}"
    return f"{prefix}{seconds}"

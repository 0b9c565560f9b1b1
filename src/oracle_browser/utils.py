"""Small parsing helpers shared by the config layer."""
import re

_DURATION_RE = re.compile(r"^([0-9]+)(ms|s|m)?$", re.IGNORECASE)


def parse_duration(text: str | None, fallback: int) -> int:
    """Parse ``"250"``, ``"250ms"``, ``"5s"`` or ``"2m"`` into milliseconds.

    Returns *fallback* for empty or unparseable input.
    """
    if not text:
        return fallback
    match = _DURATION_RE.match(text.strip())
    if not match:
        return fallback
    value = int(match.group(1))
    unit = (match.group(2) or "ms").lower()
    if unit == "s":
        return value * 1000
    if unit == "m":
        return value * 60_000
    return value

import time
from typing import Any, Mapping, Optional


def data_get(data: Optional[Mapping], path: str, default: Any = None) -> Any:
    """
    Resolve a dotted path like 'data.commandName' against nested mappings.
    Returns `default` as soon as a segment is missing or not a mapping.
    """
    current: Any = data
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current


def pushed_at() -> str:
    """Current UNIX time with microseconds, e.g. '1762420354.123456'."""
    return f"{time.time():.6f}"

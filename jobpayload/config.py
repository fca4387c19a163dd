import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union

DEFAULT_CONFIG = {
    "signal_key_prefix": "",      # empty disables fairness signals
    "signals_database": "0",
    "redis_url": "redis://localhost:6379",
    "socket_timeout": "5",
    "connections": "",            # name=url,name=url
}

ALLOWED_CONFIG_KEYS = set(DEFAULT_CONFIG.keys())

ENV_PREFIX = "JOBPAYLOAD_"


def parse_connections(value: str) -> Dict[str, str]:
    """
    Parse 'signals=redis://host:6379/2,cache=redis://other:6379/0'
    into {name: url}. Raises ValueError on entries without '='.
    """
    out = {}
    for entry in (value or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, url = entry.partition("=")
        if not sep or not name.strip() or not url.strip():
            raise ValueError(f"Invalid connection entry: {entry!r} (expected name=url)")
        out[name.strip()] = url.strip()
    return out


def parse_database(value: Union[str, int]) -> Union[str, int]:
    """Digit strings select a Redis database index, anything else is a connection name."""
    if isinstance(value, int):
        return value
    value = str(value).strip()
    if not value:
        raise ValueError("signals_database cannot be empty.")
    return int(value) if value.isdigit() else value


@dataclass
class PayloadConfig:
    signal_key_prefix: str = ""
    signals_database: Union[str, int] = 0
    redis_url: str = "redis://localhost:6379"
    socket_timeout: float = 5.0
    connections: Dict[str, str] = field(default_factory=dict)

    @property
    def signals_enabled(self) -> bool:
        return bool(self.signal_key_prefix)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PayloadConfig":
        unknown = set(values) - ALLOWED_CONFIG_KEYS
        if unknown:
            raise ValueError(f"Allowed keys: {', '.join(sorted(ALLOWED_CONFIG_KEYS))}")

        merged = {**DEFAULT_CONFIG, **{k: str(v) for k, v in values.items()}}
        try:
            timeout = float(merged["socket_timeout"])
        except ValueError:
            raise ValueError("socket_timeout must be a number.")
        if timeout <= 0:
            raise ValueError("socket_timeout must be > 0 seconds")

        return cls(
            signal_key_prefix=merged["signal_key_prefix"],
            signals_database=parse_database(merged["signals_database"]),
            redis_url=merged["redis_url"],
            socket_timeout=timeout,
            connections=parse_connections(merged["connections"]),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PayloadConfig":
        environ = os.environ if environ is None else environ
        values = {}
        for key in ALLOWED_CONFIG_KEYS:
            env_key = ENV_PREFIX + key.upper()
            if env_key in environ:
                values[key] = environ[env_key]
        return cls.from_mapping(values)

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from pcaphost.utils.errors import ConfigurationError

DEFAULT_DB_PATH = Path.home() / ".pcapdb"
DEFAULT_MAP_NAME = "TcpHost"
DEFAULT_CACHE_SIZE = 10_000
DEFAULT_CACHE_TTL = 5 * 60.0  # seconds after last write

ENV_PREFIX = "PCAPHOST_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for one pcaphost invocation.
    Defaults can be overridden from PCAPHOST_* environment variables.
    """
    db_path: Path = DEFAULT_DB_PATH
    map_name: str = DEFAULT_MAP_NAME
    cache_size: int = DEFAULT_CACHE_SIZE
    cache_ttl: float = DEFAULT_CACHE_TTL
    include_local: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        kwargs = {}

        db = env.get(ENV_PREFIX + "DB")
        if db:
            kwargs["db_path"] = Path(db).expanduser()

        map_name = env.get(ENV_PREFIX + "MAP")
        if map_name:
            kwargs["map_name"] = map_name

        size = env.get(ENV_PREFIX + "CACHE_SIZE")
        if size is not None:
            kwargs["cache_size"] = _positive(ENV_PREFIX + "CACHE_SIZE", size, int)

        ttl = env.get(ENV_PREFIX + "CACHE_TTL")
        if ttl is not None:
            kwargs["cache_ttl"] = _positive(ENV_PREFIX + "CACHE_TTL", ttl, float)

        local = env.get(ENV_PREFIX + "INCLUDE_LOCAL")
        if local is not None:
            kwargs["include_local"] = _flag(ENV_PREFIX + "INCLUDE_LOCAL", local)

        return cls(**kwargs)

    def replace(self, **changes) -> "Settings":
        return replace(self, **changes)


def _positive(key: str, raw: str, kind):
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigurationError(key, raw, f"not a valid {kind.__name__}") from None
    if value <= 0:
        raise ConfigurationError(key, raw, "must be greater than zero")
    return value


def _flag(key: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(key, raw, "expected a boolean (1/0, true/false, yes/no)")

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    pg_config: str = "pg_config"
    compiler: str = "gcc"
    profile: str = "release"
    timeout: float | None = None


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"PGEXT_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ValueError(f"PGEXT_TIMEOUT must be positive, got {raw!r}")
    return timeout


def get_settings() -> Settings:
    return Settings(
        pg_config=os.getenv("PG_CONFIG", "pg_config"),
        compiler=os.getenv("CC", "gcc"),
        profile=os.getenv("PGEXT_PROFILE", "release"),
        timeout=_parse_timeout(os.getenv("PGEXT_TIMEOUT")),
    )

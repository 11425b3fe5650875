"""Runtime configuration for cidrcalc."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .meta.client import DEFAULT_ENDPOINT_URL, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .ranges.evaluator import DEFAULT_THRESHOLD


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _coerce_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _coerce_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def default_cache_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the per-user cache directory (``$XDG_CACHE_HOME/cidrcalc`` or ``~/.cache/cidrcalc``)."""
    env = os.environ if env is None else env
    base = env.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "cidrcalc"


@dataclass(slots=True)
class CidrCalcSettings:
    """Normalized configuration shared by the CLI and the meta client.

    A ``cache_dir`` of None disables on-disk caching and cache fallback.
    """

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    cache_dir: Optional[Path] = None
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    threshold: int = DEFAULT_THRESHOLD
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_sources(
        cls,
        config: Mapping[str, Any] | None = None,
        env_prefix: str = "CIDRCALC_",
    ) -> "CidrCalcSettings":
        """Build settings from defaults, optional config mapping, and environment variables.

        Precedence order (highest to lowest):
        1. Explicit config mapping values
        2. Environment variables
        3. Default values

        Passing ``cache_dir=False`` in ``config`` disables caching, as does a
        truthy ``{prefix}DISABLE_CACHE`` environment variable.
        """
        env = os.environ
        prefix = env_prefix.upper()

        cfg: dict[str, Any] = {
            "endpoint_url": DEFAULT_ENDPOINT_URL,
            "cache_dir": default_cache_dir(env),
            "request_timeout": DEFAULT_TIMEOUT_SECONDS,
            "threshold": DEFAULT_THRESHOLD,
            "user_agent": DEFAULT_USER_AGENT,
        }

        config_keys: set[str] = set()
        if config:
            config_keys = {k for k, v in config.items() if v is not None}
            cfg.update({k: v for k, v in config.items() if v is not None})

        if "endpoint_url" not in config_keys:
            endpoint_override = env.get(f"{prefix}ENDPOINT_URL")
            if endpoint_override:
                cfg["endpoint_url"] = endpoint_override.strip()

        if "cache_dir" not in config_keys:
            cache_override = env.get(f"{prefix}CACHE_DIR")
            if cache_override:
                cfg["cache_dir"] = Path(cache_override).expanduser()
            if _coerce_bool(env.get(f"{prefix}DISABLE_CACHE"), False):
                cfg["cache_dir"] = None

        if cfg["cache_dir"] is False:
            cfg["cache_dir"] = None
        elif cfg["cache_dir"] is not None:
            cfg["cache_dir"] = Path(cfg["cache_dir"])

        if "request_timeout" not in config_keys:
            cfg["request_timeout"] = _coerce_float(env.get(f"{prefix}TIMEOUT"), float(cfg["request_timeout"]))

        if "threshold" not in config_keys:
            threshold = _coerce_int(env.get(f"{prefix}THRESHOLD"), int(cfg["threshold"]))
            cfg["threshold"] = threshold if threshold >= 0 else DEFAULT_THRESHOLD

        return cls(**cfg)


def load_settings(
    config: Mapping[str, Any] | None = None,
    env_prefix: str = "CIDRCALC_",
) -> CidrCalcSettings:
    """Convenience wrapper used by CLI entry points."""
    return CidrCalcSettings.from_sources(config=config, env_prefix=env_prefix)


__all__ = ["CidrCalcSettings", "default_cache_dir", "load_settings"]

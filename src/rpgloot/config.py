"""Configuration helpers for the loot engine tooling."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(slots=True)
class LootConfig:
    definitions_path: str | None = None
    seed: int | None = None
    log_level: str = _DEFAULT_LOG_LEVEL
    strict: bool = False


def get_user_config_dir() -> Path:
    """Return the directory holding the rpgloot config file for this user."""
    env_var = "APPDATA" if os.name == "nt" else "XDG_CONFIG_HOME"
    root = os.environ.get(env_var)
    if root:
        return Path(root) / "rpgloot"
    if os.name == "nt":
        return Path.home() / "rpgloot"
    return Path.home() / ".config" / "rpgloot"


def get_default_config_path() -> Path:
    return get_user_config_dir() / "config.json"


def _normalize(raw: dict) -> LootConfig:
    definitions_path = raw.get("definitions_path")
    if not isinstance(definitions_path, str) or not definitions_path:
        definitions_path = None
    seed = raw.get("seed")
    if isinstance(seed, bool) or not isinstance(seed, int):
        seed = None
    log_level = raw.get("log_level")
    if not isinstance(log_level, str) or log_level.upper() not in _LOG_LEVELS:
        log_level = _DEFAULT_LOG_LEVEL
    strict = raw.get("strict") is True
    return LootConfig(
        definitions_path=definitions_path,
        seed=seed,
        log_level=log_level.upper(),
        strict=strict,
    )


def load_config(path: Path | None = None) -> LootConfig:
    """Read ``path`` (default: the per-user file); unreadable files give defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return LootConfig()
    if not isinstance(raw, dict):
        return LootConfig()
    return _normalize(raw)


def save_config(config: LootConfig, path: Path | None = None) -> None:
    """Write the normalized form of ``config`` as sorted JSON."""
    target = path or get_default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    normalized = asdict(_normalize(asdict(config)))
    target.write_text(json.dumps(normalized, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def configure_logging(config: LootConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

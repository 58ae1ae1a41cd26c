"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from ensure_update.errors import ConfigError

from .models import EnsureUpdateConfig

CONFIG_ENV = "ENSURE_UPDATE_CONFIG"
STATE_DIR_ENV = "ENSURE_UPDATE_STATE_DIR"


def default_config_path() -> Path:
    return Path.home() / ".ensure-update" / "config.yaml"


def load_config(cli_path: str | None = None) -> EnsureUpdateConfig:
    """Load config with resolution order: CLI > $ENSURE_UPDATE_CONFIG > user-global > defaults.

    An explicitly named file that does not exist is an error; the user-global
    file is optional.
    """
    env_path = os.environ.get(CONFIG_ENV)
    explicit = cli_path or env_path
    if explicit and not Path(explicit).expanduser().exists():
        raise ConfigError(f"Config file not found: {explicit}")

    config_paths = [
        Path(explicit).expanduser() if explicit else None,
        default_config_path(),
    ]

    cfg = EnsureUpdateConfig()
    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    break
                if not isinstance(raw, dict):
                    raise ConfigError(f"Invalid config in {path}: expected a mapping")
                raw = _expand_env_vars(raw)
                cfg = EnsureUpdateConfig(**raw)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ConfigError(f"Invalid config in {path}: {e}") from e
            break

    state_dir = os.environ.get(STATE_DIR_ENV)
    if state_dir:
        cfg = cfg.model_copy(
            update={"store": cfg.store.model_copy(update={"state_dir": state_dir})}
        )
    return cfg


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj

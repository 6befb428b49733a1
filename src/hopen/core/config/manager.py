"""
hopen configuration management (layered YAML + environment overrides).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jsonschema import Draft202012Validator

from hopen.core.exceptions import ConfigError
from hopen.core.utils import deep_merge, read_yaml
from hopen.data import get_data_path
from hopen.data import read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "HOPEN_"
ENV_CONFIG_DIR = "HOPEN_CONFIG_DIR"
DEFAULT_USER_CONFIG_DIR = Path("~/.config/hopen")
USER_CONFIG_FILENAME = "config.yaml"


def get_user_config_dir() -> Path:
    """Return the user config directory (``$HOPEN_CONFIG_DIR`` or ``~/.config/hopen``)."""
    raw = os.environ.get(ENV_CONFIG_DIR) or str(DEFAULT_USER_CONFIG_DIR)
    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = Path.home() / p
    return p.resolve()


class ConfigManager:
    """Load, merge, and validate hopen configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: ``HOPEN_<section>__<key>[__<key>...]``
    2. User config: ``<user-config-dir>/config.yaml``
    3. Bundled defaults: ``hopen.data/config/defaults.yaml``

    Only variables containing ``__`` are treated as overrides, so plain
    variables such as ``HOPEN_SITE_HOME`` and ``HOPEN_CONFIG_DIR`` keep
    their own meaning.
    """

    def __init__(self, user_config_dir: Optional[Path] = None) -> None:
        self.user_config_dir = (
            Path(user_config_dir).expanduser().resolve()
            if user_config_dir is not None
            else get_user_config_dir()
        )
        self.core_config_path = get_data_path("config", "defaults.yaml")
        self.schema_path = get_data_path("schemas", "config.schema.yaml")

    @property
    def user_config_path(self) -> Path:
        return self.user_config_dir / USER_CONFIG_FILENAME

    # ========== Env override parsing ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip().lower() in {"null", "none"}:
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if "__" not in raw:
                continue
            segs = raw.split("__")
            if any(seg == "" for seg in segs):
                if strict:
                    raise ConfigError(
                        f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                        context={"variable": key},
                    )
                continue
            yield [seg.lower() for seg in segs], self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        node = root
        for seg in path[:-1]:
            child = node.get(seg)
            if not isinstance(child, dict):
                child = {}
                node[seg] = child
            node = child
        node[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool = True) -> None:
        for path, typed_value in self._iter_env_overrides(strict=strict):
            logger.debug("config override from env: %s=%r", ".".join(path), typed_value)
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = read_yaml(self.schema_path, default={}, raise_on_error=True)
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {where}: {first.message}",
                context={"user config": self.user_config_path},
            )

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration (defaults < user file < env)."""
        cfg: Dict[str, Any] = copy.deepcopy(read_data_yaml("config", "defaults.yaml"))

        try:
            user_cfg = read_yaml(self.user_config_path, default={}, raise_on_error=True)
        except FileNotFoundError:
            user_cfg = {}
        except Exception as exc:
            # Fail closed: never silently ignore an invalid user config.
            raise ConfigError(f"Cannot read {self.user_config_path}: {exc}") from exc
        if user_cfg and not isinstance(user_cfg, dict):
            raise ConfigError(
                "User config must be a mapping",
                context={"user config": self.user_config_path},
            )
        if user_cfg:
            logger.debug("merging user config from %s", self.user_config_path)
            cfg = deep_merge(cfg, user_cfg)

        self.apply_env_overrides(cfg, strict=validate)

        if validate:
            self.validate_schema(cfg)
        return cfg


__all__ = ["ConfigManager", "get_user_config_dir", "ENV_PREFIX", "ENV_CONFIG_DIR"]

"""Medialib configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (MEDIALIB_PROMPT, MEDIALIB_CONFIRM_QUIT)
  3. Per-project medialib.yaml  (current working directory)
  4. Global ~/.medialib/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from medialib.library.models import DEFAULT_REQUIRED_KEYS, MediaType, RequiredKeys

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR_NAME: str = ".medialib"
_GLOBAL_CONFIG_NAME: str = "config.yaml"
_PROJECT_CONFIG_NAME: str = "medialib.yaml"

# Known top-level sections — unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["session", "required_keys", "export"])

_TRUE_STRINGS: frozenset[str] = frozenset(["1", "true", "yes", "on"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class SessionCfg:
    """Interactive session settings (medialib.yaml: session:).

    Attributes:
        prompt: Text shown before each input line.
        confirm_quit: Ask before quitting while the last result set is non-empty.
    """

    prompt: str = "> "
    confirm_quit: bool = True


@dataclass
class ExportCfg:
    """Persister settings (medialib.yaml: export:)."""

    indent: int = 2


@dataclass
class MedialibConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    session: SessionCfg = field(default_factory=SessionCfg)
    required_keys: RequiredKeys = field(default_factory=lambda: dict(DEFAULT_REQUIRED_KEYS))
    export: ExportCfg = field(default_factory=ExportCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _parse_required_keys(raw: Any, base: RequiredKeys) -> RequiredKeys:
    """Overlay *raw* (type name → list of keys) onto *base*.

    Types omitted from *raw* keep their *base* keys; an empty list makes a
    type's metadata freely deletable.
    """
    if not isinstance(raw, dict):
        raise ConfigError(
            "required_keys must be a mapping of media type to a list of keys.\n"
            "  Example:\n"
            "    required_keys:\n"
            "      image: [creator, resolution]"
        )
    result = dict(base)
    for type_name, keys in raw.items():
        try:
            media_type = MediaType.parse(str(type_name))
        except ValueError as exc:
            raise ConfigError(f"required_keys: {exc}") from None
        if keys is None:
            keys = []
        if isinstance(keys, str) or not isinstance(keys, list):
            raise ConfigError(
                f"required_keys.{media_type.value} must be a list of keys, got {keys!r}."
            )
        result[media_type] = frozenset(str(k) for k in keys)
    return result


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> MedialibConfig:
    """Build a *MedialibConfig* from a merged raw YAML dict."""
    cfg = MedialibConfig()

    if "session" in data:
        s = data["session"] or {}
        cfg.session = SessionCfg(
            prompt=str(s.get("prompt", cfg.session.prompt)),
            confirm_quit=_parse_bool(s.get("confirm_quit", cfg.session.confirm_quit)),
        )

    if "required_keys" in data:
        cfg.required_keys = _parse_required_keys(data["required_keys"], cfg.required_keys)

    if "export" in data:
        e = data["export"] or {}
        cfg.export = ExportCfg(indent=int(e.get("indent", cfg.export.indent)))

    return cfg


def _apply_env_overrides(cfg: MedialibConfig) -> MedialibConfig:
    """Apply MEDIALIB_* environment variable overrides."""
    if prompt := os.environ.get("MEDIALIB_PROMPT"):
        cfg.session.prompt = prompt
    if (confirm := os.environ.get("MEDIALIB_CONFIRM_QUIT")) is not None:
        cfg.session.confirm_quit = _parse_bool(confirm)
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> MedialibConfig:
    """Load and return a merged *MedialibConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *medialib.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *MedialibConfig* with env var overrides applied.

    Raises:
        ConfigError: If a file is not a YAML mapping or names an unknown
            media type under ``required_keys``.
    """
    global_path = (
        global_config_path
        if global_config_path is not None
        else Path.home() / _GLOBAL_CONFIG_DIR_NAME / _GLOBAL_CONFIG_NAME
    )
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    return cfg

"""Load RenderConfig from a prerender config file if present.

Lookup order (relative to the working directory):

    1. An explicit path, when given
    2. ``prerender.config.py``
    3. ``prerender.config.json``
    4. ``prerender.config.yaml``
    5. ``prerender.config.yml``

Python config files export ``config``: either a mapping or a callable
(sync or async) returning one.  JSON and YAML files hold a mapping.
Keyword overrides (e.g. from the CLI) take precedence over the file.
"""

from __future__ import annotations

import importlib.util
import json
import sys
from collections.abc import Mapping
from pathlib import Path

import yaml

from prerender._errors import ConfigError
from prerender.config import RenderConfig, maybe_await, merge_config

CONFIG_FILENAMES: tuple[str, ...] = (
    "prerender.config.py",
    "prerender.config.json",
    "prerender.config.yaml",
    "prerender.config.yml",
)

# Attribute a Python config module must define
_CONFIG_ATTR = "config"


async def load_config(
    path: str | Path | None = None,
    *,
    cwd: Path | None = None,
    **overrides: object,
) -> RenderConfig:
    """Load the config file (if any) and merge *overrides* over it.

    Returns an all-defaults config when no file is found.

    Raises:
        ConfigError: If a config file exists but cannot be parsed, or its
            values are invalid.

    """
    file_config = await read_config_file(path, cwd=cwd)
    config = merge_config(file_config)
    if overrides:
        config = merge_config(overrides, base=config)
    return config


def find_config_file(path: str | Path | None = None, *, cwd: Path | None = None) -> Path | None:
    """Return the first existing config file candidate, or *None*."""
    root = cwd if cwd is not None else Path.cwd()
    candidates: list[Path] = []
    if path:
        candidates.append(root / path)
    candidates.extend(root / name for name in CONFIG_FILENAMES)

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


async def read_config_file(
    path: str | Path | None = None,
    *,
    cwd: Path | None = None,
) -> Mapping[str, object]:
    """Read raw config values from the discovered file.  Empty if none."""
    found = find_config_file(path, cwd=cwd)
    if found is None:
        return {}

    suffix = found.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(found.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(found.read_text(encoding="utf-8")) or {}
        elif suffix == ".py":
            data = await _load_python_config(found)
        else:
            msg = f"Unsupported config file type: {found}"
            raise ConfigError(msg)
    except ConfigError:
        raise
    except Exception as exc:
        msg = f"Failed to load config from {found}: {exc}"
        raise ConfigError(msg) from exc

    if not isinstance(data, Mapping):
        msg = f"Config file {found} must define a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return data


async def _load_python_config(py_file: Path) -> object:
    """Import *py_file* in isolation and return its (resolved) ``config``."""
    module_name = "prerender_user_config"
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        msg = f"Cannot import config module {py_file}"
        raise ConfigError(msg)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    finally:
        sys.modules.pop(module_name, None)

    if not hasattr(module, _CONFIG_ATTR):
        msg = f"{py_file} does not define {_CONFIG_ATTR!r}"
        raise ConfigError(msg)

    exported = getattr(module, _CONFIG_ATTR)
    if callable(exported):
        return await maybe_await(exported())
    return exported

"""
Locate and read the YAML configuration files for press_sync.

Up to three files contribute, from lowest to highest precedence:

* ``~/.config/press_sync/config.yml`` (per user)
* ``.press_sync/config.yml`` or ``.press_sync/config.yaml`` in the working
  directory (per project)
* the file named by ``PRESS_SYNC_CONFIG``

Higher files replace whole top-level sections of lower ones; sections are
not merged key by key. ``${VAR}`` references are expanded once the files
are combined, so a project file may refer to secrets kept in the
environment.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Iterator

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PRESS_SYNC_CONFIG"

PROJECT_DIR = ".press_sync"
PROJECT_FILENAMES = ("config.yml", "config.yaml")
USER_CONFIG = Path(".config") / "press_sync" / "config.yml"

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+?)(?::-(?P<fallback>.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Expand ``${NAME}`` and ``${NAME:-fallback}`` in *value*.

    An unset or empty variable expands to its fallback, or to ``""`` when
    none is given. Text like ``${`` without a closing brace is kept as is.
    """
    return _ENV_REF.sub(
        lambda m: os.environ.get(m["name"]) or m["fallback"] or "", value
    )


def _interpolate_recursive(obj: Any) -> Any:
    match obj:
        case str():
            return interpolate_env_vars(obj)
        case dict():
            return {key: _interpolate_recursive(v) for key, v in obj.items()}
        case list():
            return [_interpolate_recursive(v) for v in obj]
        case _:
            return obj


def _candidate_paths() -> Iterator[Path]:
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        yield Path(explicit).expanduser().resolve()
    project_dir = Path.cwd() / PROJECT_DIR
    for name in PROJECT_FILENAMES:
        yield project_dir / name
    yield Path.home() / USER_CONFIG


def discover_config_files() -> list[Path]:
    """Return the config files that exist, highest precedence first."""
    found = [path for path in _candidate_paths() if path.is_file()]
    logger.debug("Config files found: %s", [str(p) for p in found])
    return found


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse one file; a blank file or a non-mapping root contributes nothing.

    Raises:
        yaml.YAMLError: If the file is not valid YAML.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError:
        logger.error("Config file %s is not valid YAML", path)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Ignoring config file %s: non-dict root (%s)",
            path,
            type(data).__name__,
        )
        return {}
    return data


def load_hierarchical_config() -> dict[str, Any]:
    """Combine every discovered config file into one raw mapping.

    Returns ``{}`` when there are no config files.

    Raises:
        yaml.YAMLError: If a config file is not valid YAML.
        OSError: If a config file cannot be read.
    """
    combined: dict[str, Any] = {}
    for path in reversed(discover_config_files()):
        combined.update(_read_config_file(path))
    return _interpolate_recursive(combined)

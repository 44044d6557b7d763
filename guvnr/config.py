"""Project configuration loading.

Reads ``guvnr.yaml`` (or ``guvnr.yml``) from the project root with
PyYAML's ``safe_load``. Only the keys the checker consumes are mapped;
everything else in the file is kept in ``raw`` untouched.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from guvnr.core.scanner.models import ScanMode
from guvnr.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: tuple[str, ...] = ("guvnr.yaml", "guvnr.yml")
DEFAULT_MAX_NEW_TODOS = 3


@dataclass
class GuvnrConfig:
    """Settings read from guvnr.yaml."""
    version: Optional[str] = None
    project_name: Optional[str] = None
    project_description: Optional[str] = None
    scan_mode: ScanMode = ScanMode.BASIC
    enforce: bool = False
    exclude: list[str] = field(default_factory=list)
    max_new_todos: int = DEFAULT_MAX_NEW_TODOS
    path: Optional[Path] = None
    raw: dict[str, Any] = field(default_factory=dict)


def find_config_file(root: Path) -> Optional[Path]:
    """Return the first config file present under root, if any."""
    for name in CONFIG_FILE_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def _section(data: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(
            f"'{key}' in {path.name} must be a mapping",
            suggestion=f"Write '{key}:' followed by indented keys",
            context={"path": str(path)},
        )
    return value


def parse_config(content: str, path: Path) -> GuvnrConfig:
    """
    Parse config text into a GuvnrConfig.

    Raises:
        ConfigError: malformed YAML, a non-mapping document, or a bad value
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"{path.name} is not valid YAML: {e}",
            suggestion="Fix the YAML syntax, then run 'guvnr validate'",
            context={"path": str(path)},
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"{path.name} must contain a mapping at the top level",
            context={"path": str(path)},
        )

    project = _section(data, "project", path)
    security = _section(data, "security", path)

    mode_value = security.get("scan_mode", ScanMode.BASIC.value)
    try:
        scan_mode = ScanMode(str(mode_value))
    except ValueError:
        raise ConfigError(
            f"security.scan_mode must be 'basic' or 'strict', got {mode_value!r}",
            context={"path": str(path)},
        )

    exclude = security.get("exclude") or []
    if isinstance(exclude, str):
        exclude = [exclude]
    if not isinstance(exclude, list):
        raise ConfigError(
            "security.exclude must be a list of patterns",
            context={"path": str(path)},
        )

    max_new = security.get("max_new_todos", DEFAULT_MAX_NEW_TODOS)
    if isinstance(max_new, bool) or not isinstance(max_new, int) or max_new < 0:
        raise ConfigError(
            f"security.max_new_todos must be a non-negative integer, got {max_new!r}",
            context={"path": str(path)},
        )

    version = data.get("version")
    return GuvnrConfig(
        version=str(version) if version is not None else None,
        project_name=project.get("name"),
        project_description=project.get("description"),
        scan_mode=scan_mode,
        enforce=bool(security.get("enforce", False)),
        exclude=[str(p) for p in exclude],
        max_new_todos=max_new,
        path=path,
        raw=data,
    )


def load_config(root: Path) -> GuvnrConfig:
    """
    Load guvnr.yaml from a project root.

    A missing file yields defaults.

    Args:
        root: Project root directory

    Returns:
        GuvnrConfig

    Raises:
        ConfigError: the file exists but cannot be read or parsed
    """
    path = find_config_file(root)
    if path is None:
        logger.debug(f"No config file in {root}, using defaults")
        return GuvnrConfig()

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Cannot read {path.name}: {e}",
            context={"path": str(path)},
        ) from e

    config = parse_config(content, path)
    logger.debug(f"Loaded config from {path}")
    return config

#!/usr/bin/env python3
"""
ASPIRE2COOLIFY CONFIG LOADER
----------------------------
Finds and reads the project configuration file (YAML or JSON, both parsed
by ruamel.yaml) and turns it into typed settings. Keys may be written in
snake_case or camelCase.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml import YAML, YAMLError

from aspire2coolify.core.models import RepositoryConfig

logger = logging.getLogger("aspire2coolify.config")

SEARCH_PLACES = (
    "aspire2coolify.yaml",
    "aspire2coolify.yml",
    "aspire2coolify.json",
    ".aspire2coolifyrc",
    ".aspire2coolifyrc.yaml",
    ".aspire2coolifyrc.json",
)
DEFAULT_CONFIG_NAME = "aspire2coolify.yaml"
OUTPUT_FORMATS = ("shell", "json", "yaml")


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or understood."""


@dataclass
class CoolifySettings:
    api_url: Optional[str] = None
    token: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    server_id: Optional[str] = None
    environment_name: Optional[str] = None
    skip_existing: bool = False
    instant_deploy: Optional[bool] = None


@dataclass
class DefaultsSettings:
    # Forces one build pack on every repository-sourced application when set
    build_pack: Optional[str] = None


@dataclass
class OutputSettings:
    include_comments: bool = True
    format: str = "shell"


@dataclass
class AppConfig:
    coolify: CoolifySettings = field(default_factory=CoolifySettings)
    github: Optional[RepositoryConfig] = None
    defaults: DefaultsSettings = field(default_factory=DefaultsSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    source: Optional[Path] = None          # File the settings came from, if any


def _snake(key: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', str(key)).lower()


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return {_snake(k): v for k, v in value.items()}


def _pick(section: Dict[str, Any], cls):
    """Keeps only the keys cls knows; unknown keys are logged and ignored."""
    known = cls.__dataclass_fields__.keys()
    for key in section.keys() - known:
        logger.debug("Ignoring unknown config key '%s' for %s", key, cls.__name__)
    return cls(**{k: v for k, v in section.items() if k in known and v is not None})


def config_from_dict(data: Dict[str, Any], source: Optional[Path] = None) -> AppConfig:
    data = {_snake(k): v for k, v in (data or {}).items()}
    config = AppConfig(source=source)

    config.coolify = _pick(_section(data, "coolify"), CoolifySettings)
    config.defaults = _pick(_section(data, "defaults"), DefaultsSettings)
    config.output = _pick(_section(data, "output"), OutputSettings)

    github = _section(data, "github")
    if github.get("repository"):
        config.github = _pick(github, RepositoryConfig)
    elif github:
        logger.debug("github section without a repository ignored")

    if config.output.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output.format must be one of {', '.join(OUTPUT_FORMATS)}, got '{config.output.format}'"
        )
    return config


def load_config_file(path: Union[str, Path]) -> AppConfig:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = YAML(typ="safe").load(text)
    except YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    logger.debug("Loaded config from %s", path)
    return config_from_dict(data, source=path)


def find_config(search_from: Optional[Union[str, Path]] = None) -> Optional[Path]:
    base = Path(search_from) if search_from else Path.cwd()
    if base.is_file():
        base = base.parent
    for name in SEARCH_PLACES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config(search_from: Optional[Union[str, Path]] = None) -> AppConfig:
    """First config file found in search_from (default: cwd), else the defaults."""
    found = find_config(search_from)
    if found is None:
        return get_default_config()
    return load_config_file(found)


def get_default_config() -> AppConfig:
    return AppConfig()


def create_config_template() -> str:
    return """\
# aspire2coolify configuration
coolify:
  # api_url: https://your-coolify-instance.com
  # token: your-api-token          # or use the COOLIFY_TOKEN env var
  # project_id: your-project-uuid
  # project_name: MyApp              # used to create the project when project_id is empty
  # server_id: your-server-uuid
  # environment_name: production
  # skip_existing: false           # skip resources that already exist instead of failing

# Git source for applications (optional)
# github:
#   repository: https://github.com/your-org/your-repo
#   branch: main
#   base_path: ''
#   app_uuid: ''                   # GitHub App UUID for private repositories

defaults:
  # build_pack: nixpacks           # nixpacks | dockerfile | static | dockercompose

output:
  include_comments: true
  format: shell                    # shell | json | yaml
"""

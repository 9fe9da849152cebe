# mdxforge/core/config.py
"""
项目配置：.mdxforge/config.yaml
缺失的键使用默认值，类型错误抛出 ConfigError。
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigError

CONFIG_DIR = Path(".mdxforge")
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "project": {"id": None, "title": None},
    "storage": {"dir": ".mdxforge/store"},
    "history": {"max_length": None, "skip_identical": True},
    "codec": {"strict_delimiter": True},
    "outline": {"attach_orphan_subsections": False},
    "patch": {"allow_heuristics": True},
    "generation": {"markdown_fallback": False},
}

_BOOL_KEYS = [
    ("history", "skip_identical"),
    ("codec", "strict_delimiter"),
    ("outline", "attach_orphan_subsections"),
    ("patch", "allow_heuristics"),
    ("generation", "markdown_fallback"),
]


@dataclass
class ForgeConfig:
    project_id: str
    project_title: str
    storage_dir: str = ".mdxforge/store"
    history_max_length: Optional[int] = None
    skip_identical: bool = True
    strict_delimiter: bool = True
    attach_orphan_subsections: bool = False
    allow_heuristics: bool = True
    markdown_fallback: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_project_id: str = "default") -> 'ForgeConfig':
        merged = _merge(data)
        project_id = merged["project"]["id"] or default_project_id
        return cls(
            project_id=str(project_id),
            project_title=str(merged["project"]["title"] or project_id),
            storage_dir=str(merged["storage"]["dir"]),
            history_max_length=merged["history"]["max_length"],
            skip_identical=merged["history"]["skip_identical"],
            strict_delimiter=merged["codec"]["strict_delimiter"],
            attach_orphan_subsections=merged["outline"]["attach_orphan_subsections"],
            allow_heuristics=merged["patch"]["allow_heuristics"],
            markdown_fallback=merged["generation"]["markdown_fallback"],
        )


def _merge(data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    merged = copy.deepcopy(DEFAULTS)
    for section, values in (data or {}).items():
        if section not in merged:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"'{section}' must be a mapping, got {type(values).__name__}")
        merged[section].update(values)

    for section, key in _BOOL_KEYS:
        if not isinstance(merged[section][key], bool):
            raise ConfigError(f"'{section}.{key}' must be true or false")

    max_length = merged["history"]["max_length"]
    if max_length is not None and (isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 1):
        raise ConfigError("'history.max_length' must be a positive integer or null")

    if not merged["storage"]["dir"]:
        raise ConfigError("'storage.dir' must not be empty")
    return merged


def validate_config_content(content: str) -> Dict[str, Any]:
    """验证配置内容字符串，返回解析后的字典"""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML syntax error: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML mapping")
    _merge(data)
    return data


def load_config(path: Union[str, Path] = CONFIG_FILE) -> ForgeConfig:
    path = Path(path)
    # 项目目录名作为默认项目 ID
    default_project_id = Path.cwd().name or "default"
    if not path.exists():
        return ForgeConfig.from_dict({}, default_project_id=default_project_id)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    return ForgeConfig.from_dict(validate_config_content(content), default_project_id=default_project_id)

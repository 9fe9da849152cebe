# mdxforge/init.py
"""
项目初始化模块：渲染 .mdxforge/config.yaml 内容。
文件的实际创建由 CLI 层 (mdxforge/cli.py) 执行。
"""

import re
from pathlib import Path

import jinja2

from .core.config import validate_config_content

TEMPLATE_DIR = Path(__file__).parent / "templates" / "config"


def normalize_project_id(name: str) -> str:
    project_id = re.sub(r"[^A-Za-z0-9._-]+", "-", name.strip()).strip("-.")
    return project_id or "default"


def render_template(name: str, **values) -> str:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
    )
    return env.get_template(name).render(**values)


def init_project(project_title: str, project_id: str = None, storage_dir: str = ".mdxforge/store") -> str:
    """返回渲染好且校验通过的 config 内容"""
    content = render_template(
        "config.yaml.j2",
        project_id=normalize_project_id(project_id or project_title),
        project_title=project_title.replace("'", "''"),
        storage_dir=storage_dir,
    )
    validate_config_content(content)
    return content

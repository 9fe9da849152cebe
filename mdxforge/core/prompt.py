# mdxforge/core/prompt.py
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import jinja2

from .models import NamedDocument

# 📁 模板根目录（相对于当前文件）
TEMPLATES_DIR = Path(__file__).parent.parent / "templates" / "prompts"

ALIASES = {
    'chat': 'chat_system.md.j2',
    'generate': 'generation.md.j2',
    'generation': 'generation.md.j2',
}


class PromptBuilder:
    """Renders the prompts that teach the model the response contracts."""

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = Path(templates_dir or TEMPLATES_DIR)
        self.env = self._create_jinja_env()

    def _create_jinja_env(self) -> jinja2.Environment:
        loader = jinja2.FileSystemLoader(str(self.templates_dir))
        return jinja2.Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)

    def _resolve_template_path(self, template: str) -> str:
        if template in ALIASES:
            template = ALIASES[template]
        if not template.endswith(('.j2', '.md')):
            template += '.md.j2'
        return template

    def render(self, template: str, **context: Any) -> str:
        template_path = self._resolve_template_path(template)
        try:
            tmpl = self.env.get_template(template_path)
        except jinja2.TemplateNotFound:
            raise FileNotFoundError(f"Template not found: {template_path}")
        return tmpl.render(**context).strip()

    def chat_system_prompt(self, documents: Sequence[NamedDocument], include_contents: bool = True) -> str:
        return self.render('chat', documents=list(documents), include_contents=include_contents)

    def generation_prompt(self, api_spec: str, project_title: Optional[str] = None) -> str:
        return self.render('generate', api_spec=api_spec.strip(), project_title=project_title)

    def list_templates(self) -> Dict[str, str]:
        return dict(ALIASES)

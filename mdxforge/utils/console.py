"""
统一的控制台输出工具，基于 rich 实现 CLI 交互与日志。
"""
import logging
import os
from typing import Optional

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.theme import Theme

# 自定义主题
CUSTOM_THEME = Theme({
    "info": "cyan bold",
    "success": "green bold",
    "warning": "yellow bold",
    "error": "red bold",
    "heading": "bold underline",
    "path": "magenta",
    "code": "bold white on black",
    "prompt": "green",
})

# 全局控制台实例（单例）
console = RichConsole(theme=CUSTOM_THEME, soft_wrap=True)
# 日志走 stderr，不污染 CLI 的标准输出
log_console = RichConsole(theme=CUSTOM_THEME, stderr=True)

LOG_LEVEL_ENV = "MDXFORGE_LOG_LEVEL"
_handler: Optional[RichHandler] = None


def log_level_from_env() -> int:
    """Level named by ``MDXFORGE_LOG_LEVEL``; unknown names fall back to WARNING."""
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``mdxforge`` hierarchy rendered through rich."""
    global _handler
    root = logging.getLogger("mdxforge")
    if _handler is None:
        _handler = RichHandler(console=log_console, show_path=False, markup=False)
        root.addHandler(_handler)
        root.setLevel(log_level_from_env())
    if name == "mdxforge" or name.startswith("mdxforge."):
        return logging.getLogger(name)
    return root.getChild(name)


# --- 便捷输出函数 ---

def info(message: str):
    console.print(f"💡 [info]INFO[/info]: {message}")


def success(message: str):
    console.print(f"✅ [success]SUCCESS[/success]: {message}")


def warning(message: str):
    console.print(f"⚠️  [warning]WARNING[/warning]: {message}")


def error(message: str):
    console.print(f"❌ [error]ERROR[/error]: {message}")


def heading(title: str):
    console.print(f"\n🎯 [heading]{title}[/heading]\n")


def confirm(prompt: str, default: bool = True) -> bool:
    """确认对话（Y/N）"""
    yes_no = "[Y/n]" if default else "[y/N]"
    response = console.input(f"❓ {prompt} {yes_no}: ").strip().lower()

    if not response:
        return default
    return response in ("y", "yes")


def print_table(rows: list, headers: list, title: Optional[str] = None):
    """打印简单表格"""
    from rich.table import Table

    table = Table(title=title, show_header=True, header_style="bold magenta")
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)

# mdxforge/cli.py
"""
MdxForge CLI 主入口：通过 DocProject 服务层操作文档快照。
"""
import json
from pathlib import Path

import click
from rich.panel import Panel
from rich.tree import Tree

from mdxforge import __version__
from mdxforge.core.codec import decode
from mdxforge.core.config import CONFIG_FILE, load_config
from mdxforge.core.errors import ConfigError, JSONRecoveryFailure, DocumentShapeError, MdxForgeError
from mdxforge.core.outline import outline_to_dict
from mdxforge.core.project import DocProject
from mdxforge.core.prompt import PromptBuilder
from mdxforge.init import init_project
from mdxforge.utils.console import console, info, success, warning, error, heading, print_table, confirm
from snapstore import SnapshotStoreError


@click.group(invoke_without_command=True)
@click.version_option(__version__, message="MdxForge CLI v%(version)s")
@click.pass_context
def cli(ctx):
    """📚 MdxForge - versioned AI-generated MDX documentation"""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ------------------------------
# 辅助函数
# ------------------------------

def _load_project() -> DocProject:
    if not CONFIG_FILE.exists():
        error("Configuration file missing. Please run `mdxforge init` first.")
        raise click.Abort()
    try:
        config = load_config(CONFIG_FILE)
        return DocProject.from_config(config)
    except (ConfigError, SnapshotStoreError) as e:
        error(f"Failed to open project: {e}")
        raise click.Abort()


def _file_names(project: DocProject) -> list:
    return [doc.filename for doc in project.documents()]


# ------------------------------
# 命令: init
# ------------------------------

@cli.command()
@click.option("--title", "-t", default=None, help="Project title (defaults to the directory name)")
@click.option("--id", "project_id", default=None, help="Project id used by the snapshot store")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration")
def init(title, project_id, force):
    """🔧 Initialize project configuration"""
    heading("Project Initialization")
    if CONFIG_FILE.exists() and not force:
        if not confirm("Configuration already exists. Re-initializing will overwrite. Continue?", default=False):
            info("Cancelled.")
            return
    try:
        content = init_project(title or Path.cwd().name, project_id=project_id)
    except MdxForgeError as e:
        error(f"Initialization failed: {e}")
        raise click.Abort()

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(content, encoding="utf-8")
    success(f"Generated: {CONFIG_FILE}")


# ------------------------------
# 命令: generate / show / outline
# ------------------------------

@cli.command()
@click.argument("response_file", type=click.File("r", encoding="utf-8"))
def generate(response_file):
    """🤖 Store documents from an AI generation response (JSON array, '-' for stdin)"""
    project = _load_project()
    try:
        snapshot = project.import_generation(response_file.read())
    except (JSONRecoveryFailure, DocumentShapeError) as e:
        error(f"Could not understand the AI response: {e}")
        raise click.Abort()
    except (MdxForgeError, SnapshotStoreError) as e:
        error(f"Failed to store generated documents: {e}")
        raise click.Abort()

    names = _file_names(project)
    success(f"Saved version {snapshot.id} with {len(names)} file(s)")
    for name in names:
        console.print(f"  • [path]{name}[/path]")


@cli.command()
@click.option("--file", "-f", "filename", default=None, help="Print a single file")
def show(filename):
    """📄 List the files of the latest version, or print one file"""
    project = _load_project()
    documents = project.documents()
    if not documents:
        warning("No documents yet. Run `mdxforge generate` first.")
        return

    if filename:
        doc = project.document(filename)
        if doc is None:
            error(f"File not found: {filename}")
            raise click.Abort()
        click.echo(doc.content)
        return

    rows = [(i + 1, doc.filename, len(doc.content.splitlines())) for i, doc in enumerate(documents)]
    print_table(rows, headers=["#", "File", "Lines"], title=f"📁 {project.config.project_title}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the outline as JSON")
def outline(as_json):
    """🧭 Print the heading outline of the latest version"""
    project = _load_project()
    nodes = project.outline()
    if as_json:
        click.echo(json.dumps(outline_to_dict(nodes), indent=2, ensure_ascii=False))
        return

    tree = Tree(f"[bold]{project.config.project_title}[/bold]")

    def add(branch, node):
        child = branch.add(f"{node.title} [dim]#{node.id}[/dim]")
        for sub in node.children:
            add(child, sub)

    for node in nodes:
        add(tree, node)
    console.print(tree)


# ------------------------------
# 命令: history / revert
# ------------------------------

@cli.command()
def history():
    """🕘 List stored versions (newest first)"""
    project = _load_project()
    if not len(project.history):
        warning("No versions stored yet.")
        return

    rows = []
    for index, snapshot in enumerate(project.history):
        rows.append((index, snapshot.id, snapshot.created_at, len(decode(snapshot.full_text))))
    print_table(rows, headers=["Index", "Version", "Created At", "Files"], title="Versions")


@cli.command()
@click.argument("index", type=int)
@click.option("--commit", is_flag=True, help="Save this version again as the latest")
def revert(index, commit):
    """⏪ View an older version; with --commit make it the latest"""
    project = _load_project()
    try:
        documents = project.revert(index)
    except IndexError as e:
        error(str(e))
        raise click.Abort()

    if not commit:
        info(f"Version {index} ({project.history.current.id}) contains {len(documents)} file(s):")
        for doc in documents:
            console.print(f"  • [path]{doc.filename}[/path]")
        console.print(f"\n💡 Run [cyan]mdxforge revert {index} --commit[/cyan] to restore it.")
        return

    try:
        snapshot = project.commit_current()
    except (MdxForgeError, SnapshotStoreError) as e:
        error(f"Failed to restore version {index}: {e}")
        raise click.Abort()
    success(f"Version {index} restored as {snapshot.id}")


# ------------------------------
# chat 命令组
# ------------------------------

@cli.group()
def chat():
    """💬 Apply AI chat responses"""
    pass


@chat.command(name="apply")
@click.argument("response_file", type=click.File("r", encoding="utf-8"))
@click.option("--file", "-f", "files", multiple=True, help="Files the chat was about (default target of guessed fixes)")
@click.option("--no-heuristics", is_flag=True, help="Only accept MDX_* marker blocks")
def chat_apply(response_file, files, no_heuristics):
    """💾 Apply the edit contained in an AI chat response ('-' for stdin)"""
    project = _load_project()
    if no_heuristics:
        project.parser.allow_heuristics = False

    try:
        result = project.apply_chat_response(response_file.read(), files_in_scope=files)
    except (MdxForgeError, SnapshotStoreError) as e:
        error(f"Failed to apply chat response: {e}")
        raise click.Abort()

    if not result.applied:
        warning("No edit was requested in this response.")
        return

    op = result.operation
    origin = " (guessed from free text)" if op.source == "heuristic" else ""
    success(f"Applied {op.kind.value} of '{op.filename}'{origin} as version {result.snapshot.id}")
    if op.explanation:
        console.print(Panel(op.explanation, title="Explanation", border_style="blue"))


# ------------------------------
# file 命令组
# ------------------------------

@cli.group(name="file")
def file_group():
    """🗂️ Manage documentation files"""
    pass


@file_group.command(name="add")
@click.argument("name")
def file_add(name):
    """➕ Add a new section from the default template"""
    project = _load_project()
    try:
        doc = project.add_section(name)
    except (ValueError, MdxForgeError, SnapshotStoreError) as e:
        error(str(e))
        raise click.Abort()
    success(f"Created {doc.filename}")


@file_group.command(name="delete")
@click.argument("filename")
def file_delete(filename):
    """🗑️ Delete a file"""
    project = _load_project()
    try:
        next_file = project.delete_document(filename)
    except (MdxForgeError, SnapshotStoreError) as e:
        error(f"Failed to delete {filename}: {e}")
        raise click.Abort()
    if next_file is None:
        error(f"File {filename} not found")
        raise click.Abort()
    success(f"Deleted {filename}")
    if next_file:
        info(f"Next file: {next_file}")


@file_group.command(name="reorder")
@click.argument("filenames", nargs=-1, required=True)
def file_reorder(filenames):
    """↕️ Reorder files; unlisted files keep their order at the end"""
    project = _load_project()
    try:
        project.reorder(filenames)
    except (MdxForgeError, SnapshotStoreError) as e:
        error(f"Failed to reorder files: {e}")
        raise click.Abort()
    success("New order: " + ", ".join(_file_names(project)))


# ------------------------------
# prompt 命令组
# ------------------------------

@cli.group()
def prompt():
    """🧾 Render prompts for the language model"""
    pass


@prompt.command(name="chat")
@click.option("--no-contents", is_flag=True, help="Only list filenames, not their contents")
def prompt_chat(no_contents):
    """Render the chat system prompt for the latest version"""
    project = _load_project()
    click.echo(PromptBuilder().chat_system_prompt(project.documents(), include_contents=not no_contents))


@prompt.command(name="generate")
@click.option("--spec", "spec_file", type=click.File("r", encoding="utf-8"), required=True, help="API specification file")
def prompt_generate(spec_file):
    """Render the documentation generation prompt for an API specification"""
    try:
        config = load_config(CONFIG_FILE)
    except ConfigError as e:
        error(f"Failed to load configuration: {e}")
        raise click.Abort()
    click.echo(PromptBuilder().generation_prompt(spec_file.read(), project_title=config.project_title))


if __name__ == '__main__':
    cli()

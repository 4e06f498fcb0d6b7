"""CLI entry point for prompt-composer."""

import asyncio
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from prompt_composer.composer.engine import TemplateEngine
from prompt_composer.config.loader import load_config
from prompt_composer.models.block import Block, FileSetBlock, SavedResponseBlock
from prompt_composer.models.warnings import TemplateWarning
from prompt_composer.services.exceptions import PromptComposerError
from prompt_composer.services.template_store import PromptComposerStore
from prompt_composer.utils.ids import sequential_id_factory
from prompt_composer.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()


def build_engine(config_path: Optional[Path], project_dirs: tuple[Path, ...]) -> TemplateEngine:
    """
    Create an engine over the configured template folders.

    Args:
        config_path: Config file (default ~/.config/prompt-composer/config.yaml)
        project_dirs: Project directories overriding the configured ones

    Raises:
        click.ClickException: If the configuration is invalid
    """
    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if project_dirs:
        templates = config.templates.model_copy(
            update={"project_dirs": [str(d) for d in project_dirs]}
        )
        config = config.model_copy(update={"templates": templates})

    store = PromptComposerStore.from_config(config.templates)
    return TemplateEngine(store, config=config, id_factory=sequential_id_factory("block"))


def describe_block(block: Block) -> str:
    """One-line summary of a block's payload for table output."""
    if isinstance(block, FileSetBlock):
        return f"{len(block.files)} file(s)"
    if isinstance(block, SavedResponseBlock):
        return f"{block.source_file}: {block.content!r}"
    return repr(block.content)


def show_warning(warning: TemplateWarning) -> None:
    click.echo(f"Warning: {warning.message}", err=True)


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read template {path}: {e}") from e


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/prompt-composer/config.yaml)",
)
@click.option(
    "--project-dir",
    "project_dirs",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory to search for templates (repeatable, searched in order)",
)
@click.option("--verbose", is_flag=True, help="Write debug-level entries to the log file")
@click.pass_context
def cli(
    ctx: click.Context, config_path: Optional[Path], project_dirs: tuple[Path, ...], verbose: bool
):
    """prompt-composer - assemble prompts from placeholder templates.

    Templates are looked up in each project's .prompt-composer folder, then
    in ~/.prompt-composer.
    """
    configure_logging(level="DEBUG" if verbose else None)
    logger.info("cli_started", verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["project_dirs"] = project_dirs


@cli.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-expand", is_flag=True, help="Keep template references as markers")
@click.pass_context
def blocks(ctx: click.Context, template: Path, no_expand: bool):
    """Show the blocks a template expands into."""
    engine = build_engine(ctx.obj["config_path"], ctx.obj["project_dirs"])
    text = read_template(template)

    try:
        result = asyncio.run(
            engine.materialize(text, on_warning=show_warning, expand_references=not no_expand)
        )
    except PromptComposerError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title=template.name)
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Label")
    table.add_column("Lead")
    table.add_column("Locked")
    table.add_column("Content")
    for index, block in enumerate(result, start=1):
        table.add_row(
            str(index),
            block.kind,
            block.label,
            "yes" if block.is_group_lead else "",
            "yes" if block.locked else "",
            describe_block(block),
        )
    console.print(table)


@cli.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def render(ctx: click.Context, template: Path):
    """Print the final prompt a template produces."""
    engine = build_engine(ctx.obj["config_path"], ctx.obj["project_dirs"])
    text = read_template(template)

    async def _render() -> str:
        result = await engine.materialize(text, on_warning=show_warning)
        return await engine.compose_prompt(result)

    try:
        click.echo(asyncio.run(_render()))
    except PromptComposerError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def raw(ctx: click.Context, template: Path):
    """Expand a template and print the raw text rebuilt from its blocks."""
    engine = build_engine(ctx.obj["config_path"], ctx.obj["project_dirs"])
    text = read_template(template)

    try:
        result = asyncio.run(engine.materialize(text, on_warning=show_warning))
    except PromptComposerError as e:
        raise click.ClickException(str(e)) from e
    click.echo(engine.reconstruct(result[0].group_id, result))


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()

"""
Command line interface.

    create-prompt enhance "add a login form"
    create-prompt init
    create-prompt validate
    create-prompt list
    create-prompt structure
"""
import logging
import sys
from pathlib import Path

import click

from create_prompt import __version__
from create_prompt.config import get_settings
from create_prompt.schemas import OutputFormat
from create_prompt.services.assembler import TARGET_CONFIGS
from create_prompt.services.loader import load_workspace, validate_workspace
from create_prompt.services.pipeline import describe_workspace, generate_prompt, init_workspace
from create_prompt.services.tree import write_structure

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.getLogger("create_prompt").setLevel(level)


def parse_var(values: tuple[str, ...]) -> dict[str, str]:
    variables = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--var")
        variables[key.strip()] = value
    return variables


def parse_context(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


@click.group()
@click.version_option(__version__, prog_name="create-prompt")
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace directory (default: .create-prompt in the current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, workspace: Path | None, verbose: bool):
    """Turn casual requests into structured, context-rich prompts."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = workspace or Path.cwd() / get_settings().workspace_dir


@cli.command()
@click.argument("intent", nargs=-1, required=True)
@click.option("--template", "-t", help="Template to use instead of the detected one")
@click.option(
    "--target",
    type=click.Choice(list(TARGET_CONFIGS)),
    default=None,
    help="Model the prompt is written for",
)
@click.option("--context", "-c", "context_names", help="Context documents to force-include, comma separated")
@click.option("--var", "variables", multiple=True, help="KEY=VALUE, may be repeated; dotted keys override schema values")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Output encoding",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the prompt to a file")
@click.option("--no-context", is_flag=True, help="Leave out all context documents")
@click.option("--dry-run", is_flag=True, help="Show what would be used without printing the prompt")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def enhance(
    ctx: click.Context,
    intent: tuple[str, ...],
    template: str | None,
    target: str | None,
    context_names: str | None,
    variables: tuple[str, ...],
    output_format: str | None,
    output: Path | None,
    no_context: bool,
    dry_run: bool,
    verbose: bool,
):
    """Build a prompt for INTENT."""
    if verbose:
        logging.getLogger("create_prompt").setLevel(logging.DEBUG)

    workspace: Path = ctx.obj["workspace"]
    prompt = generate_prompt(
        " ".join(intent),
        workspace,
        template_name=template,
        target=target,
        output_format=OutputFormat(output_format) if output_format else None,
        force_context=parse_context(context_names),
        variables=parse_var(variables),
        include_context=not no_context,
    )

    if prompt.content is None:
        raise click.ClickException(
            "; ".join(prompt.metadata.errors) + "\nRun 'create-prompt init' to create a workspace."
        )

    for warning in prompt.warnings:
        click.echo(f"Warning: {warning}", err=True)

    metadata = prompt.metadata
    if dry_run:
        click.echo(f"Intent:    {metadata.intent.summary if metadata.intent else ''}")
        click.echo(f"Task type: {metadata.task_type} ({metadata.task_confidence:.0%})")
        click.echo(f"Template:  {metadata.template_used or '-'}")
        click.echo(f"Target:    {metadata.target}")
        click.echo(f"Context:   {', '.join(metadata.context_used) or '-'}")
        click.echo(f"Schemas:   {', '.join(metadata.schemas_used) or '-'}")
        click.echo(f"Tokens:    ~{metadata.estimated_tokens}")
        return

    if output:
        output.write_text(prompt.content + "\n", encoding="utf-8")
        click.echo(f"Prompt written to {output} (~{metadata.estimated_tokens} tokens)", err=True)
    else:
        click.echo(prompt.content)


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite existing files")
@click.option("--minimal", is_flag=True, help="Only templates and config.json")
@click.pass_context
def init(ctx: click.Context, force: bool, minimal: bool):
    """Create a workspace with the default templates, context and schemas."""
    workspace: Path = ctx.obj["workspace"]
    result = init_workspace(workspace, force=force, minimal=minimal)

    click.echo(f"Workspace: {workspace}")
    for path in result.written:
        click.echo(f"  created  {path}")
    for path in result.skipped:
        click.echo(f"  kept     {path}")
    if result.skipped and not force:
        click.echo("Existing files were kept, use --force to overwrite them.")


@cli.command()
@click.pass_context
def validate(ctx: click.Context):
    """Check templates, schemas and context documents."""
    workspace: Path = ctx.obj["workspace"]
    report = validate_workspace(workspace)

    for error in report.errors:
        click.echo(f"Error: {error}")
    for warning in report.warnings:
        click.echo(f"Warning: {warning}")

    if not report.valid:
        click.echo(f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)")
        ctx.exit(1)
    click.echo(f"Workspace is valid ({len(report.warnings)} warning(s))")


@cli.command(name="list")
@click.pass_context
def list_documents(ctx: click.Context):
    """List templates, context documents and schemas."""
    workspace: Path = ctx.obj["workspace"]
    if not workspace.is_dir():
        raise click.ClickException(f"Workspace directory not found: {workspace}")

    listing = describe_workspace(load_workspace(workspace))
    for title, key in (("Templates", "templates"), ("Context", "context"), ("Schemas", "schemas")):
        click.echo(f"{title}:")
        for line in listing[key] or ["(none)"]:
            click.echo(f"  {line}")


@cli.command()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project directory to scan",
)
@click.option("--depth", type=click.IntRange(1, 10), default=4, show_default=True)
@click.pass_context
def structure(ctx: click.Context, root: Path, depth: int):
    """Write context/project_structure.md from the project tree."""
    workspace: Path = ctx.obj["workspace"]
    if not workspace.is_dir():
        raise click.ClickException(f"Workspace directory not found: {workspace}")

    path = write_structure(workspace, root, depth)
    click.echo(f"Project structure written to {path}")

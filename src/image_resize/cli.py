"""Command-line interface for image-resize."""

from pathlib import Path

import click

from .clipboard import FileClipboard
from .config import CONFIG_DIR, CONFIG_FILE, Config
from .dialog import PresetDialog, PromptDialog
from .document import TextDocument
from .errors import ImageResizeError
from .logging import LogLevel, setup_logging
from .models import Position, SyntaxKind
from .notify import LogNotifier
from .service import ImageResizeService, OutcomeStatus, Selection
from .storage import DirectoryResourceStore


def get_default_config_content() -> str:
    """Get the default config.toml content from bundled defaults."""
    import importlib.resources

    try:
        config_file = importlib.resources.files("image_resize.defaults").joinpath(
            "config.toml"
        )
        return config_file.read_text(encoding="utf-8")
    except (TypeError, FileNotFoundError):
        # Fallback to inline default
        return """\
[resize]
default_mode = "percentage"
html_style = "width_and_height"
quick_percentages = [100, 75, 50, 25]

[dimensions]
resource_timeout = 5.0
external_timeout = 10.0

[storage]
resources_dir = "resources"
"""


def _load_config(ctx: click.Context) -> Config:
    """Load the project config and set up logging from it."""
    config = Config.find_or_default()
    log_config = config.to_log_config()
    if ctx.obj.get("verbose"):
        log_config.level = LogLevel.DEBUG
    setup_logging(log_config)
    return config


def _open_document(file: Path, line: int, col: int) -> TextDocument:
    """Load a file and put the cursor at a 1-based line and column."""
    try:
        document = TextDocument.from_path(file)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: Unable to read {file}: {e}", err=True)
        raise SystemExit(1)

    if line > document.line_count:
        click.echo(
            f"Error: {file} has {document.line_count} lines; line {line} is out of range",
            err=True,
        )
        raise SystemExit(1)

    document.set_cursor(Position(line - 1, col - 1))
    return document


def _make_service(config: Config, document: TextDocument, dialog=None) -> ImageResizeService:
    return ImageResizeService(
        document,
        DirectoryResourceStore(config.get_resources_dir()),
        config=config,
        dialog=dialog,
        notifier=LogNotifier(),
    )


def _finish(document: TextDocument, outcome) -> None:
    """Save the document when an edit was applied; exit non-zero otherwise."""
    if outcome.status is OutcomeStatus.APPLIED:
        document.save()
        click.echo(outcome.syntax)
    elif outcome.status is OutcomeStatus.CANCELLED:
        click.echo("Cancelled")
    else:
        raise SystemExit(1)


position_arguments = [
    click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
    click.argument("line", type=click.IntRange(min=1)),
    click.argument("col", type=click.IntRange(min=1)),
]


def with_position(func):
    for decorator in reversed(position_arguments):
        func = decorator(func)
    return func


end_option = click.option(
    "--end",
    type=(click.IntRange(min=1), click.IntRange(min=1)),
    default=None,
    metavar="LINE COL",
    help="End of a selection (exclusive); the selection must hold one image",
)


def _selection(line: int, col: int, end: tuple[int, int] | None) -> Selection | None:
    if end is None:
        return None
    end_line, end_col = end
    return Position(line - 1, col - 1), Position(end_line - 1, end_col - 1)


@click.group()
@click.version_option(package_name="image-resize")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """image-resize - Resize Markdown and HTML image embeds in text files.

    LINE and COL are 1-based, as shown by most editors.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
def init(force: bool):
    """Initialize image-resize in the current directory."""
    config_dir = Path.cwd() / CONFIG_DIR
    config_file = config_dir / CONFIG_FILE

    if config_file.exists() and not force:
        click.echo(f"Error: {CONFIG_DIR}/{CONFIG_FILE} already exists", err=True)
        click.echo("Use --force to overwrite", err=True)
        raise SystemExit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(get_default_config_content())
    click.echo(f"Created {config_file}")

    click.echo("\nNext steps:")
    click.echo(f"  - Edit {CONFIG_DIR}/{CONFIG_FILE} to change resize defaults")
    click.echo("  - Put resource images in resources/ as <id>.<ext>")
    click.echo("\nRun 'image-resize inspect FILE LINE COL' to check an image")


@main.command()
@with_position
@click.pass_context
def inspect(ctx: click.Context, file: Path, line: int, col: int):
    """Show the image embed at a position and its natural size."""
    config = _load_config(ctx)
    document = _open_document(file, line, col)
    service = _make_service(config, document)

    if not service.is_on_image():
        click.echo(f"No image at {file}:{line}:{col}", err=True)
        raise SystemExit(1)

    try:
        prepared = service.detect_and_prepare()
    except ImageResizeError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    detection, context = prepared
    reference = context.reference
    start, end = detection.range.start, detection.range.end
    click.echo(f"Syntax: {reference.kind.value}")
    click.echo(f"Source: {reference.source} ({reference.source_kind.value})")
    click.echo(f"Alt:    {reference.alt_text}")
    if reference.title:
        click.echo(f"Title:  {reference.title}")
    click.echo(f"Range:  {start.line + 1}:{start.ch + 1}-{end.line + 1}:{end.ch + 1}")
    click.echo(f"Size:   {context.original.width} x {context.original.height} px")


@main.command()
@with_position
@click.option("--markdown", "target", flag_value=SyntaxKind.MARKDOWN.value, help="Emit Markdown")
@click.option(
    "--html",
    "target",
    flag_value=SyntaxKind.HTML.value,
    default=SyntaxKind.HTML.value,
    help="Emit HTML (default)",
)
@click.option("--percentage", "-p", type=click.FloatRange(min=0, min_open=True), help="Scale by percent")
@click.option("--width", "-w", type=click.IntRange(min=1), help="Target width in pixels")
@click.option("--height", "-h", type=click.IntRange(min=1), help="Target height in pixels")
@click.option("--alt", "alt_text", default=None, help="New alt text")
@click.option("--title", default=None, help="New title")
@click.option("--interactive", "-i", is_flag=True, help="Prompt for every choice")
@end_option
@click.pass_context
def resize(
    ctx: click.Context,
    file: Path,
    line: int,
    col: int,
    target: str,
    percentage: float | None,
    width: int | None,
    height: int | None,
    alt_text: str | None,
    title: str | None,
    interactive: bool,
    end: tuple[int, int] | None,
):
    """Resize the image embed at a position and save the file."""
    if percentage is not None and (width or height):
        raise click.UsageError("--percentage cannot be combined with --width/--height")

    config = _load_config(ctx)
    document = _open_document(file, line, col)

    if interactive:
        dialog = PromptDialog()
    else:
        dialog = PresetDialog(
            target=SyntaxKind(target),
            percentage=percentage,
            width=width,
            height=height,
            alt_text=alt_text,
            title=title,
        )

    outcome = _make_service(config, document, dialog).resize_image(_selection(line, col, end))
    _finish(document, outcome)


@main.command()
@with_position
@click.argument("percent", type=click.FloatRange(min=0, min_open=True), required=False)
@end_option
@click.pass_context
def quick(
    ctx: click.Context,
    file: Path,
    line: int,
    col: int,
    percent: float | None,
    end: tuple[int, int] | None,
):
    """Resize the image embed at a position to a percentage.

    100 removes the custom size and converts the image to Markdown. Without
    PERCENT, choose one of the configured quick percentages.
    """
    config = _load_config(ctx)
    document = _open_document(file, line, col)

    if percent is None:
        choices = [str(p) for p in config.resize.quick_percentages]
        percent = float(click.prompt("Percentage", type=click.Choice(choices), default=choices[0]))

    outcome = _make_service(config, document).quick_resize(percent, _selection(line, col, end))
    _finish(document, outcome)


@main.command()
@with_position
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the PNG",
)
@click.pass_context
def copy(ctx: click.Context, file: Path, line: int, col: int, output: Path):
    """Copy the image at a position to a PNG file."""
    config = _load_config(ctx)
    document = _open_document(file, line, col)
    service = _make_service(config, document)

    try:
        data_uri = service.copy_image(FileClipboard(output))
    except (ImageResizeError, OSError):
        # The failure was already reported as a notice
        raise SystemExit(1)

    if data_uri is None:
        raise SystemExit(1)


@main.command()
def doctor():
    """Check the configuration and resources directory."""
    from .doctor import run_doctor

    errors, warnings, ok = run_doctor()

    for message in ok:
        click.echo(f"OK: {message}")
    for message in warnings:
        click.echo(f"Warning: {message}", err=True)
    for message in errors:
        click.echo(f"Error: {message}", err=True)

    if errors:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

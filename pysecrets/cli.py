"""CLI interface for pysecrets."""

import logging
from typing import Any, Optional

import click

from .config import SecretsSettings, config
from .exceptions import DispatchError, SecretsError
from .models import TransferReport
from .output import OutputFormatter
from .stager import DiffStager
from .transfer import TransferGateway
from .utils import is_affirmative, parse_args, unique

logger = logging.getLogger(__name__)

CONFIRM_QUESTION = "Are you sure you want to upload and update secrets for everyone?"
CONFIRM_CHOICES = ("yes", "no")
DEBUG_OPTIONS = ("-d", "--debug")

# Command arguments are split into files and options by parse_args()
PASSTHROUGH = {"ignore_unknown_options": True}


class SecretsGroup(click.Group):
    """Command group that reports missing and unknown commands with usage text."""

    def resolve_command(self, ctx: click.Context, args: list[str]) -> Any:
        cmd_name = args[0] if args else None
        if cmd_name is not None and self.get_command(ctx, cmd_name) is None:
            raise DispatchError(f"Unknown command: {cmd_name} 🤷")
        return super().resolve_command(ctx, args)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except DispatchError as e:
            click.echo(f"\n  Error: {e}", err=True)
            click.echo(ctx.get_help())
            ctx.exit(1)


def configure_logging(debug: bool) -> None:
    """Configure logging for the current invocation."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        # Enable debug logging for pysecrets modules
        logging.getLogger("pysecrets").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def _parse_command_args(
    ctx: Any, args: tuple[str, ...]
) -> tuple[dict[str, str], list[str], bool]:
    """Split command arguments into options and files.

    A ``-d``/``--debug`` token among them turns on debug logging for the
    rest of the invocation.

    Returns:
        Tuple of (options, positional arguments, debug)
    """
    options, positional = parse_args(args)
    debug = ctx.obj["debug"] or any(opt in options for opt in DEBUG_OPTIONS)
    ctx.obj["options"] = options
    if debug and not ctx.obj["debug"]:
        configure_logging(debug)
    logger.debug("Options: %s", options)
    return options, positional, debug


def _prepare(ctx: Any, args: tuple[str, ...]) -> tuple[SecretsSettings, list[str]]:
    """Parse command arguments and resolve settings for a command.

    Returns:
        Tuple of (settings, selected files)
    """
    _, positional, debug = _parse_command_args(ctx, args)

    settings = config.resolve(
        bucket=ctx.obj["bucket"],
        local_root=ctx.obj["local_root"],
        project=ctx.obj["project"],
        debug=debug,
    )
    settings.require_bucket()
    logger.debug("Settings: %s", settings)
    return settings, unique(positional)


def _print_report(out: OutputFormatter, title: str, report: TransferReport) -> None:
    items = [("Transferred", str(report.transferred))]
    if report.skipped:
        items.append(("Skipped", str(report.skipped)))
    if report.failed:
        items.append(("Failed", str(report.failed)))
    out.print_summary(title, items)


@click.group(cls=SecretsGroup, invoke_without_command=True)
@click.option("--bucket", "-b", help="Bucket holding the shared secrets")
@click.option(
    "--local-root",
    "-l",
    help="Local secrets directory (default: ./secrets)",
)
@click.option("--project", help="Google Cloud project for the storage client")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--debug", "-d", is_flag=True, help="Enable debugging")
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    bucket: Optional[str],
    local_root: Optional[str],
    project: Optional[str],
    quiet: bool,
    debug: bool,
) -> None:
    """🕵️  Secrets: Manage your team's local environment secrets with gcloud.

    \b
    ⬆️  upload [ <file1> <file2> ... ]
       Upload and update the secrets in the cloud storage. You will be shown
       a diff of the changes which you can review before the actual upload.
    📥 download [ <file1> <file2> ... ]
       Download and update the secrets in your local dev environment.
    👀 diff [ <file1> <file2> ... ]
       Display the diff between your local files and the cloud storage.
    💛 help
       Show this help text.

    Without files, commands act on the whole secrets directory.
    """
    # Store settings in context for subcommands to access
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)
    ctx.obj["bucket"] = bucket
    ctx.obj["local_root"] = local_root
    ctx.obj["project"] = project
    ctx.obj["debug"] = debug
    configure_logging(debug)

    if ctx.invoked_subcommand is None:
        raise DispatchError("No command specified 😢")


@main.command(context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def download(ctx: Any, args: tuple[str, ...]) -> None:
    """Download secrets from the cloud storage.

    ARGS: optional files to download (default: everything)
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        settings, files = _prepare(ctx, args)
        gateway = TransferGateway(settings, out)
        settings.local_root.mkdir(parents=True, exist_ok=True)

        if not files:
            count = gateway.download_all()
            out.success(f"✓ Downloaded {count} file(s) to {settings.local_root}")
        else:
            report = gateway.download_selection(files)
            _print_report(out, "Download complete", report)
    except SecretsError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command(context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def upload(ctx: Any, args: tuple[str, ...]) -> None:
    """Upload and update secrets in the cloud storage.

    Shows the pending diff and asks for confirmation first.

    ARGS: optional files to upload (default: everything)
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        settings, files = _prepare(ctx, args)
        gateway = TransferGateway(settings, out)
        stager = DiffStager(settings, gateway, out)
        ctx.call_on_close(stager.cleanup)

        stager.run(files)

        choices = "\n".join(f"- {choice}" for choice in CONFIRM_CHOICES)
        answer = click.prompt(
            f"\n{CONFIRM_QUESTION}\n{choices}\n",
            default="",
            show_default=False,
            prompt_suffix="> ",
        )
        if not is_affirmative(answer):
            out.info("Upload cancelled.")
            return

        if not files:
            count = gateway.upload_all()
            out.success(f"✓ Uploaded {count} file(s) to {settings.bucket_url}")
        else:
            report = gateway.upload_selection(files)
            _print_report(out, "Upload complete", report)
    except SecretsError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command(context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def diff(ctx: Any, args: tuple[str, ...]) -> None:
    """Show the diff between local files and the cloud storage.

    ARGS: optional files to compare (default: everything)
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        settings, files = _prepare(ctx, args)
        gateway = TransferGateway(settings, out)
        stager = DiffStager(settings, gateway, out)
        ctx.call_on_close(stager.cleanup)
        stager.run(files)
    except SecretsError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command(name="help", context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def help_command(ctx: Any, args: tuple[str, ...]) -> None:
    """Show this help text."""
    _parse_command_args(ctx, args)
    click.echo(ctx.parent.get_help())


if __name__ == "__main__":
    main()

"""CLI interface for PyCMS."""

import logging
from pathlib import Path
from typing import Any, Optional, cast

import click

from .api import CmsClient
from .config import ENVIRONMENTS, AccountConfig, check_and_warn_git_inclusion, config
from .exceptions import CmsAPIError, CmsConfigError
from .logs import RenderOptions, output_logs
from .output import OutputFormatter
from .sync import Mode, UploadExecutor, plan_upload
from .sync.modes import DEFAULT_MODE
from .sync.planner import IssueKind, UploadPlan
from .utils import strip_route_prefix

logger = logging.getLogger(__name__)

# Issues that end the command with exit code 1; the others just return
FATAL_ISSUE_KINDS = frozenset({IssueKind.DESTINATION, IssueKind.STRUCTURE})


def config_options(func: Any) -> Any:
    """Add the options shared by all commands that talk to an account."""
    func = click.option(
        "--use-env",
        is_flag=True,
        help="Read the account from PYCMS_ACCOUNT_ID, PYCMS_API_KEY and PYCMS_ENV",
    )(func)
    func = click.option(
        "--account",
        "-a",
        envvar="PYCMS_ACCOUNT",
        help="Account name or ID (uses the default account if not specified)",
    )(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help="Path to a pycms.config.json file",
    )(func)
    return func


def load_account(
    ctx: Any,
    out: OutputFormatter,
    config_path: Optional[str],
    account: Optional[str],
    use_env: bool,
) -> AccountConfig:
    """Load the config and resolve the account, exiting with 1 on failure."""
    try:
        config.load(config_path, use_env=use_env)
    except CmsConfigError as e:
        out.error(f"Invalid configuration: {e}")
        ctx.exit(1)

    warning = check_and_warn_git_inclusion(config.config_path)
    if warning:
        out.warning(warning)

    if not config.is_configured:
        out.error(
            "No account configured. Run 'pycms init' or pass --use-env "
            "with PYCMS_ACCOUNT_ID and PYCMS_API_KEY set."
        )
        ctx.exit(1)

    resolved = config.get_account(account)
    if resolved is None:
        if account:
            out.error(f'The account "{account}" could not be found in the config')
        else:
            out.error("No default account is set. Pass --account to choose one.")
        ctx.exit(1)
    if not resolved.api_key:
        out.error(f"The account {resolved.account_id} has no API key configured")
        ctx.exit(1)
    return resolved


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(ctx: Any, quiet: bool, verbose: bool) -> None:
    """PyCMS - Upload files to the CMS Design Manager and read function logs."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pycms").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--account-id", type=int, prompt="Account ID", help="Account ID")
@click.option(
    "--api-key",
    "-k",
    prompt="API key",
    hide_input=True,
    help="API key for the account",
)
@click.option("--name", "-n", help="Name for the account (defaults to the ID)")
@click.option(
    "--env",
    type=click.Choice(ENVIRONMENTS),
    default="prod",
    show_default=True,
    help="Backend environment",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Config file to write (default: ./pycms.config.json)",
)
@click.pass_context
def init(
    ctx: Any,
    account_id: int,
    api_key: str,
    name: Optional[str],
    env: str,
    config_path: Optional[str],
) -> None:
    """Add an account to the config file."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        if config_path and not Path(config_path).exists():
            config.reset()
            config.config_path = Path(config_path).resolve()
        else:
            config.load(config_path)
    except CmsConfigError as e:
        out.error(f"Invalid configuration: {e}")
        ctx.exit(1)

    account = AccountConfig(
        account_id=account_id, api_key=api_key, name=name or str(account_id), env=env
    )
    try:
        written = config.save_account(account)
    except OSError as e:
        out.error(f"Could not write config file: {e}")
        ctx.exit(1)

    out.print_summary(
        "Initialization Complete",
        [
            ("Account", f"{account.name} ({account.account_id})"),
            ("Environment", account.env),
            ("Config file", str(written)),
        ],
    )
    warning = check_and_warn_git_inclusion(written)
    if warning:
        out.warning(warning)


@main.command()
@click.argument("src", type=str)
@click.argument("dest", type=str)
@config_options
@click.option(
    "--mode",
    "-m",
    help="Upload mode: publish (live immediately) or draft",
)
@click.option("--no-progress", is_flag=True, help="Disable progress bars")
@click.pass_context
def upload(
    ctx: Any,
    src: str,
    dest: str,
    config_path: Optional[str],
    account: Optional[str],
    use_env: bool,
    mode: Optional[str],
    no_progress: bool,
) -> None:
    """Upload a file or folder to the Design Manager.

    SRC: Local file or folder, relative to the current directory

    DEST: Path in the Design Manager, can be a new path
    """
    out: OutputFormatter = ctx.obj["out"]
    resolved = load_account(ctx, out, config_path, account, use_env)

    mode_name = mode or resolved.default_mode or config.default_mode
    try:
        upload_mode = Mode.from_string(mode_name) if mode_name else DEFAULT_MODE
    except ValueError as e:
        out.error(str(e))
        ctx.exit(1)

    result = plan_upload(src, dest, upload_mode)
    if not result.ok:
        for issue in result.issues:
            out.error(issue.message)
        if any(issue.kind in FATAL_ISSUE_KINDS for issue in result.issues):
            ctx.exit(1)
        return

    plan = cast(UploadPlan, result.plan)
    logger.debug(
        f"Uploading {plan.target.local_path} to "
        f"{plan.target.remote_path} ({upload_mode.value})"
    )

    client = CmsClient(resolved)
    try:
        executor = UploadExecutor(
            client, out, resolved.account_id, show_progress=not no_progress
        )
        executor.execute(plan)
    except KeyboardInterrupt:
        out.warning("\nUpload cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    finally:
        client.close()


@main.command()
@click.argument("function_path", type=str)
@config_options
@click.option("--latest", "-l", is_flag=True, help="Only show the latest log")
@click.option("--compact", is_flag=True, help="Only show the header of each log")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of logs")
@click.pass_context
def logs(
    ctx: Any,
    function_path: str,
    config_path: Optional[str],
    account: Optional[str],
    use_env: bool,
    latest: bool,
    compact: bool,
    limit: Optional[int],
) -> None:
    """Show execution logs of a serverless function.

    FUNCTION_PATH: Route of the function, e.g. "contact" or "/_hcms/api/contact"
    """
    out: OutputFormatter = ctx.obj["out"]
    resolved = load_account(ctx, out, config_path, account, use_env)
    route = strip_route_prefix(function_path)
    if not route:
        out.error("A function path needs to be passed")
        ctx.exit(1)

    client = CmsClient(resolved)
    try:
        if latest:
            response = client.get_latest_function_log(resolved.account_id, route)
        else:
            response = client.get_function_logs(
                resolved.account_id, route, limit=limit
            )
    except CmsAPIError as e:
        out.error(f'Unable to fetch logs for "{route}": {e}')
        ctx.exit(1)
    finally:
        client.close()

    output_logs(out, response, RenderOptions(compact=compact))

"""CLI entrypoint for gloc."""

import logging
import sys

import rich_click as click

from gloc import __version__
from gloc.controllers import GlocCliController, RunCommand
from gloc.coordinator import AggregationError
from gloc.discovery import DiscoveryError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = GlocCliController()


@click.command(
    epilog='Example: gloc "git fetch" ~/Documents/Projects',
)
@click.version_option(version=__version__, prog_name="gloc")
@click.argument("command")
@click.argument("root", default=".")
@click.option("--output", "show_output", is_flag=True, help="Show output of the command.")
@click.option(
    "--ignore-empty",
    is_flag=True,
    help="With --output, skip printing output that is empty.",
)
@click.option(
    "--ignore-errors",
    is_flag=True,
    help="With --output, skip printing output of failed commands.",
)
@click.option(
    "--recurse-into",
    "recurse",
    is_flag=True,
    help="Search for repositories recursively, skipping `node_modules` and `.git`.",
)
@click.option(
    "--all-dirs",
    is_flag=True,
    help="Run in every directory directly under ROOT, git repository or not.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum commands running at once. Defaults to GLOC_WORKERS or 10.",
)
@click.option(
    "--no-shell",
    is_flag=True,
    help="Split COMMAND into arguments (shell quoting rules) and run it without a shell.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug details to stderr.")
def gloc(  # noqa: PLR0913
    command: str,
    root: str,
    show_output: bool,
    ignore_empty: bool,
    ignore_errors: bool,
    recurse: bool,
    all_dirs: bool,
    workers: int | None,
    no_shell: bool,
    verbose: bool,
) -> None:
    """Run COMMAND in every git repository directly under ROOT, concurrently.

    ROOT defaults to the current directory; `~` expands to your home.

    Exits with status **1** when any command fails.
    """

    _configure_logging(verbose)
    try:
        result = CONTROLLER.run(
            RunCommand(
                command=command,
                root=root,
                show_output=show_output,
                ignore_empty=ignore_empty,
                ignore_errors=ignore_errors,
                recurse=recurse,
                all_dirs=all_dirs,
                workers=workers,
                use_shell=not no_shell,
            ),
        )
    except (DiscoveryError, AggregationError) as error:
        raise click.ClickException(str(error)) from error
    except ValueError as error:
        raise click.UsageError(str(error)) from error

    _emit_lines(result.lines)
    if not result.success and result.summary is not None:
        raise click.ClickException(
            f"{result.summary.failed} of {result.summary.total} command(s) failed.",
        )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    gloc()

import logging
import sys
from dataclasses import replace
from typing import Optional

import click

from .cli_config import ComprehensiveConfig, get_config
from .completion import get_completion_scripts
from .dependency_resolver import LocalPathResolver
from .error_handling import (
    GoReplaceError,
    InputReadError,
    InputTooLongError,
    MissingArgumentError,
    setup_error_handling,
)
from .manifest_writer import apply_replace
from .parsers import filter_dependencies, parse_go_mod
from .reporting import ReplaceReporter
from .selection import confirm_selection, select_dependency
from .structured_logging import configure_logging, log_operation_cancelled

__version__ = "1.1.0"

reporter = ReplaceReporter()


def prompt_operator(text: str) -> str:
    """Read one line from the operator; an empty answer is allowed."""
    try:
        return click.prompt(text, default="", show_default=False, prompt_suffix=" ")
    except click.Abort:
        raise InputReadError()


def _confirm(selected: str) -> bool:
    try:
        return confirm_selection(selected, prompt_operator, reporter)
    except InputReadError:
        return False


def _apply_overrides(
    config: ComprehensiveConfig, go_mod: Optional[str], gopath: Optional[str]
) -> ComprehensiveConfig:
    """Return a copy of config with command line overrides applied."""
    if go_mod:
        config = replace(config, manifest=replace(config.manifest, file_name=go_mod))
    if gopath:
        config = replace(config, resolver=replace(config.resolver, gopath=gopath))
    return config


def _setup_logging(config: ComprehensiveConfig, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.logging.log_level
    configure_logging(level, enable_json=config.logging.enable_json)
    setup_error_handling(log_level=getattr(logging, level.upper(), logging.CRITICAL))


def run_replace(partial_name: str, config: ComprehensiveConfig) -> bool:
    """
    Find, select, resolve and replace a dependency matching partial_name.

    Returns:
        bool: False when there was nothing to do (no matches or the operator
        cancelled), True when a replace directive was written

    Raises:
        GoReplaceError: For any failure along the way
    """
    max_input_length = config.security.max_input_length
    if len(partial_name) > max_input_length:
        raise InputTooLongError(max_input_length)

    manifest_path = config.manifest.file_name
    content, records, replaced = parse_go_mod(manifest_path, config.security)
    matched = filter_dependencies(records, replaced, partial_name)

    if not matched:
        reporter.print_info("No matches found.")
        return False

    selected = select_dependency(matched, prompt_operator, max_input_length, reporter)

    if not _confirm(selected):
        log_operation_cancelled(selected)
        reporter.print_info("Operation canceled.")
        return False

    local_path = LocalPathResolver(config.resolver).resolve(selected)
    apply_replace(manifest_path, content, selected, local_path)

    reporter.print_success(f"Added replace: {selected} => {local_path}")
    return True


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("partial_name", required=False)
@click.option(
    "--go-mod",
    "go_mod",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the go.mod file (default: go.mod in the current directory)",
)
@click.option(
    "--gopath",
    type=click.Path(file_okay=False),
    default=None,
    help="Workspace whose src/ holds local module checkouts (default: $GOPATH)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr")
@click.option(
    "--completion",
    type=click.Choice(["bash", "zsh", "fish"], case_sensitive=False),
    default=None,
    help="Print a shell completion script and exit",
)
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, partial_name, go_mod, gopath, verbose, completion, version):
    """
    Searches for matching dependencies in go.mod and replaces them with
    local path if found.

    Example:

      goreplace proto
    """
    if version:
        click.echo(f"goreplace version {__version__}")
        ctx.exit()

    if completion:
        click.echo(get_completion_scripts()[completion.lower()])
        ctx.exit()

    config = _apply_overrides(get_config(), go_mod, gopath)
    _setup_logging(config, verbose)

    try:
        if partial_name is None:
            raise MissingArgumentError()
        run_replace(partial_name, config)
    except MissingArgumentError as e:
        reporter.print_error(str(e))
        reporter.print_usage()
        sys.exit(1)
    except GoReplaceError as e:
        reporter.print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()

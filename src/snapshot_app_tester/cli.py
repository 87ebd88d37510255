"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

import click

from snapshot_app_tester.bootstrap import BootstrapError, install_browser
from snapshot_app_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    DriverSettings,
    load_configuration,
    write_placeholder_configuration,
)
from snapshot_app_tester.configuration.runtime_settings import SUPPORTED_BROWSERS
from snapshot_app_tester.results_writing import ReportMetadata, write_comparison_workbook
from snapshot_app_tester.snapshot_comparison import (
    ComparisonResult,
    SnapshotComparisonError,
    compare_snapshot_directories,
    promote_current_snapshots,
)
from snapshot_app_tester.snapshot_recording.snapshot_recorder import CURRENT_SUFFIX


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="snapshot-app-tester")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Snapshot-based test driver for reactive web applications."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML driver configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a YAML driver configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


_root_option = click.option(
    "--root",
    "root",
    required=False,
    type=click.Path(path_type=str),
    help="Snapshot root directory (defaults to the configured or standard location)",
)
_config_option = click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON driver configuration file",
)


@cli.command(name="compare")
@_config_option
@_root_option
@click.option(
    "--test-name",
    "test_names",
    multiple=True,
    help="Test to compare; repeatable. Defaults to every test with current snapshots.",
)
@click.option(
    "--screenshots",
    is_flag=True,
    default=False,
    help="Also compare screenshot images byte for byte.",
)
@click.option(
    "--report",
    "report_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional path of a comparison report workbook to write",
)
def compare(
    config_path: str | None,
    root: str | None,
    test_names: tuple[str, ...],
    screenshots: bool,
    report_path: str | None,
) -> None:
    """Compare current snapshots against the expected ones."""
    snapshot_root = _resolve_snapshot_root(config_path, root)
    names = test_names or _discover_test_names(snapshot_root)
    if not names:
        raise CliError(f"No current snapshots found under {snapshot_root}")
    try:
        results = [
            compare_snapshot_directories(snapshot_root, name, compare_screenshots=screenshots)
            for name in names
        ]
    except SnapshotComparisonError as exc:
        raise CliError(str(exc)) from exc

    for result in results:
        _echo_result(result)
    if report_path:
        written = write_comparison_workbook(
            results,
            report_path,
            ReportMetadata(
                generated_at=datetime.now(UTC),
                snapshot_root=snapshot_root,
                compare_screenshots=screenshots,
            ),
        )
        click.echo(str(written))

    failed = [result.test_name for result in results if not result.passed]
    if failed:
        raise CliError(f"Snapshot differences in: {', '.join(failed)}")


@cli.command(name="update")
@_config_option
@_root_option
@click.option("--test-name", "test_name", required=True, help="Test whose snapshots to accept")
def update(config_path: str | None, root: str | None, test_name: str) -> None:
    """Accept the current snapshots of a test as its expected snapshots."""
    snapshot_root = _resolve_snapshot_root(config_path, root)
    try:
        expected_dir = promote_current_snapshots(snapshot_root, test_name)
    except (SnapshotComparisonError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(expected_dir))


@cli.command(name="install-browser")
@click.option(
    "--browser",
    "browser_name",
    default="chromium",
    show_default=True,
    type=click.Choice(SUPPORTED_BROWSERS),
    help="Browser engine to install for Playwright",
)
@click.option("--with-deps", is_flag=True, default=False, help="Also install system packages.")
def install_browser_command(browser_name: str, with_deps: bool) -> None:
    """Install the browser used to drive applications."""
    try:
        install_browser(browser_name, with_deps=with_deps)
    except BootstrapError as exc:
        raise CliError(str(exc)) from exc
    click.echo(f"browser ready: {browser_name}")


def _resolve_snapshot_root(config_path: str | None, root: str | None) -> Path:
    if root:
        return Path(root).resolve()
    if config_path:
        try:
            settings = load_configuration(config_path)
        except ConfigurationError as exc:
            raise CliError(str(exc)) from exc
        base_dir = settings.path.parent if settings.path else Path.cwd()
        return settings.snapshots.resolve_root(base_dir)
    return DriverSettings().snapshots.resolve_root(Path.cwd())


def _discover_test_names(snapshot_root: Path) -> tuple[str, ...]:
    if not snapshot_root.is_dir():
        return ()
    return tuple(
        sorted(
            path.name.removesuffix(CURRENT_SUFFIX)
            for path in snapshot_root.iterdir()
            if path.is_dir() and path.name.endswith(CURRENT_SUFFIX)
        )
    )


def _echo_result(result: ComparisonResult) -> None:
    if result.passed:
        click.echo(f"{result.test_name}: OK ({len(result.files)} file(s))")
        return
    click.echo(f"{result.test_name}: FAILED")
    for failure in result.failures:
        click.echo(f"  {failure.name}: {failure.status.value}")
        for difference in failure.differences:
            click.echo(f"    {difference}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""CLI application for depbump."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from core.errors import DepbumpError
from core.filters import filter_dependencies
from core.installed import get_installed_packages
from core.logging_utils import configure_logging
from core.models import DependencyGroup, UpgradeReport, VersionTarget
from core.outdated import upgrade_dependency_map, upgrade_package_json
from core.parse_node import read_package_json
from core.resolve_node import DEFAULT_REGISTRY, NpmResolver

console = Console()
logger = logging.getLogger(__name__)


def format_upgrade_table(report: UpgradeReport) -> Table:
    """Render proposed upgrades as `name  current → upgraded` rows."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("package")
    table.add_column("current", justify="right")
    table.add_column("arrow")
    table.add_column("upgraded")
    for name in sorted(report.upgraded):
        table.add_row(name, report.current[name], "→", report.upgraded[name])
    return table


def format_json_output(report: UpgradeReport) -> str:
    """Format JSON output."""
    return json.dumps({"upgraded": report.upgraded, "failed": report.failed}, indent=2)


def resolve_target(target: str | None, greatest: bool) -> VersionTarget:
    if target:
        return VersionTarget.parse(target)
    return VersionTarget.GREATEST if greatest else VersionTarget.LATEST


async def run_upgrade(
    content: str | None,
    resolver: NpmResolver,
    group: DependencyGroup,
    package_filter: str | None,
    target: VersionTarget,
) -> UpgradeReport:
    """Upgrade a manifest, or the global packages when content is None."""
    async with resolver:
        if content is None:
            installed = await asyncio.to_thread(get_installed_packages)
            installed = filter_dependencies(installed, package_filter)
            return await upgrade_dependency_map(installed, resolver, target)
        return await upgrade_package_json(
            content, resolver, group=group, package_filter=package_filter, target=target
        )


app = typer.Typer(
    name="depbump",
    help="depbump - Upgrade package.json dependencies to the latest versions, keeping their style",
    add_completion=False,
)


@app.command()
def upgrade(
    file_path: str = typer.Argument("package.json", help="Path to package.json (use '-' for stdin)"),
    dev: bool = typer.Option(False, "--dev", "-D", help="Check only devDependencies"),
    prod: bool = typer.Option(False, "--prod", "-P", help="Check only dependencies"),
    package_filter: str | None = typer.Option(
        None, "--filter", "-f", help="Package names to check: /regex/ or comma/space delimited list"
    ),
    global_: bool = typer.Option(False, "--global", "-g", help="Check globally installed packages"),
    greatest: bool = typer.Option(False, "--greatest", "-t", help="Use the greatest published version instead of latest"),
    target: str | None = typer.Option(None, "--target", help="Version target: latest or greatest"),
    write: bool = typer.Option(False, "--upgrade", "-u", help="Write upgraded declarations to package.json"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    registry: str = typer.Option(DEFAULT_REGISTRY, "--registry", envvar="DEPBUMP_REGISTRY", help="npm registry URL"),
    timeout: float = typer.Option(30.0, "--timeout", envvar="DEPBUMP_TIMEOUT", help="Request timeout in seconds"),
    concurrency: int = typer.Option(6, "--concurrency", envvar="DEPBUMP_CONCURRENCY", help="Maximum concurrent requests"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """depbump - Upgrade dependency declarations in package.json."""
    configure_logging(verbose)

    try:
        version_target = resolve_target(target, greatest)

        # Read input
        if global_:
            content = None
            display_path = "global packages"
        elif file_path == "-":
            content = sys.stdin.read()
            display_path = "<stdin>"
        else:
            content = read_package_json(Path(file_path))
            display_path = file_path

        resolver = NpmResolver(registry_url=registry, timeout=timeout, max_concurrency=concurrency)
        report = asyncio.run(
            run_upgrade(
                content,
                resolver,
                DependencyGroup(prod=prod, dev=dev),
                package_filter,
                version_target,
            )
        )

        if json_output:
            typer.echo(format_json_output(report))
            raise typer.Exit(0)

        for name, reason in sorted(report.failed.items()):
            console.print(f"Warning: could not resolve {name}: {reason}", style="yellow")

        if not report.current:
            console.print("No dependencies found to check")
            raise typer.Exit(0)

        if not report.has_changes:
            console.print(f"All dependencies match the {version_target.value} package versions :)")
            raise typer.Exit(0)

        console.print(format_upgrade_table(report))

        if global_:
            names = " ".join(sorted(report.upgraded))
            console.print(f"\nRun npm install -g {names} to install the latest versions.")
        elif write and file_path == "-":
            typer.echo(report.updated_content)
        elif write:
            Path(file_path).write_text(report.updated_content, encoding="utf-8")
            console.print(f"\nUpgraded {display_path}")
        else:
            console.print(f"\nRun with -u to upgrade {display_path}")

    except typer.Exit:
        raise
    except DepbumpError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

#!/usr/bin/env python3
"""
Main CLI entry point for the migration-waves tool.
"""

import json
import sys

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .exceptions import ConfigurationError, IngestionError
from .config import PlannerSettings
from .ingestion import load_export
from .planner import plan
from .report import WaveReport, plan_to_dict, summary_to_dict
from .summary import summarize_repositories

console = Console()
err_console = Console(stderr=True)


def _error_panel(message: str, title: str):
    err_console.print(Panel(
        f"[red]{message}[/red]",
        title=title,
        border_style="red"
    ))


@click.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option('--small-size-mb', type=float, help='Repos below this size (and below --small-metadata) are small (default: 500)')
@click.option('--large-size-mb', type=float, help='Repos at or above this size are large (default: 2000)')
@click.option('--small-metadata', type=float, help='Metadata record count below which a repo can be small (default: 75000)')
@click.option('--large-metadata', type=float, help='Metadata record count at or above which a repo is large (default: 200000)')
@click.option('--wave-size-small', type=int, help='Repositories per small wave (default: 75)')
@click.option('--wave-size-medium', type=int, help='Repositories per medium wave (default: 25)')
@click.option('--wave-size-large', type=int, help='Repositories per large wave (default: 5)')
@click.option('--org-threshold', type=int, help='Organizations with at least this many repos get dedicated waves (default: 50)')
@click.option('--org', 'org_login', metavar='NAME', help='Only plan and summarize the repositories of this organization')
@click.option('--summary', 'show_summary', is_flag=True, help='Show repository statistics before the plan')
@click.option('--details', is_flag=True, help='List every repository of every wave, grouped by organization')
@click.option('--max-waves', default=20, type=click.IntRange(min=0), help='Number of waves to show in the wave table (default: 20)')
@click.option('--all-waves', is_flag=True, help='Show every wave in the wave table')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']), default='table', help='Output format (default: table)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.version_option(version=__version__)
def cli(files, small_size_mb, large_size_mb, small_metadata, large_metadata, wave_size_small,
        wave_size_medium, wave_size_large, org_threshold, org_login, show_summary, details, max_waves,
        all_waves, output_format, verbose):
    """
    Plan GitHub repository migration waves from a metadata export.

    FILES: one or more repository exports (.csv or .json from gh-github-stats)

    Settings can also come from MIGRATION_WAVES_* environment variables or a .env file;
    command-line options take precedence.

    Examples:
      migration-waves repos.csv
      migration-waves export.json --summary --org-threshold 100
      migration-waves repos.csv --format json > plan.json
      migration-waves export.json --org my-org --summary
    """
    load_dotenv()

    try:
        settings = PlannerSettings.from_env().with_overrides(
            small_size_mb=small_size_mb,
            large_size_mb=large_size_mb,
            small_metadata=small_metadata,
            large_metadata=large_metadata,
            wave_size_small=wave_size_small,
            wave_size_medium=wave_size_medium,
            wave_size_large=wave_size_large,
            org_threshold=org_threshold,
        )

        report = WaveReport(out=console, verbose=verbose)
        if verbose and output_format == 'table':
            report.show_settings(settings)

        export = load_export(files, verbose=verbose and output_format == 'table')
        if org_login is not None:
            export = export.for_org(org_login)
        records = export.repositories
        result = plan(
            records,
            thresholds=settings.thresholds,
            sizing=settings.sizing,
            org_dedicated_threshold=settings.org_threshold,
        )
        summary = summarize_repositories(records, orgs=export.orgs) if show_summary else None

        if output_format == 'json':
            payload = plan_to_dict(result)
            if summary is not None:
                payload['summary'] = summary_to_dict(summary)
            click.echo(json.dumps(payload, indent=2))
            return

        if not records:
            if org_login is not None:
                console.print(f"[yellow]⚠️  No repositories found for organization '{org_login}'[/yellow]")
            else:
                console.print("[yellow]⚠️  No repositories found in the input[/yellow]")
            return

        if summary is not None:
            report.show_summary(summary)
        report.show_plan(result, settings, max_waves=None if all_waves else max_waves)
        if details:
            report.show_details(result)

    except ConfigurationError as e:
        _error_panel(e.message, "Configuration Error")
        sys.exit(1)
    except IngestionError as e:
        _error_panel(e.message, "Input Error")
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]❌ Operation cancelled by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        _error_panel(f"Unexpected error: {e}", "Error")
        if verbose:
            err_console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    cli()

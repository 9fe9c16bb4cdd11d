"""
Rendering of wave plans and repository summaries.
Produces rich tables for the terminal and plain dicts for JSON output.
"""

from dataclasses import asdict
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import PlannerSettings
from .models import CATEGORY_ORDER, MigrationWave, SizeCategory, WavePlan
from .summary import RepositorySummary

console = Console()

CATEGORY_STYLES = {
    SizeCategory.SMALL: 'green',
    SizeCategory.MEDIUM: 'blue',
    SizeCategory.LARGE: 'red',
}


def wave_to_dict(wave: MigrationWave) -> Dict[str, Any]:
    return {
        'org': wave.org.label,
        'pooled': wave.org.is_pooled,
        'wave_num': wave.wave_num,
        'type': wave.category.value,
        'total_size_mb': round(wave.total_size_mb, 2),
        'total_metadata_records': wave.total_metadata_records,
        'repos': [
            {
                'org_name': repo.org_name,
                'repo_name': repo.repo_name,
                'size_mb': repo.size_mb,
                'metadata_records': repo.metadata_records,
                'size_category': repo.size_category.value,
            }
            for repo in wave.repos
        ],
    }


def plan_to_dict(plan: WavePlan) -> Dict[str, Any]:
    """Convert a plan to JSON-serializable data."""
    stats = plan.stats
    return {
        'waves': [wave_to_dict(wave) for wave in plan.waves],
        'stats': {
            'total_repos': stats.total_repos,
            'total_waves': stats.total_waves,
            'repos': {category.value: stats.repos_by_category[category] for category in CATEGORY_ORDER},
            'waves': {category.value: stats.waves_by_category[category] for category in CATEGORY_ORDER},
            'avg_wave_size': {
                category.value: stats.avg_wave_size_by_category[category] for category in CATEGORY_ORDER
            },
        },
    }


def summary_to_dict(summary: RepositorySummary) -> Dict[str, Any]:
    return {
        'total_repos': summary.total_repos,
        'totals': dict(summary.totals),
        'activity': dict(summary.activity),
        'sizes': dict(summary.sizes),
        'updates': dict(summary.updates),
        'branches': dict(summary.branches),
        'collaborators': dict(summary.collaborators),
        'features': dict(summary.features),
        'created_by_year': [{'year': year, 'repos': count} for year, count in summary.created_by_year],
        'orgs': [{'name': name, 'repos': count} for name, count in summary.orgs],
        'largest': [{'name': name, 'size_mb': size} for name, size in summary.largest],
        'most_active': [{'name': name, 'activity': activity} for name, activity in summary.most_active],
        'top_collaborators': [
            {'name': name, 'collaborators': count} for name, count in summary.top_collaborators
        ],
        'newest': [{'name': name, 'created': created.isoformat()} for name, created in summary.newest],
        'oldest': [{'name': name, 'created': created.isoformat()} for name, created in summary.oldest],
        'recently_updated': [
            {'name': name, 'last_push': pushed.isoformat()} for name, pushed in summary.recently_updated
        ],
        'metadata_ratio': [{'name': name, 'records_per_mb': ratio} for name, ratio in summary.metadata_ratio],
        'branch_complexity': [
            {'name': name, 'branches_per_mb': ratio} for name, ratio in summary.branch_complexity
        ],
        'release_frequency': [
            {'name': name, 'tags': tags, 'releases': releases, 'per_year': per_year}
            for name, tags, releases, per_year in summary.release_frequency
        ],
        'organizations': {
            'totals': dict(summary.org_totals),
            'details': [asdict(org) for org in summary.org_details],
        },
    }


def _ranked_table(title: str, columns, rows) -> Table:
    table = Table(title=title)
    for index, column in enumerate(columns):
        if index == 0:
            table.add_column(column, style="cyan")
        else:
            table.add_column(column, justify="right")
    for row in rows:
        table.add_row(*row)
    return table


class WaveReport:
    """Prints plans and summaries to the terminal."""

    def __init__(self, out: Optional[Console] = None, verbose: bool = False):
        self.console = out or console
        self.verbose = verbose

    def show_settings(self, settings: PlannerSettings):
        """Show the thresholds and wave sizes in effect."""
        t = settings.thresholds
        s = settings.sizing
        self.console.print(Panel(
            f"[blue]Small:[/blue] <{t.small_size_mb:g}MB AND <{t.small_metadata:,.0f} metadata records\n"
            f"[blue]Large:[/blue] ≥{t.large_size_mb:g}MB OR ≥{t.large_metadata:,.0f} metadata records\n"
            f"[blue]Medium:[/blue] everything else\n"
            f"[blue]Wave sizing:[/blue] small {s.small}/wave, medium {s.medium}/wave, large {s.large}/wave\n"
            f"[blue]Dedicated waves:[/blue] organizations with ≥{settings.org_threshold} repositories",
            title="Classification Thresholds",
            border_style="blue"
        ))

    def show_plan(self, plan: WavePlan, settings: PlannerSettings, max_waves: Optional[int] = 20):
        stats = plan.stats

        table = Table(title="Migration Wave Plan")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white", justify="right")
        table.add_row("Total Repositories", f"{stats.total_repos:,}")
        table.add_row("Total Waves", f"{stats.total_waves:,}")
        for category in CATEGORY_ORDER:
            table.add_row(f"{category.label} Repositories", f"{stats.repos_by_category[category]:,}")
        for category in CATEGORY_ORDER:
            table.add_row(f"{category.label} Waves", f"{stats.waves_by_category[category]:,}")
        self.console.print(table)

        table = Table(title="Repositories per Wave")
        table.add_column("Type", style="cyan")
        table.add_column("Repositories", justify="right")
        table.add_column("Waves", justify="right")
        table.add_column("Average", justify="right")
        table.add_column("Max", justify="right")
        for category in CATEGORY_ORDER:
            if not stats.waves_by_category[category]:
                continue
            table.add_row(
                f"[{CATEGORY_STYLES[category]}]{category.label}[/{CATEGORY_STYLES[category]}]",
                f"{stats.repos_by_category[category]:,}",
                f"{stats.waves_by_category[category]:,}",
                f"{stats.avg_wave_size_by_category[category]:.1f}",
                str(settings.sizing.for_category(category)),
            )
        self.console.print(table)

        self.show_waves(plan, max_waves)
        self.show_org_summary(plan)

    def show_waves(self, plan: WavePlan, max_waves: Optional[int] = 20):
        waves = plan.waves if max_waves is None else plan.waves[:max_waves]
        title = "Waves" if len(waves) == len(plan.waves) else f"Waves (first {len(waves)} of {len(plan.waves)})"

        table = Table(title=title)
        table.add_column("Wave", style="cyan")
        table.add_column("Organization")
        table.add_column("Type")
        table.add_column("Repos", justify="right")
        table.add_column("Size (MB)", justify="right")
        table.add_column("Metadata", justify="right")
        for wave in waves:
            style = CATEGORY_STYLES[wave.category]
            table.add_row(
                f"Wave {wave.wave_num}",
                wave.org.label,
                f"[{style}]{wave.category.label}[/{style}]",
                str(len(wave.repos)),
                f"{wave.total_size_mb:,.0f}",
                f"{wave.total_metadata_records:,}",
            )
        self.console.print(table)

    def show_org_summary(self, plan: WavePlan, limit: int = 10):
        table = Table(title=f"Top {limit} Organizations by Repositories")
        table.add_column("Organization", style="cyan")
        table.add_column("Waves", justify="right")
        table.add_column("Repositories", justify="right")
        for org, waves, repos in plan.org_summary(limit=limit):
            table.add_row(org.label, f"{waves:,}", f"{repos:,}")
        self.console.print(table)

    def show_details(self, plan: WavePlan):
        """Per-organization breakdown listing every repository of every wave."""
        for org, waves in plan.waves_by_org().items():
            repo_count = sum(len(wave.repos) for wave in waves)
            lines = []
            for wave in waves:
                style = CATEGORY_STYLES[wave.category]
                lines.append(
                    f"[bold]Wave {wave.wave_num}[/bold] "
                    f"[{style}]{wave.category.label}[/{style}] ({len(wave.repos)} repos)"
                )
                for repo in wave.repos:
                    lines.append(
                        f"  • {repo.full_name}  {repo.size_mb:,.1f}MB  {repo.metadata_records:,} records"
                    )
            self.console.print(Panel(
                "\n".join(lines),
                title=f"{org.label}: {len(waves)} waves, {repo_count} repositories",
                border_style="cyan"
            ))

    def show_org_overview(self, summary: RepositorySummary):
        """Organization totals and one row per organization, for gh-github-stats exports."""
        if not summary.org_details:
            return
        table = Table(title="Organization Overview")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        for label, value in summary.org_totals.items():
            table.add_row(label, f"{value:,}")
        self.console.print(table)

        table = Table(title="Organizations")
        table.add_column("Organization", style="cyan")
        table.add_column("Public", justify="right")
        table.add_column("Private", justify="right")
        table.add_column("Members", justify="right")
        table.add_column("Outside Collaborators", justify="right")
        table.add_column("Teams", justify="right")
        table.add_column("Runners", justify="right")
        for org in summary.org_details:
            table.add_row(
                org.display_name,
                f"{org.public_repos:,}",
                f"{org.private_repos:,}",
                f"{org.members:,}",
                f"{org.outside_collaborators:,}",
                f"{org.teams:,}",
                f"{org.runners:,}",
            )
        self.console.print(table)

    def show_summary(self, summary: RepositorySummary):
        totals = summary.totals

        self.show_org_overview(summary)

        table = Table(title="Repository Overview")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Repositories", f"{summary.total_repos:,}")
        table.add_row("Total Size", f"{totals.get('size_mb', 0):,.1f} MB")
        for key, label in (
            ('issues', "Issues"),
            ('pull_requests', "Pull Requests"),
            ('pr_reviews', "PR Reviews"),
            ('releases', "Releases"),
            ('tags', "Tags"),
            ('branches', "Branches"),
            ('discussions', "Discussions"),
            ('collaborators', "Collaborators"),
            ('forks', "Forks"),
            ('archived', "Archived"),
            ('empty', "Empty"),
        ):
            table.add_row(label, f"{totals.get(key, 0):,}")
        self.console.print(table)

        for title, buckets in (
            ("Repository Size", summary.sizes),
            ("Activity (issues + PRs)", summary.activity),
            ("Last Push", summary.updates),
            ("Branches", summary.branches),
            ("Collaborators", summary.collaborators),
        ):
            table = Table(title=title)
            table.add_column("Bucket", style="cyan")
            table.add_column("Repositories", justify="right")
            for name, count in buckets.items():
                table.add_row(name, f"{count:,}")
            self.console.print(table)

        if summary.features:
            table = Table(title="Feature Usage")
            table.add_column("Feature", style="cyan")
            table.add_column("Repositories", justify="right")
            table.add_column("Share", justify="right")
            for feature, count in summary.features.items():
                table.add_row(feature, f"{count:,}", f"{count / summary.total_repos:.0%}")
            self.console.print(table)

        if summary.created_by_year:
            self.console.print(_ranked_table(
                "Repositories Created per Year", ("Year", "Repositories"),
                ((str(year), f"{count:,}") for year, count in summary.created_by_year),
            ))

        if not self.verbose:
            return

        self.console.print(_ranked_table(
            "Largest Repositories", ("Repository", "Size (MB)"),
            ((name, f"{size:,.1f}") for name, size in summary.largest),
        ))
        self.console.print(_ranked_table(
            "Most Active Repositories", ("Repository", "Issues + PRs"),
            ((name, f"{activity:,}") for name, activity in summary.most_active),
        ))
        self.console.print(_ranked_table(
            "Most Collaborators", ("Repository", "Collaborators"),
            ((name, f"{count:,}") for name, count in summary.top_collaborators),
        ))
        for title, column, entries in (
            ("Newest Repositories", "Created", summary.newest),
            ("Oldest Repositories", "Created", summary.oldest),
            ("Recently Updated", "Last Push", summary.recently_updated),
        ):
            if entries:
                self.console.print(_ranked_table(
                    title, ("Repository", column),
                    ((name, when.strftime('%Y-%m-%d')) for name, when in entries),
                ))
        if summary.metadata_ratio:
            self.console.print(_ranked_table(
                "Metadata per MB", ("Repository", "Records / MB"),
                ((name, f"{ratio:,.2f}") for name, ratio in summary.metadata_ratio),
            ))
        if summary.branch_complexity:
            self.console.print(_ranked_table(
                "Branches per MB", ("Repository", "Branches / MB"),
                ((name, f"{ratio:,.2f}") for name, ratio in summary.branch_complexity),
            ))
        if summary.release_frequency:
            self.console.print(_ranked_table(
                "Tags and Releases", ("Repository", "Tags", "Releases", "Per Year"),
                (
                    (name, f"{tags:,}", f"{releases:,}", "-" if per_year is None else f"{per_year:,.2f}")
                    for name, tags, releases, per_year in summary.release_frequency
                ),
            ))

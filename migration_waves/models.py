"""
Shared data models for the migration-waves tool.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class SizeCategory(str, Enum):
    """Size tier of a repository, in processing order."""
    SMALL = 'small'
    MEDIUM = 'medium'
    LARGE = 'large'

    @property
    def label(self) -> str:
        return self.value.capitalize()


CATEGORY_ORDER: Tuple[SizeCategory, ...] = (SizeCategory.SMALL, SizeCategory.MEDIUM, SizeCategory.LARGE)


@dataclass(frozen=True)
class RepositoryRecord:
    """One row of a GitHub organization/repository metadata export."""
    org_name: str
    repo_name: str
    repo_size_mb: float = 0.0

    # Metadata counters
    issue_count: int = 0
    pull_request_count: int = 0
    pr_review_count: int = 0
    pr_review_comment_count: int = 0
    commit_comment_count: int = 0
    issue_comment_count: int = 0
    issue_event_count: int = 0
    release_count: int = 0
    milestone_count: int = 0
    tag_count: int = 0
    discussion_count: int = 0

    # Descriptive fields, only used by the repository summary
    branch_count: int = 0
    collaborator_count: int = 0
    protected_branch_count: int = 0
    project_count: int = 0
    has_wiki: bool = False
    is_empty: bool = False
    is_fork: bool = False
    is_archived: bool = False
    migration_issue: bool = False
    created: str = ''
    last_push: str = ''
    last_update: str = ''
    repo_url: str = ''

    @property
    def full_name(self) -> str:
        """Return the repository name in org/repo format."""
        return f"{self.org_name}/{self.repo_name}"


@dataclass(frozen=True)
class OrgStats:
    """Organization details from the "orgs" array of a gh-github-stats export."""
    login: str
    name: str = ''
    description: str = ''
    public_repos: int = 0
    private_repos: int = 0
    members: int = 0
    outside_collaborators: int = 0
    teams: int = 0
    runners: int = 0
    actions_secrets: int = 0
    actions_variables: int = 0
    created: str = ''

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True)
class RepositoryExport:
    """Everything read from one or more export files."""
    repositories: Tuple[RepositoryRecord, ...] = ()
    orgs: Tuple[OrgStats, ...] = ()

    def for_org(self, login: str) -> 'RepositoryExport':
        """Keep only the repositories and organization details of ``login``."""
        return RepositoryExport(
            repositories=tuple(record for record in self.repositories if record.org_name == login),
            orgs=tuple(org for org in self.orgs if org.login == login),
        )


@dataclass(frozen=True)
class ClassificationThresholds:
    """Boundaries between the small, medium and large size categories."""
    small_size_mb: float = 500.0
    large_size_mb: float = 2000.0
    small_metadata: float = 75_000
    large_metadata: float = 200_000


@dataclass(frozen=True)
class WaveSizing:
    """Number of repositories per wave for each size category."""
    small: int = 75
    medium: int = 25
    large: int = 5

    def for_category(self, category: SizeCategory) -> int:
        return getattr(self, category.value)


DEFAULT_THRESHOLDS = ClassificationThresholds()
DEFAULT_WAVE_SIZING = WaveSizing()
ORG_DEDICATED_WAVES_THRESHOLD = 50


@dataclass(frozen=True)
class OrgGroup:
    """
    Owner of a wave: either a named organization or the pool of small organizations.

    Use ``OrgGroup.named(...)`` and ``OrgGroup.pooled()``. The pooled group never
    compares equal to a named group, even one literally called ``MIXED_SMALL_ORGS``.
    """
    name: Optional[str] = None
    is_pooled: bool = False

    POOLED_LABEL = 'MIXED_SMALL_ORGS'

    @classmethod
    def named(cls, name: str) -> 'OrgGroup':
        return cls(name=name, is_pooled=False)

    @classmethod
    def pooled(cls) -> 'OrgGroup':
        return cls(name=None, is_pooled=True)

    @property
    def label(self) -> str:
        """Return the display label for this group."""
        return self.POOLED_LABEL if self.is_pooled else (self.name or '')

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class MigrationRepository:
    """A repository with its derived metadata count and size category."""
    org_name: str
    repo_name: str
    size_mb: float
    metadata_records: int
    size_category: SizeCategory

    @property
    def full_name(self) -> str:
        return f"{self.org_name}/{self.repo_name}"


@dataclass(frozen=True)
class MigrationWave:
    """An ordered batch of same-category repositories migrated together."""
    org: OrgGroup
    wave_num: int
    repos: Tuple[MigrationRepository, ...]
    category: SizeCategory

    @property
    def total_size_mb(self) -> float:
        return sum(repo.size_mb for repo in self.repos)

    @property
    def total_metadata_records(self) -> int:
        return sum(repo.metadata_records for repo in self.repos)


@dataclass(frozen=True)
class WaveStats:
    """Aggregate counts over a list of waves."""
    total_repos: int
    total_waves: int
    repos_by_category: Dict[SizeCategory, int]
    waves_by_category: Dict[SizeCategory, int]
    avg_wave_size_by_category: Dict[SizeCategory, float]


@dataclass(frozen=True)
class WavePlan:
    """Result of one planning run."""
    waves: Tuple[MigrationWave, ...]
    stats: WaveStats

    def waves_by_org(self) -> Dict[OrgGroup, Tuple[MigrationWave, ...]]:
        """Group waves by owner, keeping plan order."""
        grouped: Dict[OrgGroup, list] = {}
        for wave in self.waves:
            grouped.setdefault(wave.org, []).append(wave)
        return {org: tuple(waves) for org, waves in grouped.items()}

    def org_summary(self, limit: Optional[int] = None) -> Tuple[Tuple[OrgGroup, int, int], ...]:
        """
        Return ``(org, waves, repos)`` rows sorted by repository count descending.
        """
        rows = [
            (org, len(waves), sum(len(wave.repos) for wave in waves))
            for org, waves in self.waves_by_org().items()
        ]
        rows.sort(key=lambda row: row[2], reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return tuple(rows)

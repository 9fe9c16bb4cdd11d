"""
Migration wave planning.

Organizations with at least ``org_dedicated_threshold`` repositories get their
own wave sequence; all other organizations are pooled into shared waves that
are scheduled before any dedicated organization.
"""

from typing import Dict, Iterable, List, Sequence

from .classifier import classify, metadata_record_count, validate_thresholds
from .exceptions import ConfigurationError
from .models import (
    CATEGORY_ORDER,
    DEFAULT_THRESHOLDS,
    DEFAULT_WAVE_SIZING,
    ORG_DEDICATED_WAVES_THRESHOLD,
    ClassificationThresholds,
    MigrationRepository,
    MigrationWave,
    OrgGroup,
    RepositoryRecord,
    WavePlan,
    WaveSizing,
    WaveStats,
)
from .waves import build_waves, validate_wave_sizing


def to_migration_repository(record: RepositoryRecord, thresholds: ClassificationThresholds) -> MigrationRepository:
    metadata_records = metadata_record_count(record)
    return MigrationRepository(
        org_name=record.org_name,
        repo_name=record.repo_name,
        size_mb=record.repo_size_mb,
        metadata_records=metadata_records,
        size_category=classify(record.repo_size_mb, metadata_records, thresholds),
    )


def compute_wave_stats(waves: Sequence[MigrationWave]) -> WaveStats:
    """Count repositories and waves per category in a single pass."""
    repos_by_category = {category: 0 for category in CATEGORY_ORDER}
    waves_by_category = {category: 0 for category in CATEGORY_ORDER}
    wave_repos_by_category = {category: 0 for category in CATEGORY_ORDER}
    total_repos = 0

    for wave in waves:
        total_repos += len(wave.repos)
        waves_by_category[wave.category] += 1
        wave_repos_by_category[wave.category] += len(wave.repos)
        for repo in wave.repos:
            repos_by_category[repo.size_category] += 1

    avg_wave_size_by_category = {
        category: (wave_repos_by_category[category] / waves_by_category[category]
                   if waves_by_category[category] else 0.0)
        for category in CATEGORY_ORDER
    }

    return WaveStats(
        total_repos=total_repos,
        total_waves=len(waves),
        repos_by_category=repos_by_category,
        waves_by_category=waves_by_category,
        avg_wave_size_by_category=avg_wave_size_by_category,
    )


def plan(
    repositories: Iterable[RepositoryRecord],
    thresholds: ClassificationThresholds = DEFAULT_THRESHOLDS,
    *,
    sizing: WaveSizing = DEFAULT_WAVE_SIZING,
    org_dedicated_threshold: int = ORG_DEDICATED_WAVES_THRESHOLD,
) -> WavePlan:
    """
    Generate migration waves for a set of repositories.

    Configuration is validated before any repository is classified; a
    ConfigurationError aborts the whole run.

    Returns:
        WavePlan with pooled waves first, then dedicated organizations in the
        order they first appear in ``repositories``.
    """
    validate_thresholds(thresholds)
    validate_wave_sizing(sizing)
    if isinstance(org_dedicated_threshold, bool) or not isinstance(org_dedicated_threshold, int) \
            or org_dedicated_threshold < 1:
        raise ConfigurationError(
            f"Organization threshold must be a positive integer, got {org_dedicated_threshold!r}"
        )

    # dicts keep insertion order, so organizations stay in first-seen order
    org_groups: Dict[str, List[MigrationRepository]] = {}
    for record in repositories:
        repo = to_migration_repository(record, thresholds)
        org_groups.setdefault(repo.org_name, []).append(repo)

    dedicated_waves: List[MigrationWave] = []
    pooled_repos: List[MigrationRepository] = []
    for org_name, repos in org_groups.items():
        if len(repos) >= org_dedicated_threshold:
            dedicated_waves.extend(build_waves(OrgGroup.named(org_name), repos, sizing))
        else:
            pooled_repos.extend(repos)

    waves: List[MigrationWave] = []
    if pooled_repos:
        waves.extend(build_waves(OrgGroup.pooled(), pooled_repos, sizing))
    waves.extend(dedicated_waves)

    return WavePlan(waves=tuple(waves), stats=compute_wave_stats(waves))

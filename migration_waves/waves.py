"""
Chunking of classified repositories into ordered migration waves.
"""

from typing import Dict, List, Sequence

from .exceptions import ConfigurationError
from .models import CATEGORY_ORDER, MigrationRepository, MigrationWave, OrgGroup, SizeCategory, WaveSizing


def validate_wave_sizing(sizing: WaveSizing) -> None:
    """Raise ConfigurationError unless every wave size is a positive integer."""
    for category in CATEGORY_ORDER:
        size = sizing.for_category(category)
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ConfigurationError(
                f"Wave size for {category.value} repositories must be a positive integer, got {size!r}"
            )


def _partition(repos: Sequence[MigrationRepository]) -> Dict[SizeCategory, List[MigrationRepository]]:
    groups: Dict[SizeCategory, List[MigrationRepository]] = {category: [] for category in CATEGORY_ORDER}
    for repo in repos:
        groups[repo.size_category].append(repo)
    for category in CATEGORY_ORDER:
        # sort() is stable: input order breaks exact ties
        groups[category].sort(key=lambda r: (r.size_mb, r.metadata_records))
    return groups


def build_waves(org: OrgGroup, repos: Sequence[MigrationRepository], sizing: WaveSizing) -> List[MigrationWave]:
    """
    Build the waves for one organization group.

    Repositories are processed small -> medium -> large, smallest and simplest
    first within each category, and sliced into chunks of the category's wave
    size. Wave numbers start at 1 and run across all categories.
    """
    validate_wave_sizing(sizing)

    waves: List[MigrationWave] = []
    wave_num = 1

    groups = _partition(repos)
    for category in CATEGORY_ORDER:
        members = groups[category]
        wave_size = sizing.for_category(category)
        for start in range(0, len(members), wave_size):
            waves.append(MigrationWave(
                org=org,
                wave_num=wave_num,
                repos=tuple(members[start:start + wave_size]),
                category=category,
            ))
            wave_num += 1

    return waves

"""
Size classification of repositories.
"""

from .exceptions import ConfigurationError
from .models import ClassificationThresholds, RepositoryRecord, SizeCategory


METADATA_FIELDS = (
    'issue_count',
    'pull_request_count',
    'pr_review_count',
    'pr_review_comment_count',
    'commit_comment_count',
    'issue_comment_count',
    'issue_event_count',
    'release_count',
    'milestone_count',
    'tag_count',
    'discussion_count',
)


def metadata_record_count(record: RepositoryRecord) -> int:
    """Total number of metadata records (issues, PRs, comments, releases, ...) of a repository."""
    return sum(getattr(record, field) or 0 for field in METADATA_FIELDS)


def validate_thresholds(thresholds: ClassificationThresholds) -> None:
    """Raise ConfigurationError unless small < large on both axes (NaN never passes)."""
    if not thresholds.small_size_mb < thresholds.large_size_mb:
        raise ConfigurationError(
            f"Small size threshold ({thresholds.small_size_mb}MB) must be less than "
            f"large size threshold ({thresholds.large_size_mb}MB)"
        )
    if not thresholds.small_metadata < thresholds.large_metadata:
        raise ConfigurationError(
            f"Small metadata threshold ({thresholds.small_metadata}) must be less than "
            f"large metadata threshold ({thresholds.large_metadata})"
        )


def classify(size_mb: float, metadata_records: int, thresholds: ClassificationThresholds) -> SizeCategory:
    """
    Classify a repository as small, medium or large.

    - Small: size < small_size_mb AND metadata < small_metadata
    - Large: size >= large_size_mb OR metadata >= large_metadata
    - Medium: everything else
    """
    validate_thresholds(thresholds)

    if size_mb < thresholds.small_size_mb and metadata_records < thresholds.small_metadata:
        return SizeCategory.SMALL
    if size_mb >= thresholds.large_size_mb or metadata_records >= thresholds.large_metadata:
        return SizeCategory.LARGE
    return SizeCategory.MEDIUM

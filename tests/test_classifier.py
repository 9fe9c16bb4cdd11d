import pytest

from migration_waves.classifier import classify, metadata_record_count, validate_thresholds
from migration_waves.exceptions import ConfigurationError
from migration_waves.models import ClassificationThresholds, RepositoryRecord, SizeCategory

T = ClassificationThresholds(small_size_mb=500, large_size_mb=2000, small_metadata=75000, large_metadata=200000)


def test_metadata_record_count_sums_all_counters():
    record = RepositoryRecord(
        org_name="acme",
        repo_name="r",
        issue_count=1,
        pull_request_count=2,
        pr_review_count=3,
        pr_review_comment_count=4,
        commit_comment_count=5,
        issue_comment_count=6,
        issue_event_count=7,
        release_count=8,
        milestone_count=9,
        tag_count=10,
        discussion_count=11,
        branch_count=1000,
        collaborator_count=1000,
    )
    assert metadata_record_count(record) == 66


def test_metadata_record_count_empty_record():
    assert metadata_record_count(RepositoryRecord(org_name="acme", repo_name="r")) == 0


@pytest.mark.parametrize("size_mb,metadata,expected", [
    (0, 0, SizeCategory.SMALL),
    (499.9, 74999, SizeCategory.SMALL),
    (500, 0, SizeCategory.MEDIUM),
    (0, 75000, SizeCategory.MEDIUM),
    (1999.9, 199999, SizeCategory.MEDIUM),
    (2000, 0, SizeCategory.LARGE),
    (0, 200000, SizeCategory.LARGE),
    (10_000, 1, SizeCategory.LARGE),
    (1, 1_000_000, SizeCategory.LARGE),
])
def test_classify_boundaries(size_mb, metadata, expected):
    assert classify(size_mb, metadata, T) is expected


def test_small_requires_both_axes():
    assert classify(10, 100_000, T) is SizeCategory.MEDIUM
    assert classify(1000, 10, T) is SizeCategory.MEDIUM


def test_classify_is_total_over_a_grid():
    sizes = [0, 0.5, 499, 500, 501, 1999, 2000, 5000]
    metadata = [0, 74999, 75000, 199999, 200000, 10**7]
    for size in sizes:
        for count in metadata:
            assert classify(size, count, T) in set(SizeCategory)


@pytest.mark.parametrize("thresholds", [
    ClassificationThresholds(small_size_mb=500, large_size_mb=100, small_metadata=1, large_metadata=2),
    ClassificationThresholds(small_size_mb=500, large_size_mb=500, small_metadata=1, large_metadata=2),
    ClassificationThresholds(small_size_mb=1, large_size_mb=2, small_metadata=10, large_metadata=10),
    ClassificationThresholds(small_size_mb=1, large_size_mb=2, small_metadata=20, large_metadata=10),
])
def test_invalid_thresholds_raise(thresholds):
    with pytest.raises(ConfigurationError):
        validate_thresholds(thresholds)
    with pytest.raises(ConfigurationError):
        classify(0, 0, thresholds)


def test_configuration_error_message_mentions_axis():
    bad = ClassificationThresholds(small_size_mb=1, large_size_mb=2, small_metadata=5, large_metadata=1)
    with pytest.raises(ConfigurationError, match="metadata"):
        validate_thresholds(bad)


@pytest.mark.parametrize("thresholds", [
    ClassificationThresholds(small_size_mb=float("nan")),
    ClassificationThresholds(large_size_mb=float("nan")),
    ClassificationThresholds(small_metadata=float("nan")),
    ClassificationThresholds(large_metadata=float("nan")),
])
def test_nan_thresholds_are_rejected(thresholds):
    with pytest.raises(ConfigurationError):
        validate_thresholds(thresholds)

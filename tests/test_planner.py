import random
from collections import Counter

import pytest

from migration_waves.exceptions import ConfigurationError
from migration_waves.models import ClassificationThresholds, OrgGroup, SizeCategory, WaveSizing
from migration_waves.planner import compute_wave_stats, plan

DEFAULTS = ClassificationThresholds(small_size_mb=500, large_size_mb=2000, small_metadata=75000, large_metadata=200000)


def test_invalid_thresholds_fail_before_any_work():
    bad = ClassificationThresholds(small_size_mb=500, large_size_mb=100, small_metadata=1, large_metadata=2)
    with pytest.raises(ConfigurationError):
        plan([], bad)


def test_invalid_thresholds_fail_on_non_empty_input(make_record):
    bad = ClassificationThresholds(small_size_mb=1, large_size_mb=2, small_metadata=3, large_metadata=3)
    with pytest.raises(ConfigurationError):
        plan([make_record()], bad)


@pytest.mark.parametrize("org_threshold", [0, -5, 1.5])
def test_invalid_org_threshold(org_threshold):
    with pytest.raises(ConfigurationError):
        plan([], DEFAULTS, org_dedicated_threshold=org_threshold)


def test_invalid_sizing():
    with pytest.raises(ConfigurationError):
        plan([], DEFAULTS, sizing=WaveSizing(small=0))


def test_wave_options_are_keyword_only():
    with pytest.raises(TypeError):
        plan([], DEFAULTS, WaveSizing())


def test_default_sizing_is_used(make_record):
    records = [make_record(name=f"r{i}") for i in range(76)]

    result = plan(records, DEFAULTS)

    assert [len(w.repos) for w in result.waves] == [75, 1]


def test_empty_input():
    result = plan([], DEFAULTS)

    assert result.waves == ()
    assert result.stats.total_repos == 0
    assert result.stats.total_waves == 0
    assert all(avg == 0 for avg in result.stats.avg_wave_size_by_category.values())


def test_scenario_single_small_org_is_pooled(make_record):
    records = [
        make_record("acme", "a", size_mb=10, metadata=100),
        make_record("acme", "b", size_mb=600, metadata=1000),
        make_record("acme", "c", size_mb=2500, metadata=5000),
    ]

    result = plan(records, DEFAULTS)

    assert [w.category for w in result.waves] == [SizeCategory.SMALL, SizeCategory.MEDIUM, SizeCategory.LARGE]
    assert [w.wave_num for w in result.waves] == [1, 2, 3]
    assert [len(w.repos) for w in result.waves] == [1, 1, 1]
    assert all(w.org == OrgGroup.pooled() for w in result.waves)
    assert result.stats.total_repos == 3
    assert result.stats.total_waves == 3


def test_dedicated_org_of_200_small_repos(make_record):
    records = [make_record("big", f"r{i}", size_mb=1) for i in range(200)]

    result = plan(records, DEFAULTS)

    assert [len(w.repos) for w in result.waves] == [75, 75, 50]
    assert all(w.org == OrgGroup.named("big") for w in result.waves)


def test_small_orgs_pooled_large_org_dedicated(make_record):
    records = (
        [make_record("one", f"a{i}") for i in range(10)]
        + [make_record("big", f"b{i}") for i in range(60)]
        + [make_record("two", f"c{i}") for i in range(10)]
    )

    result = plan(records, DEFAULTS)

    orgs = [w.org for w in result.waves]
    assert orgs == [OrgGroup.pooled(), OrgGroup.named("big")]
    pooled_wave = result.waves[0]
    assert len(pooled_wave.repos) == 20
    assert {r.org_name for r in pooled_wave.repos} == {"one", "two"}
    assert len(result.waves[1].repos) == 60


def test_threshold_is_inclusive(make_record):
    records = [make_record("edge", f"r{i}") for i in range(50)]

    result = plan(records, DEFAULTS)

    assert {w.org for w in result.waves} == {OrgGroup.named("edge")}


def test_pooled_group_does_not_collide_with_real_org_name(make_record):
    records = [make_record(OrgGroup.POOLED_LABEL, f"r{i}") for i in range(3)] + [make_record("x", "y")]

    result = plan(records, DEFAULTS, org_dedicated_threshold=3)

    assert [w.org for w in result.waves] == [OrgGroup.pooled(), OrgGroup.named(OrgGroup.POOLED_LABEL)]
    assert result.waves[0].org != result.waves[1].org
    assert result.waves[0].org.label == result.waves[1].org.label


def test_pooled_waves_come_first_and_dedicated_orgs_keep_first_seen_order(make_record):
    records = []
    for i in range(5):
        records.append(make_record("zeta", f"z{i}"))
        records.append(make_record("alpha", f"a{i}"))
    records.append(make_record("tiny", "t0"))

    result = plan(records, DEFAULTS, org_dedicated_threshold=5)

    labels = [w.org.label for w in result.waves]
    assert labels == [OrgGroup.POOLED_LABEL, "zeta", "alpha"]


def test_wave_numbers_restart_per_org(make_record):
    records = (
        [make_record("a", f"a{i}", size_mb=3000) for i in range(12)]
        + [make_record("b", f"b{i}", size_mb=3000) for i in range(6)]
    )

    result = plan(records, DEFAULTS, org_dedicated_threshold=6)

    by_org = result.waves_by_org()
    assert [w.wave_num for w in by_org[OrgGroup.named("a")]] == [1, 2, 3]
    assert [w.wave_num for w in by_org[OrgGroup.named("b")]] == [1, 2]


def test_conservation_and_stats_consistency(make_record):
    rng = random.Random(42)
    records = []
    for org_index in range(8):
        org = f"org{org_index}"
        for i in range(rng.randint(1, 120)):
            records.append(make_record(org, f"{org}-r{i}", size_mb=rng.uniform(0, 4000),
                                       metadata=rng.randint(0, 300000)))

    result = plan(records, DEFAULTS, sizing=WaveSizing(small=11, medium=7, large=3), org_dedicated_threshold=40)

    seen = Counter((r.org_name, r.repo_name) for w in result.waves for r in w.repos)
    assert seen == Counter((r.org_name, r.repo_name) for r in records)
    assert all(w.repos for w in result.waves)
    assert result.stats.total_repos == sum(len(w.repos) for w in result.waves)
    assert result.stats.total_waves == len(result.waves)
    assert sum(result.stats.repos_by_category.values()) == len(records)
    assert sum(result.stats.waves_by_category.values()) == len(result.waves)

    pooled_positions = [i for i, w in enumerate(result.waves) if w.org.is_pooled]
    dedicated_positions = [i for i, w in enumerate(result.waves) if not w.org.is_pooled]
    if pooled_positions and dedicated_positions:
        assert max(pooled_positions) < min(dedicated_positions)


def test_compute_wave_stats_averages(make_record):
    records = [make_record("a", f"s{i}", size_mb=1) for i in range(80)] + \
              [make_record("a", f"l{i}", size_mb=5000) for i in range(6)]

    stats = plan(records, DEFAULTS).stats

    assert stats.repos_by_category == {SizeCategory.SMALL: 80, SizeCategory.MEDIUM: 0, SizeCategory.LARGE: 6}
    assert stats.waves_by_category == {SizeCategory.SMALL: 2, SizeCategory.MEDIUM: 0, SizeCategory.LARGE: 2}
    assert stats.avg_wave_size_by_category[SizeCategory.SMALL] == 40
    assert stats.avg_wave_size_by_category[SizeCategory.MEDIUM] == 0
    assert stats.avg_wave_size_by_category[SizeCategory.LARGE] == 3


def test_compute_wave_stats_empty():
    stats = compute_wave_stats([])

    assert stats.total_repos == 0
    assert stats.total_waves == 0


def test_org_summary_sorted_by_repos(make_record):
    records = [make_record("big", f"b{i}") for i in range(70)] + [make_record("small", "s")]

    result = plan(records, DEFAULTS)

    rows = result.org_summary()
    assert [(org.label, waves, repos) for org, waves, repos in rows] == [
        ("big", 1, 70),
        (OrgGroup.POOLED_LABEL, 1, 1),
    ]
    assert len(result.org_summary(limit=1)) == 1


def test_records_are_not_mutated(make_record):
    records = [make_record("a", "x", size_mb=3), make_record("a", "y", size_mb=1)]
    before = list(records)

    plan(records, DEFAULTS)

    assert records == before

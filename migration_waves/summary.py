"""
Descriptive statistics over a repository export.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from .models import OrgStats, RepositoryRecord

TOP_N = 10
TIMELINE_N = 20

ACTIVITY_BUCKETS = ("No activity", "Low activity", "Medium activity", "High activity", "Very high activity")
SIZE_BUCKETS = ("Less than 1 MB", "1–10 MB", "10–100 MB", "100–1000 MB", "More than 1000 MB")
UPDATE_BUCKETS = ("Past week", "Past month", "Past 3 months", "Past year", "1-2 years ago", "2+ years ago")
BRANCH_BUCKETS = ("Single branch", "2–5 branches", "6–10 branches", "More than 10 branches")
# (label, inclusive upper bound)
COLLABORATOR_BUCKETS = (("0-1", 1), ("2-5", 5), ("6-10", 10), ("11-20", 20), ("21+", None))

# Feature label -> RepositoryRecord field; a repo uses a feature when the field is > 0
FEATURE_FIELDS = {
    "Issues": 'issue_count',
    "Pull Requests": 'pull_request_count',
    "Discussions": 'discussion_count',
    "Projects": 'project_count',
    "Wiki": 'has_wiki',
    "Protected Branches": 'protected_branch_count',
    "Milestones": 'milestone_count',
}

# OrgStats field -> organization totals label
ORG_TOTAL_FIELDS = {
    'public_repos': "Public Repositories",
    'private_repos': "Private Repositories",
    'members': "Organization Members",
    'teams': "Teams",
    'runners': "Self-Hosted Runners",
    'actions_secrets': "Actions Secrets",
    'actions_variables': "Actions Variables",
}

# RepositoryRecord field -> totals key
TOTAL_FIELDS = {
    'repo_size_mb': 'size_mb',
    'issue_count': 'issues',
    'pull_request_count': 'pull_requests',
    'commit_comment_count': 'commit_comments',
    'milestone_count': 'milestones',
    'release_count': 'releases',
    'collaborator_count': 'collaborators',
    'protected_branch_count': 'protected_branches',
    'project_count': 'projects',
    'tag_count': 'tags',
    'issue_comment_count': 'issue_comments',
    'pr_review_comment_count': 'pr_review_comments',
    'branch_count': 'branches',
    'discussion_count': 'discussions',
    'pr_review_count': 'pr_reviews',
    'issue_event_count': 'issue_events',
}
FLAG_FIELDS = {
    'has_wiki': 'wikis',
    'is_fork': 'forks',
    'is_archived': 'archived',
    'is_empty': 'empty',
}


@dataclass
class RepositorySummary:
    """Totals, histograms and top lists for a set of repositories."""
    total_repos: int = 0
    totals: Dict[str, float] = field(default_factory=dict)
    activity: Dict[str, int] = field(default_factory=lambda: dict.fromkeys(ACTIVITY_BUCKETS, 0))
    sizes: Dict[str, int] = field(default_factory=lambda: dict.fromkeys(SIZE_BUCKETS, 0))
    updates: Dict[str, int] = field(default_factory=lambda: dict.fromkeys(UPDATE_BUCKETS, 0))
    branches: Dict[str, int] = field(default_factory=lambda: dict.fromkeys(BRANCH_BUCKETS, 0))
    collaborators: Dict[str, int] = field(
        default_factory=lambda: dict.fromkeys((label for label, _ in COLLABORATOR_BUCKETS), 0)
    )
    # only features used by at least one repository
    features: Dict[str, int] = field(default_factory=dict)
    created_by_year: List[Tuple[int, int]] = field(default_factory=list)
    orgs: List[Tuple[str, int]] = field(default_factory=list)
    largest: List[Tuple[str, float]] = field(default_factory=list)
    most_active: List[Tuple[str, int]] = field(default_factory=list)
    top_collaborators: List[Tuple[str, int]] = field(default_factory=list)
    newest: List[Tuple[str, datetime]] = field(default_factory=list)
    oldest: List[Tuple[str, datetime]] = field(default_factory=list)
    recently_updated: List[Tuple[str, datetime]] = field(default_factory=list)
    metadata_ratio: List[Tuple[str, float]] = field(default_factory=list)
    branch_complexity: List[Tuple[str, float]] = field(default_factory=list)
    # (repository, tags, releases, tags + releases per year of age)
    release_frequency: List[Tuple[str, int, int, Optional[float]]] = field(default_factory=list)
    org_totals: Dict[str, int] = field(default_factory=dict)
    org_details: List[OrgStats] = field(default_factory=list)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None for blank or malformed values."""
    value = (value or '').strip()
    if not value:
        return None
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _activity_bucket(activity: int) -> str:
    if activity == 0:
        return "No activity"
    if activity < 10:
        return "Low activity"
    if activity < 100:
        return "Medium activity"
    if activity < 1000:
        return "High activity"
    return "Very high activity"


def _size_bucket(size_mb: float) -> str:
    if size_mb < 1:
        return "Less than 1 MB"
    if size_mb < 10:
        return "1–10 MB"
    if size_mb < 100:
        return "10–100 MB"
    if size_mb < 1000:
        return "100–1000 MB"
    return "More than 1000 MB"


def _update_bucket(days: float) -> str:
    if days < 7:
        return "Past week"
    if days < 30:
        return "Past month"
    if days < 90:
        return "Past 3 months"
    if days < 365:
        return "Past year"
    if days < 730:
        return "1-2 years ago"
    return "2+ years ago"


def _branch_bucket(branches: int) -> str:
    if branches <= 1:
        return "Single branch"
    if branches <= 5:
        return "2–5 branches"
    if branches <= 10:
        return "6–10 branches"
    return "More than 10 branches"


def _collaborator_bucket(collaborators: int) -> str:
    for label, upper in COLLABORATOR_BUCKETS[:-1]:
        if collaborators <= upper:
            return label
    return COLLABORATOR_BUCKETS[-1][0]


def _top(items: List[tuple], key, limit: int = TOP_N, reverse: bool = True) -> List[tuple]:
    # sorted() is stable, so ties keep input order
    return sorted(items, key=key, reverse=reverse)[:limit]


def summarize_orgs(orgs: Sequence[OrgStats]) -> Dict[str, int]:
    """Sum the organization-level counters, keyed by display label."""
    return {label: sum(getattr(org, attr) for org in orgs) for attr, label in ORG_TOTAL_FIELDS.items()}


def summarize_repositories(
    records: Sequence[RepositoryRecord],
    now: Optional[datetime] = None,
    orgs: Sequence[OrgStats] = (),
) -> RepositorySummary:
    """
    Aggregate dashboard statistics in a single pass over ``records``.

    Args:
        records: Repositories to summarize
        now: Reference time for recency buckets and repository age (defaults to the current UTC time)
        orgs: Organization details from a gh-github-stats export, if any
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    summary = RepositorySummary(total_repos=len(records))
    summary.totals = {key: 0 for key in list(TOTAL_FIELDS.values()) + list(FLAG_FIELDS.values())}
    feature_counts = dict.fromkeys(FEATURE_FIELDS, 0)
    org_counts: Dict[str, int] = {}
    year_counts: Dict[int, int] = {}
    by_size: List[Tuple[str, float]] = []
    by_activity: List[Tuple[str, int]] = []
    by_collaborators: List[Tuple[str, int]] = []
    by_created: List[Tuple[str, datetime]] = []
    by_push: List[Tuple[str, datetime]] = []
    by_metadata_ratio: List[Tuple[str, float]] = []
    by_branch_ratio: List[Tuple[str, float]] = []
    by_releases: List[Tuple[str, int, int, Optional[float]]] = []

    for record in records:
        name = record.full_name
        for attr, key in TOTAL_FIELDS.items():
            summary.totals[key] += getattr(record, attr) or 0
        for attr, key in FLAG_FIELDS.items():
            if getattr(record, attr):
                summary.totals[key] += 1
        for feature, attr in FEATURE_FIELDS.items():
            if getattr(record, attr) > 0:
                feature_counts[feature] += 1

        activity = record.issue_count + record.pull_request_count
        summary.activity[_activity_bucket(activity)] += 1
        summary.sizes[_size_bucket(record.repo_size_mb)] += 1
        summary.branches[_branch_bucket(record.branch_count)] += 1
        summary.collaborators[_collaborator_bucket(record.collaborator_count)] += 1

        last_push = parse_timestamp(record.last_push)
        if last_push is not None:
            days = (now - last_push).total_seconds() / 86400
            summary.updates[_update_bucket(days)] += 1
            by_push.append((name, last_push))

        created = parse_timestamp(record.created)
        years = None
        if created is not None:
            year_counts[created.year] = year_counts.get(created.year, 0) + 1
            by_created.append((name, created))
            years = (now - created).total_seconds() / (86400 * 365)

        org = record.org_name or "Unknown"
        org_counts[org] = org_counts.get(org, 0) + 1
        by_size.append((name, record.repo_size_mb))
        by_activity.append((name, activity))
        by_collaborators.append((name, record.collaborator_count))

        # a zero size counts as 1 MB
        size = record.repo_size_mb or 1
        metadata = activity + record.commit_comment_count
        if metadata:
            by_metadata_ratio.append((name, round(metadata / size, 2)))
        if record.branch_count:
            by_branch_ratio.append((name, round(record.branch_count / size, 2)))
        released = record.tag_count + record.release_count
        if released:
            per_year = round(released / years, 2) if years and years > 0 else None
            by_releases.append((name, record.tag_count, record.release_count, per_year))

    summary.features = {feature: count for feature, count in feature_counts.items() if count > 0}
    summary.created_by_year = sorted(year_counts.items())
    summary.orgs = sorted(org_counts.items(), key=lambda item: item[1], reverse=True)
    summary.largest = _top(by_size, key=lambda item: item[1])
    summary.most_active = _top(by_activity, key=lambda item: item[1])
    summary.top_collaborators = _top(by_collaborators, key=lambda item: item[1])
    summary.newest = _top(by_created, key=lambda item: item[1], limit=TIMELINE_N)
    summary.oldest = _top(by_created, key=lambda item: item[1], limit=TIMELINE_N, reverse=False)
    summary.recently_updated = _top(by_push, key=lambda item: item[1], limit=TIMELINE_N)
    summary.metadata_ratio = _top(by_metadata_ratio, key=lambda item: item[1])
    summary.branch_complexity = _top(by_branch_ratio, key=lambda item: item[1])
    summary.release_frequency = _top(by_releases, key=lambda item: item[1] + item[2])

    if orgs:
        summary.org_totals = summarize_orgs(orgs)
        summary.org_details = list(orgs)
    return summary

"""
Loading of repository metadata exports.
Handles the repository-stats CSV export and gh-github-stats JSON output, normalizing
both into RepositoryRecord objects.
"""

import csv
import io
import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from rich.console import Console

from .exceptions import IngestionError
from .models import OrgStats, RepositoryExport, RepositoryRecord

console = Console()

# CSV column -> RepositoryRecord field
INT_COLUMNS = {
    'Issue_Count': 'issue_count',
    'Pull_Request_Count': 'pull_request_count',
    'PR_Review_Count': 'pr_review_count',
    'PR_Review_Comment_Count': 'pr_review_comment_count',
    'Commit_Comment_Count': 'commit_comment_count',
    'Issue_Comment_Count': 'issue_comment_count',
    'Issue_Event_Count': 'issue_event_count',
    'Release_Count': 'release_count',
    'Milestone_Count': 'milestone_count',
    'Tag_Count': 'tag_count',
    'Discussion_Count': 'discussion_count',
    'Branch_Count': 'branch_count',
    'Collaborator_Count': 'collaborator_count',
    'Protected_Branch_Count': 'protected_branch_count',
    'Project_Count': 'project_count',
}
BOOL_COLUMNS = {
    'Is_Empty': 'is_empty',
    'Is_Fork': 'is_fork',
    'Is_Archived': 'is_archived',
    'Migration_Issue': 'migration_issue',
}
TEXT_COLUMNS = {
    'Created': 'created',
    'Last_Push': 'last_push',
    'Last_Update': 'last_update',
    'Repo_URL': 'repo_url',
}
REQUIRED_COLUMNS = ('Org_Name', 'Repo_Name')


def _to_number(value: Any, cast, where: str):
    """Normalize one numeric cell: blank is zero, anything else must be a finite, non-negative number."""
    if value is None:
        return cast(0)
    if isinstance(value, bool):
        return cast(int(value))
    text = str(value).strip()
    if not text:
        return cast(0)
    try:
        number = float(text)
    except ValueError as e:
        raise IngestionError(f"{where}: expected a number, got {text!r}") from e
    if not math.isfinite(number):
        raise IngestionError(f"{where}: expected a finite number, got {text!r}")
    if number < 0:
        raise IngestionError(f"{where}: expected a non-negative number, got {text!r}")
    return cast(number)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() == 'true'


class RepositoryLoader:
    """Reads repository metadata exports into RepositoryRecord lists."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def load(self, path: Union[str, Path]) -> List[RepositoryRecord]:
        return list(self.read(path).repositories)

    def read(self, path: Union[str, Path]) -> RepositoryExport:
        """Load a .csv or .json export, chosen by file suffix."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix == '.csv':
            return RepositoryExport(repositories=tuple(self.load_csv(path)))
        if suffix == '.json':
            return self.parse_export(self._read_json(path))
        raise IngestionError(f"Unsupported file type '{path.suffix}': expected a .csv or .json file")

    def _read_text(self, path: Path) -> str:
        if not path.is_file():
            raise IngestionError(f"File not found: {path}")
        if self.verbose:
            console.print(f"[blue]📂 Reading {path}[/blue]")
        try:
            # utf-8-sig drops the BOM spreadsheet exports tend to add
            return path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            raise IngestionError(f"Could not read {path}: {e}") from e

    def load_csv(self, path: Union[str, Path]) -> List[RepositoryRecord]:
        return self.parse_csv(self._read_text(Path(path)))

    def load_json(self, path: Union[str, Path]) -> List[RepositoryRecord]:
        return self.parse_json(self._read_json(Path(path)))

    def _read_json(self, path: Path) -> Any:
        text = self._read_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise IngestionError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno})") from e

    def parse_csv(self, text: str) -> List[RepositoryRecord]:
        """
        Parse CSV text with a header row of export column names.

        Blank lines are skipped; empty numeric cells count as zero.
        """
        reader = csv.DictReader(io.StringIO(text))
        fieldnames = [name.strip() for name in (reader.fieldnames or [])]
        missing = [column for column in REQUIRED_COLUMNS if column not in fieldnames]
        if missing:
            raise IngestionError(f"CSV is missing required column(s): {', '.join(missing)}")
        reader.fieldnames = fieldnames

        records = []
        for row in reader:
            if not any((value or '').strip() for value in row.values() if isinstance(value, str)):
                continue
            records.append(self._record_from_csv_row(row, reader.line_num))

        if self.verbose:
            console.print(f"[green]✅ Parsed {len(records)} repositories from CSV[/green]")
        return records

    def _record_from_csv_row(self, row: Mapping[str, Any], line_no: int) -> RepositoryRecord:
        fields: Dict[str, Any] = {
            'org_name': (row.get('Org_Name') or '').strip(),
            'repo_name': (row.get('Repo_Name') or '').strip(),
            'repo_size_mb': _to_number(row.get('Repo_Size_MB'), float, f"line {line_no}, column Repo_Size_MB"),
        }
        for column, attr in INT_COLUMNS.items():
            fields[attr] = _to_number(row.get(column), int, f"line {line_no}, column {column}")
        for column, attr in BOOL_COLUMNS.items():
            fields[attr] = _to_bool(row.get(column))
        for column, attr in TEXT_COLUMNS.items():
            fields[attr] = (row.get(column) or '').strip()
        fields['has_wiki'] = str(row.get('Has_Wiki') or '').strip().lower() in ('true', '1')
        return RepositoryRecord(**fields)

    def parse_json(self, data: Any) -> List[RepositoryRecord]:
        """Convert gh-github-stats output to repository records."""
        return list(self.parse_export(data).repositories)

    def parse_export(self, data: Any) -> RepositoryExport:
        """
        Convert gh-github-stats output to repositories and organization details.

        Accepts either a bare list of repositories or an object with a "repos" list
        and an optional "orgs" list.
        """
        repos = data if isinstance(data, list) else (data.get('repos') if isinstance(data, dict) else None)
        if not isinstance(repos, list):
            raise IngestionError(
                'Invalid JSON format: expected an array of repositories or an object with a "repos" array'
            )

        records = [self._record_from_json(item, index) for index, item in enumerate(repos)]
        orgs = self.parse_orgs(data.get('orgs')) if isinstance(data, dict) else []
        if self.verbose:
            console.print(f"[green]✅ Parsed {len(records)} repositories from JSON[/green]")
            if orgs:
                console.print(f"[green]✅ Parsed {len(orgs)} organizations from JSON[/green]")
        return RepositoryExport(repositories=tuple(records), orgs=tuple(orgs))

    def parse_orgs(self, orgs: Any) -> List[OrgStats]:
        """Convert the "orgs" array of a gh-github-stats export; a missing array means no orgs."""
        if orgs is None:
            return []
        if not isinstance(orgs, list):
            raise IngestionError('Invalid JSON format: "orgs" must be an array of organizations')
        return [self._org_from_json(item, index) for index, item in enumerate(orgs)]

    def _org_from_json(self, item: Any, index: int) -> OrgStats:
        if not isinstance(item, dict):
            raise IngestionError(f"Organization #{index} is not a JSON object")
        where = f"organization #{index}"

        def count(key: str) -> int:
            return _to_number(item.get(key), int, f"{where}, field {key}")

        def entries(key: str) -> int:
            # secrets and variables are exported as lists of names
            value = item.get(key)
            if value is None:
                return 0
            if not isinstance(value, list):
                raise IngestionError(f"{where}, field {key}: expected an array")
            return len(value)

        return OrgStats(
            login=str(item.get('login') or ''),
            name=str(item.get('name') or ''),
            description=str(item.get('description') or ''),
            public_repos=count('publicRepos'),
            private_repos=count('totalPrivateRepos'),
            members=count('membersCount'),
            outside_collaborators=count('outsideCollaboratorsCount'),
            teams=count('teamsCount'),
            runners=count('runnersCount'),
            actions_secrets=entries('actionsSecrets'),
            actions_variables=entries('actionsVariables'),
            created=str(item.get('createdAt') or ''),
        )

    def _record_from_json(self, item: Any, index: int) -> RepositoryRecord:
        if not isinstance(item, dict):
            raise IngestionError(f"Repository #{index} is not a JSON object")
        where = f"repository #{index}"

        def count(*keys: str) -> int:
            for key in keys:
                if item.get(key) is not None:
                    return _to_number(item[key], int, f"{where}, field {key}")
            return 0

        if item.get('sizeMB') is not None:
            size_mb = _to_number(item['sizeMB'], float, f"{where}, field sizeMB")
        elif item.get('diskUsage') is not None:
            size_mb = _to_number(item['diskUsage'], float, f"{where}, field diskUsage") / 1024
        else:
            size_mb = 0.0

        has_wiki = item.get('hasWikiEnabled')
        if has_wiki is None:
            has_wiki = item.get('hasWiki')

        # gh-github-stats does not collect issue comments, PR reviews or PR review comments
        return RepositoryRecord(
            org_name=str(item.get('org') or ''),
            repo_name=str(item.get('name') or item.get('repo') or 'unknown'),
            repo_size_mb=round(size_mb, 2),
            issue_count=count('issues'),
            pull_request_count=count('pullRequests'),
            commit_comment_count=count('commitComments'),
            milestone_count=count('milestones'),
            release_count=count('releases'),
            tag_count=count('tags'),
            discussion_count=count('discussions'),
            issue_event_count=count('issueEvents'),
            branch_count=count('branches'),
            collaborator_count=count('collaborators'),
            protected_branch_count=count('branchProtections', 'protectedBranches'),
            project_count=count('projects'),
            has_wiki=bool(has_wiki),
            is_fork=bool(item.get('isFork')),
            is_archived=bool(item.get('isArchived')),
            created=str(item.get('createdAt') or ''),
            last_push=str(item.get('pushedAt') or ''),
            last_update=str(item.get('updatedAt') or ''),
            repo_url=str(item.get('url') or ''),
        )


def load_export(paths: Iterable[Union[str, Path]], verbose: bool = False) -> RepositoryExport:
    """Load and concatenate several exports, keeping organization details from JSON files."""
    loader = RepositoryLoader(verbose=verbose)
    records: List[RepositoryRecord] = []
    orgs: List[OrgStats] = []
    for path in paths:
        export = loader.read(path)
        records.extend(export.repositories)
        orgs.extend(export.orgs)
    return RepositoryExport(repositories=tuple(records), orgs=tuple(orgs))


def load_repositories(paths: Iterable[Union[str, Path]], verbose: bool = False) -> List[RepositoryRecord]:
    """Load and concatenate several exports."""
    return list(load_export(paths, verbose=verbose).repositories)

import pytest

from migration_waves.models import MigrationRepository, RepositoryRecord, SizeCategory


@pytest.fixture
def make_record():
    """Factory for repository records; metadata is put in issue_count."""
    def _make(org="acme", name="repo", size_mb=1.0, metadata=0, **fields):
        return RepositoryRecord(org_name=org, repo_name=name, repo_size_mb=size_mb, issue_count=metadata, **fields)
    return _make


@pytest.fixture
def make_repo():
    """Factory for already-classified migration repositories."""
    def _make(name, size_mb=1.0, metadata=0, category=SizeCategory.SMALL, org="acme"):
        return MigrationRepository(
            org_name=org,
            repo_name=name,
            size_mb=size_mb,
            metadata_records=metadata,
            size_category=category,
        )
    return _make


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "repos.csv"
    path.write_text(
        "Org_Name,Repo_Name,Repo_Size_MB,Issue_Count,Pull_Request_Count,Is_Fork,Has_Wiki,Last_Push\n"
        "acme,tiny,10,100,0,False,True,2024-01-01T00:00:00Z\n"
        "acme,mid,600,1000,0,TRUE,False,\n"
        "acme,huge,2500,5000,0,false,,\n",
        encoding="utf-8",
    )
    return path

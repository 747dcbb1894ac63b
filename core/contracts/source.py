from typing import List, Protocol

from .models import CommitDetail, CommitSummary, RepositoryReference


class CommitSource(Protocol):
    """A protocol for upstream services that serve commit history."""

    async def fetch_commits(self, ref: RepositoryReference) -> List[CommitSummary]:
        """Returns the first page of commits for the repository, newest first."""
        ...

    async def fetch_detail(self, ref: RepositoryReference, sha: str) -> CommitDetail:
        """Returns one commit including its changed files."""
        ...

    async def aclose(self) -> None:
        ...

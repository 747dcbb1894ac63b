from typing import List, Optional

from core.analyzer import analyze_commit_match
from core.contracts.models import CommitDetail, CommitSummary, MatchResult, RepositoryReference
from core.contracts.source import CommitSource
from core.reference import DEFAULT_HOST, parse_repository_url
from utils.errors import CommitMatchException, InvalidReference, UpstreamError
from utils.logger import logger


class AnalysisSession:
    """
    The working state of one user: the selected repository, its commit list and
    the currently selected commit with its match result.

    Every action replaces that state wholesale. Errors from parsing or from the
    upstream service are stored in ``error`` and never raised to the caller.
    Each list or detail request is tagged with a generation number, and a
    response whose generation has been superseded is dropped.
    """

    def __init__(self, source: CommitSource, host: str = DEFAULT_HOST):
        self.source = source
        self.host = host

        self.reference: Optional[RepositoryReference] = None
        self.commits: List[CommitSummary] = []
        self.selected: Optional[CommitDetail] = None
        self.result: Optional[MatchResult] = None
        self.error: str = ""
        self.loading: bool = False

        self._list_generation = 0
        self._detail_generation = 0

    def _clear_selection(self) -> None:
        self.selected = None
        self.result = None

    def set_repository(self, url: str) -> Optional[RepositoryReference]:
        """
        Resets the session to the repository named by ``url`` without fetching anything.

        Returns:
            The parsed reference, or None after recording an "invalid URL" error.
        """
        self._list_generation += 1
        # A detail still in flight belongs to the previous repository.
        self._detail_generation += 1

        self.error = ""
        self.loading = False
        self.commits = []
        self._clear_selection()

        self.reference = parse_repository_url(url, host=self.host)
        if self.reference is None:
            self.error = str(InvalidReference(url))
            logger.warning(self.error)
        return self.reference

    async def load_repository(self, url: str) -> "AnalysisSession":
        """Parses ``url`` and replaces the commit list with the repository's first page."""
        reference = self.set_repository(url)
        if reference is None:
            return self
        generation = self._list_generation

        self.loading = True
        try:
            commits = await self.source.fetch_commits(reference)
        except CommitMatchException as e:
            if generation == self._list_generation:
                self.error = str(e)
                logger.error(f"Failed to load commits for {reference.full_name}: {e}")
            return self
        finally:
            if generation == self._list_generation:
                self.loading = False

        if generation != self._list_generation:
            logger.debug(f"Discarding stale commit list for {reference.full_name}")
            return self

        self.commits = commits
        return self

    async def select_commit(self, sha: str) -> "AnalysisSession":
        """Fetches one commit of the loaded repository and scores it."""
        if self.reference is None:
            self.error = "No repository loaded."
            return self

        self._detail_generation += 1
        generation = self._detail_generation
        reference = self.reference

        self.error = ""
        self._clear_selection()

        try:
            detail = await self.source.fetch_detail(reference, sha)
        except UpstreamError as e:
            if generation == self._detail_generation:
                self.error = f"Failed to fetch commit details: {e.status}"
                logger.error(f"{self.error} ({reference.full_name}@{sha})")
            return self
        except (CommitMatchException, ValueError) as e:
            if generation == self._detail_generation:
                self.error = str(e)
                logger.error(f"Failed to fetch commit {sha} of {reference.full_name}: {e}")
            return self

        if generation != self._detail_generation:
            logger.debug(f"Discarding stale detail for {sha}")
            return self

        self.selected = detail
        self.result = analyze_commit_match(detail)
        logger.debug(
            f"Commit {detail.short_sha}: {self.result.classification} ({self.result.confidence}%)"
        )
        return self

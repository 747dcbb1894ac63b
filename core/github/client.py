from typing import Any, List

import httpx

from config.models import GitHubConfig
from core.contracts.models import CommitDetail, CommitSummary, RepositoryReference
from core.contracts.source import CommitSource
from core.registry import source_registry
from utils.errors import DecodeError, InvalidReference, UpstreamError, UpstreamUnreachable
from utils.logger import logger


@source_registry.register("github")
class GitHubClient(CommitSource):
    """
    Reads commit history from the GitHub REST API.

    Requests are unauthenticated and therefore subject to GitHub's anonymous
    rate limit. Only the first page of the commit listing is read.
    """

    def __init__(self, config: GitHubConfig):
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": config.user_agent,
            },
            timeout=config.timeout_sec,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> Any:
        logger.debug(f"GET {self.config.api_base_url}{path}")
        try:
            response = await self._client.get(path)
        except httpx.InvalidURL as e:
            raise InvalidReference(path) from e
        except httpx.RequestError as e:
            raise UpstreamUnreachable(f"Could not reach GitHub API: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning(f"GitHub API returned {response.status_code} for {path}")
            raise UpstreamError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"GitHub API returned a non-JSON body for {path}: {e}") from e

    async def fetch_commits(self, ref: RepositoryReference) -> List[CommitSummary]:
        """
        Fetches the first page of commits, newest first as returned upstream.

        Raises:
            UpstreamError: The API answered with a non-success status.
            UpstreamUnreachable: The request failed at the network level.
            DecodeError: The body is not a list of commit objects.
        """
        data = await self._get_json(f"/repos/{ref.owner}/{ref.name}/commits")
        if not isinstance(data, list):
            raise DecodeError(f"Expected a list of commits for {ref.full_name}, got {type(data).__name__}")

        commits = [CommitSummary.from_api(item) for item in data]
        logger.info(f"Fetched {len(commits)} commits for {ref.full_name}")
        return commits

    async def fetch_detail(self, ref: RepositoryReference, sha: str) -> CommitDetail:
        """
        Fetches a single commit together with its changed files.

        Raises:
            ValueError: If ``sha`` is empty.
            UpstreamError, UpstreamUnreachable, DecodeError: As for ``fetch_commits``.
        """
        if not sha:
            raise ValueError("Commit sha must be a non-empty string.")

        data = await self._get_json(f"/repos/{ref.owner}/{ref.name}/commits/{sha}")
        detail = CommitDetail.from_api(data)
        file_count = len(detail.files) if detail.files is not None else 0
        logger.info(f"Fetched commit {detail.short_sha} of {ref.full_name} ({file_count} files)")
        return detail

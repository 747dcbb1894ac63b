import asyncio

import httpx
import pytest

from config.models import GitHubConfig
from core.contracts.models import CommitSummary
from core.github.client import GitHubClient
from core.session import AnalysisSession
from tests.factories import FakeSource, GatedSource, make_detail
from utils.errors import DecodeError, UpstreamUnreachable

URL = "https://github.com/octo/Hello-World"


def summaries(*shas):
    return [CommitSummary(sha=sha, message=f"commit {sha}") for sha in shas]


async def wait_for_gate(source, key):
    while key not in source.gates:
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_load_repository_populates_commits():
    source = FakeSource(commits={"Hello-World": summaries("s1", "s2")})
    session = AnalysisSession(source)

    await session.load_repository(URL)

    assert session.error == ""
    assert session.loading is False
    assert session.reference.full_name == "octo/Hello-World"
    assert [c.sha for c in session.commits] == ["s1", "s2"]


@pytest.mark.asyncio
async def test_invalid_url_does_not_start_a_request():
    source = FakeSource()
    session = AnalysisSession(source)

    await session.load_repository("https://example.com/nothing")

    assert source.calls == []
    assert session.reference is None
    assert session.commits == []
    assert "Invalid GitHub URL" in session.error


@pytest.mark.asyncio
async def test_upstream_404_leaves_list_empty():
    source = FakeSource(status=404)
    session = AnalysisSession(source)

    await session.load_repository(URL)

    assert session.commits == []
    assert session.error == "GitHub API error: 404"
    assert session.loading is False


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [UpstreamUnreachable("offline"), DecodeError("bad payload")])
async def test_other_upstream_failures_are_recorded(error, mocker):
    source = FakeSource()
    mocker.patch.object(source, "fetch_commits", side_effect=error)
    session = AnalysisSession(source)

    await session.load_repository(URL)

    assert session.commits == []
    assert session.error == str(error)


@pytest.mark.asyncio
async def test_new_load_resets_previous_state():
    detail = make_detail("fix login bug", "auth/login.ts")
    source = FakeSource(commits={"Hello-World": summaries(detail.sha)}, details={detail.sha: detail})
    session = AnalysisSession(source)
    await session.load_repository(URL)
    await session.select_commit(detail.sha)
    assert session.selected is not None

    await session.load_repository("https://github.com/octo/empty")

    assert session.commits == []
    assert session.selected is None
    assert session.result is None
    assert session.reference.name == "empty"


@pytest.mark.asyncio
async def test_select_commit_analyzes_detail():
    detail = make_detail("fix login bug", "auth/login.ts")
    source = FakeSource(commits={"Hello-World": summaries(detail.sha)}, details={detail.sha: detail})
    session = AnalysisSession(source)
    await session.load_repository(URL)

    await session.select_commit(detail.sha)

    assert session.selected == detail
    assert session.result.classification == "good"
    assert session.result.confidence == 80
    assert ("detail", "octo/Hello-World", detail.sha) in source.calls


@pytest.mark.asyncio
async def test_select_commit_failure_keeps_commit_list():
    source = FakeSource(commits={"Hello-World": summaries("s1")})
    session = AnalysisSession(source)
    await session.load_repository(URL)

    await session.select_commit("missing")

    assert session.error == "Failed to fetch commit details: 404"
    assert session.selected is None
    assert session.result is None
    assert [c.sha for c in session.commits] == ["s1"]


@pytest.mark.asyncio
async def test_select_commit_without_repository():
    source = FakeSource()
    session = AnalysisSession(source)

    await session.select_commit("s1")

    assert session.error == "No repository loaded."
    assert source.calls == []


def test_set_repository_does_not_fetch():
    source = FakeSource()
    session = AnalysisSession(source)

    ref = session.set_repository(URL)

    assert ref.full_name == "octo/Hello-World"
    assert source.calls == []


@pytest.mark.asyncio
async def test_superseded_list_fetch_is_discarded():
    source = GatedSource(commits={"first": summaries("old"), "second": summaries("new")})
    session = AnalysisSession(source)

    first = asyncio.create_task(session.load_repository("https://github.com/octo/first"))
    await wait_for_gate(source, "first")
    second = asyncio.create_task(session.load_repository("https://github.com/octo/second"))
    await wait_for_gate(source, "second")

    source.gates["second"].set()
    await second
    source.gates["first"].set()
    await first

    assert session.reference.name == "second"
    assert [c.sha for c in session.commits] == ["new"]
    assert session.loading is False


@pytest.mark.asyncio
async def test_superseded_detail_fetch_is_discarded():
    old = make_detail("update readme", "README.md")
    new = make_detail("fix login bug", "auth/login.ts")
    old = old.model_copy(update={"sha": "old"})
    new = new.model_copy(update={"sha": "new"})
    source = GatedSource(commits={"Hello-World": summaries("old", "new")}, details={"old": old, "new": new})
    session = AnalysisSession(source)

    loading = asyncio.create_task(session.load_repository(URL))
    await wait_for_gate(source, "Hello-World")
    source.gates["Hello-World"].set()
    await loading

    first = asyncio.create_task(session.select_commit("old"))
    await wait_for_gate(source, "old")
    second = asyncio.create_task(session.select_commit("new"))
    await wait_for_gate(source, "new")

    source.gates["new"].set()
    await second
    source.gates["old"].set()
    await first

    assert session.selected.sha == "new"
    assert session.result.classification == "good"


@pytest.mark.asyncio
async def test_detail_from_previous_repository_is_discarded():
    detail = make_detail("fix login bug", "auth/login.ts")
    source = GatedSource(commits={"Hello-World": summaries(detail.sha)}, details={detail.sha: detail})
    session = AnalysisSession(source)
    session.set_repository(URL)

    selecting = asyncio.create_task(session.select_commit(detail.sha))
    await wait_for_gate(source, detail.sha)
    session.set_repository("https://github.com/octo/other")
    source.gates[detail.sha].set()
    await selecting

    assert session.selected is None
    assert session.result is None


@pytest.mark.asyncio
async def test_url_with_control_character_is_rejected_before_fetching():
    source = FakeSource()
    session = AnalysisSession(source)

    await session.load_repository("https://github.com/oc\x01to/repo")

    assert source.calls == []
    assert session.commits == []
    assert "Invalid GitHub URL" in session.error


@pytest.mark.asyncio
async def test_unencodable_request_url_is_recorded(mocker):
    mocker.patch("httpx.AsyncClient.get", side_effect=httpx.InvalidURL("Invalid non-printable ASCII character in URL"))
    source = GitHubClient(GitHubConfig())
    session = AnalysisSession(source)

    try:
        await session.load_repository(URL)
    finally:
        await source.aclose()

    assert session.commits == []
    assert session.error.startswith("Invalid GitHub URL")
    assert session.loading is False

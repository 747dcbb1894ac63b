from datetime import datetime
from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from utils.errors import DecodeError


class RepositoryReference(BaseModel):
    """An (owner, name) pair identifying a hosted repository."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class CommitSummary(BaseModel):
    sha: str = Field(..., min_length=1, description="Full commit SHA")
    author_name: Optional[str] = Field(None, description="Author name recorded in the commit")
    authored_at: Optional[datetime] = Field(None, description="Author timestamp")
    message: str = Field("", description="Full commit message, subject on the first line")
    html_url: Optional[str] = Field(None, description="Canonical web page of the commit")

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @classmethod
    def from_api(cls, payload: Any) -> "CommitSummary":
        """Decodes one entry of the commit-listing endpoint."""
        return cls._decode(payload, _summary_fields(payload))

    @classmethod
    def _decode(cls, payload: Any, fields: Mapping[str, Any]):
        try:
            return cls(**fields)
        except ValidationError as e:
            sha = payload.get("sha") if isinstance(payload, Mapping) else None
            raise DecodeError(f"Unexpected commit payload (sha={sha}): {e}") from e


class FileChange(BaseModel):
    filename: str
    additions: int = Field(0, ge=0)
    deletions: int = Field(0, ge=0)
    # Open enumeration: added, removed, modified, renamed, copied, changed, ...
    status: str = "modified"

    @property
    def change_summary(self) -> str:
        return f"+{self.additions} -{self.deletions}"


class CommitDetail(CommitSummary):
    files: Optional[List[FileChange]] = Field(
        None, description="Changed files; None when upstream did not include a file list"
    )

    @classmethod
    def from_api(cls, payload: Any) -> "CommitDetail":
        """Decodes the single-commit endpoint, including its ``files`` array."""
        fields = dict(_summary_fields(payload))
        fields["files"] = payload.get("files")
        return cls._decode(payload, fields)


class FileRelevance(BaseModel):
    file: str
    change_summary: str
    status: str
    matched_term_count: int = Field(0, ge=0)
    relevance: Literal["high", "low"]


class MatchResult(BaseModel):
    classification: Literal["good", "partial", "poor", "unknown"]
    confidence: int = Field(0, ge=0, le=100)
    per_file: List[FileRelevance] = Field(default_factory=list)


def _summary_fields(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise DecodeError(f"Expected a commit object, got {type(payload).__name__}")

    commit = payload.get("commit") or {}
    if not isinstance(commit, Mapping):
        raise DecodeError(f"Malformed 'commit' field for sha={payload.get('sha')}")
    author = commit.get("author") or {}
    if not isinstance(author, Mapping):
        raise DecodeError(f"Malformed 'commit.author' field for sha={payload.get('sha')}")

    return {
        "sha": payload.get("sha"),
        "author_name": author.get("name"),
        "authored_at": author.get("date"),
        "message": commit.get("message") or "",
        "html_url": payload.get("html_url"),
    }

from typing import Protocol

from .models import CommitDetail, MatchResult


class ReportFormatter(Protocol):
    def format(self, detail: CommitDetail, result: MatchResult) -> str:
        ...

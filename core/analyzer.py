"""
Heuristic scoring of how well a commit message describes the files it touches.

The score is pure term overlap: words of the message against fragments of the
changed paths. Matching is a bidirectional substring test, so short fragments
such as ``src`` or ``lib`` match any message word containing them. That
over-matching is part of the heuristic and is kept as is.
"""
import math
import re
from typing import List, Optional, Set

from core.contracts.models import CommitDetail, FileChange, FileRelevance, MatchResult

MESSAGE_TERM_PATTERN = re.compile(r"\w+", re.ASCII)
PATH_SEPARATOR_PATTERN = re.compile(r"[/._-]")
MIN_FILE_TERM_LENGTH = 3

BASE_CONFIDENCE = 30
MATCH_WEIGHT = 50
GOOD_THRESHOLD = 60
PARTIAL_THRESHOLD = 30


def extract_message_terms(message: str) -> Set[str]:
    """Lower-cased word runs of the message. Only membership matters."""
    return set(MESSAGE_TERM_PATTERN.findall(message.lower()))


def extract_file_terms(filename: str) -> List[str]:
    """Lower-cased path fragments longer than two characters, in path order."""
    fragments = PATH_SEPARATOR_PATTERN.split(filename.lower())
    return [fragment for fragment in fragments if len(fragment) >= MIN_FILE_TERM_LENGTH]


def count_matched_terms(file_terms: List[str], message_terms: Set[str]) -> int:
    return sum(
        1
        for term in file_terms
        if any(term in msg_term or msg_term in term for msg_term in message_terms)
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _classify(confidence: int) -> str:
    if confidence > GOOD_THRESHOLD:
        return "good"
    if confidence > PARTIAL_THRESHOLD:
        return "partial"
    return "poor"


def _file_relevance(change: FileChange, message_terms: Set[str]) -> FileRelevance:
    matched = count_matched_terms(extract_file_terms(change.filename), message_terms)
    return FileRelevance(
        file=change.filename,
        change_summary=change.change_summary,
        status=change.status,
        matched_term_count=matched,
        relevance="high" if matched > 0 else "low",
    )


def analyze_commit_match(detail: Optional[CommitDetail]) -> MatchResult:
    """
    Scores a commit's message against its changed files.

    Args:
        detail: The commit to score. None, or a detail without files, yields
            an "unknown" result with zero confidence.

    Returns:
        The classification, a 0-100 confidence and per-file relevance in the
        same order as ``detail.files``.
    """
    if detail is None or not detail.files:
        return MatchResult(classification="unknown", confidence=0, per_file=[])

    message_terms = extract_message_terms(detail.message)
    per_file = [_file_relevance(change, message_terms) for change in detail.files]

    total_matches = sum(item.matched_term_count for item in per_file)
    raw = total_matches / len(per_file) * MATCH_WEIGHT + BASE_CONFIDENCE
    confidence = max(0, min(100, _round_half_up(raw)))

    return MatchResult(
        classification=_classify(confidence),
        confidence=confidence,
        per_file=per_file,
    )

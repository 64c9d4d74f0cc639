"""Composite professor-match scoring.

A candidate's score is a raw sum of rule weights. The last name gates the
whole score: a surname that is not close enough means a different person, no
matter how well the given name or department agree.
"""

import re
from typing import Iterable, Optional

from prof_resolver.models.directory import DirectoryRecord, ScoredCandidate
from prof_resolver.utils.name_normalizer import split_name
from prof_resolver.utils.similarity import is_nickname_match, jaro_winkler


# (similarity threshold, points) tried in order; no tier matched -> score 0
LAST_NAME_TIERS: list[tuple[float, float]] = [
    (0.9, 50.0),
    (0.8, 30.0),
]

FIRST_NAME_EXACT_THRESHOLD = 0.9
FIRST_NAME_EXACT_POINTS = 40.0
NICKNAME_POINTS = 35.0
FIRST_NAME_CLOSE_THRESHOLD = 0.8
FIRST_NAME_CLOSE_POINTS = 25.0
SUBSTRING_POINTS = 20.0
WEAK_SIMILARITY_SCALE = 10.0

DEPARTMENT_BONUS = 15.0

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _department_key(value: Optional[str]) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def departments_match(record_department: Optional[str], target: Optional[str]) -> bool:
    """Case-folded, alphanumeric-only containment in either direction.

    An empty department on either side never matches.
    """
    record_key = _department_key(record_department)
    target_key = _department_key(target)
    if not record_key or not target_key:
        return False
    return record_key in target_key or target_key in record_key


def _first_name_points(record_first: str, query_first: str) -> float:
    similarity = jaro_winkler(record_first, query_first)
    if similarity > FIRST_NAME_EXACT_THRESHOLD:
        return FIRST_NAME_EXACT_POINTS
    if is_nickname_match(query_first, record_first):
        return NICKNAME_POINTS
    if similarity > FIRST_NAME_CLOSE_THRESHOLD:
        return FIRST_NAME_CLOSE_POINTS

    record_lower = record_first.lower()
    query_lower = query_first.lower()
    if record_lower and query_lower and (
        query_lower in record_lower or record_lower in query_lower
    ):
        return SUBSTRING_POINTS
    return similarity * WEAK_SIMILARITY_SCALE


def score_professor(
    record: DirectoryRecord,
    query_name: str,
    normalized_department: Optional[str] = None,
) -> float:
    """Score how well a directory record matches a query name.

    Args:
        record: Candidate from the directory
        query_name: Name as searched (honorifics are stripped here)
        normalized_department: Canonical department hint, if any

    Returns:
        Raw score; 0 when the last name fails the gate
    """
    query = split_name(query_name)

    last_similarity = jaro_winkler(record.last_name, query.family)
    for threshold, points in LAST_NAME_TIERS:
        if last_similarity > threshold:
            score = points
            break
    else:
        return 0.0

    score += _first_name_points(record.first_name, query.given)

    if normalized_department and departments_match(
        record.department, normalized_department
    ):
        score += DEPARTMENT_BONUS

    return score


def score_candidates(
    records: Iterable[DirectoryRecord],
    query_name: str,
    normalized_department: Optional[str] = None,
) -> list[ScoredCandidate]:
    """Attach a match score to every record, keeping the directory's order."""
    return [
        ScoredCandidate.from_record(
            record, score_professor(record, query_name, normalized_department)
        )
        for record in records
    ]


def rank_candidates(
    records: Iterable[DirectoryRecord],
    query_name: str,
    normalized_department: Optional[str] = None,
) -> list[ScoredCandidate]:
    """Score every record and sort by score, highest first.

    The sort is stable, so equal scores keep the directory's order.
    """
    scored = score_candidates(records, query_name, normalized_department)
    return sorted(scored, key=lambda c: c.match_score, reverse=True)


def filter_by_department(
    candidates: list[ScoredCandidate], department: Optional[str]
) -> list[ScoredCandidate]:
    """Keep candidates whose department matches the hint (order preserved)."""
    if not department:
        return list(candidates)
    return [c for c in candidates if departments_match(c.department, department)]


def filter_by_given_name_prefix(
    candidates: list[ScoredCandidate], given_name: str
) -> list[ScoredCandidate]:
    """Keep candidates whose first name starts with the query's given name."""
    prefix = given_name.lower()
    return [c for c in candidates if c.first_name.lower().startswith(prefix)]

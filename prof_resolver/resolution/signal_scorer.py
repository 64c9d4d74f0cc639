"""Institution-name scoring over weighted page signals.

The scorer cleans every observed candidate, rejects text that does not look
like a school name, sums the weights of candidates that clean to the same
text, and returns the heaviest one. Cleaning and rejection policy live in the
ordered rule tables below so each rule can be exercised on its own.
"""

import re
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from prof_resolver.models.signals import (
    TRUSTED_SOURCES,
    InstitutionCandidate,
    PageSignal,
)
from prof_resolver.utils.logger import get_logger


MIN_SIGNAL_LENGTH = 4

# (name, pattern, replacement) applied in order
CLEANING_RULES: list[tuple[str, re.Pattern[str], str]] = [
    (
        "boilerplate_prefix",
        re.compile(r"^(?:Welcome to |The |Home |Official Site of )", re.IGNORECASE),
        "",
    ),
    (
        "boilerplate_suffix",
        re.compile(
            r"[|\-:–] (?:Home|Official Page|Login|Portal|Course Catalog|Student System).*$",
            re.IGNORECASE,
        ),
        "",
    ),
    ("whitespace", re.compile(r"^\s+|\s+$"), ""),
    ("domain_extension", re.compile(r"\.(?:com|edu|org|net)$", re.IGNORECASE), ""),
]

INSTITUTION_KEYWORD_PATTERN = re.compile(
    r"University|College|Institute|Polytechnic|Academy|School|Seminary", re.IGNORECASE
)

# (name, pattern) - a cleaned candidate matching any of these is dropped
REJECTION_RULES: list[tuple[str, re.Pattern[str]]] = [
    (
        "generic_page",
        re.compile(
            r"^(?:Login|Sign In|Dashboard|Courses|Welcome|Home|Index|Search|Help)$",
            re.IGNORECASE,
        ),
    ),
    ("course_number", re.compile(r"\b\d{3}\b")),
    (
        "course_title",
        re.compile(
            r"Programming|Introduction|History of|Chemistry of|Physics of|Biology of",
            re.IGNORECASE,
        ),
    ),
]

EDUCATIONAL_DOMAIN_PATTERN = re.compile(
    r"\.(?:edu|edu\.[a-z]{2}|ac\.[a-z]{2})$", re.IGNORECASE
)


def clean_candidate_text(text: str) -> str:
    """Apply CLEANING_RULES in order and return the cleaned text."""
    cleaned = text
    for _, pattern, replacement in CLEANING_RULES:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned


def is_educational_domain(domain: Optional[str]) -> bool:
    """True for hostnames under an educational top-level domain."""
    if not domain:
        return False
    return bool(EDUCATIONAL_DOMAIN_PATTERN.search(domain.strip().rstrip(".")))


def rejection_reason(
    cleaned: str, source: str, educational_domain: bool
) -> Optional[str]:
    """Return the name of the first rule that rejects a cleaned candidate.

    The institution-keyword requirement is waived for trusted sources and on
    educational domains; the remaining rejection rules always apply.
    """
    if not cleaned:
        return "empty"
    if (
        not INSTITUTION_KEYWORD_PATTERN.search(cleaned)
        and not educational_domain
        and source not in TRUSTED_SOURCES
    ):
        return "missing_institution_keyword"
    for name, pattern in REJECTION_RULES:
        if pattern.search(cleaned):
            return name
    return None


class SchoolSignalScorer:
    """Aggregates weighted institution-name signals into one best guess.

    Each scan() starts from an empty pool, so scanning the same signal list
    twice yields the same answer. Ties on accumulated weight are broken by
    first-insertion order.
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.candidates: dict[str, InstitutionCandidate] = {}
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            phase="page_scan",
            component="signal_scorer",
        )

    def add_signal(self, signal: PageSignal, domain: Optional[str] = None) -> bool:
        """Clean, filter and aggregate one signal.

        Returns:
            True if the signal was accepted into the candidate pool
        """
        if not signal.text or len(signal.text) < MIN_SIGNAL_LENGTH:
            return False

        cleaned = clean_candidate_text(signal.text)
        reason = rejection_reason(cleaned, signal.source, is_educational_domain(domain))
        if reason:
            self.logger.debug(
                "Signal rejected",
                text=signal.text[:80],
                source=signal.source,
                reason=reason,
            )
            return False

        candidate = self.candidates.get(cleaned)
        if candidate is None:
            candidate = InstitutionCandidate(cleaned_name=cleaned)
            self.candidates[cleaned] = candidate
        candidate.absorb(signal)
        return True

    def best_match(self) -> Optional[str]:
        """Return the heaviest candidate name, or None if the pool is empty."""
        if not self.candidates:
            return None

        # max() keeps the first of equal maxima, i.e. insertion order
        best = max(self.candidates.values(), key=lambda c: c.accumulated_weight)
        self.logger.info(
            "Institution selected",
            school_name=best.cleaned_name,
            weight=best.accumulated_weight,
            sources=best.sources,
            candidate_count=len(self.candidates),
        )
        return best.cleaned_name

    def scan(
        self,
        signals: Optional[Iterable[Union[PageSignal, dict]]],
        domain: Optional[str] = None,
    ) -> Optional[str]:
        """Score a full list of signals and return the best institution name.

        Args:
            signals: Ordered signals (models or raw dicts); None is treated as empty
            domain: Hostname of the page, used for the educational-domain waiver

        Returns:
            Best institution name, or None if no candidate survives
        """
        self.candidates.clear()
        if not signals:
            return None

        for raw in signals:
            try:
                signal = raw if isinstance(raw, PageSignal) else PageSignal.model_validate(raw)
            except ValidationError as e:
                self.logger.warning(
                    "Malformed page signal skipped", signal=str(raw)[:80], error=str(e)
                )
                continue
            self.add_signal(signal, domain)

        return self.best_match()

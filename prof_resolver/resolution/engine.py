"""Resolution engine: school resolution plus the tiered professor search.

One resolve() call is a single linear pass:

Step A - school: sticky cache -> school-name hint -> unscoped search -> fail
Step B - professor, scoped to the school: last name -> full name -> score and
         filter -> unscoped last-name search as a last resort

Directory failures never escape a tier; they count as an empty result and the
next tier runs.
"""

import uuid
from typing import Any, Awaitable, Callable, Optional, TypeVar

from prof_resolver.models.config import SearchLimits
from prof_resolver.models.directory import ScoredCandidate
from prof_resolver.models.resolution import (
    UNSCOPED_SCHOOL_LABEL,
    ErrorKind,
    MatchConfidence,
    ResolutionResult,
    SearchContext,
)
from prof_resolver.resolution.context_parser import extract_course_code
from prof_resolver.resolution.directory_client import DirectoryClient, DirectoryUnavailable
from prof_resolver.resolution.match_scorer import (
    filter_by_department,
    filter_by_given_name_prefix,
    rank_candidates,
    score_candidates,
)
from prof_resolver.resolution.school_cache import CachedSchool, SchoolContextCache
from prof_resolver.utils.department_normalizer import normalize_department
from prof_resolver.utils.logger import get_logger
from prof_resolver.utils.name_normalizer import ParsedName, clean_name, split_name

T = TypeVar("T")


class ResolutionEngine:
    """Resolves a SearchContext to ranked directory records.

    The school cache is injected so that several engines (or tests) can share
    or isolate it explicitly.
    """

    def __init__(
        self,
        client: DirectoryClient,
        cache: Optional[SchoolContextCache] = None,
        limits: Optional[SearchLimits] = None,
    ):
        self.client = client
        self.cache = cache if cache is not None else SchoolContextCache()
        self.limits = limits or SearchLimits()

    async def _call_tier(
        self,
        logger: Any,
        tier: str,
        call: Callable[[], Awaitable[T]],
        empty: T,
    ) -> T:
        """Run one directory call, degrading DirectoryUnavailable to `empty`."""
        try:
            return await call()
        except DirectoryUnavailable as e:
            logger.warning(
                "Directory tier degraded to empty result", tier=tier, error=str(e)
            )
            return empty

    @staticmethod
    def _department_hint(context: SearchContext) -> Optional[str]:
        if context.department:
            return normalize_department(context.department)
        found = extract_course_code(context.course)
        if found:
            return normalize_department(found[1])
        return None

    async def _resolve_school(
        self, context: SearchContext, logger: Any
    ) -> Optional[CachedSchool]:
        """Step A.1/A.2: return the binding the search will be scoped to, or None."""
        if not context.manual_override:
            cached = self.cache.lookup(context.domain)
            if cached is not None:
                logger.info(
                    "Sticky school reused",
                    domain=cached.domain,
                    school_name=cached.school_name,
                    generation=cached.generation,
                )
                return cached

        hint = (context.hinted_school_name or "").strip()
        if not hint:
            return None

        school = await self._call_tier(
            logger, "school_lookup", lambda: self.client.search_school(hint), None
        )
        if school is None:
            logger.info("School hint did not resolve", school_hint=hint)
            return None

        return self.cache.bind(context.domain, school.id, school.name)

    def _binding_replaced(self, binding: CachedSchool, logger: Any) -> bool:
        """True if the cache was written after this resolution read or made its binding."""
        if self.cache.is_current(binding):
            return False
        logger.warning(
            "School binding replaced during resolution",
            domain=binding.domain,
            school_name=binding.school_name,
            generation=binding.generation,
            current_generation=self.cache.generation,
        )
        return True

    def _unscoped_result(self, candidates: list[ScoredCandidate]) -> ResolutionResult:
        return ResolutionResult(
            success=True,
            records=candidates[: self.limits.max_results],
            resolved_school_label=UNSCOPED_SCHOOL_LABEL,
            confidence=MatchConfidence.UNSCOPED,
        )

    def _filter_scoped(
        self,
        ranked: list[ScoredCandidate],
        name: ParsedName,
        department: Optional[str],
        logger: Any,
    ) -> tuple[list[ScoredCandidate], MatchConfidence]:
        """Step B.4: pick which scored candidates to return."""
        top_n = self.limits.scoped_top_n

        if department:
            matches = filter_by_department(ranked, department)
            if matches:
                logger.info("Department matches found", department=department, count=len(matches))
                return matches[: self.limits.max_results], MatchConfidence.SCOPED
            if len(ranked) == 1:
                logger.warning(
                    "Single candidate kept despite department mismatch",
                    department=department,
                    candidate_department=ranked[0].department,
                )
                return ranked, MatchConfidence.DEPARTMENT_OVERRIDE
            logger.info("No department match, taking top scored", department=department)
            return ranked[:top_n], MatchConfidence.SCOPED

        if name.has_given_name:
            prefix_matches = filter_by_given_name_prefix(ranked, name.given)
            if prefix_matches:
                return prefix_matches[:top_n], MatchConfidence.SCOPED
        return ranked[:top_n], MatchConfidence.SCOPED

    async def resolve(
        self, context: SearchContext, correlation_id: Optional[str] = None
    ) -> ResolutionResult:
        """Run the full waterfall for one query.

        Args:
            context: The query (name, domain and optional hints)
            correlation_id: Tracing ID (generated if omitted)

        Returns:
            ResolutionResult; never raises for directory failures
        """
        logger: Any = get_logger(
            correlation_id=correlation_id or str(uuid.uuid4()),
            phase="resolution",
            component="resolution_engine",
        )
        search_term = clean_name(context.raw_name)
        name = split_name(search_term)
        department = self._department_hint(context)

        logger.info(
            "Resolution started",
            search_term=search_term,
            domain=context.domain,
            school_hint=context.hinted_school_name,
            department=department,
            manual_override=context.manual_override,
        )

        if not name.tokens:
            logger.warning("Empty name after cleanup", raw_name=context.raw_name)
            return ResolutionResult(
                success=False, error_kind=ErrorKind.PROFESSOR_NOT_FOUND
            )

        # Step A
        school = await self._resolve_school(context, logger)
        if school is None:
            global_hits = await self._call_tier(
                logger,
                "global_name",
                lambda: self.client.search_professor_global(search_term),
                [],
            )
            if global_hits:
                # Directory order is kept here; only the last-name fallback re-ranks
                logger.info("No school context, returning global matches", hits=len(global_hits))
                return self._unscoped_result(
                    score_candidates(global_hits, search_term, department)
                )
            logger.info("School unresolved and no global match")
            return ResolutionResult(success=False, error_kind=ErrorKind.SCHOOL_UNRESOLVED)

        school_id, school_name = school.school_id, school.school_name

        # Step B
        logger.info("Searching by last name", search_term=name.family, school_name=school_name)
        candidates = await self._call_tier(
            logger,
            "scoped_last_name",
            lambda: self.client.search_professor(name.family, school_id),
            [],
        )
        if not candidates:
            logger.info("Last name search empty, trying full name", search_term=search_term)
            candidates = await self._call_tier(
                logger,
                "scoped_full_name",
                lambda: self.client.search_professor(search_term, school_id),
                [],
            )

        if candidates:
            ranked = rank_candidates(candidates, search_term, department)
            results, confidence = self._filter_scoped(ranked, name, department, logger)
            if results:
                logger.info(
                    "Resolution succeeded",
                    school_name=school_name,
                    count=len(results),
                    top_score=results[0].match_score,
                    confidence=confidence.value,
                )
                return ResolutionResult(
                    success=True,
                    records=results,
                    resolved_school_label=school_name,
                    confidence=confidence,
                    stale_school=self._binding_replaced(school, logger),
                )

        logger.info("Scoped search empty, trying global last-name search", search_term=name.family)
        fallback = await self._call_tier(
            logger,
            "global_last_name",
            lambda: self.client.search_professor_global(name.family),
            [],
        )
        if fallback:
            return self._unscoped_result(rank_candidates(fallback, search_term, department))

        logger.info("Professor not found", school_name=school_name)
        return ResolutionResult(
            success=False,
            resolved_school_label=school_name,
            error_kind=ErrorKind.PROFESSOR_NOT_FOUND,
            stale_school=self._binding_replaced(school, logger),
        )

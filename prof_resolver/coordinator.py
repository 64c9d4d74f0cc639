"""
Resolution Coordinator Module

Wires the page scan, the school cache and the resolution engine together for
one user session, and exposes a small command-line entry point.

A session treats every new selection as superseding the previous one: the
in-flight resolution is cancelled before the new one starts, so a stale
resolution can never write the school cache after a newer selection.
"""

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from prof_resolver.models.config import ResolverParams
from prof_resolver.models.resolution import (
    ErrorKind,
    MatchConfidence,
    ResolutionResult,
    SearchContext,
)
from prof_resolver.resolution.context_parser import ContextParser
from prof_resolver.resolution.directory_client import DirectoryClient, RateMyProfessorsClient
from prof_resolver.resolution.engine import ResolutionEngine
from prof_resolver.resolution.page_signals import HtmlPageSignalSource, PageSignalSource
from prof_resolver.resolution.school_cache import SchoolContextCache
from prof_resolver.resolution.signal_scorer import SchoolSignalScorer
from prof_resolver.utils.logger import get_logger

MIN_SELECTION_LENGTH = 4
MAX_SELECTION_WORDS = 3


def is_plausible_selection(text: Optional[str]) -> bool:
    """True if a selected string could be a person's name worth resolving.

    Example:
        >>> is_plausible_selection("Stuart Reges")
        True
        >>> is_plausible_selection("Office hours are on Monday")
        False
    """
    if not text:
        return False
    stripped = text.strip()
    return len(stripped) >= MIN_SELECTION_LENGTH and len(stripped.split()) <= MAX_SELECTION_WORDS


class ResolutionSession:
    """One user's stream of selections against a shared engine.

    Only one resolution is current at a time. Starting a new one cancels the
    previous task, and that task's awaiter gets a Superseded result.
    Cancelling the awaiter itself still raises asyncio.CancelledError.
    """

    def __init__(
        self,
        engine: ResolutionEngine,
        params: Optional[ResolverParams] = None,
        correlation_id: Optional[str] = None,
    ):
        self.engine = engine
        self.params = params or ResolverParams()
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self._current: Optional[asyncio.Task[ResolutionResult]] = None
        self._superseded: set[asyncio.Task[ResolutionResult]] = set()
        self.logger: Any = get_logger(
            correlation_id=self.correlation_id,
            phase="session",
            component="resolution_session",
        )

    def build_context(
        self,
        selected_text: str,
        domain: str,
        page: Optional[PageSignalSource] = None,
        school_override: Optional[str] = None,
    ) -> SearchContext:
        """Scan the page (if any) and assemble the SearchContext."""
        department = None
        course = None
        school_hint = None

        if page is not None:
            hints = ContextParser(
                max_depth=self.params.context.max_depth,
                max_label_length=self.params.context.max_department_label_length,
                correlation_id=self.correlation_id,
            ).parse(page.context_blocks(selected_text), page.headings())
            department, course = hints.department, hints.course
            if not school_override:
                school_hint = SchoolSignalScorer(self.correlation_id).scan(
                    page.signals(), domain=domain
                )

        return SearchContext(
            raw_name=selected_text.strip(),
            domain=domain,
            hinted_school_name=school_override or school_hint,
            department=department,
            course=course,
            manual_override=bool(school_override),
        )

    async def _run(self, context: SearchContext) -> ResolutionResult:
        resolution_id = str(uuid.uuid4())
        try:
            return await asyncio.wait_for(
                self.engine.resolve(context, correlation_id=resolution_id),
                timeout=self.params.resolution_timeout,
            )
        except asyncio.TimeoutError:
            self.logger.error(
                "Resolution timed out",
                resolution_id=resolution_id,
                timeout=self.params.resolution_timeout,
            )
            return ResolutionResult(success=False, error_kind=ErrorKind.DIRECTORY_UNAVAILABLE)

    def cancel_current(self) -> bool:
        """Cancel the in-flight resolution, if any. Returns True if one was cancelled."""
        if self._current is not None and not self._current.done():
            self._superseded.add(self._current)
            self._current.cancel()
            self.logger.info("Superseded in-flight resolution")
            return True
        return False

    async def resolve(self, context: SearchContext) -> ResolutionResult:
        """Resolve a prepared context, superseding any in-flight resolution."""
        self.cancel_current()
        task = asyncio.create_task(self._run(context))
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            if task not in self._superseded:
                raise
            return ResolutionResult(success=False, error_kind=ErrorKind.SUPERSEDED)
        finally:
            self._superseded.discard(task)
            if self._current is task:
                self._current = None

    async def resolve_selection(
        self,
        selected_text: str,
        domain: str,
        page: Optional[PageSignalSource] = None,
        school_override: Optional[str] = None,
    ) -> Optional[ResolutionResult]:
        """Resolve a name selected on a page.

        Args:
            selected_text: Text the user selected
            domain: Hostname of the page
            page: Page observations (optional)
            school_override: School name typed by the user (optional)

        Returns:
            ResolutionResult, or None when the selection is not a plausible name
        """
        if not is_plausible_selection(selected_text):
            self.logger.debug("Selection ignored", selected_text=selected_text[:80])
            return None
        context = self.build_context(selected_text, domain, page, school_override)
        return await self.resolve(context)


def build_session(
    params: ResolverParams,
    client: Optional[DirectoryClient] = None,
    cache: Optional[SchoolContextCache] = None,
) -> ResolutionSession:
    """Create a session with an engine, cache and client built from config."""
    if cache is None:
        cache = SchoolContextCache(
            max_entries=params.cache.max_entries, ttl_seconds=params.cache.ttl_seconds
        )
    if client is None:
        client = RateMyProfessorsClient(params.directory)
    engine = ResolutionEngine(client, cache=cache, limits=params.search_limits)
    return ResolutionSession(engine, params=params)


def render_result(result: ResolutionResult, console: Console) -> None:
    """Print a resolution result as a table."""
    if not result.success:
        label = result.resolved_school_label or "unknown school"
        kind = result.error_kind.value if result.error_kind else "unknown"
        console.print(f"[red]No match[/red] ({kind}) at {label}")
        return

    table = Table(title=f"Matches @ {result.resolved_school_label}")
    table.add_column("Name")
    table.add_column("Department")
    table.add_column("School")
    table.add_column("Rating", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Profile")
    for record in result.records:
        table.add_row(
            record.full_name,
            record.department,
            record.school.name if record.school else "",
            "N/A" if record.avg_rating is None else f"{record.avg_rating:.1f}",
            "N/A" if record.avg_difficulty is None else f"{record.avg_difficulty:.1f}",
            f"{record.match_score:.1f}",
            record.profile_url() or "",
        )
    console.print(table)
    if result.confidence not in (None, MatchConfidence.SCOPED):
        console.print(f"[yellow]Confidence: {result.confidence.value}[/yellow]")


async def _main_async(args: argparse.Namespace) -> int:
    config_path = Path(args.config)
    if config_path.exists():
        params = ResolverParams.load(config_path)
    else:
        params = ResolverParams()
    logging.getLogger().setLevel(params.log_level)

    page = None
    if args.html:
        html = Path(args.html).read_text(encoding="utf-8")
        page = HtmlPageSignalSource(html, max_depth=params.context.max_depth)

    client = RateMyProfessorsClient(params.directory)
    async with client:
        session = build_session(params, client=client)
        if page is not None:
            context = session.build_context(args.name, args.domain, page, args.school)
            if args.department:
                context.department = args.department
            if args.course:
                context.course = args.course
        else:
            context = SearchContext(
                raw_name=args.name,
                domain=args.domain,
                hinted_school_name=args.school,
                department=args.department,
                course=args.course,
                manual_override=bool(args.school),
            )
        result = await session.resolve(context)

    render_result(result, Console())
    return 0 if result.success else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Command-line entry point: resolve one name and print the matches."""
    parser = argparse.ArgumentParser(description="Resolve an instructor name to directory records")
    parser.add_argument("name", help='Name as it appears on the page, e.g. "Dr. Stuart Reges"')
    parser.add_argument("--domain", default="", help="Hostname of the page")
    parser.add_argument("--school", default=None, help="School name (manual override)")
    parser.add_argument("--department", default=None, help="Department hint, e.g. CSE")
    parser.add_argument("--course", default=None, help="Course code hint, e.g. 'CSE 142'")
    parser.add_argument("--html", default=None, help="Saved page to scan for context")
    parser.add_argument(
        "--config", default="config/resolver_params.json", help="Path to resolver_params.json"
    )
    args = parser.parse_args(argv)
    return asyncio.run(_main_async(args))


if __name__ == "__main__":
    sys.exit(main())

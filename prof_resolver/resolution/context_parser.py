"""Department and course-code extraction from text around a selection."""

import re
from typing import Any, Optional, Sequence

from prof_resolver.models.signals import ContextHints, TextBlock
from prof_resolver.utils.logger import get_logger


DEFAULT_MAX_DEPTH = 8
DEFAULT_MAX_LABEL_LENGTH = 40

COURSE_CODE_PATTERN = re.compile(r"\b([A-Z]{2,8})\s?-?\s?(\d{3,4})([A-Z])?\b")

# Letter groups that look like course prefixes but label rooms, days or terms
COURSE_PREFIX_BLACKLIST = frozenset(
    {
        "ROOM", "RM", "BLDG", "HALL", "SUITE", "STE", "FLOOR", "LAB", "OFFICE",
        "MON", "TUE", "TUES", "WED", "THU", "THUR", "THURS", "FRI", "SAT", "SUN",
        "MW", "MWF", "TR", "TTH", "TH",
        "FALL", "SPRING", "SUMMER", "WINTER", "TERM", "SEM", "YEAR",
        "PAGE", "PHONE", "FAX", "EXT", "ZIP", "PO", "BOX",
    }
)

DEPARTMENT_LABEL_PATTERN = re.compile(
    r"Department(?:\s*:\s*|\s+)(?:of\s+)?([A-Za-z][A-Za-z &]*)", re.IGNORECASE
)
GENERIC_DEPARTMENT_PATTERN = re.compile(
    r"^(?:Home|Page|Portal|Login|Welcome|Site)$", re.IGNORECASE
)


def extract_course_code(text: Optional[str]) -> Optional[tuple[str, str]]:
    """Find the first course code whose prefix is not structural noise.

    Returns:
        (course, prefix), e.g. ("CSE 142", "CSE"), or None
    """
    if not text:
        return None
    for match in COURSE_CODE_PATTERN.finditer(text):
        prefix = match.group(1)
        if prefix in COURSE_PREFIX_BLACKLIST:
            continue
        return match.group(0), prefix
    return None


def extract_department_label(
    text: Optional[str], max_length: int = DEFAULT_MAX_LABEL_LENGTH
) -> Optional[str]:
    """Extract "<words>" from "Department of <words>" / "Department: <words>".

    Labels that are too long or generic ("Department Home") are rejected.
    """
    if not text or "department" not in text.lower():
        return None
    for match in DEPARTMENT_LABEL_PATTERN.finditer(text):
        label = match.group(1).strip()
        if not label or len(label) >= max_length:
            continue
        if GENERIC_DEPARTMENT_PATTERN.match(label):
            continue
        return label
    return None


class ContextParser:
    """Extracts department/course hints from nearby text blocks.

    Blocks are ordered innermost to outermost. At each level the block text,
    its table header cells and its preceding sibling are checked; the walk
    stops at the first level that yields a department label or course code.
    When nothing is found locally, document headings are scanned for a
    department label.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_label_length: int = DEFAULT_MAX_LABEL_LENGTH,
        correlation_id: Optional[str] = None,
    ):
        self.max_depth = max_depth
        self.max_label_length = max_label_length
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            phase="page_scan",
            component="context_parser",
        )

    def _texts_at_level(self, block: TextBlock) -> list[str]:
        texts = [block.text, *block.header_texts]
        if block.preceding_sibling_text:
            texts.append(block.preceding_sibling_text)
        return [t for t in texts if t]

    def _parse_level(self, block: TextBlock) -> Optional[ContextHints]:
        texts = self._texts_at_level(block)

        department = None
        for text in texts:
            department = extract_department_label(text, self.max_label_length)
            if department:
                break

        course = None
        for text in texts:
            found = extract_course_code(text)
            if found:
                course, prefix = found
                if department is None:
                    department = prefix
                break

        if department is None and course is None:
            return None
        return ContextHints(department=department, course=course)

    def parse(
        self,
        blocks: Optional[Sequence[TextBlock]],
        headings: Optional[Sequence[str]] = None,
    ) -> ContextHints:
        """Walk the blocks and fall back to document headings.

        Args:
            blocks: Nearby text, innermost first (None or empty is tolerated)
            headings: Document heading texts for the fallback scan

        Returns:
            ContextHints with department and/or course, both None if nothing found
        """
        for depth, block in enumerate((blocks or [])[: self.max_depth]):
            hints = self._parse_level(block)
            if hints:
                self.logger.debug(
                    "Context found near selection",
                    depth=depth,
                    department=hints.department,
                    course=hints.course,
                )
                return hints

        for heading in headings or []:
            department = extract_department_label(heading, self.max_label_length)
            if department:
                self.logger.debug("Department found in heading", department=department)
                return ContextHints(department=department)

        return ContextHints()

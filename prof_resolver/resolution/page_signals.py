"""HTML page signal source.

Turns a saved page into the two inputs the resolver needs: weighted
institution-name signals for the SchoolSignalScorer, and the nearby text
blocks around a selected name for the ContextParser.
"""

import re
from typing import Any, Optional, Protocol

from bs4 import BeautifulSoup, Tag

from prof_resolver.models.signals import (
    SOURCE_FOOTER_COPYRIGHT,
    SOURCE_HEADER,
    SOURCE_META,
    SOURCE_META_OG,
    SOURCE_META_REGEX,
    SOURCE_TITLE_FULL,
    SOURCE_TITLE_KEYWORD,
    SOURCE_TITLE_SUFFIX,
    PageSignal,
    TextBlock,
)
from prof_resolver.utils.logger import get_logger


# (attrs, weight, source, extract_phrase) in descending trust
META_SIGNAL_RULES: list[tuple[dict[str, str], float, str, bool]] = [
    ({"property": "og:site_name"}, 12, SOURCE_META_OG, False),
    ({"name": "application-name"}, 10, SOURCE_META, False),
    ({"name": "apple-mobile-web-app-title"}, 8, SOURCE_META, False),
    ({"name": "copyright"}, 5, SOURCE_META_REGEX, True),
    ({"name": "description"}, 4, SOURCE_META_REGEX, True),
]

TITLE_KEYWORD_WEIGHT = 8
TITLE_SUFFIX_WEIGHT = 4
TITLE_FULL_WEIGHT = 2
HEADER_WEIGHT = 5
FOOTER_WEIGHT = 6

INSTITUTION_PHRASE_PATTERN = re.compile(
    r"((?:[A-Z][a-z]+\s+){0,4}(?:University|College|Institute|State)"
    r"(?:\s+of\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)?)"
)
TITLE_SPLIT_PATTERN = re.compile(r"[|\-:–]")
TITLE_KEYWORD_PATTERN = re.compile(r"University|College|Institute|State")
HEADER_KEYWORD_PATTERN = re.compile(r"University|College")
FOOTER_COPYRIGHT_PATTERN = re.compile(r"©\s*\d{4}\s*" + INSTITUTION_PHRASE_PATTERN.pattern)

HEADING_TAGS = ["h1", "h2", "h3"]
NON_CONTENT_TAGS = frozenset({"title", "script", "style", "noscript"})


class PageSignalSource(Protocol):
    """Collaborator interface supplying page observations to the resolver."""

    def signals(self) -> list[PageSignal]: ...

    def context_blocks(self, selected_text: str) -> list[TextBlock]: ...

    def headings(self) -> list[str]: ...


def _text(element: Any, separator: str = " ") -> str:
    return element.get_text(separator, strip=True) if element is not None else ""


def _normalize_space(value: str) -> str:
    return " ".join(value.split())


class HtmlPageSignalSource:
    """PageSignalSource over raw HTML, parsed with BeautifulSoup.

    Example:
        page = HtmlPageSignalSource(html)
        school = SchoolSignalScorer().scan(page.signals(), domain="canvas.uw.edu")
        hints = ContextParser().parse(page.context_blocks("Stuart Reges"), page.headings())
    """

    def __init__(self, html: str, max_depth: int = 8, correlation_id: Optional[str] = None):
        self.soup = BeautifulSoup(html or "", "html.parser")
        self.max_depth = max_depth
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            phase="page_scan",
            component="html_page_source",
        )

    def _meta_signals(self) -> list[PageSignal]:
        found = []
        for attrs, weight, source, extract_phrase in META_SIGNAL_RULES:
            element = self.soup.find("meta", attrs=attrs)
            content = element.get("content") if isinstance(element, Tag) else None
            if not content:
                continue
            if extract_phrase:
                match = INSTITUTION_PHRASE_PATTERN.search(content)
                if match:
                    found.append(PageSignal(text=match.group(1), weight=weight, source=source))
            else:
                found.append(PageSignal(text=content, weight=weight, source=source))
        return found

    def _title_signals(self) -> list[PageSignal]:
        if self.soup.title is None:
            return []
        title = _normalize_space(self.soup.title.get_text())
        if not title:
            return []

        found = []
        parts = TITLE_SPLIT_PATTERN.split(title)
        for part in parts:
            part = part.strip()
            if TITLE_KEYWORD_PATTERN.search(part):
                found.append(
                    PageSignal(text=part, weight=TITLE_KEYWORD_WEIGHT, source=SOURCE_TITLE_KEYWORD)
                )

        # "Page | Site" usually ends with the site name
        if len(parts) > 1:
            found.append(
                PageSignal(
                    text=parts[-1].strip(), weight=TITLE_SUFFIX_WEIGHT, source=SOURCE_TITLE_SUFFIX
                )
            )
        else:
            found.append(PageSignal(text=title, weight=TITLE_FULL_WEIGHT, source=SOURCE_TITLE_FULL))
        return found

    def _header_signals(self) -> list[PageSignal]:
        found = []
        for heading in self.soup.find_all(["h1", "h2"]):
            text = _text(heading)
            if HEADER_KEYWORD_PATTERN.search(text):
                found.append(PageSignal(text=text, weight=HEADER_WEIGHT, source=SOURCE_HEADER))
        return found

    def _footer_signals(self) -> list[PageSignal]:
        found = []
        footers = self.soup.find_all("footer") + self.soup.select(".footer")
        seen: set[int] = set()
        for footer in footers:
            if id(footer) in seen:
                continue
            seen.add(id(footer))
            match = FOOTER_COPYRIGHT_PATTERN.search(_text(footer))
            if match:
                found.append(
                    PageSignal(
                        text=match.group(1).strip(),
                        weight=FOOTER_WEIGHT,
                        source=SOURCE_FOOTER_COPYRIGHT,
                    )
                )
        return found

    def signals(self) -> list[PageSignal]:
        """Collect institution-name signals in descending order of trust."""
        found = (
            self._meta_signals()
            + self._title_signals()
            + self._header_signals()
            + self._footer_signals()
        )
        self.logger.debug("Page signals collected", count=len(found))
        return found

    def headings(self) -> list[str]:
        return [_text(h) for h in self.soup.find_all(HEADING_TAGS)]

    def _find_selection(self, selected_text: str) -> Optional[Tag]:
        """Return the innermost element whose text contains the selection."""
        needle = _normalize_space(selected_text)
        if not needle:
            return None

        body = self.soup.body or self.soup
        for node in body.find_all(string=lambda s: s is not None and needle in _normalize_space(s)):
            if isinstance(node.parent, Tag) and node.parent.name not in NON_CONTENT_TAGS:
                return node.parent

        # Selection spans several text nodes: a descendant always follows its
        # ancestors in document order, so the last match is the innermost
        innermost = None
        for tag in body.find_all(True):
            if tag.name in NON_CONTENT_TAGS:
                continue
            if needle in _normalize_space(tag.get_text(" ")):
                innermost = tag
        return innermost

    def context_blocks(self, selected_text: str) -> list[TextBlock]:
        """Build TextBlocks from the selection's element outward, up to max_depth."""
        element = self._find_selection(selected_text)
        if element is None:
            self.logger.debug("Selection not found in page", selected_text=selected_text[:80])
            return []

        blocks = []
        current: Optional[Tag] = element
        while current is not None and current.name != "[document]" and len(blocks) < self.max_depth:
            sibling = current.find_previous_sibling()
            header_texts = (
                [_text(th) for th in current.find_all("th")] if current.name == "table" else []
            )
            blocks.append(
                TextBlock(
                    text=_text(current, "\n"),
                    preceding_sibling_text=_text(sibling, "\n") or None,
                    header_texts=header_texts,
                )
            )
            current = current.parent
        return blocks

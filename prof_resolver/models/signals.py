"""Page observation models consumed by the signal scorer and context parser."""

from typing import Optional
from pydantic import BaseModel, Field


# Signal source constants, highest inherent trust first
SOURCE_META_OG = "meta-og"  # og:site_name
SOURCE_MANUAL_OVERRIDE = "manual-override"  # Typed in by the user
SOURCE_META = "meta"  # application-name, apple-mobile-web-app-title
SOURCE_META_REGEX = "meta-regex"  # Pattern extracted from copyright/description
SOURCE_TITLE_KEYWORD = "title-keyword"  # Title part with an institution keyword
SOURCE_FOOTER_COPYRIGHT = "footer-copyright"
SOURCE_HEADER = "header"  # h1/h2 text
SOURCE_TITLE_SUFFIX = "title-suffix"  # Last part of "Page | Site"
SOURCE_TITLE_FULL = "title-full"

# Sources trusted enough to skip the institution-keyword requirement
TRUSTED_SOURCES = frozenset({SOURCE_META_OG, SOURCE_MANUAL_OVERRIDE})


class PageSignal(BaseModel):
    """An observed institution-name candidate with provenance.

    Attributes:
        text: Raw text as found on the page
        weight: Inherent trust of the observation point
        source: One of the SOURCE_* constants
    """

    text: str
    weight: float = Field(ge=0)
    source: str


class InstitutionCandidate(BaseModel):
    """Aggregate of all signals that cleaned to the same text during one scan."""

    cleaned_name: str
    accumulated_weight: float = 0.0
    sources: list[str] = Field(default_factory=list)

    def absorb(self, signal: PageSignal) -> None:
        self.accumulated_weight += signal.weight
        self.sources.append(signal.source)


class TextBlock(BaseModel):
    """One level of text around a selection point.

    Attributes:
        text: Visible text of the element at this level
        preceding_sibling_text: Text of the element just before it, if any
        header_texts: Table header cells when this level is a table
    """

    text: str = ""
    preceding_sibling_text: Optional[str] = None
    header_texts: list[str] = Field(default_factory=list)


class ContextHints(BaseModel):
    """Department and course hints extracted from nearby text."""

    department: Optional[str] = None
    course: Optional[str] = None

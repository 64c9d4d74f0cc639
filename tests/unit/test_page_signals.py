"""Unit tests for the BeautifulSoup page signal source."""

import pytest

from prof_resolver.models.signals import (
    SOURCE_FOOTER_COPYRIGHT,
    SOURCE_HEADER,
    SOURCE_META,
    SOURCE_META_OG,
    SOURCE_META_REGEX,
    SOURCE_TITLE_FULL,
    SOURCE_TITLE_KEYWORD,
    SOURCE_TITLE_SUFFIX,
)
from prof_resolver.resolution.context_parser import ContextParser
from prof_resolver.resolution.page_signals import HtmlPageSignalSource
from prof_resolver.resolution.signal_scorer import SchoolSignalScorer


COURSE_PAGE = """
<html>
  <head>
    <title>CSE 142 Syllabus | University of Washington</title>
    <meta property="og:site_name" content="University of Washington">
    <meta name="description" content="Course pages for the University of Washington Seattle campus">
  </head>
  <body>
    <h1>Paul G. Allen School</h1>
    <h2>Department of Computer Science</h2>
    <div class="course">
      <h3>CSE 142: Computer Programming I</h3>
      <p>Instructor: <span>Stuart Reges</span></p>
    </div>
    <footer>&copy; 2024 University of Washington. All rights reserved.</footer>
  </body>
</html>
"""

SCHEDULE_PAGE = """
<html>
  <head><title>Spring Schedule</title></head>
  <body>
    <table>
      <tr><th>MATH 124</th><th>Instructor</th></tr>
      <tr><td>Lecture A</td><td>Jane Doe</td></tr>
    </table>
  </body>
</html>
"""


class TestSignals:
    """Institution-name signal extraction."""

    def test_og_site_name_first(self):
        # Arrange
        page = HtmlPageSignalSource(COURSE_PAGE)

        # Act
        signals = page.signals()

        # Assert
        assert signals[0].source == SOURCE_META_OG
        assert signals[0].text == "University of Washington"
        assert signals[0].weight == 12

    def test_description_phrase_extracted(self):
        signals = HtmlPageSignalSource(COURSE_PAGE).signals()

        regex_signals = [s for s in signals if s.source == SOURCE_META_REGEX]
        assert [s.text for s in regex_signals] == ["University of Washington Seattle"]

    def test_title_split_into_keyword_and_suffix(self):
        signals = HtmlPageSignalSource(COURSE_PAGE).signals()

        by_source = {s.source: s.text for s in signals}
        assert by_source[SOURCE_TITLE_KEYWORD] == "University of Washington"
        assert by_source[SOURCE_TITLE_SUFFIX] == "University of Washington"
        assert SOURCE_TITLE_FULL not in by_source

    def test_untitled_split_uses_full_title(self):
        signals = HtmlPageSignalSource(SCHEDULE_PAGE).signals()

        assert [(s.text, s.source) for s in signals] == [("Spring Schedule", SOURCE_TITLE_FULL)]

    def test_footer_copyright_captures_full_name(self):
        signals = HtmlPageSignalSource(COURSE_PAGE).signals()

        footer = [s for s in signals if s.source == SOURCE_FOOTER_COPYRIGHT]
        assert [s.text for s in footer] == ["University of Washington"]

    def test_headers_need_university_or_college(self):
        html = "<html><body><h1>Reed College</h1><h2>Welcome</h2></body></html>"

        signals = HtmlPageSignalSource(html).signals()

        assert [(s.text, s.source) for s in signals] == [("Reed College", SOURCE_HEADER)]

    def test_application_name_meta(self):
        html = '<html><head><meta name="application-name" content="UW Canvas"></head></html>'

        signals = HtmlPageSignalSource(html).signals()

        assert [(s.text, s.source) for s in signals] == [("UW Canvas", SOURCE_META)]

    def test_signals_feed_scorer(self):
        page = HtmlPageSignalSource(COURSE_PAGE)

        assert SchoolSignalScorer().scan(page.signals(), domain="canvas.uw.edu") == (
            "University of Washington"
        )

    @pytest.mark.parametrize("html", ["", "<not really html", None])
    def test_malformed_html_tolerated(self, html):
        page = HtmlPageSignalSource(html)

        assert page.signals() == []
        assert page.context_blocks("Stuart Reges") == []


class TestContextBlocks:
    """Nearby-text blocks for the context parser."""

    def test_blocks_start_at_selection(self):
        blocks = HtmlPageSignalSource(COURSE_PAGE).context_blocks("Stuart Reges")

        assert blocks[0].text == "Stuart Reges"
        assert "Instructor:" in blocks[1].text

    def test_preceding_sibling_captured(self):
        blocks = HtmlPageSignalSource(COURSE_PAGE).context_blocks("Stuart Reges")

        div_level = blocks[2]
        assert div_level.preceding_sibling_text == "Department of Computer Science"

    def test_depth_bounded(self):
        blocks = HtmlPageSignalSource(COURSE_PAGE, max_depth=2).context_blocks("Stuart Reges")

        assert len(blocks) == 2

    def test_table_headers_collected(self):
        blocks = HtmlPageSignalSource(SCHEDULE_PAGE).context_blocks("Jane Doe")

        table_level = [b for b in blocks if b.header_texts]
        assert table_level[0].header_texts == ["MATH 124", "Instructor"]

    def test_selection_not_on_page(self):
        assert HtmlPageSignalSource(COURSE_PAGE).context_blocks("Nobody Here") == []

    def test_parser_reads_course_near_selection(self):
        page = HtmlPageSignalSource(COURSE_PAGE)

        hints = ContextParser().parse(page.context_blocks("Stuart Reges"), page.headings())

        assert hints.course == "CSE 142"
        assert hints.department == "CSE"

    def test_headings_listed_in_order(self):
        headings = HtmlPageSignalSource(COURSE_PAGE).headings()

        assert headings == [
            "Paul G. Allen School",
            "Department of Computer Science",
            "CSE 142: Computer Programming I",
        ]

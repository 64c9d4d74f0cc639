"""Unit tests for composite professor-match scoring."""

import pytest

from prof_resolver.models.directory import DirectoryRecord
from prof_resolver.resolution.match_scorer import (
    DEPARTMENT_BONUS,
    departments_match,
    filter_by_department,
    filter_by_given_name_prefix,
    rank_candidates,
    score_candidates,
    score_professor,
)


def make_record(first, last, department="", record_id=None):
    return DirectoryRecord(
        id=record_id or f"{first}-{last}",
        first_name=first,
        last_name=last,
        department=department,
    )


class TestLastNameGate:
    """The surname gates the whole score."""

    @pytest.mark.parametrize(
        "record",
        [
            make_record("Stuart", "Smith", "Computer Science"),
            make_record("Stuart", "Zzyzx", "Computer Science"),
            make_record("Stuart", "", "Computer Science"),
        ],
    )
    def test_score_is_zero_when_last_name_fails(self, record):
        """Perfect first name and department cannot rescue a surname mismatch."""
        assert score_professor(record, "Stuart Reges", "Computer Science") == 0.0

    def test_exact_last_name_scores_fifty(self):
        # A first name with no similarity contributes nothing
        record = make_record("", "Reges")

        assert score_professor(record, "Reges") == 50.0

    def test_close_last_name_scores_thirty(self):
        """'Smyth' vs 'Smith' lands in the 0.8-0.9 band."""
        record = make_record("", "Smyth")

        assert score_professor(record, "Smith") == 30.0


class TestFirstNameRules:
    """Given-name scoring branches."""

    def test_exact_first_name(self):
        record = make_record("Stuart", "Reges")

        assert score_professor(record, "Stuart Reges") == 90.0

    def test_nickname_branch_beats_plain_similarity(self):
        """'Liz' vs 'Elizabeth' is not similar enough for +40, so +35 applies."""
        record = make_record("Elizabeth", "Johnson")

        assert score_professor(record, "Liz Johnson") == 50.0 + 35.0

    def test_substring_branch(self):
        """'Ann' is inside 'Marianne' but neither similar nor a listed nickname."""
        record = make_record("Marianne", "Reges")

        assert score_professor(record, "Ann Reges") == 50.0 + 20.0

    def test_honorific_ignored_in_query(self):
        record = make_record("Stuart", "Reges")

        assert score_professor(record, "Dr. Stuart Reges") == score_professor(
            record, "Stuart Reges"
        )


class TestDepartmentBonus:
    """Department agreement bonus."""

    def test_scenario_stuart_reges_with_department(self):
        """Full name and department agreement scores 50 + 40 + 15."""
        record = make_record("Stuart", "Reges", "Computer Science")

        score = score_professor(record, "Dr. Stuart Reges", "Computer Science")

        assert score >= 105.0

    def test_bonus_applies_on_containment(self):
        record = make_record("Stuart", "Reges", "Computer Science & Engineering")

        assert score_professor(record, "Stuart Reges", "Computer Science") == 90.0 + DEPARTMENT_BONUS

    def test_no_bonus_without_hint(self):
        record = make_record("Stuart", "Reges", "Computer Science")

        assert score_professor(record, "Stuart Reges") == 90.0

    def test_empty_record_department_gets_no_bonus(self):
        record = make_record("Stuart", "Reges", "")

        assert score_professor(record, "Stuart Reges", "Computer Science") == 90.0


class TestDepartmentsMatch:
    """Department comparison."""

    def test_ignores_case_and_punctuation(self):
        assert departments_match("Computer-Science", "computer science") is True

    def test_either_direction(self):
        assert departments_match("Science", "Computer Science") is True
        assert departments_match("Computer Science", "Science") is True

    def test_empty_never_matches(self):
        assert departments_match("", "Computer Science") is False
        assert departments_match("Computer Science", "") is False
        assert departments_match(None, None) is False


class TestRankAndFilter:
    """Ranking order and result filters."""

    def test_rank_sorts_descending(self):
        records = [
            make_record("Zed", "Reges", record_id="weak"),
            make_record("Stuart", "Reges", record_id="strong"),
        ]

        ranked = rank_candidates(records, "Stuart Reges")

        assert [c.id for c in ranked] == ["strong", "weak"]
        assert ranked[0].match_score > ranked[1].match_score

    def test_rank_is_stable_for_ties(self):
        """Equal scores keep the directory's order."""
        records = [
            make_record("Stuart", "Reges", record_id="first"),
            make_record("Stuart", "Reges", record_id="second"),
            make_record("Stuart", "Reges", record_id="third"),
        ]

        ranked = rank_candidates(records, "Stuart Reges")

        assert [c.id for c in ranked] == ["first", "second", "third"]

    def test_rank_keeps_zero_scores(self):
        ranked = rank_candidates([make_record("Ann", "Smith")], "Stuart Reges")

        assert len(ranked) == 1
        assert ranked[0].match_score == 0.0

    def test_score_candidates_keeps_directory_order(self):
        records = [
            make_record("Zed", "Reges", record_id="weak"),
            make_record("Stuart", "Reges", record_id="strong"),
        ]

        scored = score_candidates(records, "Stuart Reges")

        assert [c.id for c in scored] == ["weak", "strong"]
        assert scored[1].match_score > scored[0].match_score

    def test_filter_by_department_preserves_order(self):
        ranked = rank_candidates(
            [
                make_record("Stuart", "Reges", "Computer Science", "a"),
                make_record("Stuart", "Reges", "History", "b"),
                make_record("Stu", "Reges", "Computer Science", "c"),
            ],
            "Stuart Reges",
        )

        filtered = filter_by_department(ranked, "Computer Science")

        assert [c.id for c in filtered] == ["a", "c"]

    def test_filter_by_given_name_prefix(self):
        ranked = rank_candidates(
            [
                make_record("Stuart", "Reges", record_id="a"),
                make_record("Marty", "Reges", record_id="b"),
            ],
            "Stu Reges",
        )

        filtered = filter_by_given_name_prefix(ranked, "Stu")

        assert [c.id for c in filtered] == ["a"]

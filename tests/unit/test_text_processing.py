"""
Unit tests for display label helpers in vellum.utils.text_processing.
"""

from datetime import date, datetime

import pytest

from vellum.contexts.templating.resume_data_structure import Skill
from vellum.utils.text_processing import (
    date_range_label,
    ensure_url_scheme,
    format_date,
    full_name,
    gpa_label,
    optional_range_label,
    safe_link,
    set_max_consecutive_blank_lines,
    skill_label,
    skill_labels,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "first, last, expected",
    [("Ada", "Lovelace", "Ada Lovelace"), ("Ada", "", "Ada"), ("", "Lovelace", "Lovelace"), (None, None, "")],
)
def test_full_name(first, last, expected):
    assert full_name(first, last) == expected


class TestFormatDate:
    """Tests for format_date()."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2023-01-15", "Jan 2023"),
            ("2023-01", "Jan 2023"),
            ("2023/03", "Mar 2023"),
            ("03/2023", "Mar 2023"),
            ("Sep 2021", "Sep 2021"),
            ("September 2021", "Sep 2021"),
            ("2024-02-01T00:00:00Z", "Feb 2024"),
            ("January 15, 2023", "Jan 2023"),
            ("Jan 15 2023", "Jan 2023"),
            ("15 Jan 2023", "Jan 2023"),
            ("2023/01/15", "Jan 2023"),
            ("01/15/2023", "Jan 2023"),
            (date(2020, 7, 4), "Jul 2020"),
            (datetime(2019, 12, 31, 23, 59), "Dec 2019"),
        ],
    )
    def test_parses_common_formats(self, value, expected):
        assert format_date(value) == expected

    @pytest.mark.unit
    def test_year_only_kept(self):
        assert format_date("2021") == "2021"

    @pytest.mark.unit
    def test_unparseable_returned_unchanged(self):
        assert format_date("Summer 2021") == "Summer 2021"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["May", "Q3", "Fall semester", "Spring 2020 cohort"])
    def test_text_without_a_readable_date_kept(self, value):
        assert format_date(value) == value

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value):
        assert format_date(value) == ""


class TestDateRangeLabel:
    """Tests for date_range_label() and optional_range_label()."""

    @pytest.mark.unit
    def test_closed_range(self):
        assert date_range_label("2020-01", "2022-06") == "Jan 2020 - Jun 2022"

    @pytest.mark.unit
    def test_current_wins_over_end_date(self):
        assert date_range_label("2020-01", "2022-06", current=True) == "Jan 2020 - Present"

    @pytest.mark.unit
    def test_missing_end_is_present(self):
        assert date_range_label("2020-01", None) == "Jan 2020 - Present"

    @pytest.mark.unit
    def test_no_dates(self):
        assert date_range_label(None, None) == ""

    @pytest.mark.unit
    def test_current_without_start(self):
        assert date_range_label(None, None, current=True) == "Present"

    @pytest.mark.unit
    def test_optional_range_never_implies_present(self):
        assert optional_range_label("2020-01", None) == "Jan 2020"
        assert optional_range_label(None, "2021-02") == "Feb 2021"
        assert optional_range_label("2020-01", "2021-02") == "Jan 2020 - Feb 2021"
        assert optional_range_label(None, None) == ""


class TestSkillLabel:
    """Tests for skill_label() with both skill shapes."""

    @pytest.mark.unit
    def test_plain_string(self):
        assert skill_label("  Python ") == "Python"

    @pytest.mark.unit
    def test_mapping_with_proficiency(self):
        assert skill_label({"name": "Go", "proficiency": "Advanced"}) == "Go (Advanced)"

    @pytest.mark.unit
    def test_skill_object(self):
        assert skill_label(Skill("Rust")) == "Rust"
        assert skill_label(Skill("Rust", "Beginner")) == "Rust (Beginner)"

    @pytest.mark.unit
    def test_missing_name(self):
        assert skill_label({"proficiency": "Expert"}) == ""
        assert skill_label(None) == ""

    @pytest.mark.unit
    def test_skill_labels_drops_empty_and_keeps_order(self):
        skills = ["C++", "", Skill("Go", "Advanced"), None, {"name": "SQL"}]
        assert skill_labels(skills) == ["C++", "Go (Advanced)", "SQL"]


@pytest.mark.unit
def test_gpa_label():
    assert gpa_label("3.9") == "GPA: 3.9"
    assert gpa_label(4.0) == "GPA: 4.0"
    assert gpa_label(None) == ""
    assert gpa_label("") == ""


class TestLinks:
    """Tests for ensure_url_scheme() and safe_link()."""

    @pytest.mark.unit
    def test_bare_link_gets_https(self):
        assert ensure_url_scheme("linkedin.com/in/ada") == "https://linkedin.com/in/ada"

    @pytest.mark.unit
    def test_existing_scheme_kept(self):
        assert ensure_url_scheme("http://example.com") == "http://example.com"
        assert ensure_url_scheme("mailto:ada@example.com") == "mailto:ada@example.com"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "url", ["javascript:alert(1)", "JavaScript:alert(1)", "data:text/html;base64,xx", "vbscript:x"]
    )
    def test_unsafe_schemes_refused(self, url):
        assert safe_link(url) == ""

    @pytest.mark.unit
    def test_safe_links(self):
        assert safe_link("github.com/ada") == "https://github.com/ada"
        assert safe_link("mailto:ada@example.com") == "mailto:ada@example.com"
        assert safe_link(None) == ""


class TestSetMaxConsecutiveBlankLines:
    """Tests for blank line normalization."""

    @pytest.mark.unit
    def test_collapse_to_one(self):
        assert set_max_consecutive_blank_lines("a\n\n\n\nb", max_consecutive=1) == "a\n\nb"

    @pytest.mark.unit
    def test_remove_all(self):
        assert set_max_consecutive_blank_lines("a\n\n  \nb\n\nc", max_consecutive=0) == "a\nb\nc"

    @pytest.mark.unit
    def test_single_blank_line_kept(self):
        assert set_max_consecutive_blank_lines("a\n\nb", max_consecutive=1) == "a\n\nb"

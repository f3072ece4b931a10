"""
Tests for scoring.requirement_matcher
"""

import pytest

from mcd_gauge_core.scoring.requirement_matcher import (
    contains_prohibited,
    contains_requirement,
    has_functional_equivalent,
)


class TestContainsRequirement:
    """Lenient matching of required elements"""

    def test_case_insensitive_substring(self):
        assert contains_requirement("Confirmed: Cardiology", "cardiology", "D1") is True

    def test_whitespace_collapsed_requirement(self):
        assert contains_requirement("Avoid the wetfloor zone", "wet floor", "D2") is True

    def test_domain_synonym(self):
        assert contains_requirement("Cardiology, Tue 3pm", "tuesday", "D1") is True

    def test_synonyms_are_domain_scoped(self):
        """Weekday abbreviations only count in the booking domain"""
        assert contains_requirement("Cardiology, Tue 3pm", "tuesday", "D2") is False

    def test_abbreviation_with_punctuation(self):
        assert contains_requirement("Dental, Fri. 9am", "friday", "D1") is True

    @pytest.mark.parametrize("output,requirement", [
        ("This is a common slot", "monday"),
        ("Next month works", "monday"),
        ("Your friend booked it", "friday"),
        ("Satisfied, booked", "saturday"),
        ("A sunny afternoon visit", "sunday"),
    ])
    def test_abbreviation_inside_a_word_does_not_match(self, output, requirement):
        assert contains_requirement(output, requirement, "D1") is False

    def test_unknown_domain_has_no_synonyms(self):
        assert contains_requirement("Booked for you", "confirmed", "D1") is True
        assert contains_requirement("Booked for you", "confirmed", "D9") is False

    def test_diagnostics_synonym(self):
        assert contains_requirement("Verify the port binding", "check", "D3") is True

    def test_functional_time_equivalent(self):
        assert contains_requirement("Dental visit at 10am", "time", "D1") is True

    def test_functional_date_equivalent(self):
        assert contains_requirement("Dental visit on Thursday", "date", "D1") is True

    def test_missing(self):
        assert contains_requirement("North 3m", "elevator", "D2") is False

    @pytest.mark.parametrize("requirement", ["", "   "])
    def test_blank_requirement_never_matches(self, requirement):
        assert contains_requirement("anything", requirement, "D1") is False

    def test_empty_output(self):
        assert contains_requirement("", "cardiology", "D1") is False


class TestHasFunctionalEquivalent:
    def test_direction(self):
        assert has_functional_equivalent("Turn left after the lobby", "direction") is True

    def test_unrelated_requirement(self):
        assert has_functional_equivalent("Turn left after the lobby", "elevator") is False


class TestContainsProhibited:
    """Prohibited elements are matched literally"""

    def test_case_insensitive(self):
        assert contains_prohibited("I THINK it works", "i think") is True

    def test_no_synonyms(self):
        assert contains_prohibited("Appointment booked", "confirmed") is False

    def test_empty_values(self):
        assert contains_prohibited("", "maybe") is False
        assert contains_prohibited("maybe", "") is False

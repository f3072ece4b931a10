"""Tests for domain entities and value objects"""

import pytest

from mcd_gauge_core.domain.entities import (
    ComparativeResults,
    DomainWalkthrough,
    MeasuredProfile,
    PerformanceProfile,
    SuccessCriteria,
    TrialSpecification,
    VariantExecutionResult,
    WalkthroughScenario,
    WalkthroughVariant,
)
from mcd_gauge_core.domain.value_objects import ApproachCategory, SuccessRate


def _make_trial(**overrides) -> TrialSpecification:
    params = dict(
        test_id="D1_MCD_T1",
        user_input="Book cardiology Tuesday 3pm",
        success_criteria=SuccessCriteria(required_elements=["cardiology"], prohibited_elements=[]),
        evaluation_method="slot_extraction",
        difficulty="simple",
    )
    params.update(overrides)
    return TrialSpecification(**params)


def _make_variant(**overrides) -> WalkthroughVariant:
    params = dict(
        id="W1A1",
        type="MCD",
        name="Structured Slot Collection",
        prompt="Book appointment: [type], [date], [time].",
        architecture="",
        trials=[],
    )
    params.update(overrides)
    return WalkthroughVariant(**params)


def _make_result(variant_id: str, approach: ApproachCategory) -> VariantExecutionResult:
    return VariantExecutionResult(
        variant_id=variant_id,
        approach=approach,
        success_rate=SuccessRate(1, 2),
        avg_tokens=20,
        avg_latency=300,
        avg_accuracy=0.5,
        mcd_alignment_rate=0.5,
        efficiency=1.0,
    )


class TestSuccessRate:
    def test_parse(self):
        rate = SuccessRate.parse("4/5")
        assert rate.successes == 4
        assert rate.total == 5
        assert rate.fraction == pytest.approx(0.8)
        assert str(rate) == "4/5"

    def test_parse_tolerates_spaces(self):
        assert SuccessRate.parse(" 2 / 3 ") == SuccessRate(2, 3)

    def test_zero_total_has_no_data(self):
        rate = SuccessRate.parse("0/0")
        assert rate.has_data is False
        assert rate.fraction == 0.0

    def test_zero_successes_is_data(self):
        """"0/5" is a measured failure, not missing data"""
        rate = SuccessRate.parse("0/5")
        assert rate.has_data is True
        assert rate.fraction == 0.0

    @pytest.mark.parametrize("text", ["", "5", "a/b", "1/2/3", "-1/4"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            SuccessRate.parse(text)

    def test_try_parse_returns_none(self):
        assert SuccessRate.try_parse("invalid") is None
        assert SuccessRate.try_parse(None) is None

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            SuccessRate(-1, 3)


class TestTrialSpecification:
    def test_defaults(self):
        trial = _make_trial()
        assert trial.domain_id is None
        assert trial.actual_results is None
        assert trial.success_criteria.min_accuracy is None

    def test_invalid_difficulty(self):
        with pytest.raises(ValueError, match="Invalid difficulty"):
            _make_trial(difficulty="trivial")

    def test_invalid_evaluation_method(self):
        with pytest.raises(ValueError, match="Invalid evaluation method"):
            _make_trial(evaluation_method="vibes")


class TestWalkthroughVariant:
    def test_invalid_type(self):
        with pytest.raises(ValueError, match="Invalid variant type"):
            _make_variant(type="Other")

    def test_profile_prefers_measured(self):
        expected = PerformanceProfile(400, 30, 20, 20, "5/5", 95)
        measured = MeasuredProfile(350, 25, 0, 0, "4/5", 90, actual_success_count=4, total_trials=5)
        variant = _make_variant(expected_profile=expected)
        assert variant.profile is expected

        variant.measured_profile = measured
        assert variant.profile is measured

    def test_unmeasured_resources_come_from_expected(self):
        expected = PerformanceProfile(400, 30, 20, 18, "5/5", 95)
        measured = MeasuredProfile(350, 25, None, None, "4/5", 90, actual_success_count=4, total_trials=5)
        variant = _make_variant(expected_profile=expected)
        variant.measured_profile = measured

        profile = variant.profile

        assert (profile.avg_latency, profile.avg_cpu_usage, profile.avg_memory_kb) == (350, 20, 18)
        assert profile.success_rate == "4/5"
        assert measured.avg_memory_kb is None

    def test_profile_none(self):
        assert _make_variant().profile is None


class TestDomainWalkthrough:
    def test_variants_flatten_scenarios(self):
        scenarios = [
            WalkthroughScenario(step=1, context="", domain="", model="", subsystem="", variants=[_make_variant(id="A")]),
            WalkthroughScenario(
                step=2, context="", domain="", model="", subsystem="",
                variants=[_make_variant(id="B"), _make_variant(id="C")],
            ),
        ]
        walkthrough = DomainWalkthrough(
            id="D1", domain="Appointment Booking", title="", description="", scenarios=scenarios,
        )
        assert [v.id for v in walkthrough.variants] == ["A", "B", "C"]


class TestComparativeResults:
    def test_has_bucket_per_approach(self):
        results = ComparativeResults()
        for approach in ApproachCategory:
            assert results.get(approach) == []

    def test_add_routes_to_bucket(self):
        results = ComparativeResults()
        results.add(_make_result("W1A1", ApproachCategory.MCD))
        results.add(_make_result("W1A3", ApproachCategory.FEW_SHOT))
        results.add(_make_result("W1A6", ApproachCategory.MCD))

        assert [r.variant_id for r in results.get(ApproachCategory.MCD)] == ["W1A1", "W1A6"]
        assert len(results.buckets[ApproachCategory.FEW_SHOT]) == 1
        assert [r.variant_id for r in results.all_results()] == ["W1A1", "W1A6", "W1A3"]

    def test_error_result_has_no_data(self):
        result = _make_result("W1A1", ApproachCategory.MCD)
        result.success_rate = SuccessRate(0, 0)
        assert result.has_data is False

"""
Tests for use_cases.comparative
"""

import pytest
from unittest.mock import MagicMock

from mcd_gauge_core.domain.entities import (
    ComparativeAnalysis,
    ComparativeResults,
    DomainOutcome,
    DomainWalkthrough,
    MCDAdvantage,
    SuccessCriteria,
    TrialSpecification,
    VariantExecutionResult,
    WalkthroughScenario,
    WalkthroughVariant,
)
from mcd_gauge_core.domain.value_objects import ApproachCategory, ModelResponse, SuccessRate
from mcd_gauge_core.harness_config import AdvantageConfig, SessionConfig
from mcd_gauge_core.session import AnalysisSession
from mcd_gauge_core.use_cases.comparative import (
    calculate_approach_metrics,
    calculate_comparative_analysis,
    calculate_mcd_score,
    generate_comparative_summary,
    generate_recommendations,
    run_comparative_walkthrough,
    validate_mcd_advantage,
)
from mcd_gauge_core.use_cases.summary import build_trial_table
from mcd_gauge_core.use_cases.variant_execution import create_error_variant_result


def _result(approach, successes, total, tokens, latency, variant_id="V"):
    return VariantExecutionResult(
        variant_id=variant_id,
        approach=approach,
        success_rate=SuccessRate(successes, total),
        avg_tokens=tokens,
        avg_latency=latency,
        avg_accuracy=0.0,
        mcd_alignment_rate=0.0,
        efficiency=0.0,
    )


def _results(*items) -> ComparativeResults:
    results = ComparativeResults()
    for item in items:
        results.add(item)
    return results


def _mcd_vs_conversational() -> ComparativeResults:
    return _results(
        _result(ApproachCategory.MCD, 9, 10, 30, 300),
        _result(ApproachCategory.CONVERSATIONAL, 2, 10, 90, 650),
    )


class TestApproachMetrics:
    def test_mean_of_variant_fractions(self):
        metrics = calculate_approach_metrics([
            _result(ApproachCategory.MCD, 5, 5, 40, 300),
            _result(ApproachCategory.MCD, 1, 2, 60, 500),
        ])
        assert metrics.success_rate == pytest.approx(0.75)
        assert metrics.avg_tokens == 50
        assert metrics.avg_latency == 400
        # 0.75 / max(1, 50 / 50)
        assert metrics.efficiency == pytest.approx(0.75)

    def test_efficiency_is_token_normalised(self):
        metrics = calculate_approach_metrics([_result(ApproachCategory.CONVERSATIONAL, 4, 5, 100, 600)])
        assert metrics.efficiency == pytest.approx(0.4)

    def test_variants_without_data_are_ignored(self):
        assert calculate_approach_metrics([_result(ApproachCategory.MCD, 0, 0, 0, 0)]) is None
        assert calculate_approach_metrics([]) is None


class TestComparativeAnalysis:
    def test_ratios_against_conversational_baseline(self):
        analysis = calculate_comparative_analysis(_mcd_vs_conversational())

        assert analysis.baseline_is_fallback is False
        assert analysis.success_ratios[ApproachCategory.MCD] == pytest.approx(4.5)
        assert analysis.success_ratios[ApproachCategory.CONVERSATIONAL] == pytest.approx(1.0)
        assert analysis.token_efficiency_ratios[ApproachCategory.MCD] == pytest.approx(3.0)
        assert analysis.latency_ratios[ApproachCategory.MCD] == pytest.approx(650 / 300)
        assert analysis.overall_rankings == [ApproachCategory.MCD, ApproachCategory.CONVERSATIONAL]

    def test_fallback_baseline_without_conversational_results(self):
        analysis = calculate_comparative_analysis(_results(_result(ApproachCategory.MCD, 9, 10, 30, 300)))

        assert analysis.baseline_is_fallback is True
        assert analysis.success_ratios[ApproachCategory.MCD] == pytest.approx(3.0)
        assert analysis.token_efficiency_ratios[ApproachCategory.MCD] == pytest.approx(80 / 30)
        assert analysis.latency_ratios[ApproachCategory.MCD] == pytest.approx(2.0)

    def test_zero_baseline_success_does_not_divide_by_zero(self):
        analysis = calculate_comparative_analysis(_results(
            _result(ApproachCategory.MCD, 1, 2, 30, 300),
            _result(ApproachCategory.CONVERSATIONAL, 0, 5, 90, 600),
        ))
        assert analysis.success_ratios[ApproachCategory.MCD] == pytest.approx(50.0)

    def test_error_results_are_left_out(self):
        results = _mcd_vs_conversational()
        results.add(_result(ApproachCategory.FEW_SHOT, 0, 0, 0, 0))

        analysis = calculate_comparative_analysis(results)

        assert ApproachCategory.FEW_SHOT not in analysis.approach_metrics
        assert ApproachCategory.FEW_SHOT not in analysis.overall_rankings

    def test_ranking_by_mean_ratio(self):
        analysis = calculate_comparative_analysis(_results(
            _result(ApproachCategory.MCD, 9, 10, 30, 300),
            _result(ApproachCategory.FEW_SHOT, 8, 10, 45, 450),
            _result(ApproachCategory.HYBRID, 10, 10, 25, 250),
            _result(ApproachCategory.CONVERSATIONAL, 2, 10, 90, 650),
        ))
        assert analysis.overall_rankings == [
            ApproachCategory.HYBRID,
            ApproachCategory.MCD,
            ApproachCategory.FEW_SHOT,
            ApproachCategory.CONVERSATIONAL,
        ]


class TestValidateMCDAdvantage:
    def test_clear_advantage_is_validated(self):
        advantage = validate_mcd_advantage(_mcd_vs_conversational())

        assert advantage.validated is True
        assert advantage.concerns == []
        assert advantage.confidence == "high"
        assert advantage.success_advantage == pytest.approx(4.5)
        assert advantage.token_advantage == pytest.approx(3.0)
        assert advantage.latency_advantage == pytest.approx(650 / 300)

    def test_no_success_concern_above_threshold(self):
        advantage = validate_mcd_advantage(_mcd_vs_conversational())
        assert not any("success advantage" in c for c in advantage.concerns)

    def test_equal_approaches_raise_concerns(self):
        advantage = validate_mcd_advantage(_results(
            _result(ApproachCategory.MCD, 1, 2, 50, 400),
            _result(ApproachCategory.FEW_SHOT, 1, 2, 50, 400),
        ))

        assert advantage.validated is False
        assert advantage.confidence == "low"
        assert "MCD success advantage below expected (1.00x vs expected 1.5x+)" in advantage.concerns
        assert "Token efficiency advantage below expected (1.00x vs expected 1.3x+)" in advantage.concerns
        assert "Review MCD implementation or adjust evaluation criteria" in advantage.recommendations

    def test_integrity_concern_when_everything_passes(self):
        advantage = validate_mcd_advantage(_results(
            _result(ApproachCategory.MCD, 10, 10, 20, 300),
            _result(ApproachCategory.SYSTEM_ROLE, 9, 10, 60, 500),
        ))

        assert "Both approaches showing unrealistically high pass rates" in advantage.concerns
        assert advantage.validated is False

    def test_hybrid_is_not_pooled_with_non_mcd(self):
        advantage = validate_mcd_advantage(_results(
            _result(ApproachCategory.MCD, 9, 10, 30, 300),
            _result(ApproachCategory.HYBRID, 10, 10, 10, 200),
            _result(ApproachCategory.CONVERSATIONAL, 2, 10, 90, 650),
        ))
        assert advantage.validated is True

    def test_custom_thresholds(self):
        thresholds = AdvantageConfig(min_success_advantage=5.0)
        advantage = validate_mcd_advantage(_mcd_vs_conversational(), thresholds)

        assert advantage.validated is False
        assert advantage.confidence == "medium"
        assert "MCD success advantage below expected (4.50x vs expected 5.0x+)" in advantage.concerns

    def test_no_mcd_results(self):
        advantage = validate_mcd_advantage(_results(_result(ApproachCategory.CONVERSATIONAL, 2, 10, 90, 650)))

        assert advantage.validated is False
        assert advantage.concerns == ["No MCD results available for comparison"]

    def test_mcd_error_results_count_as_missing(self):
        advantage = validate_mcd_advantage(_results(
            _result(ApproachCategory.MCD, 0, 0, 0, 0),
            _result(ApproachCategory.CONVERSATIONAL, 2, 10, 90, 650),
        ))
        assert advantage.concerns == ["No MCD results available for comparison"]


class TestMCDScore:
    def _analysis(self, rankings, advantage=None):
        return ComparativeAnalysis(
            approach_metrics={},
            success_ratios={},
            token_efficiency_ratios={},
            latency_ratios={},
            overall_rankings=rankings,
            mcd_advantage=advantage,
        )

    def test_first_and_validated_is_capped(self):
        analysis = self._analysis([ApproachCategory.MCD], MCDAdvantage(validated=True))
        assert calculate_mcd_score(analysis) == 100

    def test_second_place_with_concern(self):
        analysis = self._analysis(
            [ApproachCategory.HYBRID, ApproachCategory.MCD],
            MCDAdvantage(validated=False, concerns=["x"]),
        )
        assert calculate_mcd_score(analysis) == 75

    def test_absent_mcd_scores_zero(self):
        assert calculate_mcd_score(self._analysis([ApproachCategory.CONVERSATIONAL])) == 0

    def test_never_negative(self):
        rankings = [
            ApproachCategory.HYBRID,
            ApproachCategory.FEW_SHOT,
            ApproachCategory.SYSTEM_ROLE,
            ApproachCategory.CONVERSATIONAL,
            ApproachCategory.MCD,
        ]
        analysis = self._analysis(rankings, MCDAdvantage(validated=False, concerns=["a", "b", "c"]))
        assert calculate_mcd_score(analysis) == 5
        analysis.mcd_advantage.concerns.append("d")
        assert calculate_mcd_score(analysis) == 0


class TestRecommendationsAndSummary:
    def test_mcd_first(self):
        analysis = calculate_comparative_analysis(_mcd_vs_conversational())
        analysis.mcd_advantage = validate_mcd_advantage(_mcd_vs_conversational())

        assert generate_recommendations(analysis) == [
            "Use MCD for highest reliability in resource-constrained scenarios",
            "Avoid pure conversational approaches in resource-constrained edge deployments",
        ]

    def test_advantage_recommendations_are_deduplicated(self):
        results = _results(
            _result(ApproachCategory.MCD, 1, 2, 50, 400),
            _result(ApproachCategory.FEW_SHOT, 1, 2, 50, 400),
        )
        analysis = calculate_comparative_analysis(results)
        analysis.mcd_advantage = validate_mcd_advantage(results)
        analysis.mcd_advantage.recommendations.append("Verify MCD prompt design for token efficiency")

        recommendations = generate_recommendations(analysis)
        assert recommendations.count("Verify MCD prompt design for token efficiency") == 1

    def test_summary_validated(self):
        analysis = calculate_comparative_analysis(_mcd_vs_conversational())
        analysis.mcd_advantage = validate_mcd_advantage(_mcd_vs_conversational())

        summary = generate_comparative_summary("Appointment Booking", analysis, 1234.4)

        assert summary.startswith("Appointment Booking Comparative Analysis (1234ms):")
        assert "Best Performer: mcd" in summary
        assert "Rankings: mcd > conversational" in summary
        assert "MCD advantages validated" in summary

    def test_summary_questioned(self):
        analysis = calculate_comparative_analysis(_results())
        analysis.mcd_advantage = validate_mcd_advantage(_results())

        summary = generate_comparative_summary("Spatial Navigation", analysis, 10)

        assert "Best Performer: unknown" in summary
        assert "MCD advantages questioned: No MCD results available for comparison" in summary


def _walkthrough() -> DomainWalkthrough:
    def trial(test_id):
        return TrialSpecification(
            test_id=test_id,
            user_input="Book cardiology Tuesday 3pm",
            success_criteria=SuccessCriteria(
                required_elements=["cardiology", "tuesday", "3pm"],
                prohibited_elements=["i think"],
            ),
            evaluation_method="slot_extraction",
            difficulty="simple",
            domain_id="D1",
        )

    variants = [
        WalkthroughVariant("W1A1", "MCD", "Structured Slot Collection", "Book: [type]", "", [trial("D1_MCD_T1")]),
        WalkthroughVariant("W1A2", "Non-MCD", "Conversational Booking", "Hi! How can I help?", "", [trial("D1_NonMCD_T1")]),
    ]
    outcome = DomainOutcome("ok", "fast", "clarify")
    return DomainWalkthrough(
        id="D1",
        domain="Appointment Booking",
        title="Booking",
        description="",
        scenarios=[WalkthroughScenario(1, "W1", "", "", "", variants)],
        expected_outcomes={"Q1": outcome, "Q4": outcome, "Q8": outcome},
    )


def _responding_client():
    client = MagicMock()

    def generate(prompt, max_tokens=None, temperature=None):
        if prompt.startswith("Book:"):
            return ModelResponse("Confirmed: Cardiology, Tue 3pm", 300, "mock")
        return ModelResponse("I think I can help you with cardiology maybe", 700, "mock")

    client.generate.side_effect = generate
    return client


class TestRunComparativeWalkthrough:
    def test_full_run(self):
        comparison = run_comparative_walkthrough(_walkthrough(), "Q4", _responding_client())

        assert comparison.domain_id == "D1"
        assert comparison.tier == "Q4"
        mcd = comparison.results.get(ApproachCategory.MCD)
        conversational = comparison.results.get(ApproachCategory.CONVERSATIONAL)
        assert str(mcd[0].success_rate) == "1/1"
        assert str(conversational[0].success_rate) == "0/1"
        assert comparison.analysis.overall_rankings[0] == ApproachCategory.MCD
        assert comparison.analysis.mcd_advantage is not None
        assert comparison.mcd_score > 0
        assert "Appointment Booking Comparative Analysis" in comparison.summary

    def test_failing_variant_becomes_error_result(self):
        client = _responding_client()
        factory = MagicMock(side_effect=[client, RuntimeError("no client")])

        comparison = run_comparative_walkthrough(_walkthrough(), "Q1", client, client_factory=factory)

        conversational = comparison.results.get(ApproachCategory.CONVERSATIONAL)[0]
        assert str(conversational.success_rate) == "0/0"
        assert conversational.error_details == "no client"
        assert comparison.analysis.baseline_is_fallback is True

    def test_session_caches_and_records(self):
        session = AnalysisSession(SessionConfig())
        client = _responding_client()

        first = run_comparative_walkthrough(_walkthrough(), "Q8", client, session=session)
        calls = client.generate.call_count
        second = run_comparative_walkthrough(_walkthrough(), "Q8", client, session=session)

        assert second is first
        assert client.generate.call_count == calls
        assert session.stats.total_executions == 1
        assert session.cache_size == 1

    def test_error_result_keeps_variant_approach(self):
        variant = _walkthrough().variants[0]
        result = create_error_variant_result(variant, "boom")
        assert result.approach == ApproachCategory.MCD

    def test_tiers_keep_their_own_trial_outcomes(self):
        walkthrough = _walkthrough()
        q4_client = MagicMock()
        q4_client.generate.return_value = ModelResponse("Q4 output", 100, "mock")

        q1 = run_comparative_walkthrough(walkthrough, "Q1", _responding_client())
        q4 = run_comparative_walkthrough(walkthrough, "Q4", q4_client)

        q1_trial = q1.results.get(ApproachCategory.MCD)[0].trials[0]
        assert q1_trial.actual_results.output == "Confirmed: Cardiology, Tue 3pm"
        assert q1_trial.actual_results.success is True

        df = build_trial_table([q1, q4], "run1")
        mcd_rows = df[df["variant_id"] == "W1A1"].set_index("tier")
        assert mcd_rows.loc["Q1", "output"] == "Confirmed: Cardiology, Tue 3pm"
        assert bool(mcd_rows.loc["Q1", "success"]) is True
        assert mcd_rows.loc["Q4", "output"] == "Q4 output"
        assert bool(mcd_rows.loc["Q4", "success"]) is False

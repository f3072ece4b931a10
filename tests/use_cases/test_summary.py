"""
Tests for use_cases.summary
"""

import json

import pandas as pd
import pytest

from mcd_gauge_core.domain.entities import (
    ActualResults,
    ComparativeResults,
    DomainComparison,
    SuccessCriteria,
    TokenBreakdown,
    TrialSpecification,
    VariantExecutionResult,
)
from mcd_gauge_core.domain.value_objects import ApproachCategory, SuccessRate
from mcd_gauge_core.use_cases.comparative import calculate_comparative_analysis, validate_mcd_advantage
from mcd_gauge_core.use_cases.cross_domain import generate_performance_report
from mcd_gauge_core.use_cases.summary import (
    APPROACH_COLUMNS,
    TRIAL_COLUMNS,
    VARIANT_COLUMNS,
    build_approach_table,
    build_trial_table,
    build_variant_table,
    report_to_dict,
    summarize_by_tier,
)


def _trial(test_id, success):
    trial = TrialSpecification(
        test_id=test_id,
        user_input="Book cardiology Tuesday 3pm",
        success_criteria=SuccessCriteria(required_elements=["cardiology"], prohibited_elements=[]),
        evaluation_method="slot_extraction",
        difficulty="simple",
    )
    trial.actual_results = ActualResults(
        output="Confirmed: Cardiology" if success else "Sorry",
        token_breakdown=TokenBreakdown(input=8, process=0, output=4),
        latency_ms=300,
        success=success,
        accuracy=0.9 if success else 0.2,
        performance_tier="excellent" if success else "poor",
        failure_reasons=[] if success else ["Missing required element: cardiology", "Too short"],
        timestamp="2026-01-01T00:00:00",
        mcd_aligned=success,
    )
    return trial


def _result(variant_id, approach, successes, total, tokens, latency, trials=None, error=None):
    return VariantExecutionResult(
        variant_id=variant_id,
        approach=approach,
        success_rate=SuccessRate(successes, total),
        avg_tokens=tokens,
        avg_latency=latency,
        avg_accuracy=0.5,
        mcd_alignment_rate=0.5,
        efficiency=0.5,
        trials=trials or [],
        error_details=error,
    )


def _comparison(tier="Q4"):
    results = ComparativeResults()
    results.add(_result(
        "W1A1", ApproachCategory.MCD, 1, 2, 30, 300,
        trials=[_trial("D1_MCD_T1", True), _trial("D1_MCD_T2", False)],
    ))
    results.add(_result("W1A2", ApproachCategory.CONVERSATIONAL, 1, 4, 90, 650))
    results.add(_result("W1A3", ApproachCategory.FEW_SHOT, 0, 0, 0, 0, error="no client"))

    analysis = calculate_comparative_analysis(results)
    analysis.mcd_advantage = validate_mcd_advantage(results)
    return DomainComparison(
        domain_id="D1",
        domain="Appointment Booking",
        tier=tier,
        results=results,
        analysis=analysis,
        summary="summary",
        mcd_score=100,
        recommendations=["Use MCD"],
        duration_ms=12,
    )


class TestTables:
    def test_trial_table(self):
        df = build_trial_table([_comparison()], "run1")

        assert list(df.columns) == TRIAL_COLUMNS
        assert len(df) == 2
        assert df.iloc[0]["approach"] == "mcd"
        assert df.iloc[0]["output_tokens"] == 4
        assert df.iloc[1]["failure_reasons"] == "Missing required element: cardiology; Too short"

    def test_trials_without_results_are_skipped(self):
        comparison = _comparison()
        comparison.results.get(ApproachCategory.MCD)[0].trials[1].actual_results = None
        assert len(build_trial_table([comparison], "run1")) == 1

    def test_variant_table_keeps_error_variants(self):
        df = build_variant_table([_comparison()], "run1")

        assert list(df.columns) == VARIANT_COLUMNS
        assert len(df) == 3
        error_row = df[df["variant_id"] == "W1A3"].iloc[0]
        assert error_row["success_rate"] == "0/0"
        assert error_row["error_details"] == "no client"

    def test_approach_table(self):
        df = build_approach_table([_comparison()], "run1")

        assert list(df.columns) == APPROACH_COLUMNS
        assert list(df["approach"]) == ["mcd", "conversational"]
        assert list(df["rank"]) == [1, 2]
        assert df.iloc[0]["success_ratio"] == pytest.approx(2.0)
        assert df.iloc[0]["token_efficiency_ratio"] == pytest.approx(3.0)

    def test_empty_tables(self):
        assert build_trial_table([], "run1").empty
        assert list(build_variant_table([], "run1").columns) == VARIANT_COLUMNS


class TestSummarizeByTier:
    def test_pooled_per_tier_and_approach(self):
        df = build_variant_table([_comparison("Q1"), _comparison("Q8")], "run1")

        summary = summarize_by_tier(df)

        row = summary.loc[("Q1", "mcd")]
        assert row["successes"] == 1
        assert row["total_trials"] == 2
        assert row["success_rate"] == pytest.approx(0.5)
        assert summary.loc[("Q8", "conversational")]["success_rate"] == pytest.approx(0.25)
        assert ("Q1", "fewShot") not in summary.index

    def test_no_measured_variants(self):
        df = pd.DataFrame([{"tier": "Q1", "approach": "mcd", "successes": 0, "total_trials": 0,
                            "avg_tokens": 0, "avg_latency": 0}])
        assert summarize_by_tier(df).empty


class TestReportToDict:
    def test_serializable(self):
        comparison = _comparison()
        report = generate_performance_report([])

        data = report_to_dict(report, [comparison], "run1")

        assert data["run_id"] == "run1"
        assert data["comparisons"][0]["rankings"] == ["mcd", "conversational"]
        assert data["comparisons"][0]["mcd_advantage"]["success_advantage"] == pytest.approx(2.0)
        assert data["cross_domain_analysis"]["is_fallback"] is True
        assert len(data["consistency_patterns"]) == 5
        json.dumps(data)

"""
Tests for session.py
"""

from unittest.mock import MagicMock

import pytest

from mcd_gauge_core.harness_config import SessionConfig
from mcd_gauge_core.session import AnalysisSession, ExecutionStats


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _comparison(domain_id="D1", tier="Q4"):
    comparison = MagicMock()
    comparison.domain_id = domain_id
    comparison.tier = tier
    return comparison


class TestComparisonCache:
    def test_hit_and_miss(self):
        session = AnalysisSession()
        comparison = _comparison()

        session.cache(comparison)

        assert session.get_cached("D1", "Q4") is comparison
        assert session.get_cached("D1", "Q1") is None
        assert session.cache_size == 1

    def test_entries_expire(self):
        clock = FakeClock()
        session = AnalysisSession(SessionConfig(cache_ttl_seconds=60), clock=clock)
        session.cache(_comparison())

        clock.now += 60
        assert session.get_cached("D1", "Q4") is not None
        clock.now += 1
        assert session.get_cached("D1", "Q4") is None
        assert session.cache_size == 0

    def test_oldest_entry_is_evicted(self):
        session = AnalysisSession(SessionConfig(max_cache_entries=2))
        for domain_id in ("D1", "D2", "D3"):
            session.cache(_comparison(domain_id))

        assert session.cache_size == 2
        assert session.get_cached("D1", "Q4") is None
        assert session.get_cached("D3", "Q4") is not None

    def test_recaching_replaces_entry(self):
        session = AnalysisSession(SessionConfig(max_cache_entries=2))
        session.cache(_comparison("D1"))
        session.cache(_comparison("D2"))
        replacement = _comparison("D1")

        session.cache(replacement)

        assert session.cache_size == 2
        assert session.get_cached("D1", "Q4") is replacement
        assert session.get_cached("D2", "Q4") is not None

    def test_clear_cache(self):
        session = AnalysisSession()
        session.cache(_comparison())
        session.clear_cache()
        assert session.cache_size == 0


class TestExecutionStats:
    def test_running_averages(self):
        stats = ExecutionStats()
        stats.record("D1", "Q4", True, 100)
        stats.record("D1", "Q1", False, 301)
        stats.record("D2", "Q4", True, 200)

        assert stats.total_executions == 3
        assert stats.successful_executions == 2
        assert stats.failed_executions == 1
        assert stats.average_duration == 200
        assert stats.domain_stats["D1"].executions == 2
        assert stats.domain_stats["D1"].success == 1
        assert stats.tier_stats["Q4"].avg_duration == 150
        assert stats.last_execution.domain_id == "D2"
        assert stats.last_execution.duration_ms == 200

    @pytest.mark.parametrize("duration", [-5, float("nan"), float("inf"), None])
    def test_invalid_duration_counts_as_zero(self, duration, caplog):
        stats = ExecutionStats()

        stats.record("D1", "Q4", True, duration)

        assert stats.average_duration == 0
        assert stats.last_execution.duration_ms == 0
        assert "Invalid duration" in caplog.text


class TestSessionState:
    def test_initialize_marks_valid_domains(self):
        from mcd_gauge_core.catalog_loader import load_walkthroughs
        from pathlib import Path

        walkthroughs = load_walkthroughs(Path(__file__).parent.parent / "tasks" / "walkthrough_catalog.json")
        walkthroughs[1].expected_outcomes.pop("Q8")
        session = AnalysisSession()

        reports = session.initialize(walkthroughs)

        assert set(reports) == {"D1", "D2", "D3"}
        assert session.is_validated("D1") is True
        assert session.is_validated("D2") is False
        assert reports["D2"].errors == ["Missing expected outcome for tier Q8"]

    def test_health(self):
        session = AnalysisSession()
        session.record_execution("D1", "Q4", True, 120)
        assert session.validate_health() == (True, [])

        session.stats.successful_executions += 1
        healthy, issues = session.validate_health()
        assert healthy is False
        assert issues == ["Total executions does not match success + failed counts"]

    def test_bucket_inconsistency(self):
        session = AnalysisSession()
        session.record_execution("D1", "Q4", False, 120)
        session.stats.domain_stats["D1"].success = 5

        healthy, issues = session.validate_health()

        assert healthy is False
        assert "Domain D1: success count exceeds total executions" in issues

    def test_reset(self):
        session = AnalysisSession()
        session.mark_validated("D1")
        session.cache(_comparison())
        session.record_execution("D1", "Q4", True, 10)

        session.reset()

        assert session.cache_size == 0
        assert session.is_validated("D1") is False
        assert session.stats.total_executions == 0

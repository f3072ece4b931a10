"""
Analysis Session

Holds the state shared by consecutive comparative runs: the comparison cache,
the set of validated domains and the execution statistics. A session is
created by the caller and passed explicitly to the walkthrough runner.
"""

from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from mcd_gauge_core.domain.entities import DomainComparison, DomainWalkthrough, ValidationReport
from mcd_gauge_core.harness_config import SessionConfig

logger = logging.getLogger(__name__)


@dataclass
class BucketStats:
    """Execution counters of one domain or tier"""
    executions: int = 0
    success: int = 0
    avg_duration: float = 0.0

    def record(self, success: bool, duration_ms: float) -> None:
        self.executions += 1
        if success:
            self.success += 1
        self.avg_duration = round(
            (self.avg_duration * (self.executions - 1) + duration_ms) / self.executions
        )


@dataclass
class LastExecution:
    domain_id: str
    tier: str
    success: bool
    duration_ms: int
    timestamp: str


@dataclass
class ExecutionStats:
    """Running statistics over every walkthrough executed in a session"""
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_duration: float = 0.0
    domain_stats: dict[str, BucketStats] = field(default_factory=dict)
    tier_stats: dict[str, BucketStats] = field(default_factory=dict)
    last_execution: LastExecution | None = None

    def record(self, domain_id: str, tier: str, success: bool, duration_ms: float) -> None:
        """Record one execution; invalid durations are counted as 0 ms"""
        if duration_ms is None or duration_ms < 0 or not math.isfinite(duration_ms):
            logger.warning("Invalid duration for stats update: %s", duration_ms)
            duration_ms = 0

        self.total_executions += 1
        if success:
            self.successful_executions += 1
        else:
            self.failed_executions += 1
        self.average_duration = round(
            (self.average_duration * (self.total_executions - 1) + duration_ms) / self.total_executions
        )

        self.domain_stats.setdefault(domain_id, BucketStats()).record(success, duration_ms)
        self.tier_stats.setdefault(tier, BucketStats()).record(success, duration_ms)
        self.last_execution = LastExecution(
            domain_id=domain_id,
            tier=tier,
            success=success,
            duration_ms=round(duration_ms),
            timestamp=datetime.now().isoformat(),
        )


@dataclass
class _CacheEntry:
    comparison: DomainComparison
    created_at: float


class AnalysisSession:
    """
    Caller-owned state of a series of comparative runs.

    Comparisons are cached per (domain, tier) for cache_ttl_seconds; when the
    cache is full the oldest entry is evicted.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or SessionConfig()
        self._clock = clock
        self._cache: OrderedDict[tuple[str, str], _CacheEntry] = OrderedDict()
        self.validated_domains: set[str] = set()
        self.stats = ExecutionStats()

    # --- Validated domains ---

    def initialize(self, walkthroughs: list[DomainWalkthrough]) -> dict[str, ValidationReport]:
        """
        Validate every walkthrough and mark the valid ones.

        Args:
            walkthroughs: Catalog walkthroughs

        Returns:
            dict: Validation report per walkthrough id
        """
        from mcd_gauge_core.use_cases.validation import validate_domain_walkthrough

        reports = {}
        for walkthrough in walkthroughs:
            report = validate_domain_walkthrough(walkthrough)
            reports[walkthrough.id] = report
            if report.is_valid:
                self.validated_domains.add(walkthrough.id)
            else:
                logger.warning("Domain %s failed validation: %s", walkthrough.id, "; ".join(report.errors))
        return reports

    def is_validated(self, domain_id: str) -> bool:
        return domain_id in self.validated_domains

    def mark_validated(self, domain_id: str) -> None:
        self.validated_domains.add(domain_id)

    # --- Comparison cache ---

    def get_cached(self, domain_id: str, tier: str) -> DomainComparison | None:
        """Cached comparison for (domain, tier), or None when absent or expired"""
        key = (domain_id, tier)
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at > self.config.cache_ttl_seconds:
            del self._cache[key]
            return None
        return entry.comparison

    def cache(self, comparison: DomainComparison) -> None:
        key = (comparison.domain_id, comparison.tier)
        self._cache.pop(key, None)
        while len(self._cache) >= self.config.max_cache_entries:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted cached comparison %s", evicted)
        self._cache[key] = _CacheEntry(comparison=comparison, created_at=self._clock())

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # --- Statistics ---

    def record_execution(self, domain_id: str, tier: str, success: bool, duration_ms: float) -> None:
        self.stats.record(domain_id, tier, success, duration_ms)

    def validate_health(self) -> tuple[bool, list[str]]:
        """
        Check the execution statistics for inconsistencies.

        Returns:
            tuple: (is_healthy, list of issues)
        """
        stats = self.stats
        issues = []
        if stats.total_executions != stats.successful_executions + stats.failed_executions:
            issues.append("Total executions does not match success + failed counts")
        if stats.average_duration < 0 or not math.isfinite(stats.average_duration):
            issues.append("Invalid average duration")

        for label, buckets in (("Domain", stats.domain_stats), ("Tier", stats.tier_stats)):
            for key, bucket in buckets.items():
                if bucket.executions < bucket.success:
                    issues.append(f"{label} {key}: success count exceeds total executions")
                if bucket.avg_duration < 0 or not math.isfinite(bucket.avg_duration):
                    issues.append(f"{label} {key}: invalid average duration")

        return len(issues) == 0, issues

    def reset(self) -> None:
        """Clear the cache, the validated domains and the statistics"""
        self._cache.clear()
        self.validated_domains.clear()
        self.stats = ExecutionStats()

"""
envprint — Fingerprint Service

The result composer. One collect() call is one batch pass:

  registry ──▶ scheduler ──▶ {name: Outcome}
                                 │
                                 ▼
                         aggregate() ─▶ partial Dataset
                                 │
                                 ▼
          run_probe(analyzer) as "consistency" ─▶ Outcome
                                 │
                                 ▼
             merged Dataset ─▶ identify() + calculate_coverage()
                                 │
                                 ▼
                               Result

The consistency analyzer runs strictly after every other probe has settled,
under the same isolation boundary as a probe: if it raises, the run still
produces a Result whose outcomes carry an ERROR named ``consistency``.

collect() never raises under normal operation. The only caller-visible
failures are programming errors in registry construction, and those surface
when the service is built.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any

import structlog
from pydantic import Field

from envprint.config import CollectionConfig, ConsistencyConfig, EnvprintConfig
from envprint.primitives.common import FrozenModel, new_id, utc_now
from envprint.primitives.consistency import ConsistencyReport
from envprint.probes.host import default_registry
from envprint.systems.collection import (
    Coverage,
    Outcome,
    ProbeRegistry,
    ProbeStatus,
    TaskScheduler,
    calculate_coverage,
    run_probe,
)
from envprint.systems.consistency import ConsistencyAnalyzer
from envprint.systems.dataset import CONSISTENCY_SLOT, Dataset, aggregate
from envprint.systems.identity import identify

logger = structlog.get_logger()

TOTAL_TIMING_KEY = "total"


class Result(FrozenModel):
    """Everything one run produced."""

    id: str
    dataset: Dataset
    timestamp: datetime = Field(default_factory=utc_now)
    # Equal to coverage.ratio
    confidence: float = Field(ge=0.0, le=1.0)
    coverage: Coverage
    timings: dict[str, float] = Field(default_factory=dict)
    outcomes: dict[str, Outcome] = Field(default_factory=dict)

    @property
    def consistency(self) -> ConsistencyReport | None:
        return self.dataset.consistency

    @property
    def trust_score(self) -> int | None:
        report = self.dataset.consistency
        return report.trust_score if report is not None else None


class FingerprintService:
    """
    Composes the collection, aggregation, analysis and identity systems.

    The registry is owned by the caller and treated as read-only. The service
    itself keeps nothing between runs except counters.
    """

    system_id: str = "envprint"

    def __init__(
        self,
        registry: ProbeRegistry,
        *,
        collection: CollectionConfig | None = None,
        consistency: ConsistencyConfig | None = None,
        scheduler: TaskScheduler | None = None,
        analyzer: ConsistencyAnalyzer | None = None,
    ) -> None:
        if CONSISTENCY_SLOT in registry:
            raise ValueError(
                f"Probe name {CONSISTENCY_SLOT!r} is reserved for the consistency analyzer"
            )
        collection = collection or CollectionConfig()
        self._registry = registry
        self._scheduler = scheduler or TaskScheduler(
            collection.concurrency,
            collection.pace_ms,
            offload_sync_probes=collection.offload_sync_probes,
        )
        self._analyzer = analyzer or ConsistencyAnalyzer(consistency)
        self._logger = logger.bind(system="envprint.service")

        # Metrics
        self._total_runs: int = 0
        self._analysis_failures: int = 0

    @classmethod
    def from_config(cls, registry: ProbeRegistry, config: EnvprintConfig) -> FingerprintService:
        return cls(registry, collection=config.collection, consistency=config.consistency)

    @property
    def registry(self) -> ProbeRegistry:
        return self._registry

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    async def collect(self) -> Result:
        run_id = new_id()
        log = self._logger.bind(run_id=run_id)
        started = time.perf_counter()
        log.info(
            "collection_start",
            probes=len(self._registry),
            concurrency=self._scheduler.concurrency,
        )

        probe_outcomes = await self._scheduler.run(self._registry)
        partial = aggregate(probe_outcomes)

        analysis = await run_probe(lambda: self._analyzer.analyze(partial))
        outcomes = {**probe_outcomes, CONSISTENCY_SLOT: analysis}

        dataset = partial
        if analysis.status == ProbeStatus.SUCCESS:
            dataset = partial.model_copy(update={CONSISTENCY_SLOT: analysis.value})
        else:
            self._analysis_failures += 1
            log.warning("consistency_failed", error=analysis.error)

        # Coverage describes the registered probes; the analyzer is not one of them.
        coverage = calculate_coverage(probe_outcomes)
        timings = {name: outcome.duration_ms for name, outcome in outcomes.items()}
        timings[TOTAL_TIMING_KEY] = (time.perf_counter() - started) * 1000

        result = Result(
            id=identify(dataset),
            dataset=dataset,
            confidence=coverage.ratio,
            coverage=coverage,
            timings=timings,
            outcomes=outcomes,
        )
        self._total_runs += 1

        log.info(
            "collection_complete",
            fingerprint_id=result.id,
            successful=coverage.successful,
            failed=coverage.failed,
            skipped=coverage.skipped,
            confidence=round(coverage.ratio, 3),
            trust_score=result.trust_score,
            total_ms=round(timings[TOTAL_TIMING_KEY], 1),
        )
        return result

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "total_runs": self._total_runs,
            "analysis_failures": self._analysis_failures,
            "probes": len(self._registry),
            "concurrency": self._scheduler.concurrency,
        }


async def collect_fingerprint(
    registry: ProbeRegistry | None = None,
    *,
    concurrency: int | None = None,
    pace_ms: float | None = None,
) -> Result:
    """Run one collection pass; the host probe set is used when no registry is given."""
    if registry is None:
        registry = default_registry()
    overrides: dict[str, Any] = {}
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    if pace_ms is not None:
        overrides["pace_ms"] = pace_ms
    collection = CollectionConfig(**overrides)
    return await FingerprintService(registry, collection=collection).collect()

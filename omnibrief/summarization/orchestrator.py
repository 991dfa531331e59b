"""Routes extraction outcomes through ordered provider strategies."""

from collections.abc import Mapping, Sequence

from omnibrief.extraction.mime_types import FileType
from omnibrief.extraction.models import ExtractionOutcome
from omnibrief.logging.logger import Log
from omnibrief.processor.deadline import Deadline
from omnibrief.summarization.models import SummaryResult
from omnibrief.summarization.strategies import (
    Pathway,
    StrategyOutcome,
    StrategyTier,
    SummaryStrategy,
)

SOFT_FAILURE_HEADERS: dict[Pathway, str] = {
    Pathway.TEXT: "Failed to generate summary.",
    Pathway.IMAGE: "Failed to analyze image.",
    Pathway.MEDIA: "Media analysis failed.",
}


class SummaryOrchestrator:
    """Walks the strategy plan for a pathway until one strategy succeeds.

    Model-side failures never escape: when every strategy fails the result is
    a soft-failure SummaryResult describing each error, with no key points.
    """

    def __init__(self, plans: Mapping[Pathway, Sequence[SummaryStrategy]]) -> None:
        missing = [p.value for p in Pathway if not plans.get(p)]
        if missing:
            raise ValueError(f"No summary strategies configured for: {missing}")
        self._plans = {pathway: tuple(plan) for pathway, plan in plans.items()}

    def plan_for(self, pathway: Pathway) -> tuple[SummaryStrategy, ...]:
        return self._plans[pathway]

    def summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        deadline: Deadline | None = None,
    ) -> SummaryResult:
        """Return the first successful strategy result, or a soft failure.

        Raises:
            PipelineTimeoutError: if ``deadline`` passes before a strategy runs.
        """
        pathway = Pathway.for_outcome(outcome)
        Log.info("AI pathway chosen", pathway=pathway.value, file_type=file_type.value)

        failures: list[StrategyOutcome] = []
        for strategy in self._plans[pathway]:
            if strategy.tier is StrategyTier.FALLBACK and failures:
                Log.warning(
                    "Fallback triggered",
                    pathway=pathway.value,
                    strategy=strategy.name,
                    failed=failures[-1].strategy,
                )
            timeout_seconds = None
            if deadline is not None:
                deadline.check(f"{strategy.name} summary")
                timeout_seconds = deadline.remaining()
            attempt = strategy.run(outcome, file_type, timeout_seconds)
            if attempt.ok and attempt.result is not None:
                return attempt.result
            failures.append(attempt)

        Log.error("All summary strategies failed", pathway=pathway.value, attempts=len(failures))
        return self._soft_failure(pathway, failures)

    @staticmethod
    def _soft_failure(pathway: Pathway, failures: Sequence[StrategyOutcome]) -> SummaryResult:
        lines = [SOFT_FAILURE_HEADERS[pathway]]
        lines.extend(f"{failure.strategy} error: {failure.error}" for failure in failures)
        return SummaryResult(summary="\n".join(lines), key_points=[])

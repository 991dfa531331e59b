from omnibrief.summarization.factory import OrchestratorFactory
from omnibrief.summarization.models import Chapter, Speaker, SummaryResult
from omnibrief.summarization.orchestrator import SummaryOrchestrator

__all__ = ["Chapter", "OrchestratorFactory", "Speaker", "SummaryOrchestrator", "SummaryResult"]

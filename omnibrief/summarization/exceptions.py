class SummarizationError(Exception):
    """Raised when an AI provider call fails.

    Never escapes the orchestrator: strategies turn it into a failed
    StrategyOutcome.
    """


class SummarizationNetworkError(SummarizationError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class ProviderUnavailableError(SummarizationError):
    """Raised when a provider has no usable credential configured."""

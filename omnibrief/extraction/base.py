from abc import ABC, abstractmethod
from pathlib import Path


class BaseTextExtractor(ABC):
    """Contract for all document text extraction adapters."""

    @abstractmethod
    def extract(self, path: Path) -> str:
        """Extract plain text from the file at ``path``.

        Returns:
            Extracted text as a single string.

        Raises:
            ExtractionError: if the file cannot be read or parsed.
        """

from dataclasses import dataclass

from omnibrief.processor.models import MediaAsset


@dataclass(frozen=True)
class FetchedFile:
    """A downloaded file plus the display name derived from its source."""

    asset: MediaAsset
    suggested_name: str

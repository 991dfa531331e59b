from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Chapter:
    """A timestamped section of an audio/video recording."""

    time: str
    title: str
    description: str = ""


@dataclass(frozen=True)
class Speaker:
    """A speaker identified in a recording."""

    name: str
    traits: str = ""


@dataclass(frozen=True)
class SummaryResult:
    """Canonical output of every summarization pathway."""

    summary: str
    key_points: list[str] = field(default_factory=list)
    chapters: list[Chapter] = field(default_factory=list)
    speakers: list[Speaker] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys; empty chapters/speakers are omitted."""
        payload: dict[str, Any] = {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
        }
        if self.chapters:
            payload["chapters"] = [
                {"time": c.time, "title": c.title, "description": c.description}
                for c in self.chapters
            ]
        if self.speakers:
            payload["speakers"] = [
                {"name": s.name, "traits": s.traits} for s in self.speakers
            ]
        return payload

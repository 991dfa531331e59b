"""Coerces raw model output into the canonical SummaryResult.

This is the only place that inspects the shape of model JSON. Missing
fields get defaults, legacy shapes are flattened, and unparseable output
degrades to a truncated raw-text summary instead of raising.
"""

import json
import re
from typing import Any

from omnibrief.summarization.models import Chapter, Speaker, SummaryResult

PLACEHOLDER_SUMMARY = "Summary not available."
RAW_SUMMARY_LIMIT = 500

_FENCE_LINE = re.compile(r"^\s*```[\w-]*\s*$")
_POINT_KEYS = ("point", "text", "insight", "title", "description", "summary")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence lines such as ```json and ```."""
    lines = [line for line in text.strip().splitlines() if not _FENCE_LINE.match(line)]
    return "\n".join(lines).strip()


def extract_json_block(text: str) -> str | None:
    """Return the first balanced ``{...}`` block in ``text``, or None.

    Braces inside JSON string literals are ignored, so prose or markdown
    around the object does not confuse the scan.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def coerce_summary(raw: str, *, include_media_fields: bool = False) -> SummaryResult:
    """Parse model output into a SummaryResult, never raising.

    Args:
        raw: Model response text, possibly fenced or wrapped in prose.
        include_media_fields: Keep chapters and speakers. Only the multimodal
            media pathway sets this.
    """
    cleaned = strip_code_fences(raw or "")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None
    if not isinstance(parsed, dict):
        return SummaryResult(summary=_raw_summary(raw), key_points=[])

    summary = _as_text(parsed.get("summary")) or PLACEHOLDER_SUMMARY
    key_points = _key_points(parsed.get("keyPoints", parsed.get("key_points")))
    if not include_media_fields:
        return SummaryResult(summary=summary, key_points=key_points)
    return SummaryResult(
        summary=summary,
        key_points=key_points,
        chapters=_chapters(parsed.get("chapters")),
        speakers=_speakers(parsed.get("speakers")),
    )


def _raw_summary(raw: str | None) -> str:
    text = (raw or "").strip()
    return text[:RAW_SUMMARY_LIMIT] if text else PLACEHOLDER_SUMMARY


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return " ".join(part for part in (_as_text(v) for v in value) if part)
    if isinstance(value, dict):
        for key in _POINT_KEYS:
            text = _as_text(value.get(key))
            if text:
                return text
        return "; ".join(f"{k}: {_as_text(v)}" for k, v in value.items() if _as_text(v))
    return str(value)


def _key_points(value: Any) -> list[str]:
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    return [text for text in (_as_text(item) for item in items) if text]


def _chapters(value: Any) -> list[Chapter]:
    if not isinstance(value, list):
        return []
    chapters: list[Chapter] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        time = _as_text(item.get("time", item.get("timestamp")))
        title = _as_text(item.get("title"))
        if not time and not title:
            continue
        chapters.append(
            Chapter(time=time, title=title, description=_as_text(item.get("description")))
        )
    return chapters


def _speakers(value: Any) -> list[Speaker]:
    if not isinstance(value, list):
        return []
    speakers: list[Speaker] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            speakers.append(Speaker(name=item.strip()))
            continue
        if not isinstance(item, dict):
            continue
        name = _as_text(item.get("name", item.get("speaker")))
        if not name:
            continue
        traits = _as_text(item.get("traits", item.get("role")))
        speakers.append(Speaker(name=name, traits=traits))
    return speakers

from pathlib import Path

from omnibrief.summarization.exceptions import SummarizationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

TEXT_SUMMARY_PROMPT = "text_summary_prompt.txt"
IMAGE_SUMMARY_PROMPT = "image_summary_prompt.txt"
MEDIA_SUMMARY_PROMPT = "media_summary_prompt.txt"
TRANSCRIPT_SUMMARY_PROMPT = "transcript_summary_prompt.txt"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: File name of a bundled template in the prompts directory.
        path: Explicit template path; overrides ``name`` when given.

    Returns:
        The raw template string with placeholders.

    Raises:
        SummarizationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SummarizationError(f"Failed to load prompt template: {exc}") from exc

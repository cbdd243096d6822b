from pathlib import Path

from app.analysis.exceptions import AnalysisError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_instruction(name: str, prompt_dir: Path | None = None) -> str:
    """Load an instruction template bundled with the service.

    Args:
        name: Template name without extension, e.g. ``multi_document_prompt``.
        prompt_dir: Directory to read from. Defaults to the bundled prompts.

    Returns:
        The template text, stripped of surrounding whitespace.

    Raises:
        AnalysisError: if the file cannot be read or is empty.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}.txt"
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise AnalysisError(f"Failed to load instruction template '{name}': {exc}") from exc
    if not text:
        raise AnalysisError(f"Instruction template '{name}' is empty")
    return text

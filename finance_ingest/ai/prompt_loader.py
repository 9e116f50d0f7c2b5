from pathlib import Path

from finance_ingest.ai.exceptions import AIServiceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load a prompt template by file stem.

    Args:
        name: Template name without extension, e.g. "extraction_prompt".
        prompt_dir: Directory holding the templates.
                    Defaults to the bundled prompts/ directory.

    Returns:
        The raw template string with placeholders.

    Raises:
        AIServiceError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AIServiceError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(name: str, prompt_dir: Path | None = None) -> str:
    """Load a JSON schema by file stem, e.g. "extraction_schema".

    Raises:
        AIServiceError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AIServiceError(f"Failed to load JSON schema: {exc}") from exc

"""
Retrieval settings and secret loading.

'RetrievalSettings' holds the tunables of the merge engine and the response
parser. Defaults match the desktop application; every field can be overridden
from the environment with 'RetrievalSettings.from_env()':

    RETRIEVAL_SEARCH_RESULTS_MULTIPLIER=4
    RETRIEVAL_USE_SEARCH_RESULT_CONTEXT=0

Secrets (web search API keys) are loaded with 'get_secret', which checks a
mounted secret file first and falls back to an environment variable.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from retrieval_toolkit.exceptions import ConfigurationError

DEFAULT_HEADING_VARIANTS: tuple[str, ...] = (
    "Sources:",
    "References:",
    "**Sources:**",
    "**References:**",
    "**Sources**:",
    "**References**:",
    "List of Filepaths and URLs:",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class RetrievalSettings(BaseModel):
    """
    Tunables for source retrieval and citation parsing.

    Attributes:
        search_results_multiplier: Base unit for result counts. The similarity
            index is asked for twice this many chunks; web search for once or
            twice this many pages depending on whether local sources were found.
        use_search_result_context: Stitch the neighbouring passages of a local
            chunk around it before handing it to the model.
        heading_variants: Headings models emit before the citation list despite
            being told not to. Stripped from the end of the display text.
    """

    model_config = ConfigDict(frozen=True)

    search_results_multiplier: int = Field(default=3, ge=1)
    use_search_result_context: bool = True
    heading_variants: tuple[str, ...] = DEFAULT_HEADING_VARIANTS

    @classmethod
    def from_env(cls) -> "RetrievalSettings":
        overrides: dict[str, object] = {}
        multiplier = os.environ.get("RETRIEVAL_SEARCH_RESULTS_MULTIPLIER")
        if multiplier:
            try:
                overrides["search_results_multiplier"] = int(multiplier)
            except ValueError as exc:
                raise ConfigurationError(
                    f"RETRIEVAL_SEARCH_RESULTS_MULTIPLIER must be an integer, got {multiplier!r}"
                ) from exc
        use_context = os.environ.get("RETRIEVAL_USE_SEARCH_RESULT_CONTEXT")
        if use_context:
            overrides["use_search_result_context"] = _parse_bool("RETRIEVAL_USE_SEARCH_RESULT_CONTEXT", use_context)
        return cls(**overrides)  # type: ignore[arg-type]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {value!r}")


def get_secret(name: str, secrets_dir: Path = Path("/secrets")) -> str:
    """Load a secret from a mounted secret file or an environment variable.

    Checks in order:
    1. <secrets_dir>/<name>
    2. <name> environment variable

    Raises ConfigurationError if neither is available.
    """
    secret_file = secrets_dir / name
    if secret_file.exists():
        return secret_file.read_text().strip()
    key = os.environ.get(name, "")
    if not key:
        raise ConfigurationError(
            f"{name} not found. Either:\n"
            f"  - Mount it as a secret file at {secret_file}, or\n"
            f"  - Set the {name} environment variable."
        )
    return key

from enum import Enum
from typing import Optional


class GenerationErrorKind(Enum):
    EMPTY_RESPONSE = "empty_response"          # backend returned no text
    MALFORMED_RESPONSE = "malformed_response"  # text did not decode into a CloudSolution
    BACKEND_FAILURE = "backend_failure"        # transport / API / configuration error


class GenerationError(Exception):
    """
    Single failure type of GenerationClient.generate.

    `diagnostic` and `raw_text` are for operators; `user_message` is what
    a UI shows.
    """

    user_message = "Failed to generate architecture. Please try again."

    def __init__(
        self,
        kind: GenerationErrorKind,
        diagnostic: str,
        raw_text: Optional[str] = None,
    ):
        super().__init__(f"{kind.value}: {diagnostic}")
        self.kind = kind
        self.diagnostic = diagnostic
        self.raw_text = raw_text

    def to_dict(self) -> dict:
        return {
            "status": "error",
            "kind": self.kind.value,
            "message": self.user_message,
        }


class CompilationError(ValueError):
    """Mermaid rejected the chart text. `diagnostic` is Mermaid's own message."""

    def __init__(self, diagnostic: str):
        self.diagnostic = diagnostic
        super().__init__(diagnostic)

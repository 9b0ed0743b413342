import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from cloudarch.contract.schema import CLOUD_SOLUTION_SCHEMA, check_conformance
from cloudarch.schemas import CloudProvider, CloudSolution


# ============================================================
# DECODE RESULT (LLM TRUST BOUNDARY)
# ============================================================

@dataclass(frozen=True)
class DecodeResult:
    ok: bool
    solution: Optional[CloudSolution] = None
    diagnostic: str = ""

    @classmethod
    def success(cls, solution: CloudSolution) -> "DecodeResult":
        return cls(ok=True, solution=solution)

    @classmethod
    def failure(cls, diagnostic: str) -> "DecodeResult":
        return cls(ok=False, diagnostic=diagnostic)


# ============================================================
# STRICT DECODER
# ============================================================

def decode_solution(
    text: str,
    expected_provider: Optional[CloudProvider] = None,
    schema: Dict[str, Any] = CLOUD_SOLUTION_SCHEMA,
) -> DecodeResult:
    """
    Strictly decode backend text into a CloudSolution.

    Stages:
    1. JSON syntax
    2. Conformance with the shared schema (same descriptor the backend was given)
    3. Typed model construction
    4. Provider consistency with the request

    NEVER salvages: any failure yields no solution at all.
    """

    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        return DecodeResult.failure(f"invalid JSON: {e}")

    violations = check_conformance(data, schema)
    if violations:
        return DecodeResult.failure("schema violations: " + "; ".join(violations))

    try:
        solution = CloudSolution.model_validate(data)
    except ValidationError as e:
        return DecodeResult.failure(f"model validation failed: {e}")

    if expected_provider is not None and solution.provider != expected_provider:
        return DecodeResult.failure(
            f"provider mismatch: requested {expected_provider.value}, "
            f"got {solution.provider.value}"
        )

    return DecodeResult.success(solution)

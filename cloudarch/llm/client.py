import logging
from typing import Any, Dict, Optional

from cloudarch.contract.schema import CLOUD_SOLUTION_SCHEMA
from cloudarch.errors import GenerationError, GenerationErrorKind
from cloudarch.inference.base import GenerationBackend
from cloudarch.inference.prompt import build_prompt
from cloudarch.llm.parser import decode_solution
from cloudarch.schemas import CloudSolution, GenerationRequest
from cloudarch.utils.logging import preview

logger = logging.getLogger(__name__)


class GenerationClient:
    """
    One request in, one CloudSolution (or one GenerationError) out.

    Stateless per call: no retries, no caching, no queueing of
    concurrent submissions.
    """

    def __init__(
        self,
        backend: Optional[GenerationBackend] = None,
        schema: Dict[str, Any] = CLOUD_SOLUTION_SCHEMA,
    ):
        self._backend = backend
        self.schema = schema

    @property
    def backend(self) -> GenerationBackend:
        # Built on first use so a missing credential surfaces as a GenerationError
        if self._backend is None:
            from cloudarch.inference import config as inference_config

            self._backend = inference_config.get_generation_backend()
        return self._backend

    async def generate(self, request: GenerationRequest) -> CloudSolution:
        try:
            backend = self.backend
        except ValueError as e:
            logger.error("Generation backend is not configured: %s", e)
            raise GenerationError(
                GenerationErrorKind.BACKEND_FAILURE,
                f"backend unavailable: {e}",
            ) from e

        prompt = build_prompt(request)
        logger.info(
            "generate provider=%s model=%s description=%r",
            request.provider.value,
            getattr(backend, "model", "?"),
            preview(request.problem_description, 120),
        )

        try:
            text = await backend.complete(prompt, self.schema)
        except Exception as e:
            logger.error("Generation backend failed: %s: %s", type(e).__name__, e)
            raise GenerationError(
                GenerationErrorKind.BACKEND_FAILURE,
                f"{type(e).__name__}: {e}",
            ) from e

        if text is None or not text.strip():
            logger.warning("Generation backend returned no text")
            raise GenerationError(
                GenerationErrorKind.EMPTY_RESPONSE,
                "No response from AI",
                raw_text=text,
            )

        result = decode_solution(text, expected_provider=request.provider, schema=self.schema)
        if not result.ok:
            logger.warning(
                "Failed to parse architecture data: %s | raw=%s",
                result.diagnostic,
                preview(text, 600),
            )
            raise GenerationError(
                GenerationErrorKind.MALFORMED_RESPONSE,
                result.diagnostic,
                raw_text=text,
            )

        logger.info(
            "generate ok title=%r tech_stack=%d walkthrough=%d",
            result.solution.title,
            len(result.solution.tech_stack),
            len(result.solution.walkthrough),
        )
        return result.solution

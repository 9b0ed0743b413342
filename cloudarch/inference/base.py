from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class GenerationBackend(ABC):
    model: str

    @abstractmethod
    async def complete(self, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        """
        Issue exactly one non-streaming request with the response
        constrained to `schema`. Returns the raw text payload, or None
        when the backend produced none.
        """
        pass

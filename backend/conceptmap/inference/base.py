from abc import ABC, abstractmethod
from typing import Dict, List


class LLMClient(ABC):
    """
    Upstream concept producer.

    Implementations return the raw assistant text; turning it into a concept
    array is the extractor's job, so no parsing or validation happens here.
    """

    @abstractmethod
    def generate(self, messages: List[Dict[str, str]]) -> str:
        """Chat messages in, assistant text out. May raise on transport errors."""
        raise NotImplementedError

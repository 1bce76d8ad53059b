from abc import ABC, abstractmethod
from typing import List, Type, TypeVar

from pydantic import BaseModel

# Pydantic model the caller expects back.
T = TypeVar("T", bound=BaseModel)

class LLMProvider(ABC):
    """
    Contract for any chat-completion backend that can answer with a
    validated Pydantic object. Used by the LLM intent recognizer.
    """

    @abstractmethod
    async def generate_structured_output(
        self,
        messages: List[dict],
        response_model: Type[T],
        temperature: float = 0.0
    ) -> T:
        pass

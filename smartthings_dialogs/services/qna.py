"""
QnA Service Interface.

Defines the contract for the question/answer knowledge base used for
chit-chat. The router sends the best answer back verbatim.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class QnAAnswer(BaseModel):
    answer: str
    score: float


class QnAService(ABC):
    @property
    @abstractmethod
    def configured(self) -> bool:
        pass

    @abstractmethod
    async def get_answers(self, question: str) -> List[QnAAnswer]:
        """
        Returns candidate answers, best first. Empty when nothing matched.
        """
        pass


class QnAMakerService(QnAService):
    def __init__(
        self,
        knowledge_base_id: Optional[str],
        endpoint_key: Optional[str],
        host: Optional[str],
        top: int = 3,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.knowledge_base_id = knowledge_base_id
        self.endpoint_key = endpoint_key
        self.host = (host or "").rstrip("/")
        self.top = top
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.knowledge_base_id and self.endpoint_key and self.host)

    async def get_answers(self, question: str) -> List[QnAAnswer]:
        if not self.configured:
            return []

        url = f"{self.host}/knowledgebases/{self.knowledge_base_id}/generateAnswer"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                url,
                json={"question": question, "top": self.top},
                headers={"Authorization": f"EndpointKey {self.endpoint_key}"},
            )
            response.raise_for_status()
            payload = response.json()

        answers = [QnAAnswer.model_validate(a) for a in payload.get("answers", [])]
        # QnA Maker returns a zero-score placeholder when nothing matched.
        answers = [a for a in answers if a.score > 0]
        answers.sort(key=lambda a: a.score, reverse=True)
        logger.debug(f"QnA returned {len(answers)} answer(s) for '{question}'")
        return answers

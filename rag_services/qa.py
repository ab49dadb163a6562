"""
Retrieval + generation for a single question, fronted by the answer cache
"""
import asyncio
import logging
from typing import List, Tuple

from core.exceptions import IndexNotFoundError, NotReadyError, ServiceError
from models.rag_model import AnswerPayload, SourceChunk
from rag_services.cache import QueryCache
from rag_services.llm import LLMService
from rag_services.vector_store import VectorIndexStore

logger = logging.getLogger(__name__)


def normalize_question(question: str) -> str:
    return " ".join(question.split()).lower()


def format_context(results: List[Tuple[str, float]]) -> str:
    return "\n\n".join(text for text, _ in results)


class QAEngine:
    def __init__(
        self,
        index_store: VectorIndexStore,
        cache: QueryCache,
        llm_service: LLMService,
        top_k: int = 4,
    ):
        self._index_store = index_store
        self._cache = cache
        self._llm = llm_service
        self.top_k = top_k

    def cache_key(self, document_ref: str, question: str) -> Tuple[str, str]:
        return self._index_store.key_for(document_ref), normalize_question(question)

    async def answer(self, document_ref: str, question: str) -> AnswerPayload:
        """Answer ``question`` from the index built for ``document_ref``.

        Raises NotReadyError when no index exists yet and ServiceError when
        the embedding or generation call fails.
        """
        cache_key = self.cache_key(document_ref, question)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Answer cache hit for %s", cache_key)
            return cached

        try:
            index = await self._index_store.load_or_build(cache_key[0])
        except IndexNotFoundError as exc:
            raise NotReadyError("Document is still being processed, please retry later") from exc

        try:
            results = await self._index_store.query(index, question, self.top_k)
            loop = asyncio.get_running_loop()
            answer = await loop.run_in_executor(
                None, self._llm.generate_answer, question, format_context(results)
            )
        except Exception as exc:
            logger.exception("Answering failed for document %s", document_ref)
            raise ServiceError(str(exc) or type(exc).__name__) from exc

        payload = AnswerPayload(
            answer=answer,
            sources=[SourceChunk(text=text, score=score) for text, score in results],
        )
        self._cache.set(cache_key, payload)
        return payload

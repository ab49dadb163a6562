"""
LLM service for answer generation
"""
from openai import OpenAI
from typing import Optional

PROMPT_TEMPLATE = """You are a helpful assistant answering questions about a document. Use the context to answer concisely. If the answer isn't in the context, say so politely.

Context from document:
{context}

Question: {question}
Answer:"""


class LLMService:
    """Handles answer generation using OpenAI's chat models."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_tokens: int = 500,
        api_key: Optional[str] = None,
    ):
        self._client = None
        self._api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key) if self._api_key else OpenAI()
        return self._client

    def generate_answer(self, question: str, context: str) -> str:
        """Generate an answer from the retrieved context. Blocking."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": self.build_prompt(question, context)}],
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )

        return (response.choices[0].message.content or "").strip()

    @staticmethod
    def build_prompt(question: str, context: str) -> str:
        return PROMPT_TEMPLATE.format(context=context, question=question)

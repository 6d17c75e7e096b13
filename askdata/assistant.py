from __future__ import annotations

import abc

from .config import SQLGuardrailConfig
from .llm_client import LLMClient
from .models import VisualizationAdvice
from .prompts import PromptResources
from .sql_generator import SQLGenerator
from .synthesizer import ResponseSynthesizer
from .visualization import VisualizationAdvisor


class Assistant(abc.ABC):
    """The three model-backed steps of answering a question."""

    @abc.abstractmethod
    async def generate_sql(self, question: str, schema_text: str) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def narrate(self, question: str, data_text: str) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def advise_visualization(self, question: str, data_text: str) -> VisualizationAdvice:
        raise NotImplementedError


class LLMAssistant(Assistant):
    def __init__(
        self,
        guard_cfg: SQLGuardrailConfig,
        llm: LLMClient,
        prompts: PromptResources,
    ):
        self._sql_generator = SQLGenerator(guard_cfg, llm, prompts)
        self._synthesizer = ResponseSynthesizer(llm, prompts)
        self._advisor = VisualizationAdvisor(llm, prompts)

    async def generate_sql(self, question: str, schema_text: str) -> str:
        return await self._sql_generator.generate(question, schema_text)

    async def narrate(self, question: str, data_text: str) -> str:
        return await self._synthesizer.synthesize(question, data_text)

    async def advise_visualization(self, question: str, data_text: str) -> VisualizationAdvice:
        return await self._advisor.advise(question, data_text)


__all__ = ["Assistant", "LLMAssistant"]

from __future__ import annotations

from .errors import GenerationFailure
from .llm_client import LLMClient
from .logging_utils import get_logger
from .prompts import NARRATIVE_SYSTEM_PROMPT, PromptResources, contract_errors

logger = get_logger(__name__)

EMPTY_ANSWER_MESSAGE = "Failed to generate a response."


class ResponseSynthesizer:
    def __init__(self, llm: LLMClient, prompts: PromptResources):
        self._llm = llm
        self._prompts = prompts

    async def synthesize(self, question: str, data_text: str) -> str:
        messages = self._build_messages(question, data_text)
        logger.info("response_synthesizer_request", data_bytes=len(data_text))
        result = await self._llm.complete_json({"messages": messages})
        errors = contract_errors(self._prompts.narrative_validator, result)
        if errors:
            logger.warning("response_synthesizer_invalid_json", details="; ".join(errors))
            raise GenerationFailure(EMPTY_ANSWER_MESSAGE)
        answer = result["response"].strip()
        if not answer:
            raise GenerationFailure(EMPTY_ANSWER_MESSAGE)
        return answer

    def _build_messages(self, question: str, data_text: str):
        system_msg = {"role": "system", "content": NARRATIVE_SYSTEM_PROMPT}
        user_msg = {"role": "user", "content": f"Question: {question}\nData: {data_text}"}
        return [system_msg, user_msg]


__all__ = ["ResponseSynthesizer"]

from __future__ import annotations

import json
from typing import Optional

from .llm_client import LLMClient
from .logging_utils import get_logger
from .models import VisualizationAdvice
from .prompts import VISUALIZATION_SYSTEM_PROMPT, PromptResources, contract_errors

logger = get_logger(__name__)


class VisualizationAdvisor:
    """Decides whether a query result is worth charting, and how."""

    def __init__(self, llm: LLMClient, prompts: PromptResources):
        self._llm = llm
        self._prompts = prompts

    async def advise(self, question: str, data_text: str) -> VisualizationAdvice:
        shortcut = self._fast_path(data_text)
        if shortcut is not None:
            logger.info("visualization_fast_path", reasoning=shortcut.reasoning)
            return shortcut
        messages = [
            {"role": "system", "content": VISUALIZATION_SYSTEM_PROMPT},
            {"role": "user", "content": f"User Question: {question}\nData: {data_text}"},
        ]
        result = await self._llm.complete_json({"messages": messages})
        errors = contract_errors(self._prompts.visualization_validator, result)
        if errors:
            raise ValueError("Visualization advisor returned invalid JSON: " + "; ".join(errors))
        advice = VisualizationAdvice.model_validate(result)
        return self._enforce_consistency(advice)

    def _fast_path(self, data_text: str) -> Optional[VisualizationAdvice]:
        try:
            parsed = json.loads(data_text)
        except (TypeError, ValueError):
            return VisualizationAdvice.not_visualizable("Failed to parse data.")
        rows = parsed.get("rows") if isinstance(parsed, dict) else None
        if not isinstance(rows, list) or not rows:
            return VisualizationAdvice.not_visualizable("Data is empty or not in the expected format.")
        return None

    def _enforce_consistency(self, advice: VisualizationAdvice) -> VisualizationAdvice:
        if advice.is_visualizable and advice.chart_type == "none":
            logger.info("visualization_missing_chart_type")
            return advice.model_copy(update={"is_visualizable": False})
        if not advice.is_visualizable and advice.chart_type != "none":
            return advice.model_copy(update={"chart_type": "none"})
        return advice


__all__ = ["VisualizationAdvisor"]

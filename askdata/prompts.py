from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from .config import PromptsConfig

SQL_SYSTEM_PROMPT = """You are an expert SQL writer. Given a database schema and a user's question, write a single, valid {dialect} SQL query to answer the question.

Only return one statement. Do not wrap it in markdown or add explanations.

IMPORTANT: When writing queries that involve division, you MUST handle potential division-by-zero errors. Use the NULLIF function to prevent these errors.
For example, to calculate Return on Ad Spend (RoAS), instead of 'SUM(ad_sales) / SUM(ad_spend)', you should write 'SUM(ad_sales) * 1.0 / NULLIF(SUM(ad_spend), 0)'.

Respond with a JSON object of the form {{"sql": "<query>"}}."""

NARRATIVE_SYSTEM_PROMPT = """You are an AI agent that answers questions about e-commerce data in a human-readable format.

Generate a natural language response that accurately and concisely answers the question based only on the provided data.

Respond with a JSON object of the form {"response": "<answer>"}."""

VISUALIZATION_SYSTEM_PROMPT = """You are an expert data visualization analyst. Your task is to determine if the given data can be effectively visualized to answer the user's question.

- Data must contain at least one categorical column (e.g., text, date) and at least one numerical column.
- Single-value aggregations (like a single SUM or COUNT) are generally not visualizable unless the question implies comparison or trends over time.
- Time series data is best for line or area charts.
- Categorical comparisons are best for bar charts.
- Proportions or parts of a whole are good for pie charts.

Respond with a JSON object with the following fields:
- isVisualizable: boolean
- chartType: "bar", "line", "area", "pie", or "none" (use "none" if not visualizable)
- chartTitle: a concise, descriptive title for the chart
- reasoning: a brief explanation for your choices"""

SQL_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {"sql": {"type": "string"}},
    "required": ["sql"],
}

NARRATIVE_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {"response": {"type": "string"}},
    "required": ["response"],
}

VISUALIZATION_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "isVisualizable": {"type": "boolean"},
        "chartType": {"enum": ["bar", "line", "area", "pie", "none"]},
        "chartTitle": {"type": "string"},
        "reasoning": {"type": "string"},
    },
    "required": ["isVisualizable", "chartType"],
}


class PromptResources:
    def __init__(self, cfg: Optional[PromptsConfig] = None):
        cfg = cfg or PromptsConfig()
        self.examples: Dict[str, List[Dict[str, Any]]] = _load_json(cfg.examples_path) if cfg.examples_path else {}
        self.sql_validator = Draft7Validator(SQL_OUTPUT_SCHEMA)
        self.narrative_validator = Draft7Validator(NARRATIVE_OUTPUT_SCHEMA)
        self.visualization_validator = Draft7Validator(VISUALIZATION_OUTPUT_SCHEMA)

    def sql_examples(self) -> List[Dict[str, Any]]:
        return self.examples.get("sql_examples", [])


def contract_errors(validator: Draft7Validator, payload: Dict[str, Any]) -> List[str]:
    return [err.message for err in validator.iter_errors(payload)]


def _load_json(path: str) -> Dict[str, Any]:
    path_obj = pathlib.Path(path)
    if not path_obj.is_absolute():
        path_obj = pathlib.Path.cwd() / path_obj
    with path_obj.open("r", encoding="utf-8") as fh:
        return json.load(fh)


__all__ = [
    "PromptResources",
    "contract_errors",
    "SQL_SYSTEM_PROMPT",
    "NARRATIVE_SYSTEM_PROMPT",
    "VISUALIZATION_SYSTEM_PROMPT",
]

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from .config import SQLGuardrailConfig
from .errors import GenerationFailure
from .llm_client import LLMClient
from .logging_utils import get_logger
from .prompts import SQL_SYSTEM_PROMPT, PromptResources, contract_errors

logger = get_logger(__name__)

# An opening fence may carry any language tag up to the end of its line.
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*(?=\r?\n)|```")

NO_OUTPUT_MESSAGE = "AI failed to generate a response."


def clean_sql(raw: str) -> str:
    """Drop markdown code fences the model sometimes wraps around the query."""
    return _FENCE_RE.sub("", raw).strip()


class SQLGenerator:
    def __init__(self, guard_cfg: SQLGuardrailConfig, llm: LLMClient, prompts: PromptResources):
        self._guard_cfg = guard_cfg
        self._llm = llm
        self._prompts = prompts

    async def generate(self, question: str, schema_text: str) -> str:
        payload = {"messages": self._build_messages(question, schema_text)}
        logger.info("sql_generator_request", question=question)
        result = await self._llm.complete_json(payload)
        if not result:
            raise GenerationFailure(NO_OUTPUT_MESSAGE)
        errors = contract_errors(self._prompts.sql_validator, result)
        if errors:
            logger.warning("sql_generator_invalid_json", details="; ".join(errors))
            raise GenerationFailure(NO_OUTPUT_MESSAGE)
        sql = clean_sql(result["sql"])
        logger.info("sql_generated", sql=sql)
        return sql

    def _build_messages(self, question: str, schema_text: str) -> List[Dict[str, Any]]:
        system_msg = {
            "role": "system",
            "content": SQL_SYSTEM_PROMPT.format(dialect=self._dialect_name()),
        }
        example_msgs = []
        for example in self._prompts.sql_examples():
            example_msgs.append({"role": "user", "content": _user_content(example["question"], schema_text)})
            example_msgs.append({"role": "assistant", "content": json.dumps({"sql": example["sql"]})})
        user_msg = {"role": "user", "content": _user_content(question, schema_text)}
        return [system_msg, *example_msgs, user_msg]

    def _dialect_name(self) -> str:
        dialect = self._guard_cfg.dialect.lower()
        return {"postgres": "PostgreSQL", "sqlite": "SQLite", "mysql": "MySQL"}.get(dialect, dialect)


def _user_content(question: str, schema_text: str) -> str:
    return f"Schema:\n{schema_text}\n\nQuestion:\n{question}"


__all__ = ["SQLGenerator", "clean_sql"]

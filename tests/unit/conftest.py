from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from askdata.assistant import Assistant
from askdata.config import DatabaseConfig, Settings
from askdata.errors import ExecutionFailure
from askdata.executor import SQLExecutor
from askdata.llm_client import LLMClient
from askdata.models import QueryResult, VisualizationAdvice


class ScriptedLLMClient(LLMClient):
    """Returns queued payloads in order and records every prompt it saw."""

    def __init__(self, *responses: Dict[str, Any]):
        self.responses = list(responses)
        self.prompts: List[Dict[str, Any]] = []

    async def complete_json(self, prompt: Dict[str, Any]) -> Dict[str, Any]:
        self.prompts.append(prompt)
        return self.responses.pop(0)


class FakeAssistant(Assistant):
    def __init__(
        self,
        sql: str = "SELECT SUM(total_sales_revenue) AS total_revenue FROM total_sales",
        answer: str = "You made $15,432.78 in the last 7 days.",
        advice: Optional[VisualizationAdvice] = None,
        sql_error: Optional[Exception] = None,
        narrate_error: Optional[Exception] = None,
        advise_error: Optional[Exception] = None,
    ):
        self.sql = sql
        self.answer = answer
        self.advice = advice or VisualizationAdvice.not_visualizable("Single aggregate value.")
        self.sql_error = sql_error
        self.narrate_error = narrate_error
        self.advise_error = advise_error
        self.calls: List[str] = []
        self.schema_texts: List[str] = []

    async def generate_sql(self, question: str, schema_text: str) -> str:
        self.calls.append("generate_sql")
        self.schema_texts.append(schema_text)
        if self.sql_error:
            raise self.sql_error
        return self.sql

    async def narrate(self, question: str, data_text: str) -> str:
        self.calls.append("narrate")
        if self.narrate_error:
            raise self.narrate_error
        return self.answer

    async def advise_visualization(self, question: str, data_text: str) -> VisualizationAdvice:
        self.calls.append("advise_visualization")
        if self.advise_error:
            raise self.advise_error
        return self.advice


class FakeExecutor(SQLExecutor):
    def __init__(self, result: Optional[QueryResult] = None, error: Optional[str] = None):
        self.result = result if result is not None else QueryResult.empty()
        self.error = error
        self.statements: List[str] = []

    async def execute(self, sql: str) -> QueryResult:
        self.statements.append(sql)
        if self.error:
            raise ExecutionFailure(f"Database query failed: {self.error}")
        return self.result


@pytest.fixture
def settings() -> Settings:
    return Settings(database=DatabaseConfig(dsn="postgresql://placeholder"))


@pytest.fixture
def revenue_result() -> QueryResult:
    return QueryResult.from_rows([{"total_revenue": 15432.78}])


@pytest.fixture
def cpc_result() -> QueryResult:
    return QueryResult.from_rows([
        {"product_name": "MegaGadget", "cpc": 0.4},
        {"product_name": "SuperWidget", "cpc": 0.35},
        {"product_name": "HyperGrommet", "cpc": 0.32},
    ])


@pytest.fixture
def scripted_llm():
    return ScriptedLLMClient


@pytest.fixture
def make_assistant():
    return FakeAssistant


@pytest.fixture
def make_executor():
    return FakeExecutor

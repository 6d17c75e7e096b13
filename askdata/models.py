from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

ChartType = Literal["bar", "line", "area", "pie", "none"]


class QuestionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, strict=True)

    question: str = Field(..., min_length=1)


class QueryResult(BaseModel):
    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "QueryResult":
        return cls(columns=[], rows=[])

    @classmethod
    def from_rows(cls, rows: Sequence[Mapping[str, Any]]) -> "QueryResult":
        """Column order follows the key order of the first row."""
        if not rows:
            return cls.empty()
        materialized = [dict(row) for row in rows]
        return cls(columns=list(materialized[0].keys()), rows=materialized)

    def to_prompt_text(self) -> str:
        return json.dumps(self.model_dump(), default=str)


class VisualizationAdvice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_visualizable: bool = Field(alias="isVisualizable")
    chart_type: ChartType = Field(alias="chartType")
    chart_title: str = Field(default="", alias="chartTitle")
    reasoning: str = ""

    @classmethod
    def not_visualizable(cls, reasoning: str = "") -> "VisualizationAdvice":
        return cls(is_visualizable=False, chart_type="none", chart_title="", reasoning=reasoning)


class PipelineResponse(BaseModel):
    answer: str
    sql: str
    data: QueryResult
    visualization: Optional[VisualizationAdvice] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "PipelineResponse":
        return cls(answer="", sql="", data=QueryResult.empty(), error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        for key in ("visualization", "error"):
            if payload[key] is None:
                del payload[key]
        return payload


__all__ = [
    "ChartType",
    "QuestionRequest",
    "QueryResult",
    "VisualizationAdvice",
    "PipelineResponse",
]

from __future__ import annotations

from .assistant import Assistant
from .errors import GenerationFailure
from .executor import SQLExecutor
from .logging_utils import get_logger
from .models import PipelineResponse, QueryResult, VisualizationAdvice
from .observability import REQUEST_COUNTER, VISUALIZATION_DEGRADED, record_latency
from .schema_registry import SchemaRegistry
from .sql_validator import SQLValidator

logger = get_logger(__name__)

APOLOGY_PREFIX = "Sorry, I couldn't process that question."


class QuestionPipeline:
    """Turns a question into SQL, runs it, then explains and charts the result.

    Stages run once each, in order. Any failure before an answer exists is
    reported as a failure-shaped response; a failing visualization advisor
    only downgrades the chart suggestion.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        validator: SQLValidator,
        executor: SQLExecutor,
        assistant: Assistant,
    ):
        self._registry = registry
        self._validator = validator
        self._executor = executor
        self._assistant = assistant

    async def ask(self, question: str) -> PipelineResponse:
        try:
            with record_latency("total"):
                response = await self._run(question)
        except Exception as exc:  # noqa: BLE001
            REQUEST_COUNTER.labels(status="failed").inc()
            logger.warning("pipeline_failed", question=question, error=str(exc), exc_info=True)
            return PipelineResponse.failure(f"{APOLOGY_PREFIX} {exc}")
        REQUEST_COUNTER.labels(status="success").inc()
        return response

    async def _run(self, question: str) -> PipelineResponse:
        with record_latency("sql_generation"):
            sql = await self._assistant.generate_sql(question, self._registry.describe())
        if not sql or not sql.strip():
            raise GenerationFailure("Failed to generate SQL query.")

        with record_latency("validation"):
            self._validator.validate(sql)
        with record_latency("execution"):
            result = await self._executor.execute(sql)
        data_text = result.to_prompt_text()

        with record_latency("narration"):
            answer = await self._assistant.narrate(question, data_text)
        if not answer or not answer.strip():
            raise GenerationFailure("Failed to generate a response.")

        visualization = await self._advise(question, result, data_text)
        return PipelineResponse(answer=answer, sql=sql, data=result, visualization=visualization)

    async def _advise(self, question: str, result: QueryResult, data_text: str) -> VisualizationAdvice:
        if not result.rows:
            return VisualizationAdvice.not_visualizable()
        try:
            with record_latency("visualization"):
                return await self._assistant.advise_visualization(question, data_text)
        except Exception as exc:  # noqa: BLE001
            VISUALIZATION_DEGRADED.inc()
            logger.warning("visualization_degraded", error=str(exc))
            return VisualizationAdvice.not_visualizable(f"Visualization advice unavailable: {exc}")


__all__ = ["QuestionPipeline", "APOLOGY_PREFIX"]

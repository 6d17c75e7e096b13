from __future__ import annotations

import asyncio
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .assistant import Assistant, LLMAssistant
from .config import Settings, get_settings
from .db import Database
from .executor import QueryExecutor, SQLExecutor
from .llm_client import LLMClient, build_llm_client
from .logging_utils import configure_logging, get_logger
from .models import QuestionRequest
from .observability import init_metrics_server
from .pipeline import QuestionPipeline
from .prompts import PromptResources
from .schema_registry import SchemaRegistry
from .sql_validator import SQLValidator

logger = get_logger(__name__)

QUESTION_REQUIRED_MESSAGE = "Question is required and must be a string."
INVALID_BODY_MESSAGE = "Request body must be valid JSON."


def create_app(
    settings: Settings | None = None,
    *,
    assistant: Optional[Assistant] = None,
    executor: Optional[SQLExecutor] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.app.log_level, settings.app.log_format)
    init_metrics_server(settings.observability)

    app = FastAPI(title="askdata", version="0.1.0")

    registry = SchemaRegistry.from_config(settings.data_schema)
    llm_client: Optional[LLMClient] = None
    if assistant is None:
        llm_client = build_llm_client(settings.llm, os.environ.get("LLM_API_KEY", ""))
        prompts = PromptResources(settings.prompts)
        assistant = LLMAssistant(settings.sql_guardrails, llm_client, prompts)
    database: Optional[Database] = None
    if executor is None:
        database = Database(settings.database)
        executor = QueryExecutor(database, settings.database)

    pipeline = QuestionPipeline(
        registry,
        SQLValidator(settings.sql_guardrails, registry),
        executor,
        assistant,
    )
    app.state.pipeline = pipeline

    @app.on_event("startup")
    async def _startup() -> None:
        if database is not None:
            await database.connect()
        logger.info("app_started", environment=settings.environment)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if database is not None:
            await database.close()
        if llm_client is not None:
            await llm_client.aclose()
        logger.info("app_shutdown")

    @app.get("/api/schema")
    async def describe_schema() -> dict:
        return {
            "schema": registry.describe(),
            "tables": [{"name": t.name, "columns": t.columns} for t in registry.tables()],
        }

    @app.post("/api/ask")
    async def ask_question(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": INVALID_BODY_MESSAGE}, status_code=400)
        try:
            question = QuestionRequest.model_validate(body).question
        except ValidationError:
            return JSONResponse({"error": QUESTION_REQUIRED_MESSAGE}, status_code=400)

        try:
            response = await asyncio.wait_for(
                pipeline.ask(question),
                timeout=settings.app.request_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.error("ask_timed_out", question=question, timeout_s=settings.app.request_timeout_s)
            return JSONResponse({"error": "Failed to process request: request timed out"}, status_code=500)

        if response.error:
            return JSONResponse({"error": response.error}, status_code=500)
        return JSONResponse(response.to_payload())

    return app


__all__ = ["create_app", "QUESTION_REQUIRED_MESSAGE", "INVALID_BODY_MESSAGE"]

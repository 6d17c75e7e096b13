from __future__ import annotations

import functools
import os
import pathlib
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator

CONFIG_ENV_VAR = "ASKDATA_CONFIG"


class RetryConfig(BaseModel):
    attempts: int = Field(default=5, ge=1)
    backoff_seconds: float = Field(default=1.0, ge=0)


class AppConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    log_format: Literal["console", "json"] = "console"
    request_timeout_s: int = Field(default=60, ge=1)


class DatabaseConfig(BaseModel):
    dsn: str
    min_pool_size: int = Field(default=1, ge=1)
    max_pool_size: int = Field(default=10, ge=1)
    statement_timeout_ms: int = Field(default=5000, ge=100)
    row_limit: int = Field(default=500, ge=1)
    read_only: bool = True
    connect_retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("max_pool_size")
    @classmethod
    def validate_pool_sizes(cls, v: int, info: ValidationInfo) -> int:
        min_size = info.data.get("min_pool_size", 1)
        if v < min_size:
            raise ValueError("max_pool_size must be >= min_pool_size")
        return v


class LLMConfig(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    max_tokens: int = Field(default=1200, ge=1)
    timeout_s: float = Field(default=30.0, gt=0)


class SQLGuardrailConfig(BaseModel):
    dialect: str = "postgres"
    validate_identifiers: bool = False


class TableConfig(BaseModel):
    name: str
    columns: Dict[str, str]


class SchemaConfig(BaseModel):
    # Empty means the bundled e-commerce tables.
    tables: List[TableConfig] = Field(default_factory=list)


class ObservabilityConfig(BaseModel):
    service_name: str = "askdata"
    metrics_port: int = Field(default=0, ge=0)


class PromptsConfig(BaseModel):
    examples_path: Optional[str] = None


class Settings(BaseModel):
    environment: str = "development"
    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig
    llm: LLMConfig = Field(default_factory=LLMConfig)
    sql_guardrails: SQLGuardrailConfig = Field(default_factory=SQLGuardrailConfig)
    # "schema" shadows a BaseModel attribute, hence the alias.
    data_schema: SchemaConfig = Field(default_factory=SchemaConfig, alias="schema")
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    prompts: PromptsConfig = Field(default_factory=PromptsConfig)


def _load_yaml(path: pathlib.Path) -> Dict:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@functools.lru_cache(maxsize=1)
def load_settings(path: Optional[str] = None) -> Settings:
    cfg_path = pathlib.Path(path or os.environ.get(CONFIG_ENV_VAR) or "config.yaml").resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found at {cfg_path}")
    raw = _load_yaml(cfg_path)
    return Settings(**raw)


def get_settings() -> Settings:
    return load_settings()

"""
Application Configuration
Pydantic Settings for environment-based configuration
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings from environment variables
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ShopSearch"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_prefix: str = "/api"
    allowed_hosts: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

    # LLM (OpenAI-compatible chat + embeddings)
    llm_provider: Literal["openai", "mock"] = "openai"
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    openai_max_tokens: int = 1000
    openai_timeout: float = 30.0  # seconds, per call
    intent_temperature: float = 0.1
    suggestion_temperature: float = 0.7

    # Embeddings
    embedding_batch_size: int = 100
    embedding_batch_delay_seconds: float = 0.1

    # VectorStore
    vectorstore_type: Literal["qdrant", "mock"] = "qdrant"
    vectorstore_dimension: int = 1536  # text-embedding-3-small
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str | None = None
    qdrant_collection: str = "products"
    qdrant_timeout: float = 10.0

    # Search
    search_max_results: int = 20
    match_high_threshold: float = 0.9
    match_good_threshold: float = 0.7
    suggestion_max: int = 20
    suggestion_fallback_suffixes: tuple[str, ...] = (
        "黑色",
        "白色",
        "蓝色",
        "100元以下",
        "200元以下",
        "品牌",
        "大码",
        "小码",
    )

    # Variant generation
    variant_default_count: int = 5
    variant_batch_count: int = 3  # fewer variants per product during batch import
    variant_temperature: float = 0.8
    variant_max_tokens: int = 1500
    variant_min_length: int = 5
    variant_max_length: int = 100

    # Prompt overrides (JSON schema / plain-text template)
    function_schema_path: str | None = None
    variant_prompt_path: str | None = None

    # Feature flags
    enable_function_calling: bool = True
    enable_search_suggestions: bool = True
    enable_batch_import: bool = True
    enable_variant_generation: bool = True

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False  # Structured JSON logging


# Global settings instance
settings = Settings()

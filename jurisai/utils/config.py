"""Configuration management using pydantic-settings"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key for Claude")

    log_level: str = Field(default="INFO", description="Logging level")

    # LLM settings
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="LLM model to use")
    llm_temperature: float = Field(default=0.3, description="LLM temperature")
    llm_max_tokens: int = Field(default=8000, description="Max tokens in response")
    web_search_max_uses: int = Field(default=5, description="Max web searches when internet context is allowed")

    # Database mode: 'supabase' or 'sqlite'
    db_mode: str = Field(default="sqlite", description="Entity store backend: 'supabase' or 'sqlite'")
    database_path: str = Field(default="./data/jurisai.db", description="Path to SQLite database")

    # Supabase settings
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase anon key")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key")
    storage_bucket: str = Field(default="matter-uploads", description="Supabase Storage bucket for uploads")

    # Files
    upload_dir: str = Field(default="./data/uploads", description="Local directory for uploaded files")
    export_dir: str = Field(default="./data/exports", description="Directory for exported PDFs")

    # Prompt limits
    document_char_limit: int = Field(default=3000, description="Max characters per uploaded document in a prompt")
    title_max_length: int = Field(default=100, description="Max length of a derived artifact title")

    # API sessions
    session_ttl_minutes: int = Field(default=60, description="Idle minutes before a workspace is evicted")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level to the root logger"""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

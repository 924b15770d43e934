"""
Configuration for the travel assistant service.

Centralizes upstream model, rate limit and HTTP settings with
environment variable overrides (prefix ``FLEXITRIP_``).
"""

import os
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Configuration settings for the assistant."""

    model_config = SettingsConfigDict(env_prefix="FLEXITRIP_", case_sensitive=False)

    # OpenRouter settings
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API key")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1", description="OpenRouter API base URL")
    app_url: str = Field(default="http://localhost:3000", description="Sent upstream as HTTP-Referer")
    app_title: str = Field(default="FlexiTrip - Multi-Generational Travel Planning", description="Sent upstream as X-Title")

    # Model chain, tried in order
    primary_model: str = Field(default="openrouter/horizon-beta", description="First model tried")
    secondary_model: str = Field(default="anthropic/claude-3.5-sonnet", description="Second model tried")
    fallback_model: str = Field(default="openai/gpt-4o-mini", description="Last model tried")
    enhancement_model: str = Field(default="openai/gpt-4o-mini", description="Model used for prompt enhancement")

    # Sampling
    max_tokens: int = Field(default=5000, description="Completion token cap")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float = Field(default=0.9, description="Nucleus sampling")
    frequency_penalty: float = Field(default=0.1)
    presence_penalty: float = Field(default=0.1)
    enhancement_max_tokens: int = Field(default=300, description="Completion token cap for prompt enhancement")

    # Transport
    llm_timeout: int = Field(default=60, description="Upstream request timeout in seconds")
    llm_max_retries: int = Field(default=1, description="Attempts per model before falling back")

    # Rate limiting
    chat_rate_limit: int = Field(default=5, description="Chat requests allowed per window")
    chat_rate_window: int = Field(default=60, description="Chat window in seconds")
    enhance_rate_limit: int = Field(default=3, description="Enhancement requests allowed per window")
    enhance_rate_window: int = Field(default=60, description="Enhancement window in seconds")
    rate_limit_idle_seconds: int = Field(default=300, description="Drop limiter entries idle this long")

    # HTTP
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed front-end origins",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    def get_api_key(self) -> Optional[str]:
        """API key from settings, falling back to the plain OPENROUTER_API_KEY variable."""
        return self.openrouter_api_key or os.getenv("OPENROUTER_API_KEY")

    def model_chain(self) -> List[str]:
        """Ordered, de-duplicated list of models to try."""
        chain = []
        for model in (self.primary_model, self.secondary_model, self.fallback_model):
            if model and model not in chain:
                chain.append(model)
        return chain

    def get_llm_config(self) -> dict:
        """Get upstream client configuration."""
        return {
            "api_key": self.get_api_key(),
            "base_url": self.openrouter_base_url.rstrip("/"),
            "timeout": self.llm_timeout,
            "max_retries": self.llm_max_retries,
            "headers": {
                "HTTP-Referer": self.app_url,
                "X-Title": self.app_title,
            },
            "sampling": {
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
                "top_p": self.top_p,
                "frequency_penalty": self.frequency_penalty,
                "presence_penalty": self.presence_penalty,
            },
        }

    def get_rate_limit_config(self) -> dict:
        """Get rate limit configuration per endpoint."""
        return {
            "chat": {"limit": self.chat_rate_limit, "window": self.chat_rate_window},
            "enhance": {"limit": self.enhance_rate_limit, "window": self.enhance_rate_window},
            "idle_seconds": self.rate_limit_idle_seconds,
        }


# Global configuration instance
config = AppConfig()

"""
OpenRouter chat-completion client with retries, timeouts, and a model fallback chain.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from common.config import config

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """A single upstream call failed."""


class LLMUnavailableError(LLMError):
    """Every model in the chain failed."""


class LLMClient:
    """Client for OpenRouter's OpenAI-compatible chat completion endpoint."""

    def __init__(self, api_key: str = None, base_url: str = None, timeout: int = None, max_retries: int = None):
        llm_config = config.get_llm_config()
        self.api_key = api_key or llm_config["api_key"]
        self.base_url = (base_url or llm_config["base_url"]).rstrip("/")
        self.timeout = timeout if timeout is not None else llm_config["timeout"]
        self.max_retries = max(1, max_retries if max_retries is not None else llm_config["max_retries"])
        self.extra_headers = llm_config["headers"]
        self.sampling = llm_config["sampling"]

    def call(self, messages: List[Dict[str, str]], model: str, max_tokens: int = None,
             temperature: float = None) -> Dict[str, Any]:
        """
        Call one model with retry logic.
        Returns: {"text": str, "model": str, "tokens": int}
        """
        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                return self._post_completion(messages, model, max_tokens, temperature)
            except LLMError as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)  # Exponential backoff

        raise LLMError(f"{model} failed after {self.max_retries} attempts: {last_error}")

    def call_with_fallback(self, messages: List[Dict[str, str]], models: List[str] = None,
                           **kwargs) -> Dict[str, Any]:
        """Try each model in order until one answers."""
        chain = models or config.model_chain()
        if not self.api_key:
            raise LLMUnavailableError("OPENROUTER_API_KEY is not set")

        for index, model in enumerate(chain):
            try:
                result = self.call(messages, model, **kwargs)
                if index > 0:
                    logger.info("Served by fallback model %s", model)
                result["models_tried"] = chain[:index + 1]
                return result
            except LLMError as e:
                next_model = chain[index + 1] if index + 1 < len(chain) else None
                if next_model:
                    logger.warning("%s failed, falling back to %s: %s", model, next_model, e)
                else:
                    logger.error("All AI models failed, last error: %s", e)

        raise LLMUnavailableError("AI service temporarily unavailable")

    def _post_completion(self, messages: List[Dict[str, str]], model: str, max_tokens: Optional[int],
                         temperature: Optional[float]) -> Dict[str, Any]:
        """POST a chat completion request and unwrap the first choice."""
        if not self.api_key:
            raise LLMError("OPENROUTER_API_KEY not set")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers)

        payload = dict(self.sampling)
        payload["model"] = model
        payload["messages"] = messages
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature

        try:
            resp = requests.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise LLMError(f"OpenRouter request failed: {e}") from e

        if resp.status_code != 200:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            error = body.get("error") if isinstance(body, dict) else None
            message = (error.get("message") if isinstance(error, dict) else error) or "Unknown error"
            raise LLMError(f"OpenRouter API error: {resp.status_code} - {message}")

        try:
            data = resp.json()
            text = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed OpenRouter response: {e}") from e

        if text is None:
            raise LLMError("OpenRouter returned an empty message")

        logger.debug("Raw AI response length: %d", len(text))
        logger.debug("Raw AI response preview: %s", text[:500])

        usage = data.get("usage") or {}
        return {
            "text": text,
            "model": data.get("model") or model,
            "tokens": usage.get("total_tokens") or 0,
        }

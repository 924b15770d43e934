"""
Chat service orchestrator: one assistant turn from history to recommendation cards.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from common.config import config
from common.llm_client import LLMClient, LLMUnavailableError
from common.metrics import TurnMetrics
from chat.prompt_pack import build_enhancement_messages, build_request_messages, build_system_prompt
from recommendations.extractor import extract_recommendations_dict
from recommendations.models import Traveler
from recommendations.normalizer import normalize_with_tier

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatService:
    """Coordinates prompt building, the upstream call and reply parsing."""

    def __init__(self, llm_client: LLMClient = None):
        self.llm_client = llm_client or LLMClient()

    def parse_reply(self, raw_text: Any, structured_hint: List[Any] = None,
                    metrics: TurnMetrics = None) -> Dict[str, Any]:
        """
        Normalize a raw reply and extract recommendation cards from it.

        No upstream call is made. Structured recommendations (passed in, or
        carried by the reply) are mapped as-is; otherwise the conversational
        text is mined for them.

        Returns:
            {conversational_response, hasRecommendations, recommendations, tier}
        """
        tier, normalized = normalize_with_tier(raw_text)
        if metrics:
            metrics.mark_stage("normalization_done")

        extracted = extract_recommendations_dict(
            normalized.conversational_response,
            structured_hint or normalized.structured_recommendations,
        )
        if metrics:
            metrics.mark_stage("extraction_done")
            metrics.set_normalization(tier.value, len(extracted["recommendations"]))

        return {
            "conversational_response": normalized.conversational_response,
            "hasRecommendations": extracted["hasRecommendations"],
            "recommendations": extracted["recommendations"],
            "tier": tier.value,
        }

    def _complete(self, messages: List[Dict], travelers: List[Traveler],
                  travel_context: Optional[str], metrics: TurnMetrics) -> Dict[str, Any]:
        system_prompt = build_system_prompt(travelers, travel_context)
        request_messages = build_request_messages(system_prompt, messages)
        metrics.mark_stage("prompt_built")

        response = self.llm_client.call_with_fallback(request_messages)
        metrics.add_llm_call(response["model"], response.get("tokens", 0), response.get("models_tried"))
        metrics.mark_stage("llm_done")
        return response

    def respond(self, messages: List[Dict], travelers: List[Traveler],
                travel_context: Optional[str] = None) -> Dict[str, Any]:
        """
        Produce the assistant's reply for a conversation.

        Args:
            messages: Chat history, each {role, content}
            travelers: Traveler profiles for the group
            travel_context: Optional trip summary added to the system prompt

        Returns:
            {message: {}, recommendations: [], hasRecommendations: bool, metrics: {}}

        Raises:
            LLMUnavailableError: every model failed (with and without the context)
        """
        metrics = TurnMetrics()

        try:
            response = self._complete(messages, travelers, travel_context, metrics)
        except LLMUnavailableError as e:
            if not (travel_context and travel_context.strip()):
                raise
            metrics.add_error(str(e))
            logger.warning("All models failed with travel context, retrying without it")
            response = self._complete(messages, travelers, None, metrics)

        parsed = self.parse_reply(response["text"], metrics=metrics)
        metrics.finish()

        return {
            "message": {
                "role": "assistant",
                "content": parsed["conversational_response"],
                "timestamp": _now_iso(),
                "metadata": {
                    "model_used": response["model"],
                    "tokens_used": response.get("tokens", 0),
                    "response_time": metrics.duration_ms(),
                },
            },
            "recommendations": parsed["recommendations"],
            "hasRecommendations": parsed["hasRecommendations"],
            "metrics": metrics.to_dict(),
        }

    def enhance_prompt(self, base_prompt: str, travel_context: Optional[str] = None) -> Dict[str, Any]:
        """Rewrite a user question with the trip context folded in."""
        if not self.llm_client.api_key:
            raise LLMUnavailableError("OPENROUTER_API_KEY is not set")

        model = config.enhancement_model
        response = self.llm_client.call(
            build_enhancement_messages(base_prompt, travel_context),
            model,
            max_tokens=config.enhancement_max_tokens,
            temperature=config.temperature,
        )

        enhanced = (response.get("text") or "").strip() or base_prompt
        return {
            "enhancedPrompt": enhanced,
            "originalPrompt": base_prompt,
            "metadata": {
                "model_used": model,
                "tokens_used": response.get("tokens", 0),
            },
        }

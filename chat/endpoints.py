"""
Flask endpoints for the travel assistant.
"""
import logging

from flask import jsonify, request
from marshmallow import ValidationError

from common.config import config
from common.llm_client import LLMUnavailableError
from common.rate_limit import rate_limiter
from chat.prompt_pack import generate_quick_prompts, has_valid_selections
from chat.service import ChatService
from recommendations.grouping import build_day_plan, group_by_category, group_by_time_slot
from recommendations.models import CulturalSettings, TravelPreferences, Traveler
from validators import ChatRequestSchema, ParseRequestSchema, PromptEnhancementSchema, QuickPromptsSchema

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable. Please try again in a moment."


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _error(message: str, status: int, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def _rate_limited(scope: str, limit: int, window: int, message: str):
    """Check the limiter; returns (result, error_response or None)."""
    result = rate_limiter.check(f"{scope}_{_client_ip()}", limit, window)
    if not result.success:
        logger.info("Rate limit exceeded for %s", scope)
        return result, _error(message, 429, resetTime=result.reset_time)
    return result, None


def _load(schema, message: str):
    """Validate the JSON body; returns (data, error_response or None)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None, _error(message, 400, details={"_schema": ["Request body must be a JSON object"]})
    try:
        return schema.load(payload), None
    except ValidationError as e:
        return None, _error(message, 400, details=e.messages)


def register_chat_endpoints(app, service: ChatService = None):
    """Register chat endpoints with Flask app."""
    chat_service = service or ChatService()
    app.extensions["chat_service"] = chat_service

    @app.post("/api/chat")
    def chat():
        """One assistant turn with recommendation cards."""
        limits = config.get_rate_limit_config()["chat"]
        rate, limited = _rate_limited(
            "chat", limits["limit"], limits["window"],
            "Rate limit exceeded. Please wait before sending another message.",
        )
        if limited:
            return limited

        data, invalid = _load(ChatRequestSchema(), "Invalid chat request data")
        if invalid:
            return invalid

        try:
            travelers = [Traveler(**t) for t in data["travelers"]]
            result = chat_service.respond(data["messages"], travelers, data.get("travelContext"))
        except LLMUnavailableError as e:
            logger.error("Chat failed, AI unavailable: %s", e)
            return _error(UNAVAILABLE_MESSAGE, 503)
        except Exception:
            logger.exception("Chat API error")
            return _error("Failed to generate response. Please try again.", 500)

        return jsonify({
            "success": True,
            "data": {
                "message": result["message"],
                "recommendations": result["recommendations"],
                "hasRecommendations": result["hasRecommendations"],
                "remaining_requests": rate.remaining,
            },
        })

    @app.post("/api/enhance-prompt")
    def enhance_prompt():
        """Rewrite a user question with the trip context folded in."""
        limits = config.get_rate_limit_config()["enhance"]
        _, limited = _rate_limited(
            "enhance", limits["limit"], limits["window"],
            "Rate limit exceeded. Please wait before enhancing another prompt.",
        )
        if limited:
            return limited

        data, invalid = _load(PromptEnhancementSchema(), "Invalid prompt enhancement request")
        if invalid:
            return invalid

        try:
            result = chat_service.enhance_prompt(data["basePrompt"], data.get("travelContext"))
        except LLMUnavailableError as e:
            logger.error("Prompt enhancement failed, AI unavailable: %s", e)
            return _error(UNAVAILABLE_MESSAGE, 503)
        except Exception:
            logger.exception("Prompt enhancement API error")
            return _error("Failed to enhance prompt. Please try again.", 500)

        return jsonify({"success": True, "data": result})

    @app.post("/api/quick-prompts")
    def quick_prompts():
        """Suggested questions for the current selections."""
        data, invalid = _load(QuickPromptsSchema(), "Invalid quick prompt request")
        if invalid:
            return invalid

        travelers = [Traveler(**t) for t in data["travelers"]]
        preferences = TravelPreferences(**data["travelPreferences"])
        cultural = CulturalSettings(**data["culturalSettings"])

        valid = has_valid_selections(travelers, preferences)
        prompts = generate_quick_prompts(travelers, preferences, cultural) if valid else []
        return jsonify({"success": True, "data": {"prompts": prompts, "valid": valid}})

    @app.post("/api/recommendations/parse")
    def parse_recommendations():
        """Normalize a raw reply and extract its recommendation cards; no upstream call."""
        data, invalid = _load(ParseRequestSchema(), "Invalid parse request")
        if invalid:
            return invalid

        parsed = chat_service.parse_reply(data["text"], data.get("structured_recommendations"))
        records = parsed["recommendations"]
        return jsonify({
            "success": True,
            "data": {
                "conversational_response": parsed["conversational_response"],
                "hasRecommendations": parsed["hasRecommendations"],
                "recommendations": records,
                "byCategory": group_by_category(records),
                "byTimeSlot": group_by_time_slot(records),
                "dayPlan": build_day_plan(records),
            },
        })

    return app

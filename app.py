"""
FlexiTrip – travel assistant API back-end

Endpoints
─────────
GET  /health                     → {"status": "ok"}
GET  /api/ai-config              → configured model chain
POST /api/chat                   → assistant turn + recommendation cards
POST /api/enhance-prompt         → enriched user question
POST /api/quick-prompts          → suggested questions
POST /api/recommendations/parse  → cards from a raw model reply
(no HTML rendered; UI lives in the front-end)
"""

# SPDX-License-Identifier: AGPL-3.0-only

# ── imports ──────────────────────────────────────────────────────
import logging

from flask import Flask, jsonify
from flask_cors import CORS                 # allow front-end origin
from dotenv import load_dotenv

# Load environment variables from .env file before reading settings
load_dotenv()

from common.config import config  # noqa: E402
from chat.endpoints import register_chat_endpoints  # noqa: E402

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 1 * 1024 * 1024    # 1 MB of JSON is plenty

CORS(
    app,
    resources={r"/api/*": {"origins": config.cors_origins}}
)

register_chat_endpoints(app)
logger.info("Chat endpoints registered")


# ── ROUTES ───────────────────────────────────────────────────────
@app.get("/")
def root():
    """Simple root for anyone hitting the API directly."""
    return {"service": "FlexiTrip API", "docs": "/health"}, 200


@app.get("/health")
def health():
    """Used by the front-end (and uptime checks) to verify API is alive."""
    return jsonify(status="ok"), 200


@app.get("/api/ai-config")
def ai_config():
    """Debug endpoint to check AI service configuration"""
    return jsonify({
        "ai_service": "openrouter",
        "openrouter_api_key_set": bool(config.get_api_key()),
        "base_url": config.openrouter_base_url,
        "model_chain": config.model_chain(),
        "enhancement_model": config.enhancement_model,
        "max_tokens": config.max_tokens,
    }), 200


@app.errorhandler(413)
def too_large(e):
    return jsonify(success=False, error="Request body too large"), 413


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)

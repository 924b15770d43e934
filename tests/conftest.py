# SPDX-License-Identifier: AGPL-3.0-only

"""
Pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import json
import uuid

import pytest
from flask import Flask
from unittest.mock import Mock

from chat.endpoints import register_chat_endpoints
from chat.service import ChatService
from common.rate_limit import rate_limiter
from recommendations.models import CulturalSettings, TravelPreferences, Traveler


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with an empty shared rate limiter."""
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def structured_reply():
    """A well-formed model reply with two structured recommendations."""
    return json.dumps({
        "conversational_response": "Here are some family-friendly ideas for Lisbon.",
        "structured_recommendations": [
            {
                "title": "Oceanário de Lisboa",
                "category": "attraction",
                "description": "Huge aquarium with step-free access",
                "rating": 4.7,
                "duration": "2 hours",
                "price": "$$",
                "ageGroup": ["All Ages", "Kids Love"],
                "accessibility": "Fully accessible",
                "location": "Parque das Nações",
                "timeSlot": "morning"
            },
            {
                "title": "Time Out Market",
                "category": "restaurant",
                "description": "Food hall with vegetarian and halal stalls",
                "price": "$$",
                "dietaryOptions": ["Vegetarian", "Halal"],
                "timeSlot": "evening"
            }
        ]
    })


@pytest.fixture
def prose_reply():
    """A plain-text reply with a numbered list of places."""
    return (
        "Here are my recommendations for your family:\n\n"
        "1. **Belém Tower**: A riverside fortress that kids love, rated 4.6 stars, about 1 hour.\n"
        "2. **Pastéis de Belém** - Historic bakery famous for custard tarts, affordable and family-friendly.\n"
        "3. **Lisbon Tram 28**: Classic tram ride through Alfama, budget friendly, takes 45 minutes.\n\n"
        "Enjoy your trip!"
    )


@pytest.fixture
def travelers():
    """A three-generation group."""
    return [
        Traveler(name="Maria", age=42, mobility="high", interests=["history"],
                 cultural_background="mexican", dietary_restrictions=["vegetarian"]),
        Traveler(name="Leo", age=8, mobility="high", interests=["animals"]),
        Traveler(name="Rosa", age=71, mobility="low", dietary_restrictions=["gluten-free"]),
    ]


@pytest.fixture
def traveler_payloads():
    """Traveler profiles as the front-end sends them."""
    return [
        {"name": "Maria", "age": 42, "mobility": "high", "interests": ["history"],
         "cultural_background": "mexican", "dietary_restrictions": ["vegetarian"]},
        {"name": "Leo", "age": 8},
    ]


@pytest.fixture
def travel_preferences():
    return TravelPreferences(destination="Lisbon", check_in="2025-06-01", check_out="2025-06-07",
                             budget="Moderate", trip_type=["family"])


@pytest.fixture
def cultural_settings():
    return CulturalSettings(cultural_background=["Mexican"], dietary_restrictions=["vegetarian"])


@pytest.fixture
def session_id():
    return str(uuid.uuid4())


@pytest.fixture
def mock_llm_client(structured_reply):
    """LLM client double that answers every call with the structured reply."""
    client = Mock()
    client.api_key = "test-key"
    client.call_with_fallback.return_value = {
        "text": structured_reply,
        "model": "openrouter/horizon-beta",
        "tokens": 321,
        "models_tried": ["openrouter/horizon-beta"],
    }
    client.call.return_value = {
        "text": "Enhanced question about Lisbon with kids and grandparents",
        "model": "openai/gpt-4o-mini",
        "tokens": 42,
    }
    return client


@pytest.fixture
def chat_service(mock_llm_client):
    return ChatService(llm_client=mock_llm_client)


@pytest.fixture
def flask_app(chat_service):
    """Bare Flask app with the chat endpoints wired to the mocked service."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    register_chat_endpoints(app, service=chat_service)
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    # Endpoint tests go through Flask, everything else is a unit test
    for item in items:
        if "integration" in item.name or "endpoints" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)

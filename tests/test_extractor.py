# SPDX-License-Identifier: AGPL-3.0-only

"""
Tests for heuristic recommendation extraction.
"""

import json

import pytest

from recommendations.extractor import (
    MAX_DESCRIPTION_LENGTH,
    clean_description,
    extract_recommendations,
    extract_recommendations_dict,
    extract_title,
    is_disqualified_title,
    split_segments,
)

CITY_MUSEUM = (
    "I recommend the City Museum: a fascinating collection of artifacts, "
    "wheelchair accessible, rated 4.5 stars, about 2 hours."
)


class TestGuardClause:
    """Replies without recommendation language produce nothing."""

    def test_conversational_reply_has_no_recommendations(self):
        result = extract_recommendations("Have a great trip!")
        assert result.has_recommendations is False
        assert result.recommendations == []

    def test_empty_text(self):
        result = extract_recommendations("")
        assert result.to_dict() == {"hasRecommendations": False, "recommendations": []}

    def test_indicator_without_usable_segment(self):
        text = "We suggest a few things.\nIn the evening, walk along the river and enjoy the views."
        result = extract_recommendations(text)
        assert result.has_recommendations is False
        assert result.recommendations == []


class TestProseExtraction:
    """Segments become classified records."""

    def test_single_sentence_recommendation(self):
        result = extract_recommendations(CITY_MUSEUM)
        assert result.has_recommendations is True
        assert len(result.recommendations) == 1

        record = result.recommendations[0]
        assert record.title == "City Museum"
        assert record.category == "attraction"
        assert record.rating == 4.5
        assert record.duration == "2 hours"
        assert record.accessibility == "Fully accessible"
        assert record.description.startswith("a fascinating collection")

    def test_numbered_list_keeps_source_order(self, prose_reply):
        result = extract_recommendations(prose_reply)
        titles = [r.title for r in result.recommendations]
        assert titles == ["Belém Tower", "Pastéis de Belém", "Lisbon Tram 28"]

    def test_numbered_list_classification(self, prose_reply):
        tower, bakery, tram = extract_recommendations(prose_reply).recommendations

        assert tower.category == "attraction"
        assert tower.rating == 4.6
        assert tower.duration == "1 hour"
        assert "Kids Love" in tower.age_group
        assert tower.dietary_options is None

        assert bakery.category == "restaurant"
        assert bakery.price == "$"
        assert bakery.dietary_options == []

        assert tram.category == "transport"
        assert tram.duration == "45 minutes"

    def test_ids_are_unique_within_a_turn(self, prose_reply):
        ids = [r.id for r in extract_recommendations(prose_reply).recommendations]
        assert len(ids) == len(set(ids))
        assert all(i.startswith("rec_") for i in ids)

    def test_bold_heading_line_joins_following_line(self):
        text = "I recommend these:\n**Jerónimos Monastery**\nStunning monastery with cloisters, allow 2 hours.\n"
        records = extract_recommendations(text).recommendations
        assert [r.title for r in records] == ["Jerónimos Monastery"]
        assert records[0].duration == "2 hours"

    def test_inline_bullets_are_split(self):
        text = ("Consider these spots • Castelo de São Jorge: hilltop castle with views • "
                "LX Factory: weekend market in an old mill")
        titles = [r.title for r in extract_recommendations(text).recommendations]
        assert titles == ["Castelo de São Jorge", "LX Factory"]

    def test_unknown_category_defaults_to_attraction(self):
        records = extract_recommendations("Visit Quinta da Regaleira: a mystical estate with wells and tunnels.").recommendations
        assert records[0].category == "attraction"

    def test_dietary_options_only_for_restaurants(self):
        text = "Try Ao 26 Vegan Food Project: a vegan restaurant with gluten-free desserts."
        record = extract_recommendations(text).recommendations[0]
        assert record.category == "restaurant"
        assert record.dietary_options == ["Vegan", "Gluten-Free"]


class TestDisqualifiers:
    """Sentence fragments are not mistaken for venue names."""

    @pytest.mark.parametrize("title", [
        "In the evening",
        "the old town",
        "Here are my picks",
        "Lisbon was once the capital",
        "Strip views",
        "Organized by type",
        "Enjoy the sunset",
    ])
    def test_rejected(self, title):
        assert is_disqualified_title(title)

    @pytest.mark.parametrize("title", ["The Louvre", "Belém Tower", "Time Out Market", "LX Factory"])
    def test_accepted(self, title):
        assert not is_disqualified_title(title)

    def test_fragment_segments_are_dropped(self):
        text = (
            "Here are my recommendations for you:\n"
            "Strip views: the best panoramas are from the top floor.\n"
            "Miradouro da Graça: a free viewpoint with a kiosk cafe."
        )
        titles = [r.title for r in extract_recommendations(text).recommendations]
        assert titles == ["Miradouro da Graça"]


class TestTitlesAndDescriptions:
    """Title patterns and description cleanup."""

    def test_colon_separator(self):
        assert extract_title("Belém Tower: riverside fortress") == ("Belém Tower", "riverside fortress")

    def test_spaced_dash_separator(self):
        title, rest = extract_title("Time Out Market - a lively food hall")
        assert title == "Time Out Market"
        assert rest == "a lively food hall"

    def test_copular_verb(self):
        title, rest = extract_title("The Oceanarium is one of the largest aquariums in Europe")
        assert title == "The Oceanarium"
        assert rest.startswith("one of the largest")

    def test_capitalized_clause_ending_in_period(self):
        title, rest = extract_title("Sintra Palace. Great day trip from the city")
        assert title == "Sintra Palace"
        assert rest == "Great day trip from the city"

    def test_capitalized_clause_followed_by_sentence(self):
        title, rest = extract_title("Feira da Ladra Perfect for a lazy morning of browsing")
        assert title == "Feira da Ladra"
        assert rest.startswith("Perfect for")

    def test_word_fallback(self):
        title, rest = extract_title("lots of small bakeries around every corner of town worth a stop today")
        assert title == "lots of small bakeries"
        assert rest.startswith("lots of small bakeries")

    def test_lead_in_is_stripped(self):
        assert extract_title("You should visit the LX Factory: old mill")[0] == "LX Factory"

    def test_long_description_is_truncated(self):
        description = clean_description("word " * 60, "Title")
        assert len(description) == MAX_DESCRIPTION_LENGTH
        assert description.endswith("...")

    def test_short_description_falls_back_to_title(self):
        record = extract_recommendations("Visit Sintra Palace: nice.").recommendations[0]
        assert record.description == "Sintra Palace"

    def test_leading_punctuation_is_stripped(self):
        assert clean_description(" - : a lovely garden walk", "X") == "a lovely garden walk"

    def test_short_segments_are_discarded(self):
        assert split_segments("Visit Lisbon\n\nSee the castle") == []


class TestStructuredHint:
    """A non-empty hint replaces the heuristics."""

    def test_hint_short_circuits_text(self):
        hint = [{"title": "A"}, "Belém Tower", 42]
        result = extract_recommendations("I recommend the City Museum: lovely.", hint)
        assert len(result.recommendations) == len(hint)
        assert [r.title for r in result.recommendations] == ["A", "Belém Tower", "Recommendation 3"]

    def test_hint_fields_are_mapped(self, structured_reply):
        hint = json.loads(structured_reply)["structured_recommendations"]
        aquarium, market = extract_recommendations("", hint).recommendations

        assert aquarium.to_dict()["ageGroup"] == ["All Ages", "Kids Love"]
        assert aquarium.rating == 4.7
        assert aquarium.time_slot == "morning"
        assert aquarium.location == "Parque das Nações"
        assert market.dietary_options == ["Vegetarian", "Halal"]

    def test_invalid_hint_values_fall_back(self):
        hint = [{
            "title": "Cafe Nicola",
            "category": "food",
            "rating": 9,
            "price": "cheap",
            "ageGroup": ["Toddlers"],
            "accessibility": "wheelchair accessible",
            "timeSlot": "Night",
            "dietaryOptions": ["Vegan", "Paleo"],
        }]
        record = extract_recommendations("", hint).recommendations[0]
        assert record.category == "restaurant"
        assert record.rating is None
        assert record.price == "$"
        assert record.age_group == ["All Ages"]
        assert record.accessibility == "Fully accessible"
        assert record.time_slot is None
        assert record.dietary_options == ["Vegan"]

    def test_dietary_options_dropped_outside_restaurants(self):
        hint = [{"title": "Belém Tower", "category": "attraction", "dietaryOptions": ["Vegan"]}]
        record = extract_recommendations("", hint).recommendations[0]
        assert record.dietary_options is None
        assert "dietaryOptions" not in record.to_dict()

    def test_dict_form_is_json_ready(self, structured_reply):
        hint = json.loads(structured_reply)["structured_recommendations"]
        data = extract_recommendations_dict("", hint)

        assert data["hasRecommendations"] is True
        assert data["recommendations"][0]["ageGroup"] == ["All Ages", "Kids Love"]
        assert data["recommendations"][1]["dietaryOptions"] == ["Vegetarian", "Halal"]
        assert "rating" not in data["recommendations"][1]

    def test_dict_form_without_recommendations(self):
        assert extract_recommendations_dict("Have a great trip!") == {
            "hasRecommendations": False,
            "recommendations": [],
        }

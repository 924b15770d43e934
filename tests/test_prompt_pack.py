# SPDX-License-Identifier: AGPL-3.0-only

"""
Tests for prompt construction.
"""

import pytest

from chat.prompt_pack import (
    ENHANCEMENT_INSTRUCTIONS,
    FOCUS_REQUESTS,
    MAX_QUICK_PROMPTS,
    age_guideline,
    build_base_prompt,
    build_enhancement_messages,
    build_request_messages,
    build_system_prompt,
    cultural_guidelines,
    cultural_population_preferences,
    family_considerations,
    family_description,
    generate_quick_prompts,
    has_valid_selections,
)
from recommendations.models import CulturalSettings, TravelPreferences, Traveler


class TestAgeGuidelines:
    """Age bands drive the per-traveler bullet."""

    @pytest.mark.parametrize("age,needle", [
        (3, "stroller-friendly"),
        (8, "interactive activities"),
        (15, "social opportunities"),
        (30, "Can handle most activities"),
        (70, "comfortable seating"),
    ])
    def test_bands(self, age, needle):
        line = age_guideline(Traveler(name="T", age=age))
        assert line.startswith(f"- T ({age}):")
        assert needle in line

    def test_senior_mentions_mobility(self):
        assert "Mobility level: low" in age_guideline(Traveler(name="Rosa", age=71, mobility="low"))

    def test_teen_interests(self):
        line = age_guideline(Traveler(name="Sam", age=14, interests=["skating", "music"]))
        assert "Interests: skating, music" in line


class TestCulturalGuidelines:

    def test_known_and_unknown_cultures(self):
        text = cultural_population_preferences(["Mexican", "Martian"])
        assert "CULTURAL POPULATION PREFERENCES:" in text
        assert "- Mexican: Cultural plazas" in text
        assert "- Martian: Community cultural centers" in text

    def test_no_cultures(self):
        assert cultural_population_preferences([]) == ""

    def test_group_guidelines(self, travelers):
        text = cultural_guidelines(travelers)
        assert "Cultural backgrounds: mexican" in text
        assert "Dietary restrictions: vegetarian, gluten-free" in text

    def test_nothing_noted(self):
        assert cultural_guidelines([Traveler(name="A", age=30)]) == \
            "No specific cultural or dietary restrictions noted."


class TestSystemPrompt:
    """System prompt content."""

    def test_contains_roster_and_contract(self, travelers):
        prompt = build_system_prompt(travelers)
        assert prompt.startswith("You are FlexiTrip")
        assert '"name": "Maria"' in prompt
        assert "- Leo (8):" in prompt
        assert '"structured_recommendations"' in prompt
        assert "MANDATORY RULES:" in prompt
        assert "CURRENT TRAVEL CONTEXT" not in prompt

    def test_travel_context_section(self, travelers):
        prompt = build_system_prompt(travelers, "  Lisbon, June, 3 travelers  ")
        assert "CURRENT TRAVEL CONTEXT:\nLisbon, June, 3 travelers\n" in prompt

    def test_blank_context_is_ignored(self, travelers):
        assert "CURRENT TRAVEL CONTEXT" not in build_system_prompt(travelers, "   ")

    def test_empty_roster(self):
        assert "- No traveler details provided" in build_system_prompt([])

    def test_request_messages_keep_only_role_and_content(self):
        history = [{"role": "user", "content": "Hi", "timestamp": "now", "id": "1"}]
        messages = build_request_messages("SYS", history)
        assert messages == [{"role": "system", "content": "SYS"}, {"role": "user", "content": "Hi"}]


class TestFamilyDescription:

    def test_counts(self, travelers):
        assert family_description([]) == "myself"
        assert family_description(travelers[:1]) == "1 person"
        assert family_description(travelers[:2]) == "1 adult and 1 child"
        assert family_description(travelers) == "1 adult, 1 child, and 1 senior"

    def test_plurals(self):
        group = [Traveler(name="A", age=30), Traveler(name="B", age=35),
                 Traveler(name="C", age=5), Traveler(name="D", age=9)]
        assert family_description(group) == "2 adults and 2 children"

    def test_considerations(self, travelers):
        text = family_considerations(travelers)
        assert text.startswith("We prefer venues that include family-friendly activities")
        assert "wheelchair accessibility" in text
        assert family_considerations([Traveler(name="A", age=30)]) == ""


class TestBasePrompt:
    """Quick-prompt sentences."""

    def test_full_selection(self, travelers, travel_preferences, cultural_settings):
        prompt = build_base_prompt(travelers, travel_preferences, cultural_settings)
        assert prompt.startswith(
            "I'm planning a trip to Lisbon for 1 adult, 1 child, and 1 senior "
            "from 06/01/2025 to 06/07/2025 with a moderate budget."
        )
        assert "authentic Mexican/Latino restaurants" in prompt
        assert "We come from Mexican backgrounds" in prompt
        assert "We have vegetarian dietary requirements." in prompt
        assert prompt.endswith("authentic cultural experiences.")

    def test_no_destination(self):
        prompt = build_base_prompt([], TravelPreferences(), CulturalSettings())
        assert prompt.startswith("I'm planning a family trip.")

    def test_unknown_focus_uses_general(self, travelers, travel_preferences):
        general = build_base_prompt(travelers, travel_preferences, CulturalSettings())
        assert build_base_prompt(travelers, travel_preferences, CulturalSettings(), "spa") == general

    def test_unparseable_dates_are_kept(self):
        prefs = TravelPreferences(destination="Porto", check_in="next week", check_out="later")
        assert "from next week to later" in build_base_prompt([], prefs, CulturalSettings())


class TestQuickPrompts:

    def test_general_first_and_capped(self, travelers, travel_preferences, cultural_settings):
        prompts = generate_quick_prompts(travelers, travel_preferences, cultural_settings)
        assert len(prompts) == MAX_QUICK_PROMPTS
        assert prompts[0].endswith(FOCUS_REQUESTS["general"].format(
            cultural=" We come from Mexican backgrounds and would appreciate culturally authentic experiences.",
            dietary=" We have vegetarian dietary requirements.",
        ))
        assert "What activities and attractions" in prompts[1]
        assert "best restaurants and dining experiences" in prompts[2]

    def test_adults_only_gets_one_prompt(self):
        prompts = generate_quick_prompts([Traveler(name="A", age=30)], TravelPreferences(destination="Rome"),
                                         CulturalSettings())
        assert len(prompts) == 1

    def test_valid_selections(self):
        assert has_valid_selections([], TravelPreferences(destination="Rome"))
        assert has_valid_selections([Traveler(name="A", age=30)], TravelPreferences())
        assert not has_valid_selections([], TravelPreferences(destination="  "))


class TestEnhancementMessages:

    def test_context_and_query(self):
        system, user = build_enhancement_messages("Where to eat?", "Lisbon in June")
        assert system["content"] == ENHANCEMENT_INSTRUCTIONS.format(context="Lisbon in June")
        assert user == {"role": "user", "content": 'Please enhance this travel query: "Where to eat?"'}

    def test_missing_context(self):
        system, _ = build_enhancement_messages("Where to eat?")
        assert "No specific travel context provided" in system["content"]

"""
Prompt construction for the travel assistant.

System prompts carry the traveler roster, age and cultural guidance and the
JSON reply contract. Quick prompts are ready-made user questions built from
the trip preferences.
"""
import json
from datetime import datetime
from typing import Dict, List, Optional

from recommendations.models import CulturalSettings, Mobility, TravelPreferences, Traveler


ASSISTANT_NAME = "FlexiTrip"

# (culture keywords, venue preferences); first matching group wins
CULTURAL_POPULATION_PREFERENCES = [
    (("chinese", "japanese", "korean", "vietnamese", "thai", "asian"),
     "Temples, gardens, cultural museums, authentic cuisine districts, traditional markets, tea houses"),
    (("hispanic", "latino", "mexican", "spanish", "colombian", "guatemalan", "salvadoran"),
     "Cultural plazas, art districts, vibrant neighborhoods, family venues, music/dance locations"),
    (("italian", "german", "irish", "french", "british", "european", "polish", "russian"),
     "Historical sites, museums, architectural landmarks, traditional pubs/cafes, heritage districts"),
    (("middle_eastern", "arabic", "persian", "turkish", "lebanese", "egyptian"),
     "Mosques, halal dining, cultural centers, traditional bazaars, Islamic architecture"),
    (("african", "ethiopian", "nigerian", "ghanaian", "kenyan", "black"),
     "Cultural centers, community venues, music/arts locations, African diaspora sites"),
    (("indian", "pakistani", "bangladeshi", "sri_lankan", "south_asian"),
     "Temples, spice markets, vegetarian restaurants, cultural festivals, traditional arts"),
    (("jewish", "hebrew", "israeli"),
     "Synagogues, kosher dining, Jewish cultural centers, Holocaust museums, heritage sites"),
    (("native_american", "indigenous", "tribal"),
     "Cultural centers, museums, traditional craft shops, sacred sites, powwow venues"),
]
DEFAULT_POPULATION_PREFERENCE = "Community cultural centers, authentic restaurants, traditional shops, heritage sites"

# Requests added to quick prompts when the group includes one of these cultures
CULTURAL_POPULATION_INSIGHTS = [
    (("indian", "pakistani", "bangladeshi", "sri_lankan", "south_asian"),
     "Please prioritize vegetarian-friendly dining with authentic Indian/South Asian restaurants, "
     "Hindu temples or cultural centers, traditional spice markets, and venues with comfortable seating for seniors"),
    (("chinese", "taiwanese", "hong_kong"),
     "Please include authentic Chinese restaurants in cultural districts, traditional tea houses, "
     "temples, and markets where the local Chinese community gathers"),
    (("mexican", "hispanic", "latino"),
     "Please include authentic Mexican/Latino restaurants, cultural plazas, art districts, "
     "traditional markets, and family-friendly venues with live music"),
    (("middle_eastern", "arabic", "persian", "turkish"),
     "Please include halal dining options, mosques or Islamic cultural centers, traditional bazaars, "
     "and Middle Eastern restaurants frequented by the local community"),
    (("african", "ethiopian", "nigerian"),
     "Please include authentic African restaurants, cultural centers, music venues that celebrate "
     "African heritage, and community gathering spaces"),
    (("jewish", "israeli"),
     "Please include kosher dining options, synagogues or Jewish cultural centers, heritage museums, "
     "and restaurants popular with the local Jewish community"),
]

FOCUS_REQUESTS = {
    "activities": (
        "What activities and attractions would you recommend for our group?{cultural} "
        "Please include both mainstream attractions and culturally significant places."
    ),
    "dining": (
        "What are the best restaurants and dining experiences for families?{cultural}{dietary} "
        "We'd love both authentic cultural restaurants and family-friendly options."
    ),
    "accommodation": (
        "What type of accommodation would work best for our group, and do you have specific "
        "recommendations?{cultural} Please consider cultural preferences and family needs."
    ),
    "transportation": (
        "What's the best way to get around and what transportation options would you recommend "
        "for our group?{cultural} Please consider accessibility and cultural considerations."
    ),
    "general": (
        "What would you recommend for activities, dining, and places to stay?{cultural}{dietary} "
        "Please include both popular attractions and authentic cultural experiences."
    ),
}

MAX_QUICK_PROMPTS = 3

KEY_PRINCIPLES = """- Always consider ALL travelers when making recommendations
- Explain WHY each suggestion works for the group's diverse needs
- Prioritize safety for children and accessibility for seniors
- Suggest alternatives for different energy levels and interests
- Include practical details like walking distances, seating availability, and timing
- Consider cultural preferences and dietary restrictions in restaurant recommendations
- Provide specific, actionable advice rather than generic suggestions"""

CULTURAL_STRATEGY = """When cultural backgrounds are specified, prioritize locations that align with documented travel patterns and preferences of these populations. Consider:

- HERITAGE & RELIGIOUS SITES: Temples, mosques, churches, cultural centers relevant to their background
- CULTURAL DISTRICTS: Neighborhoods with authentic restaurants, shops, and community centers
- TRADITIONAL MARKETS: Places to find familiar foods, spices, and cultural items
- COMMUNITY GATHERING SPACES: Parks, plazas, and venues popular with their cultural community
- AUTHENTIC DINING: Restaurants frequented by these populations (not just tourist versions)
- FAMILY-FRIENDLY VENUES: Locations accommodating multi-generational family structures"""

RESPONSE_EXAMPLE = {
    "conversational_response": "Your friendly travel advice explaining recommendations and reasoning...",
    "structured_recommendations": [
        {
            "title": "Specific Place Name",
            "category": "attraction",
            "description": "Why this place works for this group",
            "rating": 4.5,
            "duration": "2 hours",
            "price": "$$",
            "ageGroup": ["All Ages"],
            "accessibility": "Fully accessible",
            "location": "Specific address or area",
            "timeSlot": "evening",
        }
    ],
}

RESPONSE_RULES = """1. Response must be ONLY valid JSON - no extra text
2. Use only these categories: "attraction", "restaurant", "transport", "accommodation"
3. Include 6-10 specific, real places in structured_recommendations
4. Each title must be an actual place name (not description)
5. DO NOT use backslashes or escape characters in descriptions - use simple text only
6. Keep descriptions under 60 characters - be concise
7. Keep conversational_response under 300 characters - be brief
8. NEVER use line breaks or special characters in strings
9. End JSON with proper closing braces - ensure complete response"""

ENHANCEMENT_INSTRUCTIONS = """You are a travel planning assistant that helps enhance user queries to get better travel recommendations.

Your task is to take a basic travel query and enhance it with specific details that will lead to more personalized and useful recommendations.

Guidelines:
1. Keep the user's original intent and tone
2. Add specific context about the family group, preferences, and travel details
3. Make the query more actionable and specific
4. Ensure it flows naturally and doesn't feel robotic
5. Keep it concise but informative (under 200 words)
6. Don't change the fundamental question, just enhance it with context

Context Information:
{context}

Return only the enhanced query, no explanations or additional text."""


def age_guideline(traveler: Traveler) -> str:
    """One bullet of age-specific needs for a traveler."""
    who = f"- {traveler.name} ({traveler.age})"
    if traveler.age <= 5:
        return (f"{who}: Needs stroller-friendly paths, frequent breaks, nap times, simple activities, "
                "safety priority, child-proofed environments")
    if traveler.age <= 12:
        return (f"{who}: Enjoys interactive activities, hands-on experiences, shorter attention spans, "
                "playground access, kid-friendly food, educational fun")
    if traveler.age <= 17:
        interests = ", ".join(traveler.interests) or "varied activities"
        return (f"{who}: Interests: {interests}, social opportunities, photo spots, some independence, "
                "diverse food options")
    if traveler.age >= 65:
        return (f"{who}: Mobility level: {traveler.mobility}, needs accessible venues, comfortable seating, "
                "shorter walking distances, cultural interests, comfortable transport")
    return f"{who}: Can handle most activities, good for coordinating group needs, flexible with timing and activities"


def _match_culture(culture: str, table) -> Optional[str]:
    lower = culture.lower()
    for keywords, text in table:
        if any(k in lower for k in keywords):
            return text
    return None


def cultural_population_preferences(cultures: List[str]) -> str:
    if not cultures:
        return ""
    lines = [
        f"- {culture}: {_match_culture(culture, CULTURAL_POPULATION_PREFERENCES) or DEFAULT_POPULATION_PREFERENCE}"
        for culture in cultures
    ]
    return "\nCULTURAL POPULATION PREFERENCES:\n" + "\n".join(lines) + "\n"


def _unique(values) -> List[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def cultural_guidelines(travelers: List[Traveler]) -> str:
    cultures = _unique(t.cultural_background for t in travelers)
    dietary = _unique(d for t in travelers for d in t.dietary_restrictions)

    guidelines = ""
    if cultures:
        guidelines += f"Cultural backgrounds: {', '.join(cultures)}\n"
        guidelines += cultural_population_preferences(cultures)
        guidelines += "- Prioritize culturally significant and heritage sites\n"
        guidelines += "- Include authentic restaurants and cultural districts\n"
        guidelines += "- Consider religious/cultural calendar and customs\n"
    if dietary:
        guidelines += f"Dietary restrictions: {', '.join(dietary)}\n"
        guidelines += "- Ensure restaurant recommendations accommodate ALL dietary needs\n"
        guidelines += "- Mention specific dishes or menu items that work for everyone\n"

    return guidelines or "No specific cultural or dietary restrictions noted."


def _traveler_context(travelers: List[Traveler]) -> List[Dict]:
    return [
        {
            "name": t.name,
            "age": t.age,
            "mobility": t.mobility,
            "interests": t.interests,
            "cultural": t.cultural_background,
            "dietary": t.dietary_restrictions,
        }
        for t in travelers
    ]


def build_system_prompt(travelers: List[Traveler], travel_context: Optional[str] = None) -> str:
    """
    Build the age-aware system prompt.

    Args:
        travelers: Everyone on the trip
        travel_context: Optional free-text summary of the current trip,
            appended as its own section when non-blank

    Returns:
        System prompt ending with the strict JSON reply contract
    """
    age_lines = "\n".join(age_guideline(t) for t in travelers) or "- No traveler details provided"

    prompt = f"""You are {ASSISTANT_NAME}, an AI travel assistant specializing in multi-generational family travel planning.

CURRENT TRAVELERS:
{json.dumps(_traveler_context(travelers), indent=2)}

AGE-SPECIFIC CONSIDERATIONS:
{age_lines}

CULTURAL & DIETARY CONSIDERATIONS:
{cultural_guidelines(travelers)}

KEY PRINCIPLES:
{KEY_PRINCIPLES}

CULTURAL INTELLIGENCE & RECOMMENDATION STRATEGY:
{CULTURAL_STRATEGY}

CRITICAL: You MUST respond ONLY with valid JSON in this exact format. Do not include any text before or after the JSON:

{json.dumps(RESPONSE_EXAMPLE, indent=2)}

MANDATORY RULES:
{RESPONSE_RULES}

Provide thoughtful recommendations that ensure everyone in this multi-generational group can enjoy the travel experience together."""

    if travel_context and travel_context.strip():
        prompt += f"""

CURRENT TRAVEL CONTEXT:
{travel_context.strip()}

Based on this context, please provide personalized recommendations that consider all family members' needs, preferences, and constraints. Always include specific details about accessibility, age-appropriateness, and timing recommendations."""

    return prompt


def build_request_messages(system_prompt: str, messages: List[Dict]) -> List[Dict[str, str]]:
    """System message followed by the chat history (role and content only)."""
    return [{"role": "system", "content": system_prompt}] + [
        {"role": m["role"], "content": m["content"]} for m in messages
    ]


def family_description(travelers: List[Traveler]) -> str:
    """Short head count such as '2 adults and 1 child'."""
    if not travelers:
        return "myself"
    if len(travelers) == 1:
        return "1 person"

    adults = sum(1 for t in travelers if 18 <= t.age < 65)
    children = sum(1 for t in travelers if t.age < 18)
    seniors = sum(1 for t in travelers if t.age >= 65)

    parts = []
    if adults:
        parts.append(f"{adults} adult{'s' if adults > 1 else ''}")
    if children:
        parts.append(f"{children} {'children' if children > 1 else 'child'}")
    if seniors:
        parts.append(f"{seniors} senior{'s' if seniors > 1 else ''}")

    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return f"{', '.join(parts[:-1])}, and {parts[-1]}"


def family_considerations(travelers: List[Traveler]) -> str:
    if not travelers:
        return ""

    has_children = any(t.age < 18 for t in travelers)
    has_seniors = any(t.age >= 65 for t in travelers)
    low_mobility = any(t.mobility != Mobility.HIGH.value for t in travelers)

    considerations = []
    if has_children:
        considerations.append("include family-friendly activities with interactive experiences")
    if has_seniors:
        considerations.append("prioritize venues with comfortable seating, elevators or ramps, and shorter walking distances")
    if low_mobility:
        considerations.append("ensure wheelchair accessibility, avoid stairs-only access, and suggest reserve-ahead options")
    if has_seniors or low_mobility:
        considerations.append("recommend quieter time slots and mention any senior or accessibility discounts")

    return f"We prefer venues that {', '.join(considerations)}" if considerations else ""


def cultural_population_insights(cultural: CulturalSettings) -> str:
    insights = []
    for culture in cultural.cultural_background:
        lower = culture.lower()
        for keywords, text in CULTURAL_POPULATION_INSIGHTS:
            if any(k in lower for k in keywords):
                insights.append(text)
    return "; ".join(insights)


def focus_request(focus: str, cultural: CulturalSettings) -> str:
    cultural_note = ""
    if cultural.cultural_background:
        cultural_note = (f" We come from {' and '.join(cultural.cultural_background)} backgrounds "
                         "and would appreciate culturally authentic experiences.")
    dietary_note = ""
    if cultural.dietary_restrictions:
        dietary_note = f" We have {' and '.join(cultural.dietary_restrictions)} dietary requirements."

    template = FOCUS_REQUESTS.get(focus, FOCUS_REQUESTS["general"])
    return template.format(cultural=cultural_note, dietary=dietary_note)


def _display_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%m/%d/%Y")
    except ValueError:
        return value


def build_base_prompt(
    travelers: List[Traveler],
    preferences: TravelPreferences,
    cultural: CulturalSettings,
    focus: str = "general",
) -> str:
    """Compose a first-person trip question from the current selections."""
    if preferences.destination.strip():
        parts = [f"I'm planning a trip to {preferences.destination.strip()}"]
    else:
        parts = ["I'm planning a family trip"]

    if travelers:
        parts.append(f"for {family_description(travelers)}")

    if preferences.check_in and preferences.check_out:
        parts.append(f"from {_display_date(preferences.check_in)} to {_display_date(preferences.check_out)}")

    if preferences.budget:
        parts.append(f"with a {preferences.budget.lower()} budget")

    prompt = " ".join(parts) + "."
    for sentence in (cultural_population_insights(cultural), family_considerations(travelers)):
        if sentence:
            prompt += f" {sentence}."
    return f"{prompt} {focus_request(focus, cultural)}"


def generate_quick_prompts(
    travelers: List[Traveler],
    preferences: TravelPreferences,
    cultural: CulturalSettings,
) -> List[str]:
    """Up to three suggested questions, general first."""
    focuses = ["general"]
    if any(t.age < 18 for t in travelers):
        focuses.append("activities")
    if cultural.dietary_restrictions or cultural.cultural_background:
        focuses.append("dining")
    if any(t.mobility != Mobility.HIGH.value for t in travelers):
        focuses.append("transportation")

    return [build_base_prompt(travelers, preferences, cultural, focus) for focus in focuses[:MAX_QUICK_PROMPTS]]


def has_valid_selections(travelers: List[Traveler], preferences: TravelPreferences) -> bool:
    return bool(travelers) or bool(preferences.destination.strip())


def build_enhancement_messages(base_prompt: str, travel_context: Optional[str] = None) -> List[Dict[str, str]]:
    context = travel_context.strip() if travel_context and travel_context.strip() else "No specific travel context provided"
    return [
        {"role": "system", "content": ENHANCEMENT_INSTRUCTIONS.format(context=context)},
        {"role": "user", "content": f'Please enhance this travel query: "{base_prompt}"'},
    ]

# SPDX-License-Identifier: AGPL-3.0-only

"""
Keyword tables used to classify recommendation text.

Tables map a label to an ordered tuple of lowercase substrings. They are
kept apart from the scoring code in ``classifiers`` so labels and keywords
can be extended without touching control flow. Insertion order matters:
it is the tie-break order for category scoring and the output order for
multi-label tables.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from .models import Accessibility, AgeGroup, Category, DietaryOption

KeywordTable = Mapping[str, Tuple[str, ...]]


CATEGORY_KEYWORDS: KeywordTable = MappingProxyType({
    Category.ATTRACTION.value: (
        "museum", "park", "monument", "landmark", "attraction", "site", "tower", "bridge",
        "temple", "church", "cathedral", "palace", "castle", "fort", "zoo", "aquarium",
        "garden", "beach", "mountain", "lake", "river", "viewpoint", "observatory",
        "gallery", "exhibition", "memorial", "statue", "plaza", "square",
    ),
    Category.RESTAURANT.value: (
        "restaurant", "cafe", "bistro", "diner", "eatery", "food", "cuisine", "meal",
        "dining", "bar", "pub", "tavern", "grill", "bakery", "market", "street food",
        "lunch", "dinner", "breakfast", "brunch", "snack", "dessert", "coffee",
    ),
    Category.TRANSPORT.value: (
        "transport", "taxi", "uber", "bus", "train", "metro", "subway", "tram",
        "ferry", "boat", "car", "rental", "walk", "bike", "scooter", "ride",
        "shuttle", "airport", "station", "getting around", "travel",
    ),
    Category.ACCOMMODATION.value: (
        "hotel", "hostel", "resort", "inn", "lodge", "motel", "bnb", "airbnb",
        "accommodation", "stay", "room", "suite", "apartment", "villa",
    ),
})

AGE_GROUP_KEYWORDS: KeywordTable = MappingProxyType({
    AgeGroup.ALL_AGES.value: ("all ages", "family-friendly", "everyone", "suitable for all"),
    AgeGroup.KIDS_LOVE.value: ("kids", "children", "toddler", "interactive", "playground", "fun for kids"),
    AgeGroup.ADULTS.value: ("adults", "mature", "sophisticated", "adult-oriented"),
    AgeGroup.SENIORS.value: ("seniors", "elderly", "accessible", "easy walk", "wheelchair"),
    AgeGroup.TEENS.value: ("teens", "teenagers", "youth", "adventure", "exciting"),
})

DIETARY_KEYWORDS: KeywordTable = MappingProxyType({
    DietaryOption.VEGETARIAN.value: ("vegetarian", "veggie", "plant-based"),
    DietaryOption.VEGAN.value: ("vegan", "plant-only"),
    DietaryOption.GLUTEN_FREE.value: ("gluten-free", "celiac", "gluten free"),
    DietaryOption.HALAL.value: ("halal", "muslim-friendly"),
    DietaryOption.KOSHER.value: ("kosher", "jewish"),
    DietaryOption.DAIRY_FREE.value: ("dairy-free", "lactose-free", "no dairy"),
})

# Checked in this order; negative cues first so "not wheelchair accessible"
# never reads as fully accessible.
ACCESSIBILITY_CUES: KeywordTable = MappingProxyType({
    Accessibility.NONE.value: (
        "not accessible", "not wheelchair", "inaccessible", "stairs only", "no wheelchair",
    ),
    Accessibility.LIMITED.value: (
        "limited access", "partially accessible", "partly accessible", "limited accessibility",
    ),
    Accessibility.FULL.value: (
        "wheelchair accessible", "wheelchair-accessible", "fully accessible", "step-free",
        "wheelchair friendly", "wheelchair-friendly",
    ),
})

# Verbal price cues, checked in this order before counting "$" signs.
PRICE_CUES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Free", (r"(?<![\w-])free\b", r"\bno cost\b", r"\bcomplimentary\b")),
    ("$$$", (r"\bexpensive\b", r"\bpricey\b", r"\bcostly\b")),
    ("$", (r"\bcheap\b", r"\baffordable\b", r"\bbudget\b")),
    ("$$", (r"\bmoderate(?:ly)?\b", r"\breasonabl[ey]\b")),
)

# A reply that mentions none of these is treated as purely conversational.
RECOMMENDATION_INDICATORS: Tuple[str, ...] = (
    "recommend", "suggest", "try", "visit", "check out", "consider",
    "great place", "perfect for", "ideal for", "must-see", "don't miss",
    "restaurant", "hotel", "attraction", "activity", "activities",
)

# Leading words that mark a sentence fragment rather than a venue name.
# "the" is only rejected in lowercase: "The Louvre" is a name.
TITLE_STOPWORDS = frozenset({
    "a", "an", "and", "or", "but", "so", "if", "then", "also", "just",
    "in", "on", "at", "to", "for", "from", "with", "by", "of", "about", "into",
    "near", "after", "before", "during", "while", "around", "over", "through",
    "it", "its", "this", "that", "these", "those", "there", "here",
    "they", "we", "you", "your", "our", "my", "i", "he", "she", "his", "her",
    "is", "are", "was", "were", "be", "will", "can", "should", "would", "could",
    "what", "when", "where", "which", "who", "why", "how",
    "some", "many", "most", "all", "each", "every", "other", "another",
    "enjoy", "spend", "take", "make", "don't", "be",
})

LINKING_VERBS = frozenset({
    "is", "are", "was", "were", "be", "been", "being", "will", "would",
    "can", "could", "should", "has", "have", "had", "seems", "becomes",
})

# Phrases a splitting heuristic tends to grab that are never places.
GENERIC_TITLE_PHRASES: Tuple[str, ...] = (
    "strip views", "organized by type", "here are", "here is", "my recommendations",
    "some options", "things to do", "top picks", "getting started", "key tips",
    "pro tip", "please note", "in summary", "overall", "enjoy your trip",
)

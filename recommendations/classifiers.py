# SPDX-License-Identifier: AGPL-3.0-only

"""
Per-signal classifiers for recommendation text.

Every function here is a small, total ``text -> value`` mapping so each
signal can be tested and tightened on its own. None of them raise; an
unresolved signal is ``None`` (or the documented default).
"""

import re
from typing import List, Optional

from .models import AgeGroup, Category
from .vocabulary import (
    ACCESSIBILITY_CUES,
    AGE_GROUP_KEYWORDS,
    CATEGORY_KEYWORDS,
    DIETARY_KEYWORDS,
    KeywordTable,
    PRICE_CUES,
)

MAX_RATING = 5.0

RATING_PATTERNS = [
    re.compile(r"(\d+(?:\.\d+)?)\s*(?:stars?|/\s*5\b|rating)", re.IGNORECASE),
    re.compile(r"\brated?\s*(?:at\s+)?(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*out\s+of\s+5\b", re.IGNORECASE),
]

_NUMBER = r"(\d+(?:\.\d+)?)"
_RANGE_SEP = r"\s*(?:-|–|to)\s*"

# (pattern, singular unit, plural unit), tried in order
DURATION_PATTERNS = [
    (re.compile(_NUMBER + _RANGE_SEP + _NUMBER + r"\s*-?\s*(?:hours?|hrs?|h)\b", re.IGNORECASE), "hour", "hours"),
    (re.compile(_NUMBER + r"\s*-?\s*(?:hours?|hrs?|h)\b", re.IGNORECASE), "hour", "hours"),
    (re.compile(_NUMBER + _RANGE_SEP + _NUMBER + r"\s*-?\s*(?:minutes?|mins?|m)\b", re.IGNORECASE), "minute", "minutes"),
    (re.compile(_NUMBER + r"\s*-?\s*(?:minutes?|mins?|m)\b", re.IGNORECASE), "minute", "minutes"),
    (re.compile(_NUMBER + _RANGE_SEP + _NUMBER + r"\s*-?\s*(?:days?|d)\b", re.IGNORECASE), "day", "days"),
    (re.compile(_NUMBER + r"\s*-?\s*(?:days?|d)\b", re.IGNORECASE), "day", "days"),
]

_COMPILED_PRICE_CUES = [
    (tier, [re.compile(p, re.IGNORECASE) for p in patterns]) for tier, patterns in PRICE_CUES
]


def _matching_labels(text: str, table: KeywordTable) -> List[str]:
    lower = text.lower()
    return [label for label, keywords in table.items() if any(k in lower for k in keywords)]


def detect_category(text: str, table: KeywordTable = CATEGORY_KEYWORDS) -> str:
    """
    Score each category by how many of its keywords occur in text.

    Ties go to the category declared first; no hits at all means attraction.
    """
    lower = (text or "").lower()
    best_label, best_score = Category.ATTRACTION.value, 0
    for label, keywords in table.items():
        score = sum(1 for keyword in keywords if keyword in lower)
        if score > best_score:
            best_label, best_score = label, score
    return best_label


def extract_age_groups(text: str) -> List[str]:
    """Every age group with a keyword hit, defaulting to All Ages."""
    detected = _matching_labels(text or "", AGE_GROUP_KEYWORDS)
    return detected or [AgeGroup.ALL_AGES.value]


def extract_dietary_options(text: str) -> List[str]:
    return _matching_labels(text or "", DIETARY_KEYWORDS)


def extract_rating(text: str) -> Optional[float]:
    """First rating-like number within [0, 5]; out-of-range claims are skipped."""
    for pattern in RATING_PATTERNS:
        for match in pattern.finditer(text or ""):
            try:
                rating = float(match.group(1))
            except ValueError:
                continue
            if 0 <= rating <= MAX_RATING:
                return rating
    return None


def _format_quantity(value: str) -> str:
    return f"{float(value):g}"


def extract_duration(text: str) -> Optional[str]:
    """Hour, minute or day span normalized to '1 hour' / '2 hours' style."""
    for pattern, singular, plural in DURATION_PATTERNS:
        match = pattern.search(text or "")
        if not match:
            continue
        groups = match.groups()
        if len(groups) == 2:
            return f"{_format_quantity(groups[0])}-{_format_quantity(groups[1])} {plural}"
        quantity = _format_quantity(groups[0])
        return f"1 {singular}" if float(quantity) == 1 else f"{quantity} {plural}"
    return None


def extract_price(text: str) -> Optional[str]:
    """Verbal price cues first, then the number of '$' signs (capped at four)."""
    text = text or ""
    for tier, patterns in _COMPILED_PRICE_CUES:
        if any(p.search(text) for p in patterns):
            return tier

    dollars = text.count("$")
    if dollars:
        return "$" * min(dollars, 4)
    return None


def extract_accessibility(text: str) -> Optional[str]:
    lower = (text or "").lower()
    for label, cues in ACCESSIBILITY_CUES.items():
        if any(cue in lower for cue in cues):
            return label
    return None

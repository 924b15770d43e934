# SPDX-License-Identifier: AGPL-3.0-only

"""
Heuristic recommendation extraction from assistant prose.

Used when the upstream reply carried no usable structured recommendations.
The text is split into segments on list markers and line breaks, a title is
pulled from each segment with a small set of ordered patterns, fragments
that are clearly not place names are dropped, and the rest are classified
with the per-signal functions in ``classifiers``.

When the caller passes a non-empty structured hint the heuristics are
skipped and the hint is mapped 1:1 onto records instead.
"""

import logging
import re
import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .classifiers import (
    detect_category,
    extract_accessibility,
    extract_age_groups,
    extract_dietary_options,
    extract_duration,
    extract_price,
    extract_rating,
)
from .models import (
    Accessibility,
    AgeGroup,
    Category,
    DietaryOption,
    PriceTier,
    RecommendationRecord,
    RecommendationSet,
    TimeSlot,
)
from .vocabulary import (
    GENERIC_TITLE_PHRASES,
    LINKING_VERBS,
    RECOMMENDATION_INDICATORS,
    TITLE_STOPWORDS,
)

logger = logging.getLogger(__name__)

MIN_SEGMENT_LENGTH = 20
MIN_TITLE_LENGTH = 5
MAX_TITLE_LENGTH = 80
MAX_FALLBACK_TITLE_WORDS = 8
MAX_DESCRIPTION_LENGTH = 150
MIN_DESCRIPTION_LENGTH = 10

# Inline markers only; markers at the start of a line are handled by splitting on newlines
_INLINE_SPLIT = re.compile(r"\s*•\s*|(?<=[\s:])\d+[.)]\s+(?=[A-Z*_])|\s+\*\s+(?=[A-Z])")
_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[•*\-–])\s+")
_HEADING = re.compile(r"^\s*#+\s*")
_EMPHASIS = re.compile(r"\*\*|__")
_WHOLE_BOLD = re.compile(r"^\s*(?:\d+[.)]\s+|[•*\-–]\s+)?(?:\*\*|__)([^*_]+)(?:\*\*|__)\s*:?\s*$")

_LEAD_IN = re.compile(
    r"^(?:"
    r"(?:i|we)\s+(?:would\s+|'d\s+|also\s+|highly\s+|strongly\s+|definitely\s+)*"
    r"(?:recommend|suggest)(?:ing)?"
    r"|(?:you\s+(?:should|could|might|must|can)\s+)?(?:also\s+|definitely\s+)?"
    r"(?:visit|try|check\s+out|consider|explore|head\s+to|stop\s+by|don't\s+miss)"
    r")\s+(?:visiting\s+|trying\s+|going\s+to\s+)?(?:the\s+)?",
    re.IGNORECASE,
)

# Ordered title patterns; group 1 is the title, group 2 the remainder
TITLE_PATTERNS = [
    # text before a colon or a spaced dash
    re.compile(r"^(.+?)\s*(?::|\s[-–—]\s)\s*(.*)$", re.DOTALL),
    # text before a copular verb
    re.compile(r"^(.+?)\s+(?:is|are|offers|provides|features)\s+(.*)$", re.DOTALL),
    # capitalized clause ending in a period
    re.compile(r"^([A-Z][^.!?]+?)\.\s*(.*)$", re.DOTALL),
    # run of capitalized words followed by a new capitalized sentence
    re.compile(r"^([A-Z0-9][\w'&.-]*\s+(?:(?:[A-Z0-9][\w'&.-]*|[a-z]{1,3})\s+)*?)([A-Z][a-z]+\s+[a-z].*)$", re.DOTALL),
]

_LEADING_PUNCTUATION = re.compile(r"^[\s:.,;\-–—]+")

_CATEGORIES = {c.value for c in Category}
_AGE_GROUPS = {a.value for a in AgeGroup}
_PRICES = {p.value for p in PriceTier}
_ACCESSIBILITY = {a.value for a in Accessibility}
_DIETARY = {d.value for d in DietaryOption}
_TIME_SLOTS = {t.value for t in TimeSlot}


def has_recommendation_indicators(text: str) -> bool:
    lower = (text or "").lower()
    return any(indicator in lower for indicator in RECOMMENDATION_INDICATORS)


def _clean_segment(segment: str) -> str:
    segment = _LIST_MARKER.sub("", segment)
    segment = _HEADING.sub("", segment)
    segment = _EMPHASIS.sub("", segment)
    return " ".join(segment.split())


def split_segments(text: str) -> List[str]:
    """
    Split prose into candidate segments, in source order.

    Lines are split on newlines, then on inline bullets and inline numbered
    markers. A line holding only a bold heading ("**Louvre Museum**") is
    joined onto the line that follows it as "heading: line".
    """
    segments: List[str] = []
    pending_heading: Optional[str] = None

    for line in (text or "").splitlines():
        if not line.strip():
            continue

        heading = _WHOLE_BOLD.match(line)
        if heading:
            if pending_heading:
                segments.append(pending_heading)
            pending_heading = heading.group(1).strip().rstrip(":")
            continue

        for part in _INLINE_SPLIT.split(line):
            cleaned = _clean_segment(part)
            if not cleaned:
                continue
            if pending_heading:
                cleaned = f"{pending_heading}: {cleaned}"
                pending_heading = None
            segments.append(cleaned)

    if pending_heading:
        segments.append(pending_heading)

    return [s for s in segments if len(s) >= MIN_SEGMENT_LENGTH]


def _clean_title(title: str) -> str:
    return title.strip().strip("\"'").rstrip(",;").strip()


def extract_title(segment: str) -> Tuple[str, str]:
    """
    Pick a title and the description that goes with it.

    The first pattern whose candidate falls within the title length band
    wins and the remainder becomes the description. Otherwise the leading
    words of the segment become the title and the whole segment is the
    description.
    """
    body = _LEAD_IN.sub("", segment, count=1).strip() or segment

    for pattern in TITLE_PATTERNS:
        match = pattern.match(body)
        if not match:
            continue
        title = _clean_title(match.group(1))
        if MIN_TITLE_LENGTH <= len(title) <= MAX_TITLE_LENGTH:
            return title, match.group(2)

    words = body.split()
    count = max(1, min(MAX_FALLBACK_TITLE_WORDS, len(words) // 3))
    return _clean_title(" ".join(words[:count])), body


def is_disqualified_title(title: str) -> bool:
    """True for titles that read as sentence fragments rather than place names."""
    words = title.split()
    if not words:
        return True

    first = words[0].strip("\"'(").lower()
    if words[0] == "the" or first in TITLE_STOPWORDS:
        return True

    if any(word.lower().strip(",.") in LINKING_VERBS for word in words[1:]):
        return True

    lower = title.lower()
    return any(phrase in lower for phrase in GENERIC_TITLE_PHRASES)


def clean_description(description: str, title: str) -> str:
    description = _LEADING_PUNCTUATION.sub("", description or "").strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH - 3] + "..."
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return title
    return description


def _new_turn_id() -> str:
    return uuid.uuid4().hex[:8]


def _record_from_segment(segment: str, record_id: str) -> Optional[RecommendationRecord]:
    title, remainder = extract_title(segment)
    if not title or is_disqualified_title(title):
        logger.debug("Dropped segment with title %r", title)
        return None

    category = detect_category(segment)
    return RecommendationRecord(
        id=record_id,
        title=title,
        category=category,
        description=clean_description(remainder, title),
        rating=extract_rating(segment),
        duration=extract_duration(segment),
        price=extract_price(segment),
        age_group=extract_age_groups(segment),
        accessibility=extract_accessibility(segment),
        dietary_options=(
            extract_dietary_options(segment) if category == Category.RESTAURANT.value else None
        ),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _hint_rating(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return extract_rating(_text(value)) if isinstance(value, str) else None
    return rating if 0 <= rating <= 5 else None


def _hint_labels(value: Any, allowed: set) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    labels = []
    for item in value:
        label = _text(item)
        if label in allowed and label not in labels:
            labels.append(label)
    return labels


def _record_from_hint(hint: Any, position: int, record_id: str) -> RecommendationRecord:
    """Map one structured entry onto a record; unusable fields fall back to defaults."""
    if not isinstance(hint, dict):
        hint = {"title": hint} if isinstance(hint, str) else {}

    title = _text(hint.get("title") or hint.get("name")) or f"Recommendation {position}"
    raw_description = _text(hint.get("description"))
    signal_text = f"{title} {raw_description}"

    category = _text(hint.get("category")).lower()
    if category not in _CATEGORIES:
        category = detect_category(signal_text)

    price = _text(hint.get("price"))
    if price not in _PRICES:
        price = extract_price(price) if price else None

    accessibility = _text(hint.get("accessibility"))
    if accessibility not in _ACCESSIBILITY:
        accessibility = extract_accessibility(accessibility) if accessibility else None

    time_slot = _text(hint.get("timeSlot") or hint.get("time_slot")).lower()

    dietary = None
    if category == Category.RESTAURANT.value:
        dietary = _hint_labels(hint.get("dietaryOptions") or hint.get("dietary_options"), _DIETARY)
        dietary = dietary or extract_dietary_options(signal_text)

    return RecommendationRecord(
        id=record_id,
        title=title,
        category=category,
        description=clean_description(raw_description, title),
        rating=_hint_rating(hint.get("rating")),
        duration=_text(hint.get("duration")) or None,
        price=price,
        age_group=(
            _hint_labels(hint.get("ageGroup") or hint.get("age_group"), _AGE_GROUPS)
            or [AgeGroup.ALL_AGES.value]
        ),
        accessibility=accessibility,
        location=_text(hint.get("location")) or None,
        dietary_options=dietary,
        time_slot=time_slot if time_slot in _TIME_SLOTS else None,
    )


def records_from_hint(structured_hint: List[Any]) -> List[RecommendationRecord]:
    turn = _new_turn_id()
    records = []
    for index, hint in enumerate(structured_hint):
        record_id = f"rec_{turn}_{index}"
        try:
            records.append(_record_from_hint(hint, index + 1, record_id))
        except ValidationError as e:
            logger.warning("Structured recommendation %d unusable: %s", index, e)
            title = f"Recommendation {index + 1}"
            records.append(RecommendationRecord(id=record_id, title=title, description=title))
    return records


def extract_recommendations(
    text: str, structured_hint: Optional[List[Any]] = None
) -> RecommendationSet:
    """
    Extract recommendation records from an assistant reply.

    Args:
        text: Prose reply, possibly with numbered lists or bullets
        structured_hint: Recommendations the model already emitted in typed
            form; when non-empty it replaces the text heuristics entirely

    Returns:
        RecommendationSet, records in source order. Never raises.
    """
    if structured_hint:
        records = records_from_hint(list(structured_hint))
        logger.debug("Mapped %d structured recommendations", len(records))
        return RecommendationSet(has_recommendations=bool(records), recommendations=records)

    text = text if isinstance(text, str) else _text(text)
    if not has_recommendation_indicators(text):
        return RecommendationSet(has_recommendations=False, recommendations=[])

    turn = _new_turn_id()
    records: List[RecommendationRecord] = []
    for index, segment in enumerate(split_segments(text)):
        try:
            record = _record_from_segment(segment, f"rec_{turn}_{index}")
        except Exception:  # one bad segment must not sink the rest
            logger.exception("Failed to classify segment %r", segment[:80])
            continue
        if record is not None:
            records.append(record)

    logger.debug("Extracted %d recommendations from prose", len(records))
    return RecommendationSet(has_recommendations=bool(records), recommendations=records)


def extract_recommendations_dict(
    text: str, structured_hint: Optional[List[Any]] = None
) -> Dict[str, Any]:
    """JSON-ready form of extract_recommendations: camelCase keys, unset fields omitted."""
    return extract_recommendations(text, structured_hint).to_dict()

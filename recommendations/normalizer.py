# SPDX-License-Identifier: AGPL-3.0-only

"""
Response normalization for upstream chat replies.

The upstream model is told to answer with a single JSON object of the form
``{"conversational_response": str, "structured_recommendations": [...]}``
but replies are often truncated by the token limit, wrapped in prose or code
fences, or otherwise malformed. ``normalize_response`` always returns a
usable ``NormalizedResponse`` by trying four decoders in order:

1. direct parse of the whole text,
2. truncation recovery (cut at the last complete value found in one
   forward scan, strip trailing commas, close what is still open),
3. regex extraction of just the ``conversational_response`` value,
4. the raw text itself.

Each decoder returns a ``NormalizedResponse`` or ``None`` for "try the next
one"; nothing here raises.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Callable, Iterator, List, NamedTuple, Optional, Tuple

from .models import NormalizedResponse

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATIONAL_RESPONSE = (
    "I can help you plan your trip! Could you tell me more about what you're looking for?"
)

RESPONSE_KEY = "conversational_response"
RECOMMENDATIONS_KEY = "structured_recommendations"

# Candidate repairs tried per reply; each costs one pass over the reply
MAX_REPAIR_ATTEMPTS = 64

_CODE_FENCE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CONVERSATIONAL_FIELD = re.compile(r'"conversational_response"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)

_CLOSERS = {"{": "}", "[": "]"}


class NormalizationTier(str, Enum):
    DIRECT = "direct"
    TRUNCATION_RECOVERY = "truncation_recovery"
    FIELD_EXTRACTION = "field_extraction"
    VERBATIM = "verbatim"


def _coerce_text(value: Any) -> str:
    """Safe string coercion for a parsed conversational_response."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def _from_parsed(parsed: Any) -> Optional[NormalizedResponse]:
    """
    Map a parsed JSON value onto the two-part shape.

    An object must carry ``conversational_response``; a missing or
    non-array ``structured_recommendations`` becomes ``[]``.
    """
    if isinstance(parsed, str):
        return NormalizedResponse(conversational_response=parsed) if parsed.strip() else None

    if not isinstance(parsed, dict) or RESPONSE_KEY not in parsed:
        return None

    text = _coerce_text(parsed.get(RESPONSE_KEY))
    if not text.strip():
        text = DEFAULT_CONVERSATIONAL_RESPONSE

    recommendations = parsed.get(RECOMMENDATIONS_KEY)
    if not isinstance(recommendations, list):
        recommendations = []

    return NormalizedResponse(conversational_response=text, structured_recommendations=recommendations)


def _loads(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def decode_direct(raw_text: str) -> Optional[NormalizedResponse]:
    """Tier 1: the whole reply (minus a surrounding code fence) is the JSON value."""
    for candidate in (raw_text, _strip_code_fence(raw_text)):
        ok, parsed = _loads(candidate)
        if ok:
            return _from_parsed(parsed)
    return None


class _ScanState(NamedTuple):
    end: Optional[int]                    # index just past the outermost close, None if it never closes
    cut_points: List[Tuple[int, int]]     # (i, open node) where text[:i] holds only complete values
    nodes: List[Tuple[str, int]]          # (opener, parent node) for every opener seen


def _scan(text: str) -> _ScanState:
    """
    Walk text once tracking nesting and string state, honoring backslash escapes.

    Open containers are kept as a linked stack in ``nodes`` so every cut
    point can be closed later without scanning again. Cut points sit after
    a closed container, after a string value and before a comma, so
    ``text[:i]`` plus the closers of its open node is always well formed.
    """
    nodes: List[Tuple[str, int]] = []
    cut_points: List[Tuple[int, int]] = []
    top = -1
    in_string = False
    escape_next = False
    expect_key = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if in_string:
            if char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
                if not expect_key:
                    cut_points.append((i + 1, top))
            continue

        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            nodes.append((char, top))
            top = len(nodes) - 1
            expect_key = char == "{"
        elif char in "}]":
            if top >= 0:
                top = nodes[top][1]
            if top < 0:
                return _ScanState(i + 1, cut_points, nodes)
            expect_key = False
            cut_points.append((i + 1, top))
        elif char == ",":
            cut_points.append((i, top))
            expect_key = nodes[top][0] == "{" if top >= 0 else False
        elif char == ":":
            expect_key = False

    return _ScanState(None, cut_points, nodes)


def _closers(nodes: List[Tuple[str, int]], top: int) -> str:
    closers = []
    while top >= 0:
        opener, top = nodes[top]
        closers.append(_CLOSERS[opener])
    return "".join(closers)


def iter_repairs(raw_text: str) -> Iterator[str]:
    """
    Candidate repairs of a truncated or padded JSON object, best first.

    The first candidate is the object cut where its braces balance. If it
    never closes, candidates are the text up to each cut point, latest
    first, with the open containers closed. A dangling partial property
    never reaches a candidate because no cut point falls inside one.
    """
    start = raw_text.find("{")
    if start == -1:
        return

    body = raw_text[start:]
    state = _scan(body)

    if state.end is not None:
        yield _TRAILING_COMMA.sub(r"\1", body[:state.end])
        return

    seen = 0
    last = None
    for index, top in reversed(state.cut_points):
        if seen >= MAX_REPAIR_ATTEMPTS:
            break
        if index == last:
            continue
        last = index
        seen += 1
        yield body[:index].rstrip() + _closers(state.nodes, top)


def repair_truncated_json(raw_text: str) -> List[str]:
    return list(iter_repairs(raw_text))


def decode_truncated(raw_text: str) -> Optional[NormalizedResponse]:
    """Tier 2: recover an object whose tail was cut off or surrounded by prose."""
    for candidate in iter_repairs(raw_text):
        ok, parsed = _loads(candidate)
        if not ok:
            continue
        result = _from_parsed(parsed)
        if result is not None:
            return result
    return None


def decode_field(raw_text: str) -> Optional[NormalizedResponse]:
    """Tier 3: pull out only the conversational_response string value."""
    match = _CONVERSATIONAL_FIELD.search(raw_text)
    if not match:
        return None
    text = match.group(1).replace('\\"', '"').replace("\\n", "\n")
    if not text.strip():
        return None
    return NormalizedResponse(conversational_response=text)


def decode_verbatim(raw_text: str) -> Optional[NormalizedResponse]:
    """Tier 4: the reply is plain prose."""
    if not raw_text.strip():
        return None
    return NormalizedResponse(conversational_response=raw_text)


DECODERS: List[Tuple[NormalizationTier, Callable[[str], Optional[NormalizedResponse]]]] = [
    (NormalizationTier.DIRECT, decode_direct),
    (NormalizationTier.TRUNCATION_RECOVERY, decode_truncated),
    (NormalizationTier.FIELD_EXTRACTION, decode_field),
    (NormalizationTier.VERBATIM, decode_verbatim),
]


def normalize_with_tier(raw_text: Any) -> Tuple[NormalizationTier, NormalizedResponse]:
    """Run the decoder cascade and report which tier produced the result."""
    text = _coerce_text(raw_text)

    for tier, decoder in DECODERS:
        try:
            result = decoder(text)
        except Exception:  # a decoder bug must not break the reply
            logger.exception("Decoder %s crashed", tier.value)
            result = None
        if result is None:
            if tier is NormalizationTier.DIRECT and text.strip():
                logger.warning("Direct JSON parse failed, trying recovery")
                logger.warning("Content preview: %s...", text[:200])
                logger.warning("Content end: %s", text[-200:])
            continue

        if tier is NormalizationTier.DIRECT:
            logger.debug("Reply parsed directly")
        else:
            logger.warning("Reply normalized via %s", tier.value)
        return tier, result

    logger.warning("Empty reply, using default conversational response")
    return NormalizationTier.VERBATIM, NormalizedResponse(
        conversational_response=DEFAULT_CONVERSATIONAL_RESPONSE
    )


def normalize_response(raw_text: Any) -> NormalizedResponse:
    """
    Normalize a raw upstream reply.

    Returns: NormalizedResponse with a non-empty conversational_response and
    a (possibly empty) structured_recommendations list.
    """
    _, result = normalize_with_tier(raw_text)
    return result

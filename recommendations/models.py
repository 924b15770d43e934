# SPDX-License-Identifier: AGPL-3.0-only

"""
Pydantic models for the recommendation core.

This module defines the records produced for each assistant turn, the
normalized shape of an upstream reply, and the traveler profiles used to
build prompts.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    """Closed set of recommendation categories, in tie-break order."""
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"


class AgeGroup(str, Enum):
    ALL_AGES = "All Ages"
    KIDS_LOVE = "Kids Love"
    ADULTS = "Adults"
    SENIORS = "Seniors"
    TEENS = "Teens"


class PriceTier(str, Enum):
    FREE = "Free"
    BUDGET = "$"
    MODERATE = "$$"
    EXPENSIVE = "$$$"
    LUXURY = "$$$$"


class Accessibility(str, Enum):
    FULL = "Fully accessible"
    LIMITED = "Limited accessibility"
    NONE = "Not accessible"


class DietaryOption(str, Enum):
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    HALAL = "Halal"
    KOSHER = "Kosher"
    DAIRY_FREE = "Dairy-Free"


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class Mobility(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationRecord(BaseModel):
    """One recommendation card, produced fresh for each assistant turn."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(description="Unique within one turn; generation order is relevance order")
    title: str = Field(min_length=1, description="Place or venue name")
    category: Category = Field(default=Category.ATTRACTION.value)
    description: str = Field(description="Display text, at most 150 characters")
    rating: Optional[float] = Field(None, ge=0, le=5)
    duration: Optional[str] = Field(None, description="Human readable span, e.g. '2 hours'")
    price: Optional[PriceTier] = None
    age_group: List[AgeGroup] = Field(
        default_factory=lambda: [AgeGroup.ALL_AGES.value], alias="ageGroup", min_length=1
    )
    accessibility: Optional[Accessibility] = None
    location: Optional[str] = None
    dietary_options: Optional[List[DietaryOption]] = Field(None, alias="dietaryOptions")
    time_slot: Optional[TimeSlot] = Field(None, alias="timeSlot")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @model_validator(mode="after")
    def dietary_only_for_restaurants(self) -> "RecommendationRecord":
        if self.category != Category.RESTAURANT.value:
            self.dietary_options = None
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Camel-cased dictionary for JSON responses, optional fields omitted when unset."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RecommendationSet(BaseModel):
    """Extractor output."""

    model_config = ConfigDict(populate_by_name=True)

    has_recommendations: bool = Field(False, alias="hasRecommendations")
    recommendations: List[RecommendationRecord] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasRecommendations": self.has_recommendations,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


class NormalizedResponse(BaseModel):
    """Two-part structure recovered from a raw upstream reply."""

    conversational_response: str = Field(min_length=1)
    structured_recommendations: List[Any] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class Traveler(BaseModel):
    """Traveler profile used for prompt construction."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(min_length=1, max_length=50)
    age: int = Field(ge=1, le=120)
    mobility: Mobility = Mobility.HIGH.value
    relationship: Optional[str] = None
    interests: List[str] = Field(default_factory=list, max_length=10)
    cultural_background: Optional[str] = None
    dietary_restrictions: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("interests", "dietary_restrictions", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []


class TravelPreferences(BaseModel):
    destination: str = ""
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    budget: Optional[str] = None
    trip_type: List[str] = Field(default_factory=list)


class CulturalSettings(BaseModel):
    cultural_background: List[str] = Field(default_factory=list)
    dietary_restrictions: List[str] = Field(default_factory=list)
    family_interests: List[str] = Field(default_factory=list)

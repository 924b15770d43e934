"""
Input validation schemas using Marshmallow for API endpoints.
"""
from marshmallow import EXCLUDE, Schema, fields, validate


class BaseRequestSchema(Schema):
    """Ignore client-side fields the API does not use (ids, timestamps, ...)."""

    class Meta:
        unknown = EXCLUDE


class TravelerSchema(BaseRequestSchema):
    """Validation schema for a traveler profile."""
    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=50, error='Name must be 1-50 characters'),
        error_messages={'required': 'Name is required'}
    )
    age = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, max=120, error='Age must be between 1 and 120'),
        error_messages={'required': 'Age is required', 'invalid': 'Age must be a whole number'}
    )
    mobility = fields.Str(
        required=False,
        load_default='high',
        validate=validate.OneOf(['high', 'medium', 'low']),
        error_messages={'invalid': 'Mobility must be high, medium, or low'}
    )
    relationship = fields.Str(required=False, allow_none=True)
    interests = fields.List(
        fields.Str(),
        required=False,
        allow_none=True,
        validate=validate.Length(max=10, error='Maximum 10 interests')
    )
    cultural_background = fields.Str(required=False, allow_none=True)
    dietary_restrictions = fields.List(
        fields.Str(),
        required=False,
        allow_none=True,
        validate=validate.Length(max=10, error='Maximum 10 dietary restrictions')
    )


class ChatMessageSchema(BaseRequestSchema):
    """Validation schema for one message of chat history."""
    role = fields.Str(
        required=True,
        validate=validate.OneOf(['user', 'assistant', 'system']),
        error_messages={'required': 'Message role is required'}
    )
    content = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=4000, error='Message content must be 1-4000 characters'),
        error_messages={'required': 'Message content required'}
    )


class ChatRequestSchema(BaseRequestSchema):
    """Validation schema for AI chat requests."""
    messages = fields.List(fields.Nested(ChatMessageSchema), required=True)
    travelers = fields.List(fields.Nested(TravelerSchema), required=True)
    sessionId = fields.UUID(
        required=True,
        error_messages={'invalid_uuid': 'Invalid session ID', 'required': 'Session ID is required'}
    )
    travelContext = fields.Str(required=False, allow_none=True, validate=validate.Length(max=8000))


class PromptEnhancementSchema(BaseRequestSchema):
    """Validation schema for prompt enhancement requests."""
    basePrompt = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=2000),
        error_messages={'required': 'Base prompt is required'}
    )
    travelContext = fields.Str(required=False, allow_none=True)
    sessionId = fields.Str(required=True, error_messages={'required': 'Session ID is required'})


class TravelPreferencesSchema(BaseRequestSchema):
    destination = fields.Str(required=False, load_default='')
    checkIn = fields.Str(required=False, allow_none=True, data_key='checkIn', attribute='check_in')
    checkOut = fields.Str(required=False, allow_none=True, data_key='checkOut', attribute='check_out')
    budget = fields.Str(required=False, allow_none=True)
    tripType = fields.List(fields.Str(), required=False, load_default=list, attribute='trip_type')


class CulturalSettingsSchema(BaseRequestSchema):
    culturalBackground = fields.List(fields.Str(), load_default=list, attribute='cultural_background')
    dietaryRestrictions = fields.List(fields.Str(), load_default=list, attribute='dietary_restrictions')
    familyInterests = fields.List(fields.Str(), load_default=list, attribute='family_interests')


class QuickPromptsSchema(BaseRequestSchema):
    """Validation schema for quick prompt generation."""
    travelers = fields.List(fields.Nested(TravelerSchema), load_default=list)
    travelPreferences = fields.Nested(TravelPreferencesSchema, load_default=dict)
    culturalSettings = fields.Nested(CulturalSettingsSchema, load_default=dict)


class ParseRequestSchema(BaseRequestSchema):
    """Validation schema for parsing a raw assistant reply."""
    text = fields.Str(
        required=True,
        validate=validate.Length(max=100000),
        error_messages={'required': 'Text is required', 'invalid': 'Text must be a string'}
    )
    structured_recommendations = fields.List(fields.Raw(), required=False, allow_none=True)

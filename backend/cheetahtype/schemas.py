"""Pydantic request schemas, checked once at the HTTP boundary."""
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError as SchemaValidationError,
    model_validator,
)

from cheetahtype.errors import ValidationError

TestMode = Literal['time', 'words', 'quote', 'custom', 'punctuation', 'numbers', 'zen']
FocusIntensity = Literal['low', 'medium', 'high']

# One typed character; whitespace is a real key (space, tab)
Character = Annotated[str, StringConstraints(min_length=1, max_length=1, strip_whitespace=False)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True, allow_inf_nan=False)


class IdentityProfileSchema(RequestSchema):
    """Profile fields vouched for by the identity provider."""
    firebase_uid: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=128)
    photo_url: Optional[str] = Field(default=None, max_length=512)
    email_verified: bool = False


class UserUpdateSchema(RequestSchema):
    firebase_uid: str = Field(min_length=1, max_length=128)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=128)
    photo_url: Optional[str] = Field(default=None, max_length=512)


class CharacterCountersSchema(RequestSchema):
    total_typed: int = Field(default=0, ge=0)
    correct_typed: int = Field(default=0, ge=0)
    incorrect_typed: int = Field(default=0, ge=0)
    speeds: List[float] = Field(default_factory=list)
    average_speed: Optional[float] = Field(default=None, ge=0)
    # None means "use the built-in difficulty of the character"
    difficulty_score: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode='after')
    def check_totals(self):
        if self.total_typed != self.correct_typed + self.incorrect_typed:
            raise ValueError('total_typed must equal correct_typed + incorrect_typed')
        return self


class RecordTestSchema(RequestSchema):
    firebase_uid: str = Field(min_length=1, max_length=128)
    user_email: str = Field(min_length=3, max_length=255)
    wpm: float
    actual_duration: float
    raw_wpm: Optional[float] = None
    accuracy: Optional[float] = None
    consistency: Optional[float] = None
    wpm_samples: Optional[List[float]] = None
    total_characters: Optional[int] = None
    correct_characters: Optional[int] = None
    incorrect_characters: Optional[int] = None
    total_words: Optional[int] = None
    correct_words: Optional[int] = None
    incorrect_words: Optional[int] = None
    test_mode: TestMode = 'time'
    time_limit: Optional[int] = None
    word_limit: Optional[int] = None
    language: str = 'english'
    text_content: Optional[str] = None
    character_performance: Optional[Dict[Character, CharacterCountersSchema]] = None


class CharacterPerformanceSchema(RequestSchema):
    firebase_uid: str = Field(min_length=1, max_length=128)
    test_id: int
    character_performance: Dict[Character, CharacterCountersSchema]


class SessionAnalyticsSchema(RequestSchema):
    session_id: Optional[str] = Field(default=None, min_length=1, max_length=128)
    character_performance: Dict[Character, CharacterCountersSchema]


class PracticeTextSchema(RequestSchema):
    """Practice text request; without a target the user's weakest character is used."""
    firebase_uid: str = Field(min_length=1, max_length=128)
    target_character: Optional[Character] = None
    difficulty_level: int = Field(default=1, ge=1, le=5)
    word_count: int = Field(default=50, ge=1, le=500)
    focus_intensity: FocusIntensity = 'medium'


def parse(schema, data):
    """Validate ``data`` against ``schema`` or raise our ValidationError."""
    if data is None:
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except SchemaValidationError as exc:
        raise ValidationError.from_schema_error(exc) from exc


def parse_counters(character_performance: Dict[str, CharacterCountersSchema]) -> Dict[str, dict]:
    """Plain dicts, insertion order kept, for the analytics functions."""
    return {
        char: counters.model_dump(exclude_none=True)
        for char, counters in character_performance.items()
    }

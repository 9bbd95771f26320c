from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.quiz import AnswerRecord, Number


class SessionStatus(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class SessionSnapshot(BaseModel):
    """Persisted progress of one session, serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_question_index: int
    review_mode: bool = False
    total_score: Number
    status: SessionStatus
    answer_history: List[AnswerRecord] = Field(default_factory=list)
    start_timestamp: Optional[float] = None
    saved_at: Optional[float] = None

    @field_validator("answer_history", mode="before")
    @classmethod
    def _null_history(cls, value):
        return [] if value is None else value

    @field_validator("review_mode", mode="before")
    @classmethod
    def _null_review_mode(cls, value):
        return False if value is None else value

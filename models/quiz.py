from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class Choice(BaseModel):
    """A selectable answer and the points it is worth."""
    model_config = ConfigDict(frozen=True)

    text: str
    score: Optional[Number] = 0

    @property
    def points(self) -> Number:
        return self.score or 0


class Question(BaseModel):
    """A single authored question with its scored choices."""
    question: str
    choices: List[Choice] = Field(default_factory=list)
    tags: Optional[List[str]] = None

    def has_tag(self, tag: str) -> bool:
        return bool(self.tags) and tag in self.tags


class ScoringBucket(BaseModel):
    """Labelled inclusive range of final scores, e.g. 60-100 -> "Pass"."""
    min: Number
    max: Number
    label: str

    def contains(self, score: Number) -> bool:
        return self.min <= score <= self.max


class AnswerRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question_index: int
    # Stored exactly as submitted, even when it does not index a choice
    choice_index: Optional[int] = None
    score: Number = 0


class QuizConfig(BaseModel):
    """Engine options. Every field is optional; camelCase keys are accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    questions: List[Question] = Field(default_factory=list)
    time_limit_per_question: Optional[float] = None
    total_time_limit: Optional[float] = None
    shuffle_questions: bool = False
    shuffle_choices: bool = False
    question_tags: List[str] = Field(default_factory=list)
    questions_per_tag: Optional[int] = None
    scoring_buckets: List[ScoringBucket] = Field(default_factory=list)
    storage_key: Optional[str] = None
    storage_namespace: Optional[str] = None
    encrypt_storage: bool = False

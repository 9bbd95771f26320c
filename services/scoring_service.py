import math
from typing import Optional, Sequence

from models.quiz import Number, Question, ScoringBucket


def question_max_score(question: Question) -> Number:
    if not question.choices:
        return 0
    return max(c.points for c in question.choices)


def max_possible_score(pool: Sequence[Question]) -> Number:
    return sum(question_max_score(q) for q in pool)


def final_score(total_score: Number, max_score: Number) -> int:
    """Normalize to 0-100, rounding halves up. An empty maximum scores 0."""
    if max_score == 0:
        return 0
    return int(math.floor(total_score / max_score * 100 + 0.5))


def score_bucket(score: Number, buckets: Sequence[ScoringBucket]) -> Optional[str]:
    # First matching bucket wins, even if later ones overlap
    for bucket in buckets:
        if bucket.contains(score):
            return bucket.label
    return None

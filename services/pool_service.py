import random
from typing import List, Optional, Sequence

from models.quiz import Question
from utils.randomness import shuffle_in_place, shuffled_copy


def sample_by_tags(questions: Sequence[Question], tags: Sequence[str], per_tag: int,
                   rng: Optional[random.Random] = None) -> List[Question]:
    """Take up to `per_tag` random questions for each tag, in tag order.

    A question carrying several of the requested tags can be picked once per tag.
    """
    picked: List[Question] = []
    for tag in tags:
        tag_pool = [q for q in questions if q.has_tag(tag)]
        picked.extend(shuffled_copy(tag_pool, rng)[:per_tag])
    return picked


def prepare_questions(questions: List[Question], shuffle_questions: bool, shuffle_choices: bool,
                      rng: Optional[random.Random] = None) -> List[Question]:
    """Order the pool and give every question its own copy of the choice list."""
    if shuffle_questions:
        shuffle_in_place(questions, rng)

    prepared = []
    for q in questions:
        choices = list(q.choices)
        if shuffle_choices:
            shuffle_in_place(choices, rng)
        prepared.append(q.model_copy(update={"choices": choices}, deep=True))
    return prepared


def build_question_pool(questions: Sequence[Question], tags: Sequence[str] = (), per_tag: int = 1,
                        shuffle_questions: bool = False, shuffle_choices: bool = False,
                        rng: Optional[random.Random] = None) -> List[Question]:
    """Build a fresh session pool. The authored `questions` are never mutated."""
    if tags:
        base = sample_by_tags(questions, tags, per_tag, rng)
    else:
        base = list(questions)
    return prepare_questions(base, shuffle_questions, shuffle_choices, rng)

"""
Pytest configuration and fixtures for quiz engine tests.
"""
import sys
import os
import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.quiz import Question
from db.store import MemoryStore


@pytest.fixture
def sample_questions():
    """Two tagged questions with three scored choices each"""
    return [
        Question.model_validate({
            "question": "Choose a color",
            "choices": [
                {"text": "Red", "score": 10},
                {"text": "Blue", "score": 20},
                {"text": "Green", "score": 30},
            ],
            "tags": ["visual"],
        }),
        Question.model_validate({
            "question": "Choose an animal",
            "choices": [
                {"text": "Cat", "score": 20},
                {"text": "Dog", "score": 10},
                {"text": "Bird", "score": 30},
            ],
            "tags": ["personality"],
        }),
    ]


@pytest.fixture
def tagged_questions():
    """Questions spread over three tags, one of them carrying two"""
    def q(text, tags, scores=(1, 2)):
        return Question(
            question=text,
            choices=[{"text": f"{text}-{i}", "score": s} for i, s in enumerate(scores)],
            tags=tags,
        )

    return [
        q("math-1", ["math"]),
        q("math-2", ["math"]),
        q("math-3", ["math"]),
        q("history-1", ["history"]),
        q("history-2", ["history"]),
        q("both", ["math", "history"]),
        q("untagged", None),
    ]


@pytest.fixture
def memory_store():
    return MemoryStore()

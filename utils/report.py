from typing import Dict, List, Sequence

from models.quiz import AnswerRecord, Number, Question


def clamp(value: Number, low: Number, high: Number) -> Number:
    return max(low, min(high, value))


def format_score(score: Number) -> str:
    """Render a normalized score as a percentage, e.g. 83 -> "83%"."""
    return f"{clamp(score, 0, 100)}%"


def group_answers_by_tag(questions: Sequence[Question], answers: Sequence[AnswerRecord]) -> Dict[str, List[AnswerRecord]]:
    """Bucket answers under every tag of the question they answered.

    Answers whose question index falls outside `questions` are left out.
    """
    result: Dict[str, List[AnswerRecord]] = {}
    for answer in answers:
        if not 0 <= answer.question_index < len(questions):
            continue
        for tag in questions[answer.question_index].tags or []:
            result.setdefault(tag, []).append(answer)
    return result


def average_score(records: Sequence[AnswerRecord]) -> float:
    if not records:
        return 0
    return sum(r.score for r in records) / len(records)

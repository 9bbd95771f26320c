from typing import List

from core.logger import logger
from services.quiz_engine import QuizEngine
from services.scoring_service import question_max_score
from utils.report import average_score, group_answers_by_tag


class StatsService:
    def __init__(self, engine: QuizEngine):
        self.engine = engine

    def tag_breakdown(self) -> List[dict]:
        """
        Per-tag results for the answers recorded so far.
        Each row: tag, answered, skipped, total score, max score, average score.
        Tags appear in the order they are first met in the answer history.
        """
        questions = self.engine.get_questions()
        grouped = group_answers_by_tag(questions, self.engine.get_answer_history())

        rows = []
        for tag, records in grouped.items():
            rows.append({
                "tag": tag,
                "answered": len(records),
                "skipped": sum(1 for r in records if r.choice_index is None),
                "total_score": sum(r.score for r in records),
                "max_score": sum(question_max_score(questions[r.question_index]) for r in records),
                "average_score": average_score(records),
            })
        logger.debug("Tag breakdown computed", tags=len(rows))
        return rows

    def summary(self) -> dict:
        engine = self.engine
        return {
            "status": engine.get_status(),
            "answered": len(engine.get_answer_history()),
            "questions": len(engine.get_questions()),
            "total_score": engine.get_total_score(),
            "max_score": engine.get_max_possible_score(),
            "final_score": engine.get_final_score(),
            "bucket": engine.get_score_bucket(),
            "tags": self.tag_breakdown(),
        }

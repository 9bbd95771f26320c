import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from core.config import settings
from core.logger import logger
from db.store import KeyValueStore, RedisStore
from models.quiz import AnswerRecord, Choice, Number, Question, QuizConfig
from models.session import SessionSnapshot, SessionStatus
from services.pool_service import build_question_pool
from services.scoring_service import final_score, max_possible_score, score_bucket
from services.session_service import SessionStateService
from services.task_manager import TaskManager

QUESTION_TIMER = "question"
TOTAL_TIMER = "total"


@dataclass
class QuizCallbacks:
    """Optional notification hooks, called synchronously by the engine."""
    on_start: Optional[Callable[[], Any]] = None
    on_question_change: Optional[Callable[[int], Any]] = None
    on_answer: Optional[Callable[[Optional[Choice], Number], Any]] = None
    on_complete: Optional[Callable[[int, Optional[str]], Any]] = None
    on_time_expired: Optional[Callable[[int], Any]] = None
    on_total_time_expired: Optional[Callable[[], Any]] = None


@dataclass
class ReviewItem:
    # None when the recorded index no longer points into the pool
    question: Optional[Question]
    answer: AnswerRecord


class QuizEngine:
    """Runs one timed, scored quiz session.

    All state belongs to this instance. Timers run as tasks on the current
    asyncio loop, so a loop must be running when time limits are configured.
    """

    def __init__(self, config: Union[QuizConfig, Dict[str, Any], None] = None,
                 callbacks: Optional[QuizCallbacks] = None,
                 store: Optional[KeyValueStore] = None,
                 rng: Optional[random.Random] = None):
        if config is None:
            config = QuizConfig()
        elif isinstance(config, dict):
            config = QuizConfig.model_validate(config)

        self.config = config
        self.callbacks = callbacks or QuizCallbacks()
        self.rng = rng
        self._store = store
        self._state_service: Optional[SessionStateService] = None

        self.initial_questions: List[Question] = config.questions
        self.questions_per_tag = settings.QUESTIONS_PER_TAG if config.questions_per_tag is None else config.questions_per_tag
        self.timers = TaskManager()

        self.review_mode = False
        self.start_timestamp: Optional[float] = None
        self.current_question_index = 0
        self.total_score: Number = 0
        self.status = SessionStatus.IDLE
        self.answer_history: List[AnswerRecord] = []
        self._rebuild_pool()

    def _rebuild_pool(self):
        self.questions = build_question_pool(
            self.initial_questions,
            tags=self.config.question_tags,
            per_tag=self.questions_per_tag,
            shuffle_questions=self.config.shuffle_questions,
            shuffle_choices=self.config.shuffle_choices,
            rng=self.rng,
        )
        self.max_possible_score = max_possible_score(self.questions)

    def start(self):
        self.timers.cancel_all()
        self.status = SessionStatus.STARTED
        self.current_question_index = 0
        self.total_score = 0
        self.answer_history = []
        self.review_mode = False
        self.start_timestamp = time.time()
        self._rebuild_pool()
        self.status = SessionStatus.IN_PROGRESS if self.questions else SessionStatus.COMPLETED
        logger.info("Quiz session started", questions=len(self.questions), status=self.status.value)

        self._notify("on_start")
        self._notify("on_question_change", self.current_question_index)

        self._arm_question_timer()
        self._arm_total_timer()

    def reset(self):
        self.timers.cancel_all()
        self.status = SessionStatus.IDLE
        self.current_question_index = 0
        self.total_score = 0
        self.answer_history = []
        self.review_mode = False
        self.start_timestamp = None
        self._rebuild_pool()
        logger.debug("Quiz session reset")

    def submit_answer(self, choice_index: Optional[int] = None):
        if self.status != SessionStatus.IN_PROGRESS:
            return

        # Cancel first: only one of manual submit / auto-skip may consume a question
        self.timers.cancel_task(QUESTION_TIMER)

        question = self.get_current_question()
        choices = question.choices if question else []
        choice: Optional[Choice] = None
        score: Number = 0
        if choice_index is not None and 0 <= choice_index < len(choices):
            choice = choices[choice_index]
            score = choice.points
        self.total_score += score

        self.answer_history.append(AnswerRecord(
            question_index=self.current_question_index,
            choice_index=choice_index,
            score=score,
        ))
        # Advance before notifying: history length must equal the step even if a callback raises
        self.current_question_index += 1
        self._notify("on_answer", choice, score)

        if self.current_question_index < len(self.questions):
            self._notify("on_question_change", self.current_question_index)
            self._arm_question_timer()
        else:
            self.status = SessionStatus.COMPLETED
            self.timers.cancel_task(TOTAL_TIMER)
            result, bucket = self.get_final_score(), self.get_score_bucket()
            logger.info("Quiz session completed", total_score=self.total_score, final_score=result, bucket=bucket)
            self._notify("on_complete", result, bucket)

    def _arm_question_timer(self):
        if self.config.time_limit_per_question:
            self.timers.schedule(QUESTION_TIMER, self.config.time_limit_per_question, self._on_question_timeout)

    def _arm_total_timer(self):
        if self.config.total_time_limit:
            self.timers.schedule(TOTAL_TIMER, self.config.total_time_limit, self._on_total_timeout)

    def _on_question_timeout(self):
        logger.info("Question time expired", index=self.current_question_index)
        self._notify("on_time_expired", self.current_question_index)
        self.submit_answer(None)

    def _on_total_timeout(self):
        # No final score is reported on this path, only the timeout notification
        self.status = SessionStatus.COMPLETED
        self.timers.cancel_task(QUESTION_TIMER)
        logger.info("Total quiz time expired", index=self.current_question_index, total_score=self.total_score)
        self._notify("on_total_time_expired")

    def _notify(self, name: str, *args):
        callback = getattr(self.callbacks, name)
        if callback is not None:
            callback(*args)

    def enter_review_mode(self):
        if self.status != SessionStatus.COMPLETED:
            return
        self.review_mode = True

    def is_in_review_mode(self) -> bool:
        return self.review_mode

    def get_review_data(self) -> List[ReviewItem]:
        if not self.review_mode:
            return []
        return [
            ReviewItem(question=self._question_at(record.question_index), answer=record)
            for record in self.answer_history
        ]

    def _question_at(self, index: int) -> Optional[Question]:
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    def get_current_question(self) -> Optional[Question]:
        return self._question_at(self.current_question_index)

    def get_questions(self) -> List[Question]:
        return self.questions

    def get_total_score(self) -> Number:
        return self.total_score

    def get_max_possible_score(self) -> Number:
        return self.max_possible_score

    def get_final_score(self) -> int:
        return final_score(self.total_score, self.max_possible_score)

    def get_score_bucket(self) -> Optional[str]:
        return score_bucket(self.get_final_score(), self.config.scoring_buckets)

    def get_step(self) -> int:
        return self.current_question_index

    def get_status(self) -> str:
        return self.status.value

    def get_answer_history(self) -> List[AnswerRecord]:
        return self.answer_history

    def get_start_timestamp(self) -> Optional[float]:
        return self.start_timestamp

    @property
    def state_service(self) -> SessionStateService:
        if self._state_service is None:
            store = self._store
            if store is None:
                store = RedisStore.from_settings()
            self._state_service = SessionStateService(
                store,
                namespace=self.config.storage_namespace,
                encrypt=self.config.encrypt_storage,
            )
        return self._state_service

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            current_question_index=self.current_question_index,
            review_mode=self.review_mode,
            total_score=self.total_score,
            status=self.status,
            answer_history=list(self.answer_history),
            start_timestamp=self.start_timestamp,
            saved_at=time.time(),
        )

    async def save_state(self):
        if not self.config.storage_key:
            return
        await self.state_service.save(self.config.storage_key, self.snapshot())

    async def load_state(self):
        """Restore progress saved under the configured key.

        The pool is rebuilt after restoring, so with shuffling or tag sampling
        enabled the restored indices may refer to different questions than
        the ones originally answered.
        """
        if not self.config.storage_key:
            return
        snapshot = await self.state_service.load(self.config.storage_key)
        if snapshot is None:
            return

        self.timers.cancel_all()
        self.current_question_index = snapshot.current_question_index
        self.total_score = snapshot.total_score
        self.status = snapshot.status
        self.answer_history = list(snapshot.answer_history)
        self.review_mode = snapshot.review_mode
        self.start_timestamp = snapshot.start_timestamp
        self._rebuild_pool()

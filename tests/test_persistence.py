import base64
import json

import pytest

from models.quiz import QuizConfig
from models.session import SessionSnapshot, SessionStatus
from services.quiz_engine import QuizEngine
from services.session_service import SessionStateService

pytestmark = pytest.mark.asyncio


def make_engine(questions, store, **options):
    return QuizEngine(QuizConfig(questions=questions, **options), store=store)


async def test_save_and_load_round_trip(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="test-game")
    game.start()
    game.submit_answer(0)  # Red (10)
    await game.save_state()

    restored = make_engine(sample_questions, memory_store, storage_key="test-game")
    await restored.load_state()

    assert restored.get_step() == 1
    assert restored.get_total_score() == 10
    assert restored.get_status() == "in-progress"
    assert restored.get_answer_history() == game.get_answer_history()
    assert restored.get_start_timestamp() == game.get_start_timestamp()
    assert restored.get_max_possible_score() == 60


async def test_restored_session_can_continue(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="resume")
    game.start()
    game.submit_answer(2)
    await game.save_state()

    restored = make_engine(sample_questions, memory_store, storage_key="resume")
    await restored.load_state()
    restored.submit_answer(0)
    assert restored.get_status() == "completed"
    assert restored.get_final_score() == 83


async def test_snapshot_uses_namespaced_camel_case_record(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="p1", storage_namespace="games")
    game.start()
    game.submit_answer(None)
    await game.save_state()

    assert list(memory_store.data) == ["games:p1"]
    record = json.loads(memory_store.data["games:p1"])
    assert set(record) == {
        "currentQuestionIndex", "reviewMode", "totalScore", "status",
        "answerHistory", "startTimestamp", "savedAt",
    }
    assert record["status"] == "in-progress"
    assert record["answerHistory"] == [{"questionIndex": 0, "choiceIndex": None, "score": 0}]
    assert record["savedAt"] is not None


async def test_default_namespace(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="p1")
    await game.save_state()
    assert list(memory_store.data) == ["quiz:p1"]


async def test_encoded_storage(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="secret", encrypt_storage=True)
    game.start()
    game.submit_answer(1)
    await game.save_state()

    raw = memory_store.data["quiz:secret"]
    assert not raw.startswith("{")
    assert json.loads(base64.b64decode(raw))["totalScore"] == 20

    restored = make_engine(sample_questions, memory_store, storage_key="secret", encrypt_storage=True)
    await restored.load_state()
    assert restored.get_total_score() == 20


async def test_without_storage_key_nothing_happens(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store)
    game.start()
    await game.save_state()
    await game.load_state()
    assert memory_store.data == {}
    assert game.get_status() == "in-progress"


async def test_missing_entry_keeps_state(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="nothing-here")
    game.start()
    game.submit_answer(2)
    await game.load_state()
    assert game.get_step() == 1
    assert game.get_total_score() == 30


@pytest.mark.parametrize("raw", [
    "not json at all",
    "[1, 2, 3]",
    json.dumps({"totalScore": 5}),
    json.dumps({"currentQuestionIndex": 1, "totalScore": 5, "status": "paused"}),
])
async def test_corrupted_state_is_ignored(sample_questions, memory_store, raw):
    memory_store.data["quiz:broken"] = raw
    game = make_engine(sample_questions, memory_store, storage_key="broken")
    game.start()
    game.submit_answer(2)

    await game.load_state()
    assert game.get_step() == 1
    assert game.get_total_score() == 30
    assert game.get_status() == "in-progress"


async def test_bad_base64_is_ignored(sample_questions, memory_store):
    memory_store.data["quiz:enc"] = "%%%not-base64%%%"
    game = make_engine(sample_questions, memory_store, storage_key="enc", encrypt_storage=True)
    await game.load_state()
    assert game.get_status() == "idle"


async def test_optional_fields_default(sample_questions, memory_store):
    memory_store.data["quiz:minimal"] = json.dumps({
        "currentQuestionIndex": 2, "totalScore": 40, "status": "completed", "answerHistory": None,
    })
    game = make_engine(sample_questions, memory_store, storage_key="minimal")
    await game.load_state()

    assert game.get_status() == "completed"
    assert game.get_answer_history() == []
    assert game.is_in_review_mode() is False
    assert game.get_start_timestamp() is None


async def test_review_mode_survives_restore(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="done")
    game.start()
    game.submit_answer(2)
    game.submit_answer(7)
    game.enter_review_mode()
    await game.save_state()

    restored = make_engine(sample_questions, memory_store, storage_key="done")
    await restored.load_state()
    review = restored.get_review_data()
    assert [item.answer.choice_index for item in review] == [2, 7]
    assert review[1].question.question == "Choose an animal"


async def test_review_tolerates_indices_outside_rebuilt_pool(tagged_questions, memory_store):
    memory_store.data["quiz:desync"] = json.dumps({
        "currentQuestionIndex": 3, "totalScore": 3, "status": "completed", "reviewMode": True,
        "answerHistory": [
            {"questionIndex": 0, "choiceIndex": 1, "score": 2},
            {"questionIndex": 1, "choiceIndex": 0, "score": 1},
            {"questionIndex": 2, "choiceIndex": None, "score": 0},
        ],
    })
    game = make_engine(tagged_questions, memory_store, storage_key="desync",
                       question_tags=["history"], questions_per_tag=1)
    await game.load_state()

    review = game.get_review_data()
    assert len(review) == 3
    assert review[0].question is not None
    assert review[1].question is None
    assert review[2].question is None


async def test_state_service_accepts_bytes(memory_store):
    service = SessionStateService(memory_store, namespace="ns")
    snapshot = SessionSnapshot(current_question_index=0, total_score=0, status=SessionStatus.IDLE)
    decoded = service.decode(service.encode(snapshot).encode("utf-8"))
    assert decoded.status == SessionStatus.IDLE
    assert service.storage_key("abc") == "ns:abc"


async def test_empty_namespace_is_kept(sample_questions, memory_store):
    game = make_engine(sample_questions, memory_store, storage_key="k", storage_namespace="")
    await game.save_state()
    assert list(memory_store.data) == [":k"]
    assert SessionStateService(memory_store, namespace="").storage_key("k") == ":k"

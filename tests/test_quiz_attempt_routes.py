"""Tests for attempt submission and quiz statistics endpoints."""

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from portal.models.quiz_attempt import QuizAttempt

API = "/api/v1"


@pytest_asyncio.fixture
async def quiz(client, headers, course, quiz_payload):
    r = await client.post(f"{API}/courses/{course.id}/quizzes", json=quiz_payload, headers=headers["faculty"])
    assert r.status_code == 201
    return r.json()


def correct_ids(question):
    return [o["id"] for o in question["options"] if o["isCorrect"]]


def wrong_ids(question):
    return [o["id"] for o in question["options"] if not o["isCorrect"]]


def all_correct(quiz):
    return [{"question": q["id"], "selectedOptions": correct_ids(q)} for q in quiz["questions"]]


async def submit(client, quiz, user_headers, answers):
    return await client.post(f"{API}/quizzes/{quiz['id']}/attempt", json={"answers": answers}, headers=user_headers)


@pytest.mark.asyncio
async def test_submit_all_correct(client, headers, quiz):
    r = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert r.status_code == 201

    body = r.json()
    assert body["score"] == 100
    assert body["quiz"] == {"id": quiz["id"], "title": "Week 1 check"}
    assert body["student"]["email"] == "dee@college.edu"
    assert [a["isCorrect"] for a in body["answers"]] == [True, True]
    assert body["completedAt"] is not None


@pytest.mark.asyncio
async def test_submit_partially_correct(client, headers, quiz):
    single, multiple = quiz["questions"]
    answers = [
        {"question": str(single["id"]), "selectedOptions": [str(i) for i in correct_ids(single)]},
        {"question": multiple["id"], "selectedOptions": correct_ids(multiple)[:1]},
    ]

    r = await submit(client, quiz, headers["student"], answers)
    assert r.status_code == 201
    assert r.json()["score"] == 50
    assert [a["isCorrect"] for a in r.json()["answers"]] == [True, False]


@pytest.mark.asyncio
async def test_submit_all_wrong(client, headers, quiz):
    answers = [{"question": q["id"], "selectedOptions": wrong_ids(q)[:1]} for q in quiz["questions"]]

    r = await submit(client, quiz, headers["student"], answers)
    assert r.status_code == 201
    assert r.json()["score"] == 0


@pytest.mark.asyncio
async def test_second_submission_is_a_duplicate(client, headers, quiz):
    first = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert first.status_code == 201

    again = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "DuplicateAttempt"


@pytest.mark.asyncio
async def test_lost_race_is_reported_as_duplicate(client, headers, quiz, monkeypatch, session_factory):
    """When the lookup misses a concurrent attempt, the unique constraint still yields 409."""
    first = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert first.status_code == 201

    async def no_attempt(db, quiz_id, student_id):
        return None

    monkeypatch.setattr("portal.routes.quiz_attempt.find_attempt", no_attempt)

    again = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "DuplicateAttempt"

    async with session_factory() as db:
        result = await db.execute(select(QuizAttempt).where(QuizAttempt.quiz_id == quiz["id"]))
        assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_incomplete_submission(client, headers, quiz):
    r = await submit(client, quiz, headers["student"], all_correct(quiz)[:1])
    assert r.status_code == 400
    assert r.json()["detail"] == {
        "error": "ValidationError",
        "message": "All questions must be answered",
        "details": [{"field": "answers", "message": "All questions must be answered"}],
    }


@pytest.mark.asyncio
async def test_missing_answers(client, headers, quiz):
    r = await client.post(f"{API}/quizzes/{quiz['id']}/attempt", json={}, headers=headers["student"])
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Answers are required"


@pytest.mark.asyncio
async def test_unknown_question_id(client, headers, quiz):
    answers = all_correct(quiz)
    answers[1]["question"] = 987654

    r = await submit(client, quiz, headers["student"], answers)
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Invalid question ID in answer 2"


@pytest.mark.asyncio
async def test_rejected_submission_leaves_no_attempt(client, headers, quiz):
    await submit(client, quiz, headers["student"], all_correct(quiz)[:1])

    r = await client.get(f"{API}/quizzes/{quiz['id']}/my-attempt", headers=headers["student"])
    assert r.status_code == 404

    r = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_only_students_submit(client, headers, quiz):
    r = await submit(client, quiz, headers["faculty"], all_correct(quiz))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_unenrolled_student_cannot_submit(client, headers, quiz):
    r = await submit(client, quiz, headers["outsider"], all_correct(quiz))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_inactive_quiz(client, headers, quiz):
    await client.put(f"{API}/quizzes/{quiz['id']}", json={"isActive": False}, headers=headers["faculty"])

    r = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Quiz is not active"


@pytest.mark.asyncio
async def test_unknown_quiz(client, headers):
    r = await client.post(f"{API}/quizzes/4242/attempt", json={"answers": []}, headers=headers["student"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_my_attempt(client, headers, quiz):
    await submit(client, quiz, headers["student"], all_correct(quiz))

    r = await client.get(f"{API}/quizzes/{quiz['id']}/my-attempt", headers=headers["student"])
    assert r.status_code == 200
    assert r.json()["score"] == 100

    r = await client.get(f"{API}/quizzes/{quiz['id']}/my-attempt", headers=headers["second_student"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_hidden_results(client, headers, course, quiz_payload):
    quiz_payload["settings"] = {"showResults": False}
    created = await client.post(f"{API}/courses/{course.id}/quizzes", json=quiz_payload, headers=headers["faculty"])
    quiz = created.json()

    r = await submit(client, quiz, headers["student"], all_correct(quiz))
    assert r.status_code == 201
    assert r.json()["score"] == 100
    assert all(a["isCorrect"] is None for a in r.json()["answers"])

    r = await client.get(f"{API}/quizzes/{quiz['id']}/attempts", headers=headers["faculty"])
    assert all(a["isCorrect"] is True for a in r.json()["attempts"][0]["answers"])


@pytest.mark.asyncio
async def test_attempts_listing(client, headers, quiz):
    await submit(client, quiz, headers["student"], all_correct(quiz))
    await submit(client, quiz, headers["second_student"], all_correct(quiz)[:1] + [
        {"question": quiz["questions"][1]["id"], "selectedOptions": []},
    ])

    r = await client.get(f"{API}/quizzes/{quiz['id']}/attempts", headers=headers["faculty"])
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert sorted(a["score"] for a in body["attempts"]) == [50, 100]

    r = await client.get(f"{API}/quizzes/{quiz['id']}/attempts", headers=headers["student"])
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_stats(client, headers, quiz):
    r = await client.get(f"{API}/quizzes/{quiz['id']}/stats", headers=headers["faculty"])
    assert r.status_code == 200
    assert r.json()["totalAttempts"] == 0
    assert r.json()["averageScore"] == 0

    await submit(client, quiz, headers["student"], all_correct(quiz))
    await submit(client, quiz, headers["second_student"], all_correct(quiz)[:1] + [
        {"question": quiz["questions"][1]["id"], "selectedOptions": []},
    ])

    r = await client.get(f"{API}/quizzes/{quiz['id']}/stats", headers=headers["admin"])
    assert r.status_code == 200
    assert r.json() == {
        "totalAttempts": 2,
        "averageScore": 75,
        "highestScore": 100,
        "lowestScore": 50,
        "passRate": 50,
        "scoreDistribution": {"excellent": 1, "good": 0, "average": 0, "poor": 1},
    }


@pytest.mark.asyncio
async def test_stats_forbidden_for_students(client, headers, quiz):
    r = await client.get(f"{API}/quizzes/{quiz['id']}/stats", headers=headers["student"])
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_deleting_quiz_removes_attempts(client, headers, quiz, session_factory):
    await submit(client, quiz, headers["student"], all_correct(quiz))

    r = await client.delete(f"{API}/quizzes/{quiz['id']}", headers=headers["faculty"])
    assert r.status_code == 200

    async with session_factory() as db:
        assert await db.get(QuizAttempt, 1) is None


@pytest.mark.asyncio
async def test_database_rejects_second_attempt(session_factory, users, quiz):
    """The unique (quiz, student) constraint holds even without the pre-check."""
    async with session_factory() as db:
        for _ in range(2):
            db.add(QuizAttempt(quiz_id=quiz["id"], student_id=users["student"].id, answers=[], score=0))
        with pytest.raises(IntegrityError):
            await db.commit()

from uuid import uuid4

from helpers import QUIZ_PASSWORD, auth_headers

API = "/api/v1"


async def enroll(client, quiz, user, **body):
    payload = {"quizId": str(quiz.id), "hashPassword": QUIZ_PASSWORD}
    payload.update(body)
    return await client.post(f"{API}/quiz-attempts/enroll", json=payload, headers=auth_headers(user))


async def test_enroll_save_submit_scenario(client, quiz, student):
    response = await enroll(client, quiz, student)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["meta"]["timestamp"]
    attempt = body["data"]
    assert attempt["status"] == "in_progress"
    assert attempt["answers"] == []

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/save",
        json={"answers": [{"questionId": "1", "answer": [1, 0, 0, 0]}]},
        headers=auth_headers(student),
    )
    assert response.status_code == 200
    assert response.json()["data"]["answers"][0]["answer"] == [1, 0, 0, 0]

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/submit",
        headers=auth_headers(student),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "submitted"
    assert data["answers"][0]["correct"] is True
    assert data["answers"][0]["points_earned"] == 2.0
    assert data["score"] == 2.0
    assert data["total_quiz_score"] == 6.0
    assert data["total_questions"] == 3
    assert data["score_percentage"] == 33.33
    assert data["passed_questions"] == ["1"]


async def test_enroll_records_client_context(client, quiz, student):
    response = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quiz_id": str(quiz.id), "hash_password": QUIZ_PASSWORD},
        headers={**auth_headers(student), "User-Agent": "quiz-browser/1.0"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user_agent"] == "quiz-browser/1.0"
    assert data["ip_address"]


async def test_second_enroll_returns_conflict(client, quiz, student):
    await enroll(client, quiz, student)

    response = await enroll(client, quiz, student)

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "You already have an attempt in progress for this quiz",
        "code": "ATTEMPT_ALREADY_ACTIVE",
    }


async def test_enroll_wrong_password(client, quiz, student):
    response = await enroll(client, quiz, student, hashPassword="nope")

    assert response.status_code == 403
    assert response.json()["code"] == "INVALID_QUIZ_PASSWORD"


async def test_enroll_unknown_quiz(client, student):
    response = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": str(uuid4())},
        headers=auth_headers(student),
    )

    assert response.status_code == 404
    assert response.json()["code"] == "QUIZ_NOT_FOUND"


async def test_enroll_requires_authentication(client, quiz):
    response = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": str(quiz.id)},
    )

    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_enroll_with_invalid_token(client, quiz):
    response = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": str(quiz.id)},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


async def test_validation_errors_use_envelope(client, quiz, student):
    response = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": "not-a-uuid"},
        headers=auth_headers(student),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert "quiz" in body["details"]["errors"][0]["path"].lower()


async def test_answer_flags_must_be_zero_or_one(client, quiz, student):
    attempt = (await enroll(client, quiz, student)).json()["data"]

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/auto-save",
        json={"answer": {"questionId": "1", "answer": [2, 0, 0, 0]}},
        headers=auth_headers(student),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_auto_save_reports_progress(client, quiz, student):
    attempt = (await enroll(client, quiz, student)).json()["data"]

    for flags in ([0, 1], [1, 0]):
        response = await client.put(
            f"{API}/quiz-attempts/{attempt['id']}/auto-save",
            json={"answer": {"questionId": "3", "answer": flags}},
            headers=auth_headers(student),
        )
        assert response.status_code == 200

    data = response.json()["data"]
    assert data["total"] == 3
    assert data["answered_total"] == 1
    assert data["attempt"]["answers"] == [
        {
            "question_id": "3",
            "answer": [1, 0],
            "text": None,
            "options": None,
            "correct": None,
            "points_earned": None,
        }
    ]


async def test_save_by_other_student_is_forbidden(client, quiz, student, other_student):
    attempt = (await enroll(client, quiz, student)).json()["data"]

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/save",
        json={"answers": [{"questionId": "1", "answer": [0, 1, 0, 0]}]},
        headers=auth_headers(other_student),
    )

    assert response.status_code == 403
    assert response.json()["code"] == "NOT_ATTEMPT_OWNER"


async def test_second_submit_returns_conflict(client, quiz, student):
    attempt = (await enroll(client, quiz, student)).json()["data"]
    url = f"{API}/quiz-attempts/{attempt['id']}/submit"

    assert (await client.put(url, headers=auth_headers(student))).status_code == 200
    response = await client.put(url, headers=auth_headers(student))

    assert response.status_code == 409
    assert response.json()["code"] == "ATTEMPT_ALREADY_SUBMITTED"


async def test_ban_and_delete_flow(client, quiz, student, teacher):
    attempt = (await enroll(client, quiz, student)).json()["data"]

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/ban",
        headers=auth_headers(student),
    )
    assert response.status_code == 403

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/ban",
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "banned"

    response = await client.delete(
        f"{API}/quiz-attempts/{attempt['id']}",
        headers=auth_headers(student),
    )
    assert response.status_code == 403
    assert response.json()["code"] == "ATTEMPT_BANNED"

    response = await client.delete(
        f"{API}/quiz-attempts/{attempt['id']}",
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    assert response.json()["data"] is None


async def test_deleted_attempt_is_hidden_from_student(client, quiz, student, teacher):
    attempt = (await enroll(client, quiz, student)).json()["data"]
    url = f"{API}/quiz-attempts/{attempt['id']}"

    assert (await client.delete(url, headers=auth_headers(student))).status_code == 200

    response = await client.get(url, headers=auth_headers(student))
    assert response.status_code == 404
    assert response.json()["code"] == "ATTEMPT_NOT_FOUND"

    response = await client.get(url, headers=auth_headers(teacher))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "deleted"


async def test_teacher_grading_endpoints(client, quiz, student, teacher):
    attempt = (await enroll(client, quiz, student)).json()["data"]
    await client.put(f"{API}/quiz-attempts/{attempt['id']}/submit", headers=auth_headers(student))

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/re-grade",
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    assert response.json()["data"]["graded_by"] == str(teacher.id)

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}",
        json={"score": 5},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    assert response.json()["data"]["score"] == 5.0

    response = await client.put(
        f"{API}/quiz-attempts/{attempt['id']}",
        json={"score": 10},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "SCORE_OUT_OF_RANGE"


async def test_unknown_attempt(client, student):
    response = await client.get(
        f"{API}/quiz-attempts/{uuid4()}",
        headers=auth_headers(student),
    )

    assert response.status_code == 404
    assert response.json()["code"] == "ATTEMPT_NOT_FOUND"

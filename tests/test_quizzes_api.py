from uuid import uuid4

from helpers import QUIZ_PASSWORD, auth_headers

API = "/api/v1"


def quiz_payload(**overrides):
    payload = {
        "title": "Cell biology",
        "description": "Chapter 3",
        "password": "letmein",
        "snapshot_questions": [
            {
                "text": "Powerhouse of the cell?",
                "type": "mcq",
                "options": ["Nucleus", "Mitochondria", "Ribosome"],
                "correct_options": [0, 1, 0],
                "points": 2,
            },
            {
                "id": "tf-1",
                "text": "Plant cells have walls",
                "type": "truefalse",
                "options": ["True", "False"],
                "correct_options": [1, 0],
            },
        ],
    }
    payload.update(overrides)
    return payload


async def test_teacher_creates_quiz(client, teacher):
    response = await client.post(f"{API}/quizzes", json=quiz_payload(), headers=auth_headers(teacher))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["requires_password"] is True
    assert data["question_count"] == 2
    assert data["total_points"] == 3
    assert data["created_by"] == str(teacher.id)
    generated_id, given_id = [q["id"] for q in data["questions"]]
    assert generated_id
    assert given_id == "tf-1"
    assert data["questions"][0]["correct_options"] == [0, 1, 0]
    assert "password" not in data


async def test_quiz_password_is_hashed_and_enforced(client, teacher, student):
    created = (await client.post(
        f"{API}/quizzes", json=quiz_payload(), headers=auth_headers(teacher)
    )).json()["data"]

    wrong = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": created["id"], "hashPassword": QUIZ_PASSWORD},
        headers=auth_headers(student),
    )
    assert wrong.status_code == 403

    right = await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": created["id"], "hashPassword": "letmein"},
        headers=auth_headers(student),
    )
    assert right.status_code == 201


async def test_students_cannot_create_quizzes(client, student):
    response = await client.post(f"{API}/quizzes", json=quiz_payload(), headers=auth_headers(student))

    assert response.status_code == 403
    assert response.json()["code"] == "ROLE_NOT_ALLOWED"


async def test_truefalse_needs_exactly_one_correct_option(client, teacher):
    payload = quiz_payload(snapshot_questions=[
        {
            "text": "Both?",
            "type": "truefalse",
            "options": ["True", "False"],
            "correct_options": [1, 1],
        }
    ])

    response = await client.post(f"{API}/quizzes", json=payload, headers=auth_headers(teacher))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_correct_options_must_match_options(client, teacher):
    payload = quiz_payload(snapshot_questions=[
        {
            "text": "Pick one",
            "options": ["a", "b", "c"],
            "correct_options": [1, 0],
        }
    ])

    response = await client.post(f"{API}/quizzes", json=payload, headers=auth_headers(teacher))

    assert response.status_code == 400


async def test_start_must_precede_end(client, teacher):
    payload = quiz_payload(
        start_time="2030-01-01T10:00:00Z",
        end_time="2030-01-01T09:00:00Z",
    )

    response = await client.post(f"{API}/quizzes", json=payload, headers=auth_headers(teacher))

    assert response.status_code == 400


async def test_student_view_hides_answer_keys(client, quiz, student, teacher):
    response = await client.get(f"{API}/quizzes/{quiz.id}", headers=auth_headers(student))
    assert response.status_code == 200
    questions = response.json()["data"]["questions"]
    assert len(questions) == 3
    assert all("correct_options" not in q for q in questions)
    assert all("option_weights" not in q for q in questions)

    response = await client.get(f"{API}/quizzes/{quiz.id}", headers=auth_headers(teacher))
    questions = response.json()["data"]["questions"]
    assert questions[0]["correct_options"] == [1, 0, 0, 0]


async def test_get_unknown_quiz(client, student):
    response = await client.get(f"{API}/quizzes/{uuid4()}", headers=auth_headers(student))

    assert response.status_code == 404
    assert response.json()["code"] == "QUIZ_NOT_FOUND"


async def test_list_own_quizzes(client, teacher, make_quiz, admin):
    await make_quiz(creator=teacher)
    await make_quiz(creator=teacher)
    await make_quiz(creator=admin)

    response = await client.get(f"{API}/quizzes", headers=auth_headers(teacher))

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 2


async def test_list_attempts_and_statistics(client, quiz, student, teacher):
    attempt = (await client.post(
        f"{API}/quiz-attempts/enroll",
        json={"quizId": str(quiz.id), "hashPassword": QUIZ_PASSWORD},
        headers=auth_headers(student),
    )).json()["data"]
    await client.put(
        f"{API}/quiz-attempts/{attempt['id']}/save",
        json={"answers": [{"questionId": "1", "answer": [1, 0, 0, 0]}]},
        headers=auth_headers(student),
    )
    await client.put(f"{API}/quiz-attempts/{attempt['id']}/submit", headers=auth_headers(student))

    response = await client.get(
        f"{API}/quizzes/{quiz.id}/attempts",
        params={"status": "submitted"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    listing = response.json()["data"]
    assert listing["total"] == 1
    assert listing["attempts"][0]["id"] == attempt["id"]

    response = await client.get(f"{API}/quizzes/{quiz.id}/statistics", headers=auth_headers(teacher))
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["submitted_count"] == 1
    assert stats["average"] == 2.0
    assert stats["ranking"][0]["user_id"] == str(student.id)

    response = await client.get(f"{API}/quizzes/{quiz.id}/statistics", headers=auth_headers(student))
    assert response.status_code == 403

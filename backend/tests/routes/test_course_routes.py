"""Catalog, authoring, enrollment and progress endpoints."""

from app.core.enums import CourseStatus
from tests.helpers import lesson_ids


class TestCatalog:
    def test_lists_published_only(self, client, teacher, published_course, make_course):
        make_course(teacher, title="Unfinished", status=CourseStatus.DRAFT.value)

        resp = client.get("/api/v1/courses")

        assert resp.status_code == 200
        body = resp.json()
        assert [c["id"] for c in body] == [published_course.id]
        assert body[0]["teacher"]["name"] == "Tina Teacher"
        assert body[0]["average_rating"] == 0

    def test_draft_hidden_from_students(self, client, teacher, student_headers, teacher_headers, make_course):
        draft = make_course(teacher, status=CourseStatus.DRAFT.value)

        resp = client.get(f"/api/v1/courses/{draft.id}", headers=student_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Course not available"

        assert client.get(f"/api/v1/courses/{draft.id}", headers=teacher_headers).status_code == 200

    def test_detail_includes_content_tree(self, client, published_course):
        resp = client.get(f"/api/v1/courses/{published_course.id}")

        body = resp.json()
        assert body["enrollment_count"] == 0
        assert len(body["topics"]) == 1
        assert len(body["topics"][0]["lessons"]) == 2

    def test_unknown_course(self, client):
        resp = client.get("/api/v1/courses/01HZZZZZZZZZZZZZZZZZZZZZZZ")
        assert resp.status_code == 404


class TestAuthoring:
    def test_students_cannot_create(self, client, student_headers):
        resp = client.post("/api/v1/courses", json={"title": "Mine", "subject": "math"}, headers=student_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access forbidden"

    def test_teacher_creates_draft(self, client, teacher_headers):
        payload = {
            "title": "Data Science 101",
            "subject": "data",
            "points_price": 200,
            "topics": [
                {
                    "title": "Intro",
                    "lessons": [
                        {"title": "Welcome", "type": "video", "duration": 5},
                        {
                            "title": "Check-in",
                            "type": "quiz",
                            "quiz": {
                                "title": "Warm-up",
                                "questions": [
                                    {"question_text": "2 + 2?", "options": ["3", "4"], "correct_options": [1]}
                                ],
                            },
                        },
                    ],
                }
            ],
        }

        resp = client.post("/api/v1/courses", json=payload, headers=teacher_headers)

        assert resp.status_code == 201
        assert resp.json()["message"] == "Course created successfully"
        course_id = resp.json()["course_id"]

        mine = client.get("/api/v1/courses/my/teaching", headers=teacher_headers).json()
        assert [c["id"] for c in mine] == [course_id]
        assert mine[0]["status"] == CourseStatus.DRAFT.value

        detail = client.get(f"/api/v1/courses/{course_id}", headers=teacher_headers).json()
        quiz = detail["topics"][0]["lessons"][1]["quiz"]
        assert quiz["questions"][0]["question_text"] == "2 + 2?"

    def test_missing_title(self, client, teacher_headers):
        resp = client.post("/api/v1/courses", json={"subject": "math"}, headers=teacher_headers)
        assert resp.status_code == 400

    def test_update_and_delete(self, client, teacher_headers, published_course):
        resp = client.put(
            f"/api/v1/courses/{published_course.id}",
            json={"title": "Python Basics, 2nd edition"},
            headers=teacher_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Python Basics, 2nd edition"

        resp = client.delete(f"/api/v1/courses/{published_course.id}", headers=teacher_headers)
        assert resp.json() == {"message": "Course deleted successfully"}
        assert client.get(f"/api/v1/courses/{published_course.id}").status_code == 404

    def test_student_cannot_update(self, client, student_headers, published_course):
        resp = client.put(
            f"/api/v1/courses/{published_course.id}", json={"title": "Hijacked"}, headers=student_headers
        )
        assert resp.status_code == 403


class TestLearning:
    def test_enroll_complete_lessons_and_track_progress(self, client, student_headers, published_course):
        base = f"/api/v1/courses/{published_course.id}"

        resp = client.post(f"{base}/enroll", headers=student_headers)
        assert resp.status_code == 201
        assert resp.json()["completed"] is False

        status = client.get(f"{base}/enrollment-status", headers=student_headers).json()
        assert status["is_enrolled"] is True

        first = lesson_ids(published_course)[0]
        resp = client.post(f"{base}/lessons/{first}/completion", headers=student_headers)
        assert resp.status_code == 200
        assert resp.json()["completed"] is True

        progress = client.get(f"{base}/progress", headers=student_headers).json()
        assert progress["completed_lessons"] == [first]
        assert progress["progress_percent"] == 50
        assert progress["total_lessons"] == 2

        learning = client.get("/api/v1/courses/my/learning", headers=student_headers).json()
        assert [c["id"] for c in learning] == [published_course.id]

    def test_enroll_twice(self, client, student_headers, published_course):
        client.post(f"/api/v1/courses/{published_course.id}/enroll", headers=student_headers)
        resp = client.post(f"/api/v1/courses/{published_course.id}/enroll", headers=student_headers)

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Already enrolled in this course"

    def test_unenroll(self, client, student_headers, published_course):
        client.post(f"/api/v1/courses/{published_course.id}/enroll", headers=student_headers)

        resp = client.delete(f"/api/v1/courses/{published_course.id}/enroll", headers=student_headers)

        assert resp.json() == {"message": "Successfully unenrolled from course"}
        status = client.get(
            f"/api/v1/courses/{published_course.id}/enrollment-status", headers=student_headers
        ).json()
        assert status["is_enrolled"] is False

    def test_save_toggle(self, client, student_headers, published_course):
        resp = client.post(f"/api/v1/courses/{published_course.id}/save", headers=student_headers)
        assert resp.json()["saved"] is True

    def test_enroll_requires_login(self, client, published_course):
        resp = client.post(f"/api/v1/courses/{published_course.id}/enroll")
        assert resp.status_code == 401

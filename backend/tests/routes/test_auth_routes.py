"""Auth endpoints and the error document shape."""

from tests.conftest import TEST_PASSWORD


class TestRegister:
    def test_register_teacher(self, client):
        resp = client.post(
            "/api/v1/auth/register",
            json={"name": "New Teacher", "email": "new.teacher@example.com", "password": "longenough", "role": "teacher"},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "User registered successfully"
        assert body["token"]
        assert body["user"]["role"] == "teacher"
        assert body["user"]["teacher_profile"] is not None
        assert "hashed_password" not in body["user"]

    def test_missing_fields_is_problem_document(self, client):
        resp = client.post("/api/v1/auth/register", json={"email": "a@example.com"})

        assert resp.status_code == 400
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["detail"] == "Please provide all required fields: name, email, and password"
        assert body["code"] == "ValidationException"
        assert body["instance"] == "/api/v1/auth/register"

    def test_duplicate_email(self, client, student):
        resp = client.post(
            "/api/v1/auth/register",
            json={"name": "Again", "email": student.email, "password": "longenough"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"


class TestLogin:
    def test_login_returns_token(self, client, student):
        resp = client.post("/api/v1/auth/login", json={"email": student.email, "password": TEST_PASSWORD})

        assert resp.status_code == 200
        token = resp.json()["token"]
        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["id"] == student.id

    def test_wrong_password(self, client, student):
        resp = client.post("/api/v1/auth/login", json={"email": student.email, "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"


class TestMe:
    def test_anonymous(self, client):
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authenticated"

    def test_garbage_token(self, client):
        resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"

    def test_me_lists_collections(self, client, student, student_headers):
        resp = client.get("/api/v1/auth/me", headers=student_headers)

        body = resp.json()
        assert body["email"] == student.email
        assert body["points_transactions"] == []
        assert body["certificates"] == []

"""Unit tests for enrollment and grade routes."""

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from campusrecords.api.app import register_exception_handlers
from campusrecords.api.dependencies import get_records
from campusrecords.api.routes import enrollments, grades
from campusrecords.registry import CampusRecords
from campusrecords.store import InvalidInputError, RecordsError, new_course


@pytest.fixture
def app(populated: CampusRecords):
    """Create a test FastAPI app serving the populated records."""
    app = FastAPI()

    def override_get_records():
        yield populated

    app.dependency_overrides[get_records] = override_get_records
    register_exception_handlers(app)

    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(grades.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def _enroll(client: TestClient, student_id: str, course_code: str):
    return client.post(
        "/api/v1/enrollments", json={"student_id": student_id, "course_code": course_code}
    )


@pytest.mark.unit
class TestEnrollmentRoutes:
    """Tests for /enrollments."""

    def test_enroll(self, client: TestClient, populated: CampusRecords) -> None:
        """POST /enrollments returns 201 and updates the student."""
        response = _enroll(client, "S1", "C1")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["status"] == "enrolled"
        assert populated.students.get_by_id("S1").total_credits == 3

    def test_duplicate_is_conflict(self, client: TestClient) -> None:
        """Enrolling twice is 409."""
        _enroll(client, "S1", "C1")

        response = _enroll(client, "S1", "C1")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]

    def test_credit_limit_is_unprocessable(
        self, client: TestClient, populated: CampusRecords
    ) -> None:
        """Going over the credit limit is 422 and names the limit."""
        for code in ("X1", "X2", "X3"):
            populated.courses.add(new_course(code, f"Seminar {code}", 6, "CS"))
            assert _enroll(client, "S1", code).status_code == status.HTTP_201_CREATED

        response = _enroll(client, "S1", "C1")

        assert response.status_code == 422
        assert "18" in response.json()["error"]

    def test_unknown_student_or_course(self, client: TestClient) -> None:
        """Missing keys are 404."""
        assert _enroll(client, "nope", "C1").status_code == status.HTTP_404_NOT_FOUND
        assert _enroll(client, "S1", "NOPE").status_code == status.HTTP_404_NOT_FOUND

    def test_status_update(self, client: TestClient) -> None:
        """PATCH moves an enrolled record; a second move is rejected."""
        _enroll(client, "S1", "C1")

        response = client.patch("/api/v1/enrollments/S1/C1", json={"status": "completed"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["status"] == "completed"

        response = client.patch("/api/v1/enrollments/S1/C1", json={"status": "dropped"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unenroll(self, client: TestClient, populated: CampusRecords) -> None:
        """DELETE returns 204; a second DELETE is 404."""
        _enroll(client, "S1", "C1")

        assert client.delete("/api/v1/enrollments/S1/C1").status_code == (
            status.HTTP_204_NO_CONTENT
        )
        assert client.delete("/api/v1/enrollments/S1/C1").status_code == (
            status.HTTP_404_NOT_FOUND
        )
        assert populated.students.get_by_id("S1").total_credits == 0

    def test_list_and_statistics(self, client: TestClient) -> None:
        """Listing and per-status counts."""
        _enroll(client, "S1", "C1")
        _enroll(client, "S2", "C1")
        client.patch("/api/v1/enrollments/S2/C1", json={"status": "dropped"})

        listed = client.get("/api/v1/enrollments").json()["data"]
        stats = client.get("/api/v1/enrollments/statistics").json()["data"]

        assert [(e["student_id"], e["course_code"]) for e in listed] == [
            ("S1", "C1"),
            ("S2", "C1"),
        ]
        assert stats["total"] == 2
        assert stats["by_status"]["dropped"] == 1
        assert stats["by_course"] == {"C1": 2}


@pytest.mark.unit
class TestGradeRoutes:
    """Tests for /grades."""

    def test_record(self, client: TestClient, populated: CampusRecords) -> None:
        """POST /grades returns 201 with the derived letter grade."""
        _enroll(client, "S1", "C1")

        response = client.post(
            "/api/v1/grades", json={"student_id": "S1", "course_code": "C1", "marks": 85}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["letter_grade"] == "B"
        assert data["grade_points"] == 3.0
        assert populated.students.get_by_id("S1").gpa == 3.0

    def test_marks_out_of_range(self, client: TestClient) -> None:
        """Marks above 100 are a bad request."""
        _enroll(client, "S1", "C1")

        response = client.post(
            "/api/v1/grades", json={"student_id": "S1", "course_code": "C1", "marks": 105}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_without_enrollment(self, client: TestClient) -> None:
        """Grading an unenrolled pair is 404."""
        response = client.post(
            "/api/v1/grades", json={"student_id": "S1", "course_code": "C1", "marks": 70}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_duplicate(self, client: TestClient) -> None:
        """Recording twice is 409."""
        _enroll(client, "S1", "C1")
        payload = {"student_id": "S1", "course_code": "C1", "marks": 70}
        client.post("/api/v1/grades", json=payload)

        assert client.post("/api/v1/grades", json=payload).status_code == status.HTTP_409_CONFLICT

    def test_get_update_delete(self, client: TestClient) -> None:
        """Single-grade lifecycle."""
        _enroll(client, "S1", "C1")
        client.post("/api/v1/grades", json={"student_id": "S1", "course_code": "C1", "marks": 70})

        assert client.get("/api/v1/grades/S1/C1").json()["data"]["letter_grade"] == "C"

        response = client.patch("/api/v1/grades/S1/C1", json={"marks": 93, "comments": "regrade"})
        assert response.json()["data"]["letter_grade"] == "A"
        assert response.json()["data"]["comments"] == "regrade"

        assert client.delete("/api/v1/grades/S1/C1").status_code == status.HTTP_204_NO_CONTENT
        assert client.get("/api/v1/grades/S1/C1").status_code == status.HTTP_404_NOT_FOUND

    def test_statistics(self, client: TestClient) -> None:
        """Pass rate is a percentage."""
        _enroll(client, "S1", "C1")
        _enroll(client, "S2", "C1")
        client.post("/api/v1/grades", json={"student_id": "S1", "course_code": "C1", "marks": 95})
        client.post("/api/v1/grades", json={"student_id": "S2", "course_code": "C1", "marks": 30})

        data = client.get("/api/v1/grades/statistics").json()["data"]

        assert data["total"] == 2
        assert data["pass_rate"] == 50.0
        assert data["distribution"]["F"] == 1


@pytest.mark.unit
class TestErrorHandling:
    """Tests for the error-to-status mapping."""

    def test_unmapped_records_error_is_500(self, app: FastAPI, client: TestClient) -> None:
        """Unexpected records errors hide their message."""
        @app.get("/boom")
        def boom() -> None:
            raise RecordsError("disk on fire")

        response = client.get("/boom")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"data": None, "error": "Internal server error"}

    def test_subclass_uses_parent_mapping(self, app: FastAPI, client: TestClient) -> None:
        """Error subclasses map through their base class."""

        class OddMarksError(InvalidInputError):
            pass

        @app.get("/odd")
        def odd() -> None:
            raise OddMarksError("odd marks")

        response = client.get("/odd")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "odd marks"

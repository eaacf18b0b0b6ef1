"""Unit tests for enrollment routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scolarite.api.app import register_exception_handlers
from scolarite.api.dependencies import Services, get_services
from scolarite.api.routes import enrollments
from scolarite.records import Course, Database, Student


@pytest.fixture
def services(db: Database) -> Services:
    return Services.for_database(db)


@pytest.fixture
def client(services: Services):
    """Create a test client over the enrollment router."""
    app = FastAPI()

    def override_get_services():
        yield services

    app.dependency_overrides[get_services] = override_get_services
    register_exception_handlers(app)
    app.include_router(enrollments.router, prefix="/api/v1")

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def student(services: Services) -> Student:
    department = services.departments.create("GINF", "Genie Informatique")
    return services.students.create("Amina", "Benali", "amina@example.com", department.id)


@pytest.fixture
def course(services: Services, student: Student) -> Course:
    return services.courses.create("INF101", "Algorithmique", student.department_id, max_students=2)


def enroll(client: TestClient, student: Student, course: Course) -> dict:
    response = client.post(
        "/api/v1/enrollments", json={"student_id": student.id, "course_id": course.id}
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.unit
class TestEnroll:
    def test_enroll(self, client: TestClient, student: Student, course: Course) -> None:
        data = enroll(client, student, course)

        assert data["student_id"] == student.id
        assert data["course_id"] == course.id
        assert data["status"] == "ACTIVE"
        assert data["grade"] is None

    def test_unknown_course_is_404(self, client: TestClient, student: Student) -> None:
        response = client.post(
            "/api/v1/enrollments", json={"student_id": student.id, "course_id": 999}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Course with id '999' not found"

    def test_second_enrollment_is_422(
        self, client: TestClient, student: Student, course: Course
    ) -> None:
        enroll(client, student, course)

        response = client.post(
            "/api/v1/enrollments", json={"student_id": student.id, "course_id": course.id}
        )

        assert response.status_code == 422
        assert "already enrolled" in response.json()["error"]

    def test_cross_department_is_422(
        self, client: TestClient, services: Services, student: Student
    ) -> None:
        other = services.departments.create("GC", "Genie Civil")
        course = services.courses.create("GC101", "Resistance des materiaux", other.id)

        response = client.post(
            "/api/v1/enrollments", json={"student_id": student.id, "course_id": course.id}
        )

        assert response.status_code == 422
        assert "Cross-department" in response.json()["error"]


@pytest.mark.unit
class TestTransitions:
    def test_drop(self, client: TestClient, student: Student, course: Course) -> None:
        enrollment_id = enroll(client, student, course)["id"]

        response = client.post(f"/api/v1/enrollments/{enrollment_id}/drop")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "DROPPED"

    def test_drop_twice_is_422(self, client: TestClient, student: Student, course: Course) -> None:
        enrollment_id = enroll(client, student, course)["id"]
        client.post(f"/api/v1/enrollments/{enrollment_id}/drop")

        response = client.post(f"/api/v1/enrollments/{enrollment_id}/drop")

        assert response.status_code == 422

    def test_grade_passing(self, client: TestClient, student: Student, course: Course) -> None:
        enrollment_id = enroll(client, student, course)["id"]

        response = client.post(f"/api/v1/enrollments/{enrollment_id}/grade", json={"grade": 14.5})

        data = response.json()["data"]
        assert data["grade"] == 14.5
        assert data["status"] == "COMPLETED"

    def test_grade_out_of_range_is_400(
        self, client: TestClient, student: Student, course: Course
    ) -> None:
        enrollment_id = enroll(client, student, course)["id"]

        response = client.post(f"/api/v1/enrollments/{enrollment_id}/grade", json={"grade": 21})

        assert response.status_code == 400
        assert "between 0 and 20" in response.json()["error"]

    def test_correction_requires_reason(
        self, client: TestClient, student: Student, course: Course
    ) -> None:
        enrollment_id = enroll(client, student, course)["id"]
        client.post(f"/api/v1/enrollments/{enrollment_id}/grade", json={"grade": 8})

        response = client.put(f"/api/v1/enrollments/{enrollment_id}/grade", json={"grade": 11})

        assert response.status_code == 400
        assert "reason" in response.json()["error"]

    def test_correction_rederives_status(
        self, client: TestClient, student: Student, course: Course
    ) -> None:
        enrollment_id = enroll(client, student, course)["id"]
        client.post(f"/api/v1/enrollments/{enrollment_id}/grade", json={"grade": 8})

        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/grade",
            json={"grade": 11, "reason": "Copie recorrigee"},
        )

        data = response.json()["data"]
        assert data["grade"] == 11
        assert data["status"] == "COMPLETED"

    def test_status_override(self, client: TestClient, student: Student, course: Course) -> None:
        enrollment_id = enroll(client, student, course)["id"]
        client.post(f"/api/v1/enrollments/{enrollment_id}/drop")

        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/status", json={"status": "ACTIVE"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ACTIVE"

    def test_unknown_status_is_400(
        self, client: TestClient, student: Student, course: Course
    ) -> None:
        enrollment_id = enroll(client, student, course)["id"]

        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/status", json={"status": "PAUSED"}
        )

        assert response.status_code == 400

    def test_get_missing_is_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/enrollments/42").status_code == 404

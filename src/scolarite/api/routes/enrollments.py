"""Enrollment endpoints: enroll, drop, grade."""

from fastapi import APIRouter, status

from scolarite.api.dependencies import EnrollmentServiceDep
from scolarite.api.models import (
    APIResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    GradeAssign,
    GradeCorrection,
    StatusOverride,
    enrollment_to_response,
)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=APIResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def enroll(
    request: EnrollmentCreate, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Enroll a student into a course."""
    enrollment = service.enroll(request.student_id, request.course_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.get("/{enrollment_id}", response_model=APIResponse[EnrollmentResponse])
def get_enrollment(
    enrollment_id: int, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Get an enrollment by ID."""
    return APIResponse(data=enrollment_to_response(service.get(enrollment_id)))


@router.post("/{enrollment_id}/drop", response_model=APIResponse[EnrollmentResponse])
def drop_enrollment(
    enrollment_id: int, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Drop an ACTIVE enrollment."""
    return APIResponse(data=enrollment_to_response(service.drop_course(enrollment_id)))


@router.post("/{enrollment_id}/grade", response_model=APIResponse[EnrollmentResponse])
def assign_grade(
    enrollment_id: int, request: GradeAssign, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Assign the initial grade of an enrollment."""
    enrollment = service.assign_grade(enrollment_id, request.grade)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.put("/{enrollment_id}/grade", response_model=APIResponse[EnrollmentResponse])
def correct_grade(
    enrollment_id: int, request: GradeCorrection, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Correct an existing grade. A reason is required."""
    enrollment = service.update_grade(enrollment_id, request.grade, request.reason)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.put("/{enrollment_id}/status", response_model=APIResponse[EnrollmentResponse])
def override_status(
    enrollment_id: int, request: StatusOverride, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Administrative override of an enrollment's status."""
    enrollment = service.update_enrollment_status(enrollment_id, request.status)
    return APIResponse(data=enrollment_to_response(enrollment))

from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Body, Depends

from api.deps import Student
from services.payment import CamelModel
from services.enrollment import EnrollmentService, CartItem, EnrolledCourse, get_enrollment_service


router = APIRouter()


@router.get(path='/cart')
async def get_cart(
    student: Student,
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)]
) -> list[CartItem]:
    return await enrollment_service.list_cart(student.id)


class CartBody(CamelModel):
    course_id: UUID


@router.post(path='/cart')
async def add_to_cart(
    body: Annotated[CartBody, Body()],
    student: Student,
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)]
) -> list[CartItem]:
    return await enrollment_service.add_to_cart(student.id, body.course_id)


@router.get(path='/student/enrollments')
async def list_enrollments(
    student: Student,
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)]
) -> list[EnrolledCourse]:
    return await enrollment_service.list_enrollments(student.id)

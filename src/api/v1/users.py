from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Body, Depends, Path, Query
from pydantic import BaseModel

from api.deps import Admin
from services.users import (
    UserService, Page, StudentRow, LecturerRow, LecturerBrief, Lecturer, LecturerUpdate, get_user_service
)


router = APIRouter(prefix='/user-management')


@router.get(path='/lecturer')
async def search_lecturers(
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)],
    q: Annotated[str | None, Query()] = None
) -> list[LecturerBrief]:
    return await user_service.search_lecturers(q)


@router.get(
    path='/lecturer/paginated',
    description='Numeric keywords match NIDN prefixes and are ranked by relevance'
)
async def list_lecturers(
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query()] = 1,
    q: Annotated[str | None, Query()] = None
) -> Page[LecturerRow]:
    return await user_service.list_lecturers(page=page, keyword=q)


@router.get(path='/lecturer/{lecturer_id}')
async def get_lecturer(
    lecturer_id: Annotated[UUID, Path()],
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)]
) -> Lecturer:
    return await user_service.get_lecturer(lecturer_id)


@router.put(path='/lecturer/{lecturer_id}', description='Updates only the profile fields present in the body')
async def update_lecturer(
    lecturer_id: Annotated[UUID, Path()],
    body: Annotated[LecturerUpdate, Body()],
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)]
) -> Lecturer:
    return await user_service.update_lecturer(lecturer_id, body)


@router.delete(path='/lecturer/{lecturer_id}', description='Soft-deletes the lecturer and frees the email')
async def delete_lecturer(
    lecturer_id: Annotated[UUID, Path()],
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)]
) -> Lecturer:
    return await user_service.delete_lecturer(lecturer_id)


@router.get(
    path='/student',
    description='Keyword searches are ranked by relevance: exact email, email prefix, email substring, name'
)
async def list_students(
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query()] = 1,
    q: Annotated[str | None, Query()] = None,
    page_size: Annotated[int | None, Query(alias='pageSize')] = None
) -> Page[StudentRow]:
    return await user_service.list_students(page=page, keyword=q, page_size=page_size)


class StudentStatusBody(BaseModel):
    active: bool


class SuccessResponse(BaseModel):
    success: bool = True


@router.post(path='/student/{student_id}/status')
async def set_student_status(
    student_id: Annotated[UUID, Path()],
    body: Annotated[StudentStatusBody, Body()],
    _: Admin,
    user_service: Annotated[UserService, Depends(get_user_service)]
) -> SuccessResponse:
    await user_service.set_student_active(student_id, active=body.active)
    return SuccessResponse()

from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Body, Depends, Path, Query
from pydantic import BaseModel

from api.deps import Admin, Lecturer
from services.course import (
    CourseService, CourseItem, CourseReviewInfo, PublicCourse, CategoryItem,
    StatusFilter, SortBy, get_course_service
)


router = APIRouter()


@router.get(path='/course', description='All courses that are not soft-deleted')
async def list_courses(
    _: Admin,
    course_service: Annotated[CourseService, Depends(get_course_service)],
    filter: Annotated[StatusFilter, Query()] = 'all',
    sort_by: Annotated[SortBy, Query(alias='sortBy')] = 'newest'
) -> list[CourseItem]:
    return await course_service.list_courses(status_filter=filter, sort_by=sort_by)


@router.get(path='/course/{course_id}')
async def get_course(
    course_id: Annotated[UUID, Path()],
    course_service: Annotated[CourseService, Depends(get_course_service)]
) -> PublicCourse:
    return await course_service.get_published_course(course_id)


@router.post(path='/course/{course_id}/submit', description='Lecturer hands a draft over to the admins')
async def submit_course(
    course_id: Annotated[UUID, Path()],
    lecturer: Lecturer,
    course_service: Annotated[CourseService, Depends(get_course_service)]
) -> CourseReviewInfo:
    return await course_service.submit_for_review(course_id, lecturer_id=lecturer.id)


class ReviewBody(BaseModel):
    admin_review: str


@router.post(path='/course/{course_id}/review')
async def review_course(
    course_id: Annotated[UUID, Path()],
    body: Annotated[ReviewBody, Body()],
    _: Admin,
    course_service: Annotated[CourseService, Depends(get_course_service)]
) -> CourseReviewInfo:
    return await course_service.submit_review(course_id, admin_review=body.admin_review)


@router.post(path='/course/{course_id}/publish')
async def publish_course(
    course_id: Annotated[UUID, Path()],
    _: Admin,
    course_service: Annotated[CourseService, Depends(get_course_service)]
) -> CourseReviewInfo:
    return await course_service.publish(course_id)


@router.get(path='/lecturer/courses')
async def list_lecturer_courses(
    lecturer: Lecturer,
    course_service: Annotated[CourseService, Depends(get_course_service)],
    filter: Annotated[StatusFilter, Query()] = 'all',
    sort_by: Annotated[SortBy, Query(alias='sortBy')] = 'newest'
) -> list[CourseItem]:
    return await course_service.list_lecturer_courses(lecturer.id, status_filter=filter, sort_by=sort_by)


@router.get(path='/category')
async def list_categories(
    course_service: Annotated[CourseService, Depends(get_course_service)]
) -> list[CategoryItem]:
    return await course_service.list_categories()

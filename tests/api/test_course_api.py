import logging
import httpx
import uuid
import pytest
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from starlette import status

import tables
from helpers import create_category, create_course, create_user


async def _get_course(session_maker: async_sessionmaker[AsyncSession], course_id: uuid.UUID) -> tables.Course:
    async with session_maker() as session:
        course = await session.get(tables.Course, course_id)
    assert course is not None
    return course


async def test_review_and_publish(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status='need-review')
    headers = {'X-User-Id': str(admin.id)}

    response = await api_client.post(
        f'/api/course/{course.id}/review',
        json={'admin_review': 'Materi sudah lengkap'},
        headers=headers
    )
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json() == {
        'id': str(course.id),
        'admin_review': 'Materi sudah lengkap',
        'title': course.title,
        'status': 'reviewed'
    }

    response = await api_client.post(f'/api/course/{course.id}/publish', headers=headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['status'] == 'published'
    assert response.json()['admin_review'] == 'Materi sudah lengkap'

    # Publishing twice is allowed
    response = await api_client.post(f'/api/course/{course.id}/publish', headers=headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['status'] == 'published'

    stored = await _get_course(session_maker, course.id)
    assert stored.status == 'published'
    assert stored.updated_at is not None


@pytest.mark.parametrize('current_status', ['draft', 'need-review'])
async def test_publish_requires_review(
    current_status: tables.course.Status,
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status=current_status)

    response = await api_client.post(f'/api/course/{course.id}/publish', headers={'X-User-Id': str(admin.id)})

    assert response.status_code == status.HTTP_409_CONFLICT, response.text
    assert 'error' in response.json()
    assert (await _get_course(session_maker, course.id)).status == current_status


@pytest.mark.parametrize('current_status', ['draft', 'published'])
async def test_review_requires_submission(
    current_status: tables.course.Status,
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status=current_status)

    response = await api_client.post(
        f'/api/course/{course.id}/review',
        json={'admin_review': 'Perlu perbaikan'},
        headers={'X-User-Id': str(admin.id)}
    )

    assert response.status_code == status.HTTP_409_CONFLICT, response.text
    stored = await _get_course(session_maker, course.id)
    assert stored.status == current_status
    assert stored.admin_review is None


async def test_review_can_be_revised(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status='reviewed')

    response = await api_client.post(
        f'/api/course/{course.id}/review',
        json={'admin_review': 'Revisi kedua'},
        headers={'X-User-Id': str(admin.id)}
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['admin_review'] == 'Revisi kedua'
    assert response.json()['status'] == 'reviewed'


async def test_republish_is_logged_as_unchanged(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category,
    caplog: pytest.LogCaptureFixture
):
    course = await create_course(session_maker, lecturer.id, category.id, status='published')

    with caplog.at_level(logging.INFO, logger='course-api-course'):
        response = await api_client.post(f'/api/course/{course.id}/publish', headers={'X-User-Id': str(admin.id)})

    assert response.status_code == status.HTTP_200_OK, response.text
    assert f'course {course.id} is already "published", status unchanged' in caplog.text
    assert 'moved from' not in caplog.text


async def test_review_requires_body(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status='need-review')

    response = await api_client.post(f'/api/course/{course.id}/review', json={}, headers={'X-User-Id': str(admin.id)})

    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert (await _get_course(session_maker, course.id)).status == 'need-review'


async def test_review_of_unknown_course(api_client: httpx.AsyncClient, admin: tables.User):
    response = await api_client.post(
        f'/api/course/{uuid.uuid4()}/review',
        json={'admin_review': 'OK'},
        headers={'X-User-Id': str(admin.id)}
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND, response.text


async def test_review_requires_admin(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status='need-review')
    url = f'/api/course/{course.id}/review'

    response = await api_client.post(url, json={'admin_review': 'OK'})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED, response.text
    assert response.json() == {'error': 'Unauthorized'}

    response = await api_client.post(url, json={'admin_review': 'OK'}, headers={'X-User-Id': str(uuid.uuid4())})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED, response.text

    response = await api_client.post(url, json={'admin_review': 'OK'}, headers={'X-User-Id': str(lecturer.id)})
    assert response.status_code == status.HTTP_403_FORBIDDEN, response.text
    assert response.json() == {'error': 'Forbidden'}

    assert (await _get_course(session_maker, course.id)).status == 'need-review'


async def test_deleted_admin_is_unauthorized(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    lecturer: tables.User,
    category: tables.Category
):
    admin = await create_user(session_maker, role='admin', name='former', deleted_at=datetime.now() - timedelta(hours=1))
    course = await create_course(session_maker, lecturer.id, category.id, status='reviewed')

    response = await api_client.post(f'/api/course/{course.id}/publish', headers={'X-User-Id': str(admin.id)})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED, response.text


async def test_submit_for_review(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    lecturer: tables.User,
    category: tables.Category
):
    course = await create_course(session_maker, lecturer.id, category.id, status='draft')
    other = await create_user(session_maker, role='lecturer', name='lain')

    response = await api_client.post(f'/api/course/{course.id}/submit', headers={'X-User-Id': str(other.id)})
    assert response.status_code == status.HTTP_403_FORBIDDEN, response.text
    assert (await _get_course(session_maker, course.id)).status == 'draft'

    response = await api_client.post(f'/api/course/{course.id}/submit', headers={'X-User-Id': str(lecturer.id)})
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['status'] == 'need-review'

    response = await api_client.post(f'/api/course/{course.id}/submit', headers={'X-User-Id': str(lecturer.id)})
    assert response.status_code == status.HTTP_409_CONFLICT, response.text


async def test_list_courses(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    admin: tables.User,
    lecturer: tables.User,
    category: tables.Category
):
    now = datetime.now()
    oldest = await create_course(
        session_maker, lecturer.id, category.id, title='Oldest', status='draft', created_at=now - timedelta(days=3)
    )
    middle = await create_course(
        session_maker, lecturer.id, category.id, title='Middle', created_at=now - timedelta(days=2),
        deleted_at=now + timedelta(days=1)
    )
    newest = await create_course(
        session_maker, lecturer.id, category.id, title='Newest', created_at=now - timedelta(days=1)
    )
    await create_course(
        session_maker, lecturer.id, category.id, title='Deleted', deleted_at=now - timedelta(minutes=1)
    )
    headers = {'X-User-Id': str(admin.id)}

    response = await api_client.get('/api/course', headers=headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    response_json = response.json()
    assert [c['id'] for c in response_json] == [str(newest.id), str(middle.id), str(oldest.id)]
    assert response_json[0]['lecturer_name'] == 'khongguan'
    assert response_json[0]['category_name'] == 'Keuangan'

    response = await api_client.get('/api/course', params={'sortBy': 'oldest'}, headers=headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    assert [c['id'] for c in response.json()] == [str(oldest.id), str(middle.id), str(newest.id)]

    response = await api_client.get('/api/course', params={'filter': 'draft'}, headers=headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    assert [c['id'] for c in response.json()] == [str(oldest.id)]

    response = await api_client.get('/api/course', params={'filter': 'archived'}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text


async def test_list_lecturer_courses(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    lecturer: tables.User,
    category: tables.Category
):
    other = await create_user(session_maker, role='lecturer', name='lain')
    own = await create_course(session_maker, lecturer.id, category.id, status='draft')
    await create_course(session_maker, other.id, category.id)
    await create_course(session_maker, lecturer.id, category.id, deleted_at=datetime.now() + timedelta(days=1))

    response = await api_client.get('/api/lecturer/courses', headers={'X-User-Id': str(lecturer.id)})

    assert response.status_code == status.HTTP_200_OK, response.text
    assert [c['id'] for c in response.json()] == [str(own.id)]


async def test_get_published_course(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    lecturer: tables.User,
    category: tables.Category
):
    published = await create_course(session_maker, lecturer.id, category.id, price=99000)
    draft = await create_course(session_maker, lecturer.id, category.id, status='draft')

    response = await api_client.get(f'/api/course/{published.id}')
    assert response.status_code == status.HTTP_200_OK, response.text
    response_json = response.json()
    assert response_json['id'] == str(published.id)
    assert response_json['status'] == 'published'
    assert 'admin_review' not in response_json

    response = await api_client.get(f'/api/course/{draft.id}')
    assert response.status_code == status.HTTP_404_NOT_FOUND, response.text
    assert response.json() == {'error': 'Not found'}

    response = await api_client.get('/api/course/not-a-uuid')
    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text


async def test_list_categories(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    category: tables.Category
):
    design = await create_category(session_maker, name='Desain')

    response = await api_client.get('/api/category')

    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json() == [
        {'id': str(design.id), 'name': 'Desain'},
        {'id': str(category.id), 'name': 'Keuangan'}
    ]

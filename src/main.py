import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse, PlainTextResponse
from starlette import status

import db.postgres
from api.v1 import payment, course, users, student
from services.errors import NotFoundError, ConflictError, UnauthorizedError, ForbiddenError
from services.payment import AlreadyEnrolledError


logger = logging.getLogger('course-api')

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(name)s %(levelname)s: %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.postgres.init()
    logger.info('api is started')

    yield

    await db.postgres.dispose()


app = FastAPI(
    title='Course Platform',
    lifespan=lifespan,
    docs_url='/api/openapi',
    openapi_url='/api/openapi.json',
    default_response_class=ORJSONResponse
)

app.include_router(payment.router, prefix='/api', tags=['payment'])
app.include_router(course.router, prefix='/api', tags=['course'])
app.include_router(users.router, prefix='/api', tags=['user-management'])
app.include_router(student.router, prefix='/api', tags=['student'])


def _error(status_code: int, message: str, **extra) -> ORJSONResponse:
    return ORJSONResponse(status_code=status_code, content={'error': message, **extra})


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    return _error(status.HTTP_400_BAD_REQUEST, 'Invalid request', details=jsonable_encoder(exc.errors()))


@app.exception_handler(NotFoundError)
async def on_not_found(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(ConflictError)
async def on_conflict(request: Request, exc: ConflictError):
    # Already-enrolled keeps the 400 existing clients branch on
    if isinstance(exc, AlreadyEnrolledError):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(UnauthorizedError)
async def on_unauthorized(request: Request, exc: UnauthorizedError):
    return _error(status.HTTP_401_UNAUTHORIZED, str(exc) or 'Unauthorized')


@app.exception_handler(ForbiddenError)
async def on_forbidden(request: Request, exc: ForbiddenError):
    return _error(status.HTTP_403_FORBIDDEN, str(exc) or 'Forbidden')


@app.exception_handler(Exception)
async def on_unhandled(request: Request, exc: Exception):
    # The exception is re-raised after this handler and the server logs the traceback
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')


@app.get('/healthz', response_class=PlainTextResponse)
async def healthz():
    return 'ok'

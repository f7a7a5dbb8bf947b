import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from booking_backend.core import config
from booking_backend.core.errors import BookingApiError
from booking_backend.database import Base, detect_optional_schema, engine, reset_optional_schema
from booking_backend.models import availability, booking, service, user  # noqa: F401
from booking_backend.routes import availability_routes, booking_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        reset_optional_schema()
        detect_optional_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
    yield


app = FastAPI(title='Booking API', lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(BookingApiError)
async def booking_api_error_handler(request: Request, exc: BookingApiError):
    if exc.status_code >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={'error': exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning('Validation error for %s: %s', request.url.path, errors)
    missing = any(error.get('type') == 'missing' for error in errors)
    return JSONResponse(
        status_code=400,
        content={
            'error': 'Missing required fields' if missing else 'Invalid request',
            'details': [
                {'loc': [str(part) for part in error.get('loc', ())], 'msg': error.get('msg', '')}
                for error in errors
            ],
        },
    )


@app.get('/')
def root():
    return {'status': 'Booking API Running'}


app.include_router(availability_routes.router, prefix='/api/booking/availability')
app.include_router(booking_routes.router, prefix='/api/booking')

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from database import init_db
from errors import AppError, DatabaseConnectionError, QueryError, RequestTimeoutError
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.posts import router as posts_router
from routes.cdn import router as cdn_router
from utils.route_helpers import fail, ok

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
ENDPOINTS = {
    "POST /api/auth/cadastro": "Register a user",
    "POST /api/auth/login": "Log in",
    "PUT /api/users/update": "Update a profile",
    "POST /api/users/upload-avatar": "Upload a profile picture",
    "GET /api/users/:id": "Get a user profile",
    "POST /api/posts/postar": "Create a post",
    "GET /api/posts/feed": "Get the feed",
    "POST /api/posts/curtir": "Like or unlike a post",
    "POST /api/posts/comentar": "Comment on a post",
    "DELETE /api/posts/deletar/:id": "Delete a post",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
    except (DatabaseConnectionError, QueryError) as e:
        logger.critical("Could not initialize the database: %s", e.detail)
        raise SystemExit(1)
    yield


async def handle_app_error(request: Request, exc: AppError):
    if isinstance(exc, (DatabaseConnectionError, QueryError)):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.detail, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message))


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"Invalid {field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=200, content=fail(message))


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    # A known path with the wrong method is as unmatched as an unknown path
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content=fail("Endpoint not found"))
    return JSONResponse(status_code=200, content=fail(str(exc.detail)))


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=200, content=fail("Internal server error"))


def create_app() -> FastAPI:
    app = FastAPI(title="Social feed API", version=API_VERSION, lifespan=lifespan)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],  # Allows all methods
        allow_headers=["*"],  # Allows all headers
    )

    @app.middleware("http")
    async def log_and_time_out(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        try:
            return await asyncio.wait_for(call_next(request), timeout=config.REQUEST_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.error("Timed out after %ss: %s %s", config.REQUEST_TIMEOUT_SECONDS, request.method, request.url.path)
            error = RequestTimeoutError()
            return JSONResponse(status_code=error.status_code, content=fail(error.message))

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Include routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(cdn_router)

    @app.get("/api")
    def api_info():
        return ok("API is running", {"version": API_VERSION, "endpoints": ENDPOINTS})

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)

"""
Course library backend entry point.

Architecture:
- One Python process, one asyncio event loop
- FastAPI serves the HTTP API
- Batch imports run as asyncio tasks alongside request handling
- APScheduler periodically drops finished background tasks

Start-up resolves and validates the courses directory once; every import
and file check afterwards is relative to it.

Run with: python main.py [--port PORT]
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import (
    check_required_env_vars,
    get_allowed_origins,
    get_api_port,
    get_task_cleanup_interval,
    get_task_max_age,
    is_dev_mode,
    resolve_courses_base_dir,
)
from core.courses import CourseParser
from core.database import close_engine
from core.sessions import SessionStore
from core.tasks import TaskRegistry
from web_api.routes.admin import router as admin_router
from web_api.routes.content import router as content_router
from web_api.routes.courses import router as courses_router
from web_api.routes.modules import router as modules_router
from web_api.routes.profiles import router as profiles_router
from web_api.routes.profiles import session_router
from web_api.routes.tasks import router as tasks_router
from web_api.routes.users import router as users_router

logging.basicConfig(
    level=logging.DEBUG if is_dev_mode() else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if os.environ.get("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        environment="development" if is_dev_mode() else "production",
        traces_sample_rate=0.0,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Builds the per-process collaborators (course parser, session store,
    task registry) and hangs them on app.state for the route dependencies.
    """
    ok, messages = check_required_env_vars()
    for message in messages:
        print(message)
    if not ok:
        print("Warning: starting without a database; most endpoints will fail")

    base_dir = resolve_courses_base_dir()
    print(f"Courses directory: {base_dir}")

    app.state.course_parser = CourseParser(base_dir)
    app.state.task_registry = TaskRegistry()
    app.state.session_store = SessionStore()
    if ok:
        await app.state.session_store.load_active()

    app.state.task_registry.start_cleanup(
        interval=get_task_cleanup_interval(),
        max_age=get_task_max_age(),
    )

    yield  # FastAPI runs here

    print("Shutting down...")
    app.state.task_registry.stop_cleanup()
    await close_engine()  # Close database connections


# Create FastAPI app with lifespan
app = FastAPI(
    title="Course Library API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(profiles_router)
app.include_router(session_router)
app.include_router(courses_router)
app.include_router(modules_router)
app.include_router(content_router)
app.include_router(users_router)
app.include_router(tasks_router)
app.include_router(admin_router)


@app.get("/api")
async def api_root():
    return {"message": "Hello from the course library API", "data": None}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Course Library Server")
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8080)",
    )
    args = parser.parse_args()

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )

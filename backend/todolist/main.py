"""FastAPI application entry point. Registers middleware, error handling and API routers."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todolist.config import settings
from todolist.database import Base, engine
from todolist.errors import TodoListError
import todolist.models  # noqa: F401 - registers models on the metadata
from todolist.routers import auth, files, lookups, tasks, users
from todolist.services.attachment_store import store as attachment_store

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ToDoList",
    description="Department task tracking with PDF attachments",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TodoListError)
async def todolist_error_handler(request: Request, exc: TodoListError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


app.include_router(auth.router)
app.include_router(lookups.departments_router)
app.include_router(lookups.roles_router)
app.include_router(lookups.task_statuses_router)
app.include_router(users.router)
app.include_router(tasks.router)
app.include_router(files.router)


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)
    attachment_store.ensure_directories()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "ToDoList"}

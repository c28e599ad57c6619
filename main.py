import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskflow.config.settings import settings
from taskflow.database import DatabaseState
from taskflow.errors import TaskFlowError
from taskflow.routers import auth, dashboard, performance, roles, task_types, tasks, time_logs, users
from taskflow.services.scheduler import DatabaseConnector
from taskflow.utils.auth import require_database

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TaskFlow API")
app.state.database = DatabaseState()
connector = DatabaseConnector(app.state.database)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskFlowError)
async def taskflow_error_handler(request: Request, exc: TaskFlowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s refused (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Route registration; every /api route waits for the database
api_dependencies = [Depends(require_database)]
for module in (auth, users, roles, task_types, tasks, time_logs, dashboard, performance):
    app.include_router(module.router, prefix="/api", dependencies=api_dependencies)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting TaskFlow API...")
    connector.start()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down TaskFlow API...")
    connector.stop()


@app.get("/")
def read_root():
    return {"message": "TaskFlow API"}


@app.get("/health")
def health():
    state = app.state.database
    return {
        "status": "ok" if state.ready else "starting",
        "database": connector.status(),
    }

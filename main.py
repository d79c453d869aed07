import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config.settings import settings
from app.database import Base, SessionLocal, engine
from app.routers import auth, user, task
from app.utils.exceptions import TaskAccessError
from app.utils.seed import seed_default_users

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Manager API")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logger
if not settings.is_production():
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response


@app.exception_handler(TaskAccessError)
async def task_access_error_handler(request: Request, exc: TaskAccessError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(task.router)


# Startup events
@app.on_event("startup")
def startup_event():
    """Create tables and the default accounts when the application starts"""
    logger.info("Starting Task Manager API...")
    Base.metadata.create_all(bind=engine)
    if settings.SEED_DEFAULT_USERS:
        db = SessionLocal()
        try:
            seed_default_users(db)
        finally:
            db.close()


# Root route
@app.get("/")
def read_root():
    return {"message": "Task Manager API"}

@app.get("/health")
def health():
    return {"status": "ok"}

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from database.db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# HTTP library debug logs off
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ✅ middleware imports
from middlewares.timing import TimingMiddleware  # noqa: E402
from middlewares.error_handler import add_error_handlers  # noqa: E402

# ✅ router imports
from routers import ai, alerts, attendance, classes, reports, schedule, students  # noqa: E402

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS (frontend origins come from CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ request latency (X-Latency-Ms response header)
app.add_middleware(TimingMiddleware)

# ✅ global error handlers (one JSON error envelope)
add_error_handlers(app)

# ✅ /v1 prefixed routers
app.include_router(attendance.router, prefix="/v1")
app.include_router(students.router,   prefix="/v1")
app.include_router(classes.router,    prefix="/v1")
app.include_router(reports.router,    prefix="/v1")
app.include_router(alerts.router,     prefix="/v1")
app.include_router(schedule.router,   prefix="/v1")
app.include_router(ai.router,         prefix="/v1")   # ✅ natural-language queries (needs GEMINI_API_KEY)


@app.on_event("startup")
def _startup():
    init_db()
    if not settings.LLM_ENABLED:
        logger.warning("GEMINI_API_KEY is not set: /v1/ai/query will answer 503 until it is configured")


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running", "llm_enabled": settings.LLM_ENABLED}


# ✅ root
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - attendance tracking, reports and alerts"}

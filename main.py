import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.routers import users, status_machines, teacher_rates, lesson_requests, lesson_quotes
from app.routers import lessons, goals, objectives, lesson_plans
from app.config import settings
from app.errors import DomainError


# Configure logging
if settings.log_format == "json":
    import json as json_mod

    class JsonFormatter(logging.Formatter):
        def format(self, record):
            log_data = {
                "timestamp": self.formatTime(record),
                "level": record.levelname,
                "message": record.getMessage(),
                "module": record.module,
                "request_id": getattr(record, "request_id", None),
            }
            if record.exc_info:
                log_data["exception"] = self.formatException(record.exc_info)
            return json_mod.dumps(log_data)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.root.handlers = [handler]

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger("lessons")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

# Create FastAPI application
app = FastAPI(
    title="Lesson Marketplace API",
    description="Lesson requests, teacher quotes and the lessons, goals and plans that follow",
    version="1.0.0",
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Include routers
app.include_router(users.router)
app.include_router(status_machines.router)
app.include_router(teacher_rates.router)
app.include_router(lesson_requests.router)
app.include_router(lesson_quotes.router)
app.include_router(lessons.router)
app.include_router(goals.router)
app.include_router(objectives.router)
app.include_router(lesson_plans.router)
app.include_router(lesson_plans.milestones_router)


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=settings.debug)

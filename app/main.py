"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import settings
from app.container import build_container
from app.errors import CampusError, UpstreamError
from app.logging_config import generate_request_id, set_request_id, set_user_id, setup_logging

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id for log correlation"""
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        set_user_id("")
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Campus portal: events, clubs, feedback, lost & found and announcements",
    version="1.0.0",
    debug=settings.DEBUG
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestContextMiddleware)


@app.exception_handler(CampusError)
async def campus_error_handler(request: Request, exc: CampusError):
    if isinstance(exc, UpstreamError):
        logger.error("Upstream failure on %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


# Startup event
@app.on_event("startup")
async def startup():
    """Run on application startup"""
    setup_logging()
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)
    await app.state.container.startup()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.APP_ENV)


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    container = getattr(app.state, "container", None)
    if container is not None:
        await container.shutdown()
    logger.info("%s stopped", settings.APP_NAME)


# Health check endpoint
@app.get("/api/health")
async def health_check(request: Request):
    """Health check endpoint"""
    container = getattr(request.app.state, "container", None)
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "subscribers": container.hub.subscriber_count if container else 0,
    }


# Import and include routers
from app.routes import auth, events, clubs, feedback, lost_found, announcements, realtime

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(clubs.router, prefix="/api/clubs", tags=["Clubs"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])
app.include_router(lost_found.router, prefix="/api/lost-found", tags=["Lost & Found"])
app.include_router(announcements.router, prefix="/api/announcements", tags=["Announcements"])
app.include_router(realtime.router, tags=["Real-time"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )

from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from testgen.api.assessments.router import router as assessments_router
from testgen.config.logger import app_logger, log_request_end, log_request_error, log_request_start
from testgen.config.settings import settings


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information using Loguru."""
    start_time = datetime.now()
    log_request_start(request)

    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_end(request, response.status_code, process_time)
        return response
    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_error(request, e, process_time)
        raise


@app.get("/", tags=["health"])
async def root():
    """Root endpoint with basic API information."""
    app_logger.info("Root endpoint accessed")
    return {
        "message": f"Welcome to the {settings.app_name}",
        "version": settings.app_version,
        "author": settings.app_author,
        "status": "operational",
        "docs": "/docs",
    }


app.include_router(assessments_router)


if __name__ == "__main__":
    import uvicorn
    app_logger.info("Starting assessment generator server")
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)

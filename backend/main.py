import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import MaxBodySizeMiddleware
from api.router import router
from config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Resume Match API",
    description="AI-powered resume and job description match analysis",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)
app.add_middleware(MaxBodySizeMiddleware, max_bytes=settings.max_request_bytes)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    content = {"error": "Request body must be a JSON object with 'resume' and 'jobDescription'."}
    if settings.debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"error": "Internal Server Error"}
    if settings.debug:
        content["detail"] = repr(exc)
    return JSONResponse(status_code=500, content=content)


app.include_router(router)

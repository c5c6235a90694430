import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_completion_client
from config import settings
from models.requests import AnalyzeRequest
from services import resume_analyzer
from services.completion_client import CompletionClient

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.25


class ClientDisconnected(Exception):
    pass


async def run_until_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "provider": settings.llm_provider,
        "llm_configured": bool(settings.api_key),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/api/analyze")
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    client: CompletionClient | None = Depends(get_completion_client),
):
    try:
        envelope = await run_until_disconnect(
            request,
            resume_analyzer.analyze(body.resume, body.job_description, client),
        )
    except ClientDisconnected:
        logger.info("Client disconnected, analysis cancelled")
        return JSONResponse(status_code=499, content={"error": "Client closed request."})

    return JSONResponse(status_code=envelope.status_code, content=envelope.body())

# routes/chat.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from typing import Optional
import asyncio
import json
import logging

import config
from errors import BadRequest, UpstreamFailure
from models.chat import ChatRequest
from .chat_providers import ChatProvider, get_gemini_provider, get_openai_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

PROVIDER_ERROR_MESSAGE = "Error: Could not reach the AI provider."
MESSAGE_REQUIRED = "Message required"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_frame(data: dict, event: Optional[str] = None) -> str:
    frame = f"event: {event}\n" if event else ""
    return frame + f"data: {json.dumps(data)}\n\n"


async def watch_disconnect(request: Request):
    while not await request.is_disconnected():
        await asyncio.sleep(config.DISCONNECT_POLL_SECONDS)


async def relay_stream(request: Request, provider: ChatProvider, message: Optional[str]):
    """Forward upstream chunks as SSE frames until the upstream ends, fails or the client leaves.

    Each upstream read races a disconnect watcher, so a stalled upstream is
    abandoned as soon as the client goes away.
    """
    if not message or not message.strip():
        yield sse_frame({"error": MESSAGE_REQUIRED})
        return

    logger.info(f"Starting {provider.name} stream")
    upstream = provider.stream(message)
    watcher = asyncio.ensure_future(watch_disconnect(request))
    sent = 0
    try:
        while True:
            next_chunk = asyncio.ensure_future(upstream.__anext__())
            await asyncio.wait({next_chunk, watcher}, return_when=asyncio.FIRST_COMPLETED)
            if not next_chunk.done():
                next_chunk.cancel()
                await asyncio.wait({next_chunk})
                logger.info(f"Client disconnected from {provider.name} stream after {sent} chunks")
                return
            try:
                chunk = next_chunk.result()
            except StopAsyncIteration:
                break
            if not chunk:
                continue
            sent += 1
            yield sse_frame({"text": chunk})
    except UpstreamFailure as e:
        logger.error(f"{provider.name} stream failed after {sent} chunks: {e.message}")
        yield sse_frame({"error": PROVIDER_ERROR_MESSAGE})
        return
    except Exception as e:
        logger.error(f"Unexpected error in {provider.name} stream after {sent} chunks: {str(e)}", exc_info=True)
        yield sse_frame({"error": PROVIDER_ERROR_MESSAGE})
        return
    finally:
        watcher.cancel()
        await upstream.aclose()

    logger.info(f"{provider.name} stream finished with {sent} chunks")
    if config.SSE_SEND_DONE:
        yield sse_frame({}, event="done")


@router.post("/chat")
async def chat(request: ChatRequest,
               openai_provider: ChatProvider = Depends(get_openai_provider),
               gemini_provider: ChatProvider = Depends(get_gemini_provider)):
    if not request.message or not request.message.strip():
        raise BadRequest(MESSAGE_REQUIRED)

    provider = gemini_provider if request.provider == "gemini" else openai_provider

    try:
        reply = await provider.complete(request.message)
    except UpstreamFailure as e:
        logger.error(f"{provider.name} chat failed: {e.message}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": PROVIDER_ERROR_MESSAGE, "reply": PROVIDER_ERROR_MESSAGE},
        )
    return {"success": True, "reply": reply}


@router.get("/chat-stream")
async def chat_stream(request: Request, message: Optional[str] = None,
                      provider: ChatProvider = Depends(get_openai_provider)):
    return StreamingResponse(
        relay_stream(request, provider, message),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/chat-gemini-stream")
async def chat_gemini_stream(request: Request, message: Optional[str] = None,
                             provider: ChatProvider = Depends(get_gemini_provider)):
    return StreamingResponse(
        relay_stream(request, provider, message),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )

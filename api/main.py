"""FastAPI application exposing the trip assistant chat."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, List

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from agents.trip_chat_agent import TripChatAgent
from config import API_HOST, API_PORT, CORS_ORIGINS, configure_logging, validate_api_keys
from workflows.state import ConversationContext, Message, StreamChunk

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Party Trip Assistant API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    context: ConversationContext = Field(default_factory=ConversationContext)
    history: List[Message] = Field(default_factory=list)


@lru_cache(maxsize=1)
def get_chat_agent() -> TripChatAgent:
    missing = validate_api_keys()
    if missing:
        logger.warning("Missing API keys: %s", ", ".join(missing))
    return TripChatAgent()


def sse_event(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json(by_alias=True)}\n\n"


async def sse_stream(chunks: AsyncIterator[StreamChunk]) -> AsyncIterator[str]:
    async for chunk in chunks:
        yield sse_event(chunk)


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/chat/stream")
async def chat_stream(request: ChatRequest, agent: TripChatAgent = Depends(get_chat_agent)) -> StreamingResponse:
    chunks = agent.run_tool_call_loop(request.message, request.context, request.history)
    return StreamingResponse(
        sse_stream(chunks),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@app.post("/api/chat")
async def chat(request: ChatRequest, agent: TripChatAgent = Depends(get_chat_agent)) -> Dict[str, Any]:
    return await agent.collect_reply(request.message, request.context, request.history)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT)

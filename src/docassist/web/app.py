"""FastAPI application serving the documentation assistant."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Literal

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, ValidationError

from docassist.config import AppConfig
from docassist.formatting import NO_RESULTS
from docassist.index.search import KeywordSearcher
from docassist.index.storage import ContentStore
from docassist.llm.client import ChatModelClient, ModelConfig, ModelError
from docassist.llm.prompt import build_system_prompt
from docassist.retrieval import Retriever, build_backend

LOGGER = logging.getLogger(__name__)

MAX_MESSAGE_CHARS = 2000

app = FastAPI(title="docassist", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_CHARS)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)


def _configure(target: FastAPI, config: AppConfig) -> None:
    """Attach the long-lived services for ``config`` to the app state."""
    searcher = KeywordSearcher(ContentStore(config.resolve_snapshot_path(Path.cwd())))
    backend = searcher if config.search_backend == "json" else build_backend(config)
    target.state.config = config
    target.state.searcher = searcher
    target.state.retriever = Retriever(
        backend, max_queries=config.max_queries, max_chars=config.max_content_chars
    )
    target.state.model = ChatModelClient(
        ModelConfig(
            base_url=config.model_base_url,
            model_name=config.model_name,
            api_key=config.api_key,
            timeout=config.request_timeout,
        )
    )


_configure(app, AppConfig.from_env())


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_searcher(request: Request) -> KeywordSearcher:
    return request.app.state.searcher


def get_retriever(request: Request) -> Retriever:
    return request.app.state.retriever


def get_model(request: Request) -> ChatModelClient:
    return request.app.state.model


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def stream_answer(
    model: ChatModelClient,
    system: str,
    messages: List[Dict[str, str]],
    deadline: float,
) -> AsyncIterator[str]:
    """Relay model deltas as server-sent events, ending with done or error."""
    chunks = model.stream(system, messages).__aiter__()
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise asyncio.TimeoutError
            try:
                text = await asyncio.wait_for(chunks.__anext__(), timeout=remaining)
            except StopAsyncIteration:
                break
            yield _event({"type": "text", "content": text})
    except asyncio.TimeoutError:
        LOGGER.warning("Chat request exceeded its time limit")
        yield _event({"type": "error", "message": "Request timed out"})
        return
    except ModelError as exc:
        LOGGER.error("Model streaming failed: %s", exc)
        yield _event({"type": "error", "message": str(exc)})
        return
    finally:
        await chunks.aclose()
    yield _event({"type": "done"})


@app.post("/api/chat")
async def chat(
    request: Request,
    config: AppConfig = Depends(get_config),
    retriever: Retriever = Depends(get_retriever),
    model: ChatModelClient = Depends(get_model),
) -> StreamingResponse:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request: body must be JSON")

    try:
        payload = ChatRequest.model_validate(body)
    except ValidationError as exc:
        LOGGER.info("Rejected chat request: %s", exc.errors()[0].get("msg", "invalid"))
        raise HTTPException(status_code=400, detail="Invalid request: messages array is required")

    deadline = time.monotonic() + config.request_timeout
    messages = [message.model_dump() for message in payload.messages]
    last = payload.messages[-1]
    query = last.content.strip() if last.role == "user" else ""

    context = NO_RESULTS
    if query:
        try:
            context = await asyncio.wait_for(
                retriever.search_and_format(query, config.result_limit),
                timeout=config.request_timeout,
            )
        except asyncio.TimeoutError:
            LOGGER.warning("Retrieval timed out for %r", query)
    LOGGER.debug("Context length: %d", len(context))

    return StreamingResponse(
        stream_answer(model, build_system_prompt(context), messages, deadline),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@app.get("/api/search")
async def search_documents(
    query: str = "",
    limit: int = 5,
    searcher: KeywordSearcher = Depends(get_searcher),
) -> dict[str, List[dict]]:
    query = query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    top_k = max(1, min(limit, 50))
    matches = await searcher.asearch(query, top_k=top_k)
    return {
        "results": [
            {
                "id": match.record.id,
                "type": "page",
                "title": match.title,
                "content": match.record.content,
                "url": match.link or "#",
                "score": match.score,
            }
            for match in matches
        ]
    }


@app.get("/api/context")
async def context_preview(
    query: str = "",
    config: AppConfig = Depends(get_config),
    retriever: Retriever = Depends(get_retriever),
) -> dict[str, str]:
    context = await retriever.search_and_format(query, config.result_limit)
    return {"query": query, "context": context}

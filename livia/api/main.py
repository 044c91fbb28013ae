import json
from typing import Optional, Dict, Any

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from ..core.config_manager import ConfigManager
from ..core.error_handling import ErrorHandler, ErrorContext
from ..core.exceptions import ChatError, LiviaError
from ..core.logging import logger
from ..providers import get_credential_provider
from ..services.chat.credential_cache import CredentialCache
from ..services.chat_service import ChatSession, ExchangeStream
from ..services.content_service import ContentService
from ..services.graphql_client import GraphQLClient
from .middleware import RequestLoggerMiddleware


class MessageRequest(BaseModel):
    text: str
    stream: bool = True


class RetryRequest(BaseModel):
    stream: bool = True


def _sse(payload: Dict[str, Any]) -> bytes:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def _error_payload(error: LiviaError) -> Dict[str, Any]:
    detail = error.to_error_detail()
    exchange_id = getattr(error, "exchange_id", None)
    if exchange_id:
        detail["error"]["exchange_id"] = exchange_id
    return detail


async def _stream_response(stream: ExchangeStream) -> StreamingResponse:
    """
    Wrap an exchange stream in an SSE response.

    The first fragment is awaited before the response starts so that
    pre-flight failures (too large, no credential, bad status) come back as a
    plain HTTP error instead of a 200 stream.
    """
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        first = None
    except ChatError:
        await stream.aclose()
        raise

    async def generate():
        try:
            if first is not None:
                yield _sse({"content": first})
            try:
                async for fragment in stream:
                    yield _sse({"content": fragment})
                yield _sse({"exchange_id": stream.exchange.id, "done": True})
            except ChatError as e:
                yield _sse(_error_payload(e))
            yield b"data: [DONE]\n\n"
        finally:
            await stream.aclose()

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={"X-Exchange-ID": stream.exchange.id}
    )


def create_app(config_manager: Optional[ConfigManager] = None) -> FastAPI:
    app = FastAPI(title="Livia")
    app.state.config_manager = config_manager or ConfigManager()

    @app.on_event("startup")
    async def startup_event():
        state = app.state
        config = state.config_manager

        if getattr(state, "httpx_client", None) is None:
            state.httpx_client = httpx.AsyncClient()

        graphql_client = GraphQLClient(config.graphql["endpoint"], state.httpx_client, timeout=float(config.graphql["timeout"]))

        if getattr(state, "content_service", None) is None:
            state.content_service = ContentService(graphql_client)

        if getattr(state, "chat_session", None) is None:
            provider = get_credential_provider(
                config.credential["type"],
                config.credential,
                graphql_client
            )
            state.chat_session = ChatSession.from_config(config, state.httpx_client, CredentialCache(provider))

        logger.info("Livia service started", model=config.chat["model"], credential_type=config.credential["type"])

    @app.on_event("shutdown")
    async def shutdown_event():
        client = getattr(app.state, "httpx_client", None)
        if client is not None:
            await client.aclose()

    app.add_middleware(RequestLoggerMiddleware)

    @app.exception_handler(LiviaError)
    async def livia_error_handler(request: Request, exc: LiviaError):
        return JSONResponse(status_code=exc.http_status, content=_error_payload(exc))

    @app.exception_handler(httpx.RequestError)
    async def transport_error_handler(request: Request, exc: httpx.RequestError):
        context = ErrorContext(request_id=getattr(request.state, "request_id", None), component="api")
        error = ErrorHandler.handle_transport_failure(exc, context)
        return JSONResponse(status_code=error.http_status, content=error.to_error_detail())

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.post("/v1/livia/messages")
    async def send_message(payload: MessageRequest, request: Request):
        session: ChatSession = request.app.state.chat_session
        if payload.stream:
            return await _stream_response(session.send_streaming(payload.text))

        exchange = await session.send_buffered_exchange(payload.text)
        return {"exchange_id": exchange.id, "content": exchange.response_text}

    @app.post("/v1/livia/exchanges/{exchange_id}/retry")
    async def retry_exchange(exchange_id: str, request: Request, payload: Optional[RetryRequest] = None):
        session: ChatSession = request.app.state.chat_session
        stream = payload.stream if payload is not None else True
        if stream:
            return await _stream_response(session.retry(exchange_id))

        exchange = await session.retry_buffered_exchange(exchange_id)
        return {"exchange_id": exchange.id, "content": exchange.response_text}

    @app.get("/v1/livia/transcript")
    async def get_transcript(request: Request):
        transcript = request.app.state.chat_session.transcript
        return {"greeting": transcript.greeting, "exchanges": transcript.to_list()}

    @app.delete("/v1/livia/transcript", status_code=status.HTTP_200_OK)
    async def clear_transcript(request: Request):
        removed = request.app.state.chat_session.clear_transcript()
        return {"status": "cleared", "removed": removed}

    @app.get("/v1/livia/history")
    async def get_history(request: Request):
        session: ChatSession = request.app.state.chat_session
        return {"messages": [message.to_dict() for message in session.history.snapshot()]}

    @app.delete("/v1/livia/history", status_code=status.HTTP_200_OK)
    async def clear_history(request: Request):
        request.app.state.chat_session.clear_history()
        return {"status": "cleared"}

    @app.get("/v1/content")
    async def get_all_content(request: Request):
        return await request.app.state.content_service.fetch_all()

    @app.get("/v1/content/status")
    async def get_server_status(request: Request):
        return await request.app.state.content_service.server_status()

    @app.get("/v1/content/picture")
    async def get_picture(request: Request, date: Optional[str] = None):
        return {"picture": await request.app.state.content_service.picture(date)}

    @app.get("/v1/content/events")
    async def get_events(request: Request, days: Optional[int] = None):
        return {"events": await request.app.state.content_service.events(days)}

    @app.get("/v1/content/planets")
    async def get_planets(request: Request):
        return {"planets": await request.app.state.content_service.planets()}

    @app.get("/v1/content/articles")
    async def get_articles(request: Request):
        return {"articles": await request.app.state.content_service.articles()}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from volunteer_hub.chat.rate_limit import build_rate_limiter
from volunteer_hub.chat.relay import ChatRelay
from volunteer_hub.chat.upstream import GeminiClient
from volunteer_hub.core.config import settings
from volunteer_hub.core.logging import configure_logging
from volunteer_hub.middleware.request_id import RequestIdMiddleware
from volunteer_hub.middleware.security_headers import SecurityHeadersMiddleware

configure_logging()


@lru_cache
def get_relay() -> ChatRelay:
    # One relay (and one rate-limit table) per process.
    return ChatRelay(
        rate_limiter=build_rate_limiter(
            settings.chat_rate_limit,
            backend=settings.chat_rate_limit_backend,
        ),
        upstream=GeminiClient(
            api_key=settings.gemini_api_key or "",
            url=settings.gemini_api_url,
            timeout_seconds=settings.chat_timeout_seconds,
            temperature=settings.chat_temperature,
            max_output_tokens=settings.chat_max_output_tokens,
        ),
        api_key=settings.gemini_api_key,
    )


app = FastAPI(title="Volunteer Hub Chat Relay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    max_age=86400,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.api_route("/chat", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def chat(request: Request, relay: ChatRelay = Depends(get_relay)):
    return await relay.handle(request)

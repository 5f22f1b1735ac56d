from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from clinic_chat.access import AccessGate
from clinic_chat.chat import ChatService
from clinic_chat.config import settings
from clinic_chat.errors import ChatError, InvalidRequestError, RateLimitExceededError
from clinic_chat.ratelimit import RateLimiter, get_rate_limiter
from clinic_chat.schemas import ChatRequest
import json
import logging
import time

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

INVALID_REQUEST_ANSWER = "リクエストの形式が正しくありません。"
SERVER_ERROR_ANSWER = "サーバ側でエラーが発生しました。"

app = FastAPI(title="Clinic Chat", version="0.1.0")

access_gate = AccessGate(settings.allowed_origins)
chat_service: ChatService | None = None
rate_limiter: RateLimiter | None = None

@app.on_event("startup")
def _startup():
    global chat_service, rate_limiter

    try:
        chat_service = ChatService()
        logger.info(f"✅ Chat service initialized (llm={chat_service.llm.name}, knowledge_loaded={chat_service.knowledge.loaded})")

        rate_limiter = get_rate_limiter()
        logger.info(f"✅ Rate limiter ready ({rate_limiter.name})")
        logger.info(f"🔒 Allowed origins: {', '.join(sorted(access_gate.allowed_origins)) or '(none)'}")
    except Exception as e:
        logger.error(f"Startup error: {e}")
        raise

def client_key(request: Request) -> str:
    """
    Caller identity for rate limiting.

    X-Forwarded-For is only trusted for the hops appended by our own proxies
    (TRUSTED_PROXY_HOPS); anything to the left of those is client-controlled.
    """
    peer = request.client.host if request.client else "unknown"
    hops = settings.trusted_proxy_hops
    if hops <= 0:
        return peer
    forwarded = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",") if h.strip()]
    if len(forwarded) < hops:
        return peer
    return forwarded[-hops]

def _error_body(exc: ChatError) -> dict:
    # 400s and 500s are shown in the widget, gate rejections are not
    if isinstance(exc, InvalidRequestError):
        return {"answer": INVALID_REQUEST_ANSWER, "emergency": False}
    if exc.status_code == 400:
        return {"answer": str(exc), "emergency": False}
    if exc.status_code >= 500:
        return {"answer": SERVER_ERROR_ANSWER, "emergency": False}
    return {"error": str(exc)}

async def _parse_request(request: Request) -> ChatRequest:
    raw = await request.body()
    if not raw.strip():
        return ChatRequest()
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise InvalidRequestError("Request body is not valid JSON") from e
    if not isinstance(body, dict):
        body = {}
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid chat request: {e.error_count()} errors") from e

@app.get("/health")
def health():
    return {
        "ok": True,
        "knowledge_loaded": chat_service.knowledge.loaded if chat_service else False,
        "rate_limiter": rate_limiter.name if rate_limiter else None,
        "llm_provider": settings.llm_provider,
    }

CHAT_PATH = "/chat"
CHAT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]

def _gate_response(request: Request) -> Response | None:
    origin = request.headers.get("origin")
    headers = access_gate.cors_headers(origin)
    decision = access_gate.authorize(request.method, origin)
    if decision.is_preflight:
        return Response(status_code=204, headers=headers)
    if not decision.allow:
        return JSONResponse(_error_body(decision.error), status_code=decision.error.status_code, headers=headers)
    return None

@app.exception_handler(StarletteHTTPException)
async def _http_exception(request: Request, exc: StarletteHTTPException):
    # Methods outside CHAT_METHODS are refused by the router; gate them the same way
    if exc.status_code == 405 and request.url.path == CHAT_PATH:
        gated = _gate_response(request)
        if gated is not None:
            return gated
    return await http_exception_handler(request, exc)

@app.api_route(CHAT_PATH, methods=CHAT_METHODS)
async def chat(request: Request):
    origin = request.headers.get("origin")
    headers = access_gate.cors_headers(origin)

    gated = _gate_response(request)
    if gated is not None:
        return gated

    assert chat_service is not None and rate_limiter is not None
    try:
        key = client_key(request)
        limit = await rate_limiter.consume(key)
        if not limit.success:
            logger.info(f"Rate limit exceeded for {key}")
            headers.update({
                "Retry-After": str(max(1, int(limit.reset - time.time()))),
                "X-RateLimit-Limit": str(limit.limit),
                "X-RateLimit-Remaining": str(limit.remaining),
            })
            raise RateLimitExceededError("Too many requests")

        req = await _parse_request(request)
        result = await chat_service.answer(req)
        return JSONResponse(result.model_dump(), headers=headers)
    except ChatError as e:
        if e.status_code >= 500:
            logger.error(f"Chat request failed: {e}", exc_info=True)
        else:
            logger.info(f"Chat request rejected ({e.status_code}): {e}")
        return JSONResponse(_error_body(e), status_code=e.status_code, headers=headers)
    except Exception as e:
        logger.error(f"Unexpected error in chat handler: {e}", exc_info=True)
        return JSONResponse({"answer": SERVER_ERROR_ANSWER, "emergency": False}, status_code=500, headers=headers)

from __future__ import annotations
import httpx
from .config import settings
from .errors import UpstreamError

class LLM:
    name = "base"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport

    async def complete(self, messages: list[dict]) -> str:
        raise NotImplementedError

def extract_output_text(data: dict) -> str:
    """Concatenate the output_text parts of a Responses API payload."""
    if isinstance(data.get("output_text"), str):
        return data["output_text"]
    parts = []
    for item in data.get("output") or []:
        if item.get("type") != "message":
            continue
        for content in item.get("content") or []:
            if content.get("type") == "output_text":
                parts.append(content.get("text", ""))
    return "".join(parts)

class OpenAILLM(LLM):
    name = "openai"

    async def complete(self, messages: list[dict]) -> str:
        if not settings.openai_api_key:
            raise UpstreamError("OPENAI_API_KEY is missing.")
        headers = {"Authorization": f"Bearer {settings.openai_api_key}"}
        payload = {
            "model": settings.openai_model,
            "input": messages,
        }
        async with httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=self.transport) as client:
            try:
                r = await client.post(f"{settings.openai_base_url.rstrip('/')}/responses", headers=headers, json=payload)
                r.raise_for_status()
                return extract_output_text(r.json())
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    raise UpstreamError("OpenAI rate limit exceeded.") from e
                elif e.response.status_code == 401:
                    raise UpstreamError("Invalid OpenAI API key. Please check OPENAI_API_KEY.") from e
                else:
                    raise UpstreamError(f"OpenAI API error: {e.response.status_code} - {e.response.text}") from e
            except httpx.TimeoutException as e:
                raise UpstreamError(f"OpenAI request timed out after {settings.llm_timeout_seconds}s") from e
            except (httpx.HTTPError, ValueError) as e:
                raise UpstreamError(f"OpenAI request failed: {e}") from e

class OllamaLLM(LLM):
    name = "ollama"

    async def complete(self, messages: list[dict]) -> str:
        payload = {
            "model": settings.ollama_model,
            "messages": messages,
            "stream": False,
        }
        async with httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=self.transport) as client:
            try:
                r = await client.post(f"{settings.ollama_base_url}/api/chat", json=payload)
                r.raise_for_status()
                data = r.json()
                return (data.get("message") or {}).get("content", "")
            except httpx.ConnectError as e:
                raise UpstreamError(
                    f"Cannot connect to Ollama at {settings.ollama_base_url}. Make sure Ollama is running and the model '{settings.ollama_model}' is pulled."
                ) from e
            except httpx.HTTPStatusError as e:
                raise UpstreamError(f"Ollama API error: {e.response.status_code} - {e.response.text}") from e
            except (httpx.HTTPError, ValueError) as e:
                raise UpstreamError(f"Ollama request failed: {e}") from e

def get_llm() -> LLM:
    if settings.llm_provider.lower() == "ollama":
        return OllamaLLM()
    return OpenAILLM()

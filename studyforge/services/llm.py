import logging
from typing import Any, Optional

import httpx

from studyforge.errors import GenerationError

log = logging.getLogger("StudyForge")

PROVIDERS = ("gemini", "openai", "local")


def _content_text(content: Any) -> str:
    """Chat content is a string, or a list of parts like {"type": "text", "text": ...}."""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        texts = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return "".join(texts).strip()
    return ""


class LLMClient:
    """
    Text-generation client with its key and endpoint fixed at construction:
    - gemini: Google Generative Language API (models/{model}:generateContent)
    - openai / local: OpenAI-style /chat/completions (OpenAI, Groq, Ollama...)

    Transport failures, HTTP errors and provider error payloads raise
    GenerationError. An empty completion comes back as "".
    """

    def __init__(
        self,
        *,
        provider: str,
        base_url: str,
        default_model: str,
        api_key: str = "",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        provider = (provider or "").strip().lower()
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider {provider!r}")

        self.provider = provider
        self.base_url = (base_url or "").rstrip("/")
        self.default_model = default_model
        self.api_key = (api_key or "").strip()
        self.timeout = float(timeout)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def ask(
        self,
        prompt: str,
        system: str = "You are a helpful study assistant.",
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> str:
        if not self.base_url:
            raise GenerationError("LLM misconfigured: missing base_url.")

        used_model = model or self.default_model
        try:
            if self.provider == "gemini":
                return await self._ask_gemini(prompt, system, used_model, max_tokens, temperature)
            return await self._ask_chat(prompt, system, used_model, max_tokens, temperature)
        except httpx.TimeoutException as e:
            raise GenerationError("The AI service did not answer in time.") from e
        except httpx.HTTPError as e:
            log.warning("LLM transport error: %s", e)
            raise GenerationError(f"Could not reach the AI service ({e.__class__.__name__}).") from e

    # -----------------------------
    # gemini
    # -----------------------------
    async def _ask_gemini(
        self, prompt: str, system: str, model: str, max_tokens: int, temperature: float
    ) -> str:
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY is not configured.")

        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }

        async with self._client() as client:
            r = await client.post(url, headers=headers, json=payload)

        data = self._json_or_raise(r)
        if isinstance(data, dict) and data.get("error"):
            err = data["error"]
            msg = err.get("message") if isinstance(err, dict) else str(err)
            raise GenerationError(msg or "Failed to generate content.")

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            return ""

        cand = candidates[0] or {}
        texts = []
        content = cand.get("content") if isinstance(cand, dict) else None
        for part in (content or {}).get("parts") or []:
            if isinstance(part, dict) and part.get("text"):
                texts.append(str(part["text"]))
        return "".join(texts).strip()

    # -----------------------------
    # openai-compatible
    # -----------------------------
    async def _ask_chat(
        self, prompt: str, system: str, model: str, max_tokens: int, temperature: float
    ) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        async with self._client() as client:
            r = await client.post(url, headers=headers, json=payload)

        data = self._json_or_raise(r)

        choices = data.get("choices") if isinstance(data, dict) else None
        if choices:
            choice0 = choices[0] if isinstance(choices, list) else None
            if not isinstance(choice0, dict):
                raise GenerationError("The AI service returned an unexpected reply shape.")
            msg = choice0.get("message")
            content = _content_text(msg.get("content") if isinstance(msg, dict) else None)
            if content:
                return content
            return _content_text(choice0.get("text"))

        if isinstance(data, dict) and "message" in data:
            return str(data["message"]).strip()

        if isinstance(data, dict) and "response" in data:
            return str(data["response"]).strip()

        return ""

    # -----------------------------
    # helpers
    # -----------------------------
    @staticmethod
    def _json_or_raise(r: httpx.Response) -> Any:
        if r.status_code == 401 or r.status_code == 403:
            raise GenerationError(f"The AI service rejected the API key ({r.status_code}).")
        if r.status_code >= 400:
            body = (r.text or "")[:500]
            log.warning("LLM error %s: %s", r.status_code, body)
            raise GenerationError(f"LLM error ({r.status_code}).")
        try:
            return r.json()
        except ValueError as e:
            raise GenerationError("The AI service returned a non-JSON body.") from e


def build_llm_client() -> LLMClient:
    import config

    provider = config.LLM_PROVIDER
    if provider == "gemini":
        return LLMClient(
            provider="gemini",
            base_url=config.GEMINI_BASE_URL,
            default_model=config.GEMINI_MODEL,
            api_key=config.GEMINI_API_KEY,
            timeout=config.LLM_TIMEOUT_SEC,
        )
    if provider == "openai":
        return LLMClient(
            provider="openai",
            base_url=config.OPENAI_API_URL,
            default_model=config.OPENAI_MODEL,
            api_key=config.OPENAI_API_KEY,
            timeout=config.LLM_TIMEOUT_SEC,
        )
    return LLMClient(
        provider="local",
        base_url=config.OPENAI_BASE_URL,
        default_model=config.DEFAULT_MODEL,
        timeout=config.LLM_TIMEOUT_SEC,
    )

from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .exceptions import ConfigurationError, UpstreamError
from .settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise ConfigurationError("API_KEY environment variable is not set on the server.")
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	async def __aenter__(self) -> "GeminiClient":
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()

	async def generate_json(
		self,
		prompt: str,
		response_schema: Dict[str, Any],
		*,
		thinking_budget: Optional[int] = None,
	) -> str:
		"""Ask for JSON constrained to ``response_schema`` and return the raw text."""
		generation_config: Dict[str, Any] = {
			"responseMimeType": "application/json",
			"responseSchema": response_schema,
		}
		if thinking_budget is not None:
			generation_config["thinkingConfig"] = {"thinkingBudget": int(thinking_budget)}
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": generation_config,
		}
		return await self._post_payload(payload)

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			status = http_err.response.status_code
			raise UpstreamError(f"Gemini returned HTTP {status}", raw_text=http_err.response.text) from http_err
		except httpx.RequestError as net_err:
			raise UpstreamError(f"Gemini request failed: {net_err.__class__.__name__}") from net_err
		try:
			data = r.json()
			parts = data["candidates"][0]["content"]["parts"]
			text = "".join(p.get("text", "") for p in parts)
		except (ValueError, KeyError, IndexError, TypeError) as err:
			raise UpstreamError("Unexpected Gemini response shape", raw_text=r.text) from err
		if not text.strip():
			finish = (data.get("candidates") or [{}])[0].get("finishReason")
			raise UpstreamError(f"Gemini returned no text (finishReason={finish})", raw_text=r.text)
		return text

	async def aclose(self) -> None:
		await self._client.aclose()

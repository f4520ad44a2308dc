"""Gemini generateContent client for spectroscopic analysis.

Sends one prompt per sensor record and returns the first candidate's
text. Failures are raised as ``AnalysisError`` subclasses and never
retried.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import AnalysisHttpError, AnalysisNetworkError, MalformedResponseError
from ..models import SensorRecord
from .base import Analyzer

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)

PROMPT_TEMPLATE = """\
Short, structured analysis of spectroscopic readings of marine soil from the \
ocean floor. IMPORTANT: the readings come from a sensor on a seabed research \
drone and may be slightly off; try to recover them. Be very concise, include \
a metal and composition analysis, and do nothing besides the analysis.

**Hue:** short interpretation for marine soil.
**Saturation:** short interpretation for marine soil.
**Color Value:** short interpretation for marine soil.
**Reflection:** short interpretation for marine soil.
**Ambient Light:** short interpretation for the underwater environment.

**Marine soil & ocean conditions summary:** short conclusions on soil \
composition (name concrete elements) and ocean conditions.

Sensor data:
Hue: {hue}
Saturation: {saturation}
Color Value: {color_value}
Reflection: {reflection}
Ambient Light: {ambient}
"""


def build_prompt(record: SensorRecord) -> str:
    """Embed the record's five values in the analysis prompt."""
    return PROMPT_TEMPLATE.format(
        hue=record.hue,
        saturation=record.saturation,
        color_value=record.color_value,
        reflection=record.reflection,
        ambient=record.ambient,
    )


def extract_text(payload) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a response.

    Raises:
        MalformedResponseError: If the path is missing or the text is empty
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("No analysis text received") from e
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError("No analysis text received")
    return text


class GeminiAnalyzer(Analyzer):
    """Analyzer backed by the Gemini ``generateContent`` endpoint."""

    def __init__(self,
                 api_key: str,
                 model: str = DEFAULT_MODEL,
                 base_url: str = GEMINI_BASE_URL,
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: httpx.Timeout = DEFAULT_TIMEOUT):
        """Initialize analyzer.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter
            model: Model name
            base_url: API root
            client: Shared AsyncClient, or None to own one
            timeout: Timeout for an owned client
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    async def analyze(self, record: SensorRecord) -> str:
        payload = {"contents": [{"parts": [{"text": build_prompt(record)}]}]}
        logger.info(f"Requesting analysis from {self._model}")

        try:
            resp = await self._client.post(
                self.endpoint,
                params={"key": self._api_key},
                json=payload,
            )
        except httpx.RequestError as e:
            raise AnalysisNetworkError(f"Analysis request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise AnalysisHttpError(
                f"HTTP error! status: {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

        return extract_text(data)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

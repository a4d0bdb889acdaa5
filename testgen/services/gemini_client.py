"""Retrying client for the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

import requests
from loguru import logger

from testgen.config.settings import Settings, settings
from testgen.services.errors import (
    ConfigurationError,
    FormatError,
    RateLimitExceeded,
    ServiceError,
    TransportFailure,
)


RATE_LIMIT_STATUS = 429

# Connection-level failures worth another attempt; any other RequestException is terminal.
TRANSPORT_ERRORS = (requests.ConnectionError, requests.Timeout, requests.exceptions.ChunkedEncodingError)


class GeminiClient:
    """Sends one instruction per call and returns the reply text.

    Rate limits and transport failures are retried with ``retry_delay_ms *
    2 ** attempt`` milliseconds of backoff; every other failure is terminal.
    Nothing is remembered between ``generate`` calls.
    """

    def __init__(
        self,
        config: Settings = settings,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._sleep = sleep

    def build_payload(self, instruction_text: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": instruction_text}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "topK": self._config.top_k,
                "topP": self._config.top_p,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }

    def backoff_delay_ms(self, attempt: int) -> int:
        return self._config.retry_delay_ms * 2**attempt

    def generate(self, instruction_text: str, attempt: int = 0) -> str:
        api_key = self._config.gemini_api_key
        if not api_key:
            raise ConfigurationError(
                "Gemini API key is not configured. Set the GEMINI_API_KEY environment variable."
            )

        payload = self.build_payload(instruction_text)
        max_retries = self._config.max_retries

        while True:
            logger.debug("Requesting generation", model=self._config.gemini_model, attempt=attempt)
            try:
                response = self._session.post(
                    self._config.generation_endpoint,
                    params={"key": api_key},
                    json=payload,
                    timeout=self._config.request_timeout_seconds,
                )
            except TRANSPORT_ERRORS as exc:
                if attempt < max_retries:
                    self._wait(attempt, "Network error")
                    attempt += 1
                    continue
                raise TransportFailure(attempt + 1, exc) from exc
            except requests.RequestException as exc:
                raise TransportFailure(attempt + 1, exc) from exc

            if response.status_code == RATE_LIMIT_STATUS:
                if attempt < max_retries:
                    self._wait(attempt, "Rate limited")
                    attempt += 1
                    continue
                raise RateLimitExceeded(attempt + 1)

            if not 200 <= response.status_code < 300:
                raise ServiceError(response.status_code, _service_message(response))

            text = _reply_text(response)
            logger.info("Generation reply received", chars=len(text), attempt=attempt)
            return text

    def _wait(self, attempt: int, reason: str) -> None:
        delay_ms = self.backoff_delay_ms(attempt)
        logger.bind(attempt=attempt + 1).warning(f"{reason}. Retrying in {delay_ms}ms...")
        self._sleep(delay_ms / 1000)


def _service_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message")
    return None


def _reply_text(response: requests.Response) -> str:
    if not response.content:
        raise FormatError("Invalid API response format: empty response body")
    try:
        data = response.json()
    except ValueError as exc:
        raise FormatError("Invalid API response format: body is not JSON") from exc
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise FormatError("Invalid API response format") from exc
    if not isinstance(text, str) or not text:
        raise FormatError("Invalid API response format")
    return text

"""Face comparison delegated to a multimodal model behind an AI gateway.

The gateway speaks the OpenAI chat-completions format. The model is asked for
a bare JSON object; whatever it answers, the first JSON object found in the
text is used and anything else fails closed.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

import requests

from ..core.constants import DEFAULT_AI_GATEWAY_URL, DEFAULT_AI_MODEL, DEFAULT_AI_TIMEOUT_SECONDS
from ..core.exceptions import ConfigurationError, UpstreamFailure
from .model import FaceComparison

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a face verification system. Compare the two face images and determine if they are "
    "the same person. Respond with ONLY a JSON object with fields: match (boolean), "
    "confidence (0-1 number), reason (string)."
)
USER_PROMPT = "Compare these two face images. Are they the same person?"


class FaceComparator(Protocol):
    def ensure_configured(self) -> None:
        raise NotImplementedError

    def compare(self, *, reference_photo: str, captured_photo: str) -> FaceComparison:
        raise NotImplementedError


def extract_first_json_object(text: str) -> Optional[dict]:
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            obj = None
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    return None


def parse_comparison(text: str) -> FaceComparison:
    """Turn the model's answer into a FaceComparison, failing closed."""
    data = extract_first_json_object(text or "")
    if data is None:
        return FaceComparison(match=False, confidence=0.0, reason="Failed to parse AI response")

    match = data.get("match")
    confidence = data.get("confidence")
    if not isinstance(match, bool) or isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return FaceComparison(match=False, confidence=0.0, reason="Invalid AI response format")

    confidence = float(confidence)
    if not 0.0 <= confidence <= 1.0:
        return FaceComparison(match=False, confidence=0.0, reason="AI confidence out of range")

    reason = data.get("reason")
    return FaceComparison(match=match, confidence=confidence, reason=str(reason) if reason is not None else "")


class AIGatewayFaceComparator(FaceComparator):
    def __init__(
        self,
        *,
        api_key: Optional[str],
        url: str = DEFAULT_AI_GATEWAY_URL,
        model: str = DEFAULT_AI_MODEL,
        timeout: float = DEFAULT_AI_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._url = url
        self._model = model
        self._timeout = float(timeout)
        self._http = session or requests

    def ensure_configured(self) -> None:
        if not self._api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

    def _payload(self, reference_photo: str, captured_photo: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": reference_photo}},
                        {"type": "image_url", "image_url": {"url": captured_photo}},
                    ],
                },
            ],
        }

    def compare(self, *, reference_photo: str, captured_photo: str) -> FaceComparison:
        self.ensure_configured()
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Comparing faces using %s", self._model)
        try:
            response = self._http.post(
                self._url,
                json=self._payload(reference_photo, captured_photo),
                headers=headers,
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            logger.error("AI gateway timed out after %ss", self._timeout)
            raise UpstreamFailure("Face verification timed out") from exc
        except requests.RequestException as exc:
            logger.error("AI gateway request failed: %s", exc)
            raise UpstreamFailure("Face verification service unreachable") from exc

        if response.status_code < 200 or response.status_code >= 300:
            logger.error("AI gateway error: %s %s", response.status_code, response.text[:200])
            raise UpstreamFailure(f"AI verification failed with status {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            logger.warning("AI gateway returned a non-JSON body")
            return FaceComparison(match=False, confidence=0.0, reason="Invalid AI response format")

        content = ""
        try:
            content = body["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            logger.warning("AI gateway response has no message content")

        if not isinstance(content, str):
            content = json.dumps(content)

        result = parse_comparison(content)
        logger.info("Face comparison result: match=%s confidence=%.2f", result.match, result.confidence)
        return result

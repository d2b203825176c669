# src/yt_sentiment/infrastructure/clients/gemini_client.py
"""
Gemini Inference Provider
Sends a serialized comment corpus to Gemini and decodes the JSON answer.

Upstream failures are re-raised as InferenceServiceError with the original
message preserved, so callers can recognise overload errors
("503 The model is overloaded...") by message.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Type

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel

from yt_sentiment.app.config import GeminiSettings, get_config
from yt_sentiment.infrastructure.clients.prompts import build_prompt
from yt_sentiment.services.exceptions import ConfigurationError, InferenceServiceError

logger = logging.getLogger(__name__)


class GeminiInferenceProvider:
    """Inference provider backed by the Gemini API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[GeminiSettings] = None,
    ):
        """
        Initialize Gemini provider

        Args:
            api_key: Google AI API key (reads from config/env if not provided)
            settings: Gemini settings (global config if not provided)
        """
        self.settings = settings or get_config().gemini
        self.api_key = api_key or self.settings.api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key not found. Set GEMINI_API_KEY in .env or pass to constructor"
            )

        genai.configure(api_key=self.api_key)
        self.model = genai.GenerativeModel(
            self.settings.model,
            generation_config=genai.GenerationConfig(
                temperature=self.settings.temperature,
                response_mime_type="application/json",
            ),
        )

        logger.info(f"✅ Gemini provider initialized with model: {self.settings.model}")

    async def generate(
        self, payload: str, schema: Type[BaseModel]
    ) -> Optional[Dict[str, Any]]:
        """
        Ask the model for ``schema``-shaped JSON about ``payload``

        Args:
            payload: Serialized comments or channel corpus
            schema: Result model the prompt asks for

        Returns:
            Decoded JSON object, or None when the model returned nothing usable

        Raises:
            InferenceServiceError: the API call failed
        """
        prompt = build_prompt(payload, schema)

        try:
            response = await self.model.generate_content_async(
                prompt, request_options={"timeout": self.settings.request_timeout}
            )
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"❌ Gemini call failed: {e}")
            code = getattr(e, "code", None)
            raise InferenceServiceError(
                str(e),
                status_code=int(code) if code is not None else None,
                original_error=e,
            ) from e
        except google_exceptions.RetryError as e:
            logger.error(f"❌ Gemini call failed: {e}")
            raise InferenceServiceError(str(e), original_error=e) from e

        return self._decode(response)

    def _decode(self, response: Any) -> Optional[Dict[str, Any]]:
        """Extract the JSON object from a response, None if there is none"""
        try:
            text = response.text
        except ValueError as e:
            # Raised when the response has no text part (e.g. blocked prompt)
            logger.warning(f"⚠️ Gemini returned no text: {e}")
            return None

        if not text or not text.strip():
            return None

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ Gemini returned invalid JSON: {e}")
            return None

        if not isinstance(decoded, dict):
            logger.warning(f"⚠️ Gemini returned {type(decoded).__name__}, expected object")
            return None

        return decoded


def create_inference_provider(api_key: Optional[str] = None) -> GeminiInferenceProvider:
    """Factory function to create the Gemini provider from global config"""
    return GeminiInferenceProvider(api_key=api_key)

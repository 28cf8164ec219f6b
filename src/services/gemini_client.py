from __future__ import annotations

import logging

import google.generativeai as genai

from src.services.errors import GeminiConfigurationError, GeminiResponseError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash") -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._configured = False

    def _configure_api(self) -> None:
        if self._configured:
            return
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        genai.configure(api_key=self.api_key)
        self._configured = True

    def _extract_text(self, response) -> str:
        try:
            text = response.text
        except ValueError as blocked_error:
            # .text raises when the candidate has no parts (safety block, max tokens at 0...)
            raise GeminiResponseError(f"Gemini returned no content: {blocked_error}") from blocked_error
        if not text:
            raise GeminiResponseError("Gemini returned an empty completion")
        return text

    def complete(
        self,
        prompt: str,
        max_output_tokens: int,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        self._configure_api()
        model = genai.GenerativeModel(model_name=self.model_name)
        response = model.generate_content(
            prompt,
            generation_config=genai.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            ),
        )
        text = self._extract_text(response)
        logger.debug("Gemini completion: model=%s, chars=%d", self.model_name, len(text))
        return text

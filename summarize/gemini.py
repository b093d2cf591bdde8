"""
Gemini text generation client. One attempt per call; failures propagate to the caller,
which decides how to degrade.
"""
import logging

import google.generativeai as genai

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

# display names used in the report footer
MODEL_LABELS = {
    "gemini-2.0-flash": "Gemini 2.0 Flash",
    "gemini-2.5-flash": "Gemini 2.5 Flash",
    "gemini-2.5-pro": "Gemini 2.5 Pro",
}


def model_label(model: str) -> str:
    return MODEL_LABELS.get(model, model)


class GeminiClient:
    """Prompt in, text out."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL):
        self.model_name = model or DEFAULT_MODEL
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model_name=self.model_name)
        logger.info("Initialized Gemini client (%s)", self.model_name)

    @property
    def label(self) -> str:
        return model_label(self.model_name)

    def generate(self, prompt: str) -> str:
        response = self._model.generate_content(prompt)
        return (response.text or "").strip()

"""
Vision provider adapters (Gemini / OpenAI).

Both take a parsed DataUrl and return either a normalized report or a
`{"error", "raw"}` dict when the model's text is not JSON. SDK and network
errors (including SDK-side timeouts when LLM_TIMEOUT is set) propagate to the
caller.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

import google.generativeai as genai
from openai import OpenAI

from report import DataUrl, non_json_result, normalize_report, strip_code_fence
from settings import Provider, Settings

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    pass


class ProviderConfigError(ProviderError):
    pass


# ── shared prompt ------------------------------------------------------------
SYSTEM_PROMPT = """
You are an expert art historian. Analyze ONLY the provided image.

Return STRICT JSON with this exact schema:

{
  "meta": {
    "title": "— or inferred short title",
    "artist": "— or inferred",
    "year": "— or 4-digit if confidently inferred",
    "medium": "— or inferred (e.g., Oil on canvas / Fresco / Photograph / Digital)",
    "region": "— or inferred culture/region",
    "notes": "brief optional notes"
  },
  "sections": {
    "visual": "concise visual analysis",
    "genre": "genre/style identification",
    "color": "color palette / mood",
    "line": "line & perspective",
    "shape": "shape & form",
    "artifact": "artifact type / medium discussion",
    "historical": "historical context (avoid hallucinating specifics)",
    "cultural": "cultural significance (avoid speculation)"
  }
}

If uncertain about any field, use "—" rather than guessing. Keep prose concise and factual.
Language: follow the user's interface language if possible (Chinese if inputs look Chinese).
""".strip()

USER_INSTRUCTION = "Analyze this artwork and return the strict JSON."

TEMPERATURE = 0.4
MAX_OUTPUT_TOKENS = 2048


class VisionProvider(ABC):
    kind: Provider

    @property
    def label(self) -> str:
        return self.kind.label

    @abstractmethod
    def analyze(self, image: DataUrl) -> dict:
        """Report dict, or {"error", "raw"} if the model answered with non-JSON."""
        ...


# ── Gemini ---------------------------------------------------------------------
class GeminiProvider(VisionProvider):
    kind = Provider.GEMINI

    def __init__(self, api_key: str, model_name: str, timeout: Optional[float] = None):
        if not api_key:
            raise ProviderConfigError("Missing GOOGLE_API_KEY")
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout = timeout
        self.model = genai.GenerativeModel(model_name=model_name)

    def analyze(self, image: DataUrl) -> dict:
        response = self.model.generate_content(
            [SYSTEM_PROMPT, {"mime_type": image.mime_type, "data": image.raw_bytes()}],
            generation_config=genai.types.GenerationConfig(
                temperature=TEMPERATURE,
                max_output_tokens=MAX_OUTPUT_TOKENS,
            ),
            request_options={"timeout": self.timeout} if self.timeout else None,
        )
        content = strip_code_fence(_gemini_text(response))

        try:
            parsed = json.loads(content)
        except ValueError:
            logger.warning("Gemini (%s) returned non-JSON (%d chars)", self.model_name, len(content or ""))
            return non_json_result(self.label, content)
        return normalize_report(parsed)


def _gemini_text(response) -> str:
    # response.text raises when the candidate has no text part (e.g. blocked)
    try:
        text = response.text
    except (ValueError, AttributeError):
        text = None
    if text:
        return text

    parts = []
    for c in getattr(response, "candidates", None) or []:
        content = getattr(c, "content", None)
        for p in getattr(content, "parts", None) or []:
            if getattr(p, "text", None):
                parts.append(p.text)
    return "\n".join(parts)


# ── OpenAI ---------------------------------------------------------------------
class OpenAIProvider(VisionProvider):
    kind = Provider.OPENAI

    def __init__(self, api_key: str, model_name: str, timeout: Optional[float] = None):
        if not api_key:
            raise ProviderConfigError("Missing OPENAI_API_KEY")
        self.model_name = model_name
        if timeout:
            self.client = OpenAI(api_key=api_key, timeout=timeout)
        else:
            self.client = OpenAI(api_key=api_key)

    def analyze(self, image: DataUrl) -> dict:
        # OpenAI takes the data URL as-is in an image_url block
        resp = self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": [
                    {"type": "text", "text": USER_INSTRUCTION},
                    {"type": "image_url", "image_url": {"url": image.url}},
                ]},
            ],
            temperature=TEMPERATURE,
            response_format={"type": "json_object"},
        )
        content = ""
        if resp.choices:
            content = resp.choices[0].message.content or ""

        try:
            parsed = json.loads(content)
        except ValueError:
            try:
                parsed = json.loads(strip_code_fence(content))
            except ValueError:
                logger.warning("OpenAI (%s) returned non-JSON (%d chars)", self.model_name, len(content))
                return non_json_result(self.label, content)
        return normalize_report(parsed)


def build_provider(settings: Settings) -> VisionProvider:
    """Adapter for settings.provider. Raises ProviderConfigError if its key is missing."""
    if settings.provider is Provider.GEMINI:
        return GeminiProvider(settings.google_api_key, settings.google_model, settings.llm_timeout)
    if settings.provider is Provider.OPENAI:
        return OpenAIProvider(settings.openai_api_key, settings.openai_model, settings.llm_timeout)
    raise ProviderConfigError(f"Unknown provider: {settings.provider}")

"""Extraction of SKP fields from free text with Gemini

The model is asked for JSON matching PROMO_SCHEMA; the result is sanitized
into an ExtractedPromo and merged by skp.reducer.merge_extraction.
Any failure raises ExtractionError so the caller can leave the draft untouched.
"""
import asyncio
import json
import logging
from typing import Optional

from google import genai
from google.genai import types

from .config import EXTRACTION_TIMEOUT, GEMINI_API_KEY, GEMINI_MODEL
from .errors import ExtractionError
from .reducer import ExtractedPromo

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = """Extract data for a "Surat Kerjasama Promosi" (Promotion Cooperation Agreement) from the following text.
If specific fields are missing, leave them as empty strings or default values.

- principalName: the manufacturer / brand (Principal)
- distributorName: the distributor
- periodStart, periodEnd: promotion period in YYYY-MM-DD format
- products: one entry per promoted product
  - itemCode, namaProduk (product name), mekanismePromo (e.g. "Beli 1 Gratis 1")
  - discountPercent: number only, without "%"
  - potongHarga: price deduction in Rupiah, number only, without "Rp" or separators
- rafaksi, marketingSupport: cooperation terms as written

Text to analyze:
"""


PROMO_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "principalName": types.Schema(type=types.Type.STRING),
        "distributorName": types.Schema(type=types.Type.STRING),
        "periodStart": types.Schema(type=types.Type.STRING, description="YYYY-MM-DD format"),
        "periodEnd": types.Schema(type=types.Type.STRING, description="YYYY-MM-DD format"),
        "products": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "itemCode": types.Schema(type=types.Type.STRING),
                    "namaProduk": types.Schema(type=types.Type.STRING),
                    "mekanismePromo": types.Schema(type=types.Type.STRING),
                    "discountPercent": types.Schema(type=types.Type.NUMBER),
                    "potongHarga": types.Schema(type=types.Type.NUMBER),
                },
            ),
        ),
        "rafaksi": types.Schema(type=types.Type.STRING),
        "marketingSupport": types.Schema(type=types.Type.STRING),
    },
)


def parse_response_text(response_text: Optional[str]) -> ExtractedPromo:
    """Turn the raw model output into an ExtractedPromo

    Raises:
        ExtractionError: empty output, invalid JSON or a non-object payload
    """
    if not response_text or not response_text.strip():
        raise ExtractionError("empty response from extraction service")

    text = response_text.strip()
    # unwrap ```json ... ``` blocks
    if "```json" in text:
        json_start = text.find("```json") + 7
        json_end = text.find("```", json_start)
        text = text[json_start:json_end if json_end != -1 else None].strip()
    elif "```" in text:
        json_start = text.find("```") + 3
        json_end = text.find("```", json_start)
        text = text[json_start:json_end if json_end != -1 else None].strip()

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("JSON parse error: %s; response: %s", e, text[:500])
        raise ExtractionError(f"unparseable extraction response: {e}") from e

    if not isinstance(payload, dict):
        raise ExtractionError(f"expected a JSON object, got {type(payload).__name__}")

    return ExtractedPromo.from_payload(payload)


class LLMExtractor:
    """Gemini client for SKP field extraction"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        self.timeout = timeout if timeout is not None else EXTRACTION_TIMEOUT
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self.api_key)
            except ValueError as e:
                # no API key configured
                raise ExtractionError(f"Gemini client unavailable: {e}") from e
        return self._client

    def _build_request(self, text: str) -> dict:
        return {
            "model": self.model,
            "contents": f"{EXTRACTION_PROMPT}\"{text}\"",
            "config": types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=PROMO_SCHEMA,
            ),
        }

    def extract(self, text: str) -> ExtractedPromo:
        """Blocking extraction (CLI)"""
        logger.info("Sending %d characters to %s", len(text), self.model)
        try:
            response = self.client.models.generate_content(**self._build_request(text))
        except ExtractionError:
            raise
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise ExtractionError(f"extraction service failed: {e}") from e
        return parse_response_text(response.text)

    async def extract_async(self, text: str) -> ExtractedPromo:
        """Non-blocking extraction bounded by self.timeout"""
        logger.info("Sending %d characters to %s (async)", len(text), self.model)
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(**self._build_request(text)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Gemini API timed out after %.1fs", self.timeout)
            raise ExtractionError(f"extraction service timed out after {self.timeout}s") from e
        except ExtractionError:
            raise
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise ExtractionError(f"extraction service failed: {e}") from e
        return parse_response_text(response.text)


def extract_promo_data(text: str) -> ExtractedPromo:
    """Convenience wrapper around LLMExtractor().extract"""
    extractor = LLMExtractor()
    return extractor.extract(text)

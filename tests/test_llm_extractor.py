"""Unit tests for the Gemini extraction client (no network)."""

import asyncio
import json
import unittest
from types import SimpleNamespace

from skp.errors import ExtractionError
from skp.llm_extractor import LLMExtractor, parse_response_text

PAYLOAD = {
    "principalName": "PT Sehat Selalu",
    "distributorName": "PT Distribusi",
    "periodStart": "2024-03-01",
    "periodEnd": "2024-03-31",
    "products": [{"itemCode": "A1", "namaProduk": "Vitamin C", "discountPercent": 10}],
}


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.requests = []

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeAsyncModels(FakeModels):
    def __init__(self, text=None, error=None, delay=0.0):
        super().__init__(text, error)
        self.delay = delay

    async def generate_content(self, **kwargs):
        if self.delay:
            await asyncio.sleep(self.delay)
        return FakeModels.generate_content(self, **kwargs)


def fake_client(text=None, error=None, delay=0.0):
    return SimpleNamespace(
        models=FakeModels(text, error),
        aio=SimpleNamespace(models=FakeAsyncModels(text, error, delay)),
    )


class TestParseResponseText(unittest.TestCase):
    def test_plain_json(self) -> None:
        promo = parse_response_text(json.dumps(PAYLOAD))
        self.assertEqual(promo.principal_name, "PT Sehat Selalu")
        self.assertEqual(promo.products[0].item_code, "A1")

    def test_fenced_json(self) -> None:
        promo = parse_response_text("Here you go:\n```json\n" + json.dumps(PAYLOAD) + "\n```")
        self.assertEqual(promo.period_end, "2024-03-31")

    def test_rejects_unusable_output(self) -> None:
        for text in (None, "", "   ", "not json", "[1, 2]", '"text"'):
            with self.assertRaises(ExtractionError):
                parse_response_text(text)


class TestLLMExtractor(unittest.TestCase):
    def test_extract_sync(self) -> None:
        client = fake_client(json.dumps(PAYLOAD))
        extractor = LLMExtractor(api_key="test", model="gemini-test", client=client)
        promo = extractor.extract("promo text")
        self.assertEqual(promo.distributor_name, "PT Distribusi")

        request = client.models.requests[0]
        self.assertEqual(request["model"], "gemini-test")
        self.assertIn("promo text", request["contents"])
        self.assertEqual(request["config"].response_mime_type, "application/json")

    def test_extract_async(self) -> None:
        extractor = LLMExtractor(api_key="test", client=fake_client(json.dumps(PAYLOAD)))
        promo = asyncio.run(extractor.extract_async("promo text"))
        self.assertEqual(promo.products[0].name, "Vitamin C")

    def test_transport_error_becomes_extraction_error(self) -> None:
        extractor = LLMExtractor(api_key="test", client=fake_client(error=ConnectionError("down")))
        with self.assertRaises(ExtractionError):
            extractor.extract("x")
        with self.assertRaises(ExtractionError):
            asyncio.run(extractor.extract_async("x"))

    def test_timeout(self) -> None:
        extractor = LLMExtractor(api_key="test", timeout=0.01, client=fake_client(json.dumps(PAYLOAD), delay=1.0))
        with self.assertRaises(ExtractionError) as ctx:
            asyncio.run(extractor.extract_async("x"))
        self.assertIn("timed out", str(ctx.exception))

    def test_empty_response(self) -> None:
        extractor = LLMExtractor(api_key="test", client=fake_client(text=None))
        with self.assertRaises(ExtractionError):
            asyncio.run(extractor.extract_async("x"))


if __name__ == "__main__":
    unittest.main()

"""Unit tests for the reportlab printer."""

import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from skp.models import ProductItem, new_document
from skp.pdf_renderer import SKPPrinter, decode_data_url
from skp.print_projector import RenderMode, project
from skp.signature_pad import Point, SignaturePad


def _signature() -> str:
    pad = SignaturePad(120, 60)
    pad.begin(Point(10, 40))
    pad.extend(Point(60, 10))
    pad.extend(Point(110, 45))
    pad.end()
    return pad.commit()


class TestSKPPrinter(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = Path(self._tmp.name)
        # missing font file: exercises the Helvetica fallback
        self.printer = SKPPrinter(font_path=str(self.out / "missing.ttf"))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_generate_writes_pdf(self) -> None:
        doc = replace(
            new_document(),
            number="001/SKP-ALPRO/III/2024",
            products=(ProductItem(item_code="A1", name="Vitamin C", discount_percent=10, price_deduction=1500),),
            signature_alpro=_signature(),
        )
        with self.assertLogs("skp.pdf_renderer", level="WARNING"):
            path = self.printer.generate(project(doc), self.out / "skp.pdf")
        self.assertEqual(path, self.out / "skp.pdf")
        self.assertTrue(path.read_bytes().startswith(b"%PDF"))

    def test_render_bytes_with_attachment_pages(self) -> None:
        doc = replace(new_document(), products=tuple(ProductItem(name=f"Produk {i}") for i in range(60)))
        pdf = self.printer.render_bytes(project(doc, RenderMode.PRINT))
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_default_output_path(self) -> None:
        doc = replace(new_document(), number="002/SKP-ALPRO/IV/2024")
        path = self.printer.generate(project(doc))
        try:
            self.assertEqual(path.name, "SKP_002_SKP-ALPRO_IV_2024.pdf")
            self.assertTrue(path.exists())
        finally:
            path.unlink(missing_ok=True)

    def test_bad_signature_image_does_not_fail(self) -> None:
        doc = replace(new_document(), signature_principal="data:image/png;base64,bm90IGEgcG5n")
        pdf = self.printer.render_bytes(project(doc))
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_decode_data_url(self) -> None:
        self.assertEqual(decode_data_url("data:image/png;base64,aGk="), b"hi")


if __name__ == "__main__":
    unittest.main()

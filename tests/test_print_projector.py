"""Unit tests for the paper form projection."""

import unittest
from dataclasses import replace

from skp.models import (
    CompanyType,
    CooperationType,
    EntityInfo,
    EntityType,
    PaymentType,
    ProductItem,
    SKPData,
    SignatureRole,
    TaxStatus,
    new_document,
)
from skp.print_projector import SIGNATURE_PLACEHOLDER, RenderMode, project


def _ticked(boxes) -> list[str]:
    return [b.label for b in boxes if b.ticked]


class TestProject(unittest.TestCase):
    def test_outright_include_scenario(self) -> None:
        doc = replace(
            new_document(),
            number="001/SKP-ALPRO/III/2024",
            cooperation_type=CooperationType.OUTRIGHT,
            tax_status=TaxStatus.INCLUDE,
            products=(
                ProductItem(item_code="A1", name="Vitamin C", promo_mechanism="Beli 2 Gratis 1",
                            discount_percent=10, price_deduction=1500),
                ProductItem(item_code="B2", name="Masker Medis", promo_mechanism="Potong Harga",
                            price_deduction=2500.5),
            ),
        )
        layout = project(doc)

        self.assertEqual(_ticked(layout.cooperation_type), ["OUTRIGHT"])
        self.assertEqual(_ticked(layout.tax_status), ["Harga Termasuk Tax"])
        self.assertEqual(len(layout.product_rows), 5)

        row = layout.product_rows[0]
        self.assertEqual((row.no, row.item_code, row.name), (1, "A1", "Vitamin C"))
        self.assertEqual(row.discount, "10%")
        self.assertEqual(row.price_deduction, "1.500")

        row = layout.product_rows[1]
        self.assertEqual((row.no, row.item_code, row.name), (2, "B2", "Masker Medis"))
        self.assertEqual(row.discount, "")
        self.assertEqual(row.price_deduction, "2.500,5")

        for no, blank in enumerate(layout.product_rows[2:], start=3):
            self.assertEqual(blank.no, no)
            self.assertEqual(
                (blank.item_code, blank.name, blank.promo_mechanism, blank.discount, blank.price_deduction),
                ("", "", "", "", ""),
            )

    def test_more_than_five_products_are_all_shown(self) -> None:
        doc = replace(new_document(), products=tuple(ProductItem(name=f"P{i}") for i in range(8)))
        layout = project(doc)
        self.assertEqual([r.name for r in layout.product_rows], [f"P{i}" for i in range(8)])
        self.assertEqual([r.no for r in layout.product_rows], list(range(1, 9)))

    def test_zero_values_render_empty(self) -> None:
        doc = replace(new_document(), products=(ProductItem(name="X", discount_percent=0, price_deduction=0),))
        row = project(doc).product_rows[0]
        self.assertEqual((row.discount, row.price_deduction), ("", ""))

    def test_single_tick_groups(self) -> None:
        doc = replace(
            new_document(),
            cooperation_type=CooperationType.CONSIGNMENT,
            tax_status=TaxStatus.EXCLUDE,
            invoice_to=EntityType.DISTRIBUTOR,
            payment_type=PaymentType.TRANSFER,
            cut_invoice_to=EntityType.PRINCIPAL,
            principal=EntityInfo(name="P", has_tax_id=False, tax_id="kept"),
        )
        layout = project(doc)
        self.assertEqual(_ticked(layout.cooperation_type), ["CONSIGNMENT"])
        self.assertEqual(_ticked(layout.tax_status), ["Belum Termasuk Tax"])
        self.assertEqual(_ticked(layout.invoice_to), ["Distributor"])
        self.assertEqual(_ticked(layout.payment_type), ["Transfer"])
        self.assertEqual(_ticked(layout.cut_invoice_to), ["Principal"])
        self.assertEqual(_ticked(layout.principal.tax_id_boxes), ["TIDAK"])
        self.assertEqual(layout.principal.tax_id, "kept")
        self.assertEqual(_ticked(layout.distributor.tax_id_boxes), ["YA"])

    def test_company_types_independent(self) -> None:
        self.assertEqual(_ticked(project(new_document()).company_types), [])
        doc = replace(new_document(), company_types=(CompanyType.PRIMA_RETAIL, CompanyType.PRORESULT))
        self.assertEqual(
            _ticked(project(doc).company_types),
            ["PT Proresult Kreasi Utama", "PT Prima Retail Indonesia"],
        )

    def test_signature_placeholders(self) -> None:
        doc = replace(new_document(), signature_alpro="data:image/png;base64,AAA")

        edit = project(doc, RenderMode.EDIT)
        alpro, principal = edit.signatures
        self.assertIs(alpro.role, SignatureRole.ALPRO)
        self.assertEqual(alpro.image, "data:image/png;base64,AAA")
        self.assertIsNone(alpro.placeholder)
        self.assertIsNone(principal.image)
        self.assertEqual(principal.placeholder, SIGNATURE_PLACEHOLDER)

        printed = project(doc, RenderMode.PRINT)
        self.assertTrue(all(box.placeholder is None for box in printed.signatures))
        self.assertEqual(printed.signatures[0].image, "data:image/png;base64,AAA")

    def test_issuer_text(self) -> None:
        layout = project(new_document(), issuer={"issuer_name": "Apotek Uji", "city": "Bandung", "payment_days": 30})
        self.assertIn("Apotek Uji", layout.intro)
        self.assertIn("30 hari", layout.clause)
        self.assertTrue(layout.place_date.startswith("Bandung,"))
        self.assertEqual(layout.signatures[0].signer, "Apotek Uji")

    def test_empty_document_projects(self) -> None:
        layout = project(SKPData(), RenderMode.EDIT)
        self.assertEqual(len(layout.product_rows), 5)
        self.assertEqual(layout.number, "")

    def test_pure(self) -> None:
        doc = new_document()
        self.assertEqual(project(doc), project(doc))


if __name__ == "__main__":
    unittest.main()

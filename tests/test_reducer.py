"""Unit tests for the extraction merge and edit actions."""

import math
import unittest
from dataclasses import replace

from skp.models import (
    CompanyType,
    CooperationType,
    EntityInfo,
    EntityType,
    PaymentType,
    ProductItem,
    SignatureRole,
    TaxStatus,
    new_document,
)
from skp.reducer import (
    AddProduct,
    ApplyExtraction,
    ExtractedProduct,
    ExtractedPromo,
    RemoveProduct,
    SetCooperationType,
    SetCutInvoiceTo,
    SetInvoiceTo,
    SetNumber,
    SetPaymentType,
    SetPeriod,
    SetSignature,
    SetTaxStatus,
    SetTerms,
    ToggleCompanyType,
    UpdateEntity,
    UpdatePic,
    UpdateProduct,
    apply,
    merge_extraction,
)


class TestExtractedPromoPayload(unittest.TestCase):
    def test_camel_case_payload(self) -> None:
        promo = ExtractedPromo.from_payload({
            "principalName": "PT Sehat Selalu",
            "distributorName": "PT Distribusi Nusantara",
            "periodStart": "2024-03-01",
            "periodEnd": "2024-03-31",
            "rafaksi": "2%",
            "marketingSupport": "Rp 5.000.000",
            "products": [
                {"itemCode": "A1", "namaProduk": "Vitamin C", "mekanismePromo": "Beli 2 Gratis 1",
                 "discountPercent": 10, "potongHarga": 1500},
            ],
        })
        self.assertEqual(promo.principal_name, "PT Sehat Selalu")
        self.assertEqual(promo.marketing_support, "Rp 5.000.000")
        self.assertEqual(len(promo.products), 1)
        self.assertEqual(promo.products[0].name, "Vitamin C")
        self.assertEqual(promo.products[0].price_deduction, 1500)

    def test_snake_case_payload(self) -> None:
        promo = ExtractedPromo.from_payload({"principal_name": "A", "period_end": "2024-01-31"})
        self.assertEqual(promo.principal_name, "A")
        self.assertEqual(promo.period_end, "2024-01-31")

    def test_missing_and_bad_numbers_become_zero(self) -> None:
        product = ExtractedProduct.from_payload({
            "namaProduk": "X",
            "discountPercent": None,
            "potongHarga": float("nan"),
        })
        self.assertEqual(product.discount_percent, 0)
        self.assertEqual(product.price_deduction, 0)
        self.assertFalse(math.isnan(product.price_deduction))

        product = ExtractedProduct.from_payload({"discountPercent": "abc", "potongHarga": "2,500"})
        self.assertEqual(product.discount_percent, 0)
        self.assertEqual(product.price_deduction, 2500)

    def test_none_and_garbage_payloads(self) -> None:
        self.assertEqual(ExtractedPromo.from_payload(None), ExtractedPromo())
        promo = ExtractedPromo.from_payload({"products": "not a list", "principalName": None})
        self.assertEqual(promo.products, ())
        self.assertEqual(promo.principal_name, "")

    def test_whitespace_counts_as_empty(self) -> None:
        promo = ExtractedPromo.from_payload({"principalName": "   "})
        self.assertEqual(promo.principal_name, "")


class TestMergeExtraction(unittest.TestCase):
    def setUp(self) -> None:
        self.doc = replace(
            new_document(),
            principal=EntityInfo(name="Existing Principal", tax_id="01.234"),
            period_start="2024-01-01",
        )

    def test_empty_extraction_is_identity(self) -> None:
        self.assertEqual(merge_extraction(self.doc, ExtractedPromo()), self.doc)

    def test_empty_values_never_blank_out(self) -> None:
        merged = merge_extraction(self.doc, ExtractedPromo(principal_name="", period_end="2024-01-31"))
        self.assertEqual(merged.principal.name, "Existing Principal")
        self.assertEqual(merged.period_start, "2024-01-01")
        self.assertEqual(merged.period_end, "2024-01-31")

    def test_non_empty_values_replace(self) -> None:
        merged = merge_extraction(self.doc, ExtractedPromo(principal_name="New", rafaksi="3%"))
        self.assertEqual(merged.principal.name, "New")
        # other entity fields untouched
        self.assertEqual(merged.principal.tax_id, "01.234")
        self.assertEqual(merged.terms.rafaksi, "3%")

    def test_products_replaced_wholesale_with_fresh_ids(self) -> None:
        extracted = ExtractedPromo(products=(
            ExtractedProduct(name="P1"),
            ExtractedProduct(name="P2"),
        ))
        merged = merge_extraction(self.doc, extracted)
        self.assertEqual([p.name for p in merged.products], ["P1", "P2"])
        old_ids = {p.id for p in self.doc.products}
        new_ids = [p.id for p in merged.products]
        self.assertEqual(len(set(new_ids)), 2)
        self.assertFalse(old_ids & set(new_ids))

    def test_empty_product_list_keeps_existing(self) -> None:
        merged = merge_extraction(self.doc, ExtractedPromo(principal_name="New"))
        self.assertEqual(merged.products, self.doc.products)

    def test_apply_extraction_action(self) -> None:
        merged = apply(self.doc, ApplyExtraction(ExtractedPromo(distributor_name="Dist")))
        self.assertEqual(merged.distributor.name, "Dist")


class TestEditActions(unittest.TestCase):
    def setUp(self) -> None:
        self.doc = new_document()

    def test_original_is_never_mutated(self) -> None:
        before = self.doc
        apply(self.doc, SetNumber("001/SKP-ALPRO/I/2024"))
        self.assertIs(self.doc, before)
        self.assertEqual(self.doc.number, "")

    def test_scalar_actions(self) -> None:
        doc = self.doc
        doc = apply(doc, SetCooperationType(CooperationType.CONSIGNMENT))
        doc = apply(doc, SetTaxStatus(TaxStatus.EXCLUDE))
        doc = apply(doc, SetInvoiceTo(EntityType.DISTRIBUTOR))
        doc = apply(doc, SetPaymentType(PaymentType.TRANSFER))
        doc = apply(doc, SetCutInvoiceTo(EntityType.DISTRIBUTOR))
        self.assertEqual(doc.cooperation_type, CooperationType.CONSIGNMENT)
        self.assertEqual(doc.tax_status, TaxStatus.EXCLUDE)
        self.assertEqual(doc.invoice_to, EntityType.DISTRIBUTOR)
        self.assertEqual(doc.payment_type, PaymentType.TRANSFER)
        self.assertEqual(doc.cut_invoice_to, EntityType.DISTRIBUTOR)

    def test_string_enum_values_accepted(self) -> None:
        doc = apply(self.doc, SetCooperationType("CONSIGNMENT"))
        self.assertIs(doc.cooperation_type, CooperationType.CONSIGNMENT)

    def test_update_entity_keeps_tax_id_when_unchecked(self) -> None:
        doc = apply(self.doc, UpdateEntity(EntityType.PRINCIPAL, "tax_id", "99.888"))
        doc = apply(doc, UpdateEntity(EntityType.PRINCIPAL, "has_tax_id", False))
        self.assertFalse(doc.principal.has_tax_id)
        self.assertEqual(doc.principal.tax_id, "99.888")
        self.assertEqual(doc.distributor, EntityInfo())

    def test_update_entity_tax_id_flag_from_strings(self) -> None:
        doc = apply(self.doc, UpdateEntity(EntityType.PRINCIPAL, "has_tax_id", "false"))
        self.assertIs(doc.principal.has_tax_id, False)
        doc = apply(doc, UpdateEntity(EntityType.PRINCIPAL, "has_tax_id", "true"))
        self.assertIs(doc.principal.has_tax_id, True)
        doc = apply(doc, UpdateEntity(EntityType.DISTRIBUTOR, "has_tax_id", "Tidak"))
        self.assertIs(doc.distributor.has_tax_id, False)
        doc = apply(doc, UpdateEntity(EntityType.DISTRIBUTOR, "has_tax_id", 1))
        self.assertIs(doc.distributor.has_tax_id, True)
        with self.assertRaises(ValueError):
            apply(doc, UpdateEntity(EntityType.PRINCIPAL, "has_tax_id", "maybe"))

    def test_update_entity_unknown_field(self) -> None:
        with self.assertRaises(ValueError):
            apply(self.doc, UpdateEntity(EntityType.PRINCIPAL, "nickname", "x"))

    def test_set_period_partial(self) -> None:
        doc = apply(self.doc, SetPeriod(start="2024-03-01"))
        doc = apply(doc, SetPeriod(end="2024-02-01"))
        # end before start is accepted as-is
        self.assertEqual((doc.period_start, doc.period_end), ("2024-03-01", "2024-02-01"))

    def test_product_lifecycle(self) -> None:
        doc = apply(self.doc, AddProduct())
        self.assertEqual(len(doc.products), 2)
        first, second = doc.products

        doc = apply(doc, UpdateProduct(second.id, "name", "Masker"))
        doc = apply(doc, UpdateProduct(second.id, "discount_percent", "12.5"))
        doc = apply(doc, UpdateProduct(second.id, "price_deduction", -500))
        self.assertEqual(doc.products[1].name, "Masker")
        self.assertEqual(doc.products[1].discount_percent, 12.5)
        self.assertEqual(doc.products[1].price_deduction, -500)
        self.assertEqual(doc.products[0], first)

        doc = apply(doc, RemoveProduct(first.id))
        self.assertEqual([p.id for p in doc.products], [second.id])

    def test_unknown_product_id_is_noop(self) -> None:
        self.assertEqual(apply(self.doc, UpdateProduct("missing", "name", "x")), self.doc)
        self.assertEqual(apply(self.doc, RemoveProduct("missing")), self.doc)

    def test_update_product_rejects_id_and_unknown_fields(self) -> None:
        product_id = self.doc.products[0].id
        for field_name in ("id", "colour"):
            with self.assertRaises(ValueError):
                apply(self.doc, UpdateProduct(product_id, field_name, "x"))

    def test_add_given_product(self) -> None:
        product = ProductItem(name="Given")
        doc = apply(self.doc, AddProduct(product))
        self.assertIs(doc.products[-1], product)

    def test_terms_partial_update(self) -> None:
        doc = apply(self.doc, SetTerms(rafaksi="2%"))
        doc = apply(doc, SetTerms(marketing_support="Banner"))
        self.assertEqual(doc.terms.rafaksi, "2%")
        self.assertEqual(doc.terms.marketing_support, "Banner")

    def test_toggle_company_type(self) -> None:
        doc = apply(self.doc, ToggleCompanyType(CompanyType.PRIMA_RETAIL, True))
        doc = apply(doc, ToggleCompanyType(CompanyType.PRIMA_RETAIL, True))
        doc = apply(doc, ToggleCompanyType(CompanyType.PRORESULT, True))
        self.assertEqual(doc.company_types, (CompanyType.PRIMA_RETAIL, CompanyType.PRORESULT))

        doc = apply(doc, ToggleCompanyType(CompanyType.PRIMA_RETAIL, False))
        doc = apply(doc, ToggleCompanyType(CompanyType.PRIMA_RETAIL, False))
        self.assertEqual(doc.company_types, (CompanyType.PRORESULT,))

    def test_update_pic(self) -> None:
        doc = apply(self.doc, UpdatePic("email", "pic@example.com"))
        self.assertEqual(doc.pic.email, "pic@example.com")
        with self.assertRaises(ValueError):
            apply(self.doc, UpdatePic("fax", "1"))

    def test_signatures_are_independent(self) -> None:
        doc = apply(self.doc, SetSignature(SignatureRole.ALPRO, "data:image/png;base64,AAA"))
        doc = apply(doc, SetSignature(SignatureRole.PRINCIPAL, "data:image/png;base64,BBB"))
        doc = apply(doc, SetSignature(SignatureRole.PRINCIPAL, None))
        self.assertEqual(doc.signature_alpro, "data:image/png;base64,AAA")
        self.assertIsNone(doc.signature_principal)

    def test_unsupported_action(self) -> None:
        with self.assertRaises(TypeError):
            apply(self.doc, object())


if __name__ == "__main__":
    unittest.main()

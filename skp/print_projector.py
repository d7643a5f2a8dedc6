"""Projection of an SKP onto the fixed paper form

project() is pure: the same document always yields the same PrintLayout.
Layout text is Indonesian because it reproduces the printed form.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import (
    CompanyType,
    CooperationType,
    EntityInfo,
    EntityType,
    PaymentType,
    ProductItem,
    SignatureRole,
    SKPData,
    TaxStatus,
)
from .utils import format_percent, format_rupiah

MIN_PRODUCT_ROWS = 5
SIGNATURE_PLACEHOLDER = "KLIK DISINI UNTUK TTD"

DEFAULT_ISSUER = {
    "issuer_name": "Apotek Alpro Indonesia",
    "city": "Jakarta",
    "payment_days": 14,
}


class RenderMode(str, Enum):
    EDIT = "edit"  # on-screen preview, shows signing affordances
    PRINT = "print"  # printed / exported output


@dataclass(frozen=True)
class CheckBox:
    label: str
    ticked: bool


@dataclass(frozen=True)
class PartyBlock:
    title: str
    name_label: str
    name: str
    tax_id_boxes: tuple[CheckBox, CheckBox]  # YA / TIDAK
    tax_id: str
    tax_address: str


@dataclass(frozen=True)
class ProductRow:
    no: int  # 1-based position
    item_code: str
    name: str
    promo_mechanism: str
    discount: str
    price_deduction: str


@dataclass(frozen=True)
class SignatureBox:
    role: SignatureRole
    caption: str  # "Diajukan Oleh," / "Disetujui,"
    signer: str
    signer_note: str
    image: Optional[str]
    placeholder: Optional[str]  # only in RenderMode.EDIT and only when unsigned


@dataclass(frozen=True)
class PrintLayout:
    mode: RenderMode
    title: str
    cooperation_type: tuple[CheckBox, ...]
    number: str
    intro: str
    principal: PartyBlock
    distributor: PartyBlock
    period_start: str
    period_end: str
    product_rows: tuple[ProductRow, ...]
    product_note: str
    tax_status: tuple[CheckBox, ...]
    rafaksi: str
    marketing_support: str
    company_types: tuple[CheckBox, ...]
    invoice_to: tuple[CheckBox, ...]
    payment_type: tuple[CheckBox, ...]
    cut_invoice_to: tuple[CheckBox, ...]
    pic_rows: tuple[tuple[str, str], ...]
    clause: str
    place_date: str
    signatures: tuple[SignatureBox, SignatureBox]
    footnotes: tuple[str, ...]


def _choice(current, options: list[tuple[object, str]]) -> tuple[CheckBox, ...]:
    """Mutually exclusive tick group: ticked iff current equals the cell value"""
    return tuple(CheckBox(label=label, ticked=current == value) for value, label in options)


def _party(title: str, name_label: str, entity: EntityInfo) -> PartyBlock:
    return PartyBlock(
        title=title,
        name_label=name_label,
        name=entity.name,
        tax_id_boxes=(
            CheckBox("YA", entity.has_tax_id),
            CheckBox("TIDAK", not entity.has_tax_id),
        ),
        tax_id=entity.tax_id,
        tax_address=entity.tax_address,
    )


def _product_row(no: int, product: Optional[ProductItem]) -> ProductRow:
    if product is None:
        return ProductRow(no=no, item_code="", name="", promo_mechanism="", discount="", price_deduction="")
    # zero means "not set", not Rp 0
    return ProductRow(
        no=no,
        item_code=product.item_code,
        name=product.name,
        promo_mechanism=product.promo_mechanism,
        discount=format_percent(product.discount_percent) if product.discount_percent else "",
        price_deduction=format_rupiah(product.price_deduction) if product.price_deduction else "",
    )


def product_rows(products: tuple[ProductItem, ...]) -> tuple[ProductRow, ...]:
    """All products, padded with blank rows up to MIN_PRODUCT_ROWS"""
    padded = list(products) + [None] * max(0, MIN_PRODUCT_ROWS - len(products))
    return tuple(_product_row(i, p) for i, p in enumerate(padded, start=1))


def _signature_box(
    role: SignatureRole,
    caption: str,
    signer: str,
    signer_note: str,
    image: Optional[str],
    mode: RenderMode,
) -> SignatureBox:
    placeholder = SIGNATURE_PLACEHOLDER if (not image and mode is RenderMode.EDIT) else None
    return SignatureBox(
        role=role,
        caption=caption,
        signer=signer,
        signer_note=signer_note,
        image=image or None,
        placeholder=placeholder,
    )


def project(doc: SKPData, mode: RenderMode = RenderMode.PRINT, issuer: Optional[dict] = None) -> PrintLayout:
    """Map a document onto the paper form layout

    Args:
        doc: document to render (any well-formed document, including an empty one)
        mode: EDIT adds "click to sign" placeholders; PRINT never does
        issuer: issuer config (see skp.config.load_issuer_config)
    """
    issuer = {**DEFAULT_ISSUER, **(issuer or {})}
    mode = RenderMode(mode)
    issuer_name = issuer["issuer_name"]

    entity_options = [(EntityType.PRINCIPAL, "Principal"), (EntityType.DISTRIBUTOR, "Distributor")]

    return PrintLayout(
        mode=mode,
        title="Surat Kerjasama Promosi",
        cooperation_type=_choice(
            doc.cooperation_type,
            [(CooperationType.CONSIGNMENT, "CONSIGNMENT"), (CooperationType.OUTRIGHT, "OUTRIGHT")],
        ),
        number=doc.number,
        intro=f"Berikut adalah kesepakatan program kegiatan Promosi antara {issuer_name} dengan :",
        principal=_party("Principal", "Nama Principal", doc.principal),
        distributor=_party("Distributor", "Nama Distributor", doc.distributor),
        period_start=doc.period_start,
        period_end=doc.period_end,
        product_rows=product_rows(doc.products),
        product_note=f"Sistem claim selling out Harga Jual {issuer_name}",
        tax_status=_choice(
            doc.tax_status,
            [(TaxStatus.INCLUDE, "Harga Termasuk Tax"), (TaxStatus.EXCLUDE, "Belum Termasuk Tax")],
        ),
        rafaksi=doc.terms.rafaksi,
        marketing_support=doc.terms.marketing_support,
        # independent boxes: 0, 1 or 2 may be ticked
        company_types=tuple(CheckBox(t.label, t in doc.company_types) for t in CompanyType),
        invoice_to=_choice(doc.invoice_to, entity_options),
        payment_type=_choice(
            doc.payment_type,
            [(PaymentType.POTONG_TAGIHAN, "Potong Tagihan *"), (PaymentType.TRANSFER, "Transfer")],
        ),
        cut_invoice_to=_choice(doc.cut_invoice_to, entity_options),
        pic_rows=(
            ("Nama PIC", doc.pic.name),
            ("Email PIC", doc.pic.email),
            ("No.Tlp PIC", doc.pic.phone),
            ("Alamat Pengiriman", doc.pic.address),
        ),
        clause=(
            f"Biaya support promosi dibayarkan dalam waktu {issuer['payment_days']} hari kalender sejak "
            "invoice dan faktur pajak diterima. Jika lewat dari batas waktu yang ditetapkan maka "
            f"Principal/Distributor dengan ini setuju bahwa {issuer_name} berhak memotong tagihan Distributor."
        ),
        place_date=f"{issuer['city']}, ____ / ____ / ______",
        signatures=(
            _signature_box(
                SignatureRole.ALPRO, "Diajukan Oleh,", issuer_name, "(Nama / Jabatan)",
                doc.signature_alpro, mode,
            ),
            _signature_box(
                SignatureRole.PRINCIPAL, "Disetujui,", "Principal / Distributor",
                "(Nama, Jabatan, Stempel Perusahaan)", doc.signature_principal, mode,
            ),
        ),
        footnotes=(
            "*Jika pembayaran potong tagih tetapi tidak ada PO atau tagihan kepada "
            f"{issuer_name}, maka metode pembayaran akan berubah menjadi transfer.",
            "Menggunakan Lampiran Produk kesepakatan program kegiatan Promosi jika produk lebih dari "
            f"{MIN_PRODUCT_ROWS} item.",
            "Mohon pastikan stock barang tersedia di pihak distributor selama promo berlangsung.",
        ),
    )

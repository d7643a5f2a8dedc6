"""SKP (Surat Kerjasama Promosi) data structures

Records are frozen; edits go through skp.reducer and produce new values.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class CooperationType(str, Enum):
    CONSIGNMENT = "CONSIGNMENT"
    OUTRIGHT = "OUTRIGHT"


class TaxStatus(str, Enum):
    INCLUDE = "INCLUDE"
    EXCLUDE = "EXCLUDE"


class CompanyType(str, Enum):
    PRORESULT = "PRORESULT"
    PRIMA_RETAIL = "PRIMA_RETAIL"

    @property
    def label(self) -> str:
        return COMPANY_TYPE_LABELS[self]


COMPANY_TYPE_LABELS = {
    CompanyType.PRORESULT: "PT Proresult Kreasi Utama",
    CompanyType.PRIMA_RETAIL: "PT Prima Retail Indonesia",
}


class EntityType(str, Enum):
    PRINCIPAL = "PRINCIPAL"
    DISTRIBUTOR = "DISTRIBUTOR"


class PaymentType(str, Enum):
    POTONG_TAGIHAN = "POTONG_TAGIHAN"
    TRANSFER = "TRANSFER"


class DocumentStatus(str, Enum):
    DRAFT = "Draft"
    FINAL = "Final"


class SignatureRole(str, Enum):
    ALPRO = "alpro"  # issuer
    PRINCIPAL = "principal"  # counter-party


def new_token() -> str:
    """Opaque unique identity token"""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class EntityInfo:
    """Principal or distributor party"""
    name: str = ""
    has_tax_id: bool = True
    tax_id: str = ""  # kept even when has_tax_id is False
    tax_address: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EntityInfo":
        data = data or {}
        return cls(
            name=str(data.get("name", "")),
            has_tax_id=bool(data.get("has_tax_id", True)),
            tax_id=str(data.get("tax_id", "")),
            tax_address=str(data.get("tax_address", "")),
        )


@dataclass(frozen=True)
class ProductItem:
    """One row of the promoted product table"""
    id: str = field(default_factory=new_token)
    item_code: str = ""
    name: str = ""
    promo_mechanism: str = ""  # e.g. "Beli 1 Gratis 1"
    discount_percent: float = 0
    price_deduction: float = 0  # Rupiah

    @classmethod
    def from_dict(cls, data: dict) -> "ProductItem":
        return cls(
            id=str(data.get("id") or new_token()),
            item_code=str(data.get("item_code", "")),
            name=str(data.get("name", "")),
            promo_mechanism=str(data.get("promo_mechanism", "")),
            discount_percent=data.get("discount_percent", 0) or 0,
            price_deduction=data.get("price_deduction", 0) or 0,
        )


@dataclass(frozen=True)
class PicInfo:
    """Contact person for invoice delivery"""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PicInfo":
        data = data or {}
        return cls(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            address=str(data.get("address", "")),
        )


@dataclass(frozen=True)
class CooperationTerms:
    """Jenis kerjasama"""
    rafaksi: str = ""
    marketing_support: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CooperationTerms":
        data = data or {}
        return cls(
            rafaksi=str(data.get("rafaksi", "")),
            marketing_support=str(data.get("marketing_support", "")),
        )


@dataclass(frozen=True)
class SKPData:
    """The promotion cooperation agreement"""
    id: str = field(default_factory=new_token)
    number: str = ""  # No. Surat, filled by skp.numbering
    cooperation_type: CooperationType = CooperationType.OUTRIGHT
    principal: EntityInfo = field(default_factory=EntityInfo)
    distributor: EntityInfo = field(default_factory=EntityInfo)
    period_start: str = ""  # YYYY-MM-DD
    period_end: str = ""  # YYYY-MM-DD
    products: tuple[ProductItem, ...] = ()
    tax_status: TaxStatus = TaxStatus.INCLUDE
    terms: CooperationTerms = field(default_factory=CooperationTerms)
    company_types: tuple[CompanyType, ...] = ()
    invoice_to: EntityType = EntityType.PRINCIPAL
    payment_type: PaymentType = PaymentType.POTONG_TAGIHAN
    cut_invoice_to: EntityType = EntityType.PRINCIPAL
    pic: PicInfo = field(default_factory=PicInfo)
    signature_alpro: Optional[str] = None  # PNG data URL
    signature_principal: Optional[str] = None  # PNG data URL
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    status: DocumentStatus = DocumentStatus.DRAFT

    def signature(self, role: SignatureRole) -> Optional[str]:
        if SignatureRole(role) is SignatureRole.ALPRO:
            return self.signature_alpro
        return self.signature_principal

    def to_dict(self) -> dict:
        """JSON-compatible snapshot (enum values as strings, tuples as lists)"""
        return {
            "id": self.id,
            "number": self.number,
            "cooperation_type": self.cooperation_type.value,
            "principal": _entity_to_dict(self.principal),
            "distributor": _entity_to_dict(self.distributor),
            "period_start": self.period_start,
            "period_end": self.period_end,
            "products": [
                {
                    "id": p.id,
                    "item_code": p.item_code,
                    "name": p.name,
                    "promo_mechanism": p.promo_mechanism,
                    "discount_percent": p.discount_percent,
                    "price_deduction": p.price_deduction,
                }
                for p in self.products
            ],
            "tax_status": self.tax_status.value,
            "terms": {
                "rafaksi": self.terms.rafaksi,
                "marketing_support": self.terms.marketing_support,
            },
            "company_types": [t.value for t in self.company_types],
            "invoice_to": self.invoice_to.value,
            "payment_type": self.payment_type.value,
            "cut_invoice_to": self.cut_invoice_to.value,
            "pic": {
                "name": self.pic.name,
                "email": self.pic.email,
                "phone": self.pic.phone,
                "address": self.pic.address,
            },
            "signature_alpro": self.signature_alpro,
            "signature_principal": self.signature_principal,
            "created_at": self.created_at,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SKPData":
        """Rebuild a document from to_dict() output; missing keys take defaults"""
        defaults = cls()
        return cls(
            id=str(data.get("id") or defaults.id),
            number=str(data.get("number", "")),
            cooperation_type=CooperationType(data.get("cooperation_type", defaults.cooperation_type)),
            principal=EntityInfo.from_dict(data.get("principal")),
            distributor=EntityInfo.from_dict(data.get("distributor")),
            period_start=str(data.get("period_start", "")),
            period_end=str(data.get("period_end", "")),
            products=tuple(ProductItem.from_dict(p) for p in data.get("products") or []),
            tax_status=TaxStatus(data.get("tax_status", defaults.tax_status)),
            terms=CooperationTerms.from_dict(data.get("terms")),
            company_types=tuple(CompanyType(t) for t in data.get("company_types") or []),
            invoice_to=EntityType(data.get("invoice_to", defaults.invoice_to)),
            payment_type=PaymentType(data.get("payment_type", defaults.payment_type)),
            cut_invoice_to=EntityType(data.get("cut_invoice_to", defaults.cut_invoice_to)),
            pic=PicInfo.from_dict(data.get("pic")),
            signature_alpro=data.get("signature_alpro"),
            signature_principal=data.get("signature_principal"),
            created_at=str(data.get("created_at") or defaults.created_at),
            status=DocumentStatus(data.get("status", defaults.status)),
        )


def _entity_to_dict(entity: EntityInfo) -> dict:
    return {
        "name": entity.name,
        "has_tax_id": entity.has_tax_id,
        "tax_id": entity.tax_id,
        "tax_address": entity.tax_address,
    }


def new_document() -> SKPData:
    """Fresh draft with one blank product row, as the creation form starts"""
    return SKPData(products=(ProductItem(),))

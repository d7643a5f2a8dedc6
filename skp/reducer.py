"""Document updates

Every edit is an action applied by apply(doc, action) -> new document.
AI extraction results are folded in by merge_extraction():

- scalar fields are coalesced: an empty incoming value never blanks out
  what the user typed
- the product table is replaced as a whole when the extraction has one,
  and every extracted product gets a fresh identity token
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional, Union

from .models import (
    CompanyType,
    CooperationType,
    EntityInfo,
    EntityType,
    PaymentType,
    PicInfo,
    ProductItem,
    SignatureRole,
    SKPData,
    TaxStatus,
    new_token,
)
from .utils import to_flag, to_number


# ---------- extraction payload ----------

def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _pick(payload: dict, *keys: str) -> Any:
    """First non-None value among camelCase / snake_case spellings"""
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


@dataclass(frozen=True)
class ExtractedProduct:
    item_code: str = ""
    name: str = ""
    promo_mechanism: str = ""
    discount_percent: float = 0
    price_deduction: float = 0

    @classmethod
    def from_payload(cls, payload: dict) -> "ExtractedProduct":
        return cls(
            item_code=_text(_pick(payload, "itemCode", "item_code")),
            name=_text(_pick(payload, "namaProduk", "name", "productName")),
            promo_mechanism=_text(_pick(payload, "mekanismePromo", "promo_mechanism", "promoMechanism")),
            discount_percent=to_number(_pick(payload, "discountPercent", "discount_percent")),
            price_deduction=to_number(_pick(payload, "potongHarga", "price_deduction", "priceDeduction")),
        )

    def to_product(self) -> ProductItem:
        return ProductItem(
            id=new_token(),
            item_code=self.item_code,
            name=self.name,
            promo_mechanism=self.promo_mechanism,
            discount_percent=self.discount_percent,
            price_deduction=self.price_deduction,
        )


@dataclass(frozen=True)
class ExtractedPromo:
    """Partial SKP record returned by the extraction service"""
    principal_name: str = ""
    distributor_name: str = ""
    period_start: str = ""
    period_end: str = ""
    rafaksi: str = ""
    marketing_support: str = ""
    products: tuple[ExtractedProduct, ...] = ()

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "ExtractedPromo":
        """Sanitize a raw JSON object; unknown keys are ignored"""
        payload = payload or {}
        raw_products = _pick(payload, "products") or []
        if not isinstance(raw_products, list):
            raw_products = []
        return cls(
            principal_name=_text(_pick(payload, "principalName", "principal_name")),
            distributor_name=_text(_pick(payload, "distributorName", "distributor_name")),
            period_start=_text(_pick(payload, "periodStart", "period_start")),
            period_end=_text(_pick(payload, "periodEnd", "period_end")),
            rafaksi=_text(_pick(payload, "rafaksi")),
            marketing_support=_text(_pick(payload, "marketingSupport", "marketing_support")),
            products=tuple(
                ExtractedProduct.from_payload(p) for p in raw_products if isinstance(p, dict)
            ),
        )


def _coalesce(incoming: str, current: str) -> str:
    return incoming if incoming else current


def merge_extraction(doc: SKPData, extracted: ExtractedPromo) -> SKPData:
    """Fold an extraction result into the draft without discarding user input"""
    products = doc.products
    if extracted.products:
        products = tuple(p.to_product() for p in extracted.products)

    return replace(
        doc,
        principal=replace(doc.principal, name=_coalesce(extracted.principal_name, doc.principal.name)),
        distributor=replace(doc.distributor, name=_coalesce(extracted.distributor_name, doc.distributor.name)),
        period_start=_coalesce(extracted.period_start, doc.period_start),
        period_end=_coalesce(extracted.period_end, doc.period_end),
        terms=replace(
            doc.terms,
            rafaksi=_coalesce(extracted.rafaksi, doc.terms.rafaksi),
            marketing_support=_coalesce(extracted.marketing_support, doc.terms.marketing_support),
        ),
        products=products,
    )


# ---------- edit actions ----------

@dataclass(frozen=True)
class SetNumber:
    number: str


@dataclass(frozen=True)
class SetCooperationType:
    cooperation_type: CooperationType


@dataclass(frozen=True)
class UpdateEntity:
    role: EntityType
    field: str
    value: Any


@dataclass(frozen=True)
class SetPeriod:
    start: Optional[str] = None
    end: Optional[str] = None


@dataclass(frozen=True)
class AddProduct:
    product: Optional[ProductItem] = None


@dataclass(frozen=True)
class UpdateProduct:
    product_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class RemoveProduct:
    product_id: str


@dataclass(frozen=True)
class SetTaxStatus:
    tax_status: TaxStatus


@dataclass(frozen=True)
class SetTerms:
    rafaksi: Optional[str] = None
    marketing_support: Optional[str] = None


@dataclass(frozen=True)
class ToggleCompanyType:
    company_type: CompanyType
    checked: bool


@dataclass(frozen=True)
class SetInvoiceTo:
    entity: EntityType


@dataclass(frozen=True)
class SetPaymentType:
    payment_type: PaymentType


@dataclass(frozen=True)
class SetCutInvoiceTo:
    entity: EntityType


@dataclass(frozen=True)
class UpdatePic:
    field: str
    value: str


@dataclass(frozen=True)
class SetSignature:
    role: SignatureRole
    image: Optional[str]  # None removes the signature


@dataclass(frozen=True)
class ApplyExtraction:
    extracted: ExtractedPromo = field(default_factory=ExtractedPromo)


Action = Union[
    SetNumber, SetCooperationType, UpdateEntity, SetPeriod, AddProduct, UpdateProduct,
    RemoveProduct, SetTaxStatus, SetTerms, ToggleCompanyType, SetInvoiceTo, SetPaymentType,
    SetCutInvoiceTo, UpdatePic, SetSignature, ApplyExtraction,
]

_PRODUCT_FIELDS = {f.name for f in fields(ProductItem)} - {"id"}
_PRODUCT_NUMERIC_FIELDS = {"discount_percent", "price_deduction"}
_ENTITY_FIELDS = {f.name for f in fields(EntityInfo)}
_PIC_FIELDS = {f.name for f in fields(PicInfo)}


def _check_field(name: str, allowed: set[str], record: str) -> None:
    if name not in allowed:
        raise ValueError(f"unknown {record} field: {name}")


def _update_entity(doc: SKPData, action: UpdateEntity) -> SKPData:
    _check_field(action.field, _ENTITY_FIELDS, "entity")
    value = to_flag(action.value) if action.field == "has_tax_id" else str(action.value)
    if EntityType(action.role) is EntityType.PRINCIPAL:
        return replace(doc, principal=replace(doc.principal, **{action.field: value}))
    return replace(doc, distributor=replace(doc.distributor, **{action.field: value}))


def _update_product(doc: SKPData, action: UpdateProduct) -> SKPData:
    _check_field(action.field, _PRODUCT_FIELDS, "product")
    if action.field in _PRODUCT_NUMERIC_FIELDS:
        value = to_number(action.value)
    else:
        value = str(action.value)
    return replace(
        doc,
        products=tuple(
            replace(p, **{action.field: value}) if p.id == action.product_id else p
            for p in doc.products
        ),
    )


def _toggle_company_type(doc: SKPData, action: ToggleCompanyType) -> SKPData:
    company_type = CompanyType(action.company_type)
    if action.checked:
        if company_type in doc.company_types:
            return doc
        return replace(doc, company_types=doc.company_types + (company_type,))
    return replace(doc, company_types=tuple(t for t in doc.company_types if t is not company_type))


def apply(doc: SKPData, action: Action) -> SKPData:
    """Return the document that results from one edit action"""
    if isinstance(action, SetNumber):
        return replace(doc, number=action.number)
    if isinstance(action, SetCooperationType):
        return replace(doc, cooperation_type=CooperationType(action.cooperation_type))
    if isinstance(action, UpdateEntity):
        return _update_entity(doc, action)
    if isinstance(action, SetPeriod):
        return replace(
            doc,
            period_start=doc.period_start if action.start is None else action.start,
            period_end=doc.period_end if action.end is None else action.end,
        )
    if isinstance(action, AddProduct):
        return replace(doc, products=doc.products + (action.product or ProductItem(),))
    if isinstance(action, UpdateProduct):
        return _update_product(doc, action)
    if isinstance(action, RemoveProduct):
        return replace(doc, products=tuple(p for p in doc.products if p.id != action.product_id))
    if isinstance(action, SetTaxStatus):
        return replace(doc, tax_status=TaxStatus(action.tax_status))
    if isinstance(action, SetTerms):
        return replace(
            doc,
            terms=replace(
                doc.terms,
                rafaksi=doc.terms.rafaksi if action.rafaksi is None else action.rafaksi,
                marketing_support=(
                    doc.terms.marketing_support if action.marketing_support is None else action.marketing_support
                ),
            ),
        )
    if isinstance(action, ToggleCompanyType):
        return _toggle_company_type(doc, action)
    if isinstance(action, SetInvoiceTo):
        return replace(doc, invoice_to=EntityType(action.entity))
    if isinstance(action, SetPaymentType):
        return replace(doc, payment_type=PaymentType(action.payment_type))
    if isinstance(action, SetCutInvoiceTo):
        return replace(doc, cut_invoice_to=EntityType(action.entity))
    if isinstance(action, UpdatePic):
        _check_field(action.field, _PIC_FIELDS, "pic")
        return replace(doc, pic=replace(doc.pic, **{action.field: str(action.value)}))
    if isinstance(action, SetSignature):
        if SignatureRole(action.role) is SignatureRole.ALPRO:
            return replace(doc, signature_alpro=action.image)
        return replace(doc, signature_principal=action.image)
    if isinstance(action, ApplyExtraction):
        return merge_extraction(doc, action.extracted)
    raise TypeError(f"unsupported action: {type(action).__name__}")

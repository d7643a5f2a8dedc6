"""SKP drafting endpoints"""
import io
import uuid
from dataclasses import asdict
from typing import Annotated, Any, Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from skp.archive import ArchiveStore
from skp.errors import ArchiveCorruptError, ExtractionError, MergeInProgressError, SessionClosedError
from skp.llm_extractor import LLMExtractor
from skp.models import CompanyType, CooperationType, EntityType, PaymentType, ProductItem, TaxStatus
from skp.pdf_renderer import SKPPrinter
from skp.print_projector import RenderMode
from skp.reducer import (
    AddProduct,
    ApplyExtraction,
    ExtractedPromo,
    RemoveProduct,
    SetCooperationType,
    SetCutInvoiceTo,
    SetInvoiceTo,
    SetNumber,
    SetPaymentType,
    SetPeriod,
    SetTaxStatus,
    SetTerms,
    ToggleCompanyType,
    UpdateEntity,
    UpdatePic,
    UpdateProduct,
)
from skp.session import EditingSession

from .deps import SESSIONS, SessionDep, get_archive, get_extractor, get_issuer_config

router = APIRouter()


# ===== action bodies =====

class SetNumberBody(BaseModel):
    type: Literal["set_number"]
    number: str

    def to_action(self):
        return SetNumber(number=self.number)


class SetCooperationTypeBody(BaseModel):
    type: Literal["set_cooperation_type"]
    cooperation_type: CooperationType

    def to_action(self):
        return SetCooperationType(cooperation_type=self.cooperation_type)


class UpdateEntityBody(BaseModel):
    type: Literal["update_entity"]
    role: EntityType
    field: str
    value: Any

    def to_action(self):
        return UpdateEntity(role=self.role, field=self.field, value=self.value)


class SetPeriodBody(BaseModel):
    type: Literal["set_period"]
    start: Optional[str] = None
    end: Optional[str] = None

    def to_action(self):
        return SetPeriod(start=self.start, end=self.end)


class AddProductBody(BaseModel):
    type: Literal["add_product"]
    item_code: str = ""
    name: str = ""
    promo_mechanism: str = ""
    discount_percent: float = 0
    price_deduction: float = 0

    def to_action(self):
        return AddProduct(
            product=ProductItem(
                item_code=self.item_code,
                name=self.name,
                promo_mechanism=self.promo_mechanism,
                discount_percent=self.discount_percent,
                price_deduction=self.price_deduction,
            )
        )


class UpdateProductBody(BaseModel):
    type: Literal["update_product"]
    product_id: str
    field: str
    value: Any

    def to_action(self):
        return UpdateProduct(product_id=self.product_id, field=self.field, value=self.value)


class RemoveProductBody(BaseModel):
    type: Literal["remove_product"]
    product_id: str

    def to_action(self):
        return RemoveProduct(product_id=self.product_id)


class SetTaxStatusBody(BaseModel):
    type: Literal["set_tax_status"]
    tax_status: TaxStatus

    def to_action(self):
        return SetTaxStatus(tax_status=self.tax_status)


class SetTermsBody(BaseModel):
    type: Literal["set_terms"]
    rafaksi: Optional[str] = None
    marketing_support: Optional[str] = None

    def to_action(self):
        return SetTerms(rafaksi=self.rafaksi, marketing_support=self.marketing_support)


class ToggleCompanyTypeBody(BaseModel):
    type: Literal["toggle_company_type"]
    company_type: CompanyType
    checked: bool

    def to_action(self):
        return ToggleCompanyType(company_type=self.company_type, checked=self.checked)


class SetInvoiceToBody(BaseModel):
    type: Literal["set_invoice_to"]
    entity: EntityType

    def to_action(self):
        return SetInvoiceTo(entity=self.entity)


class SetPaymentTypeBody(BaseModel):
    type: Literal["set_payment_type"]
    payment_type: PaymentType

    def to_action(self):
        return SetPaymentType(payment_type=self.payment_type)


class SetCutInvoiceToBody(BaseModel):
    type: Literal["set_cut_invoice_to"]
    entity: EntityType

    def to_action(self):
        return SetCutInvoiceTo(entity=self.entity)


class UpdatePicBody(BaseModel):
    type: Literal["update_pic"]
    field: str
    value: str

    def to_action(self):
        return UpdatePic(field=self.field, value=self.value)


class ApplyExtractionBody(BaseModel):
    """Merge an already extracted payload (camelCase or snake_case keys)"""
    type: Literal["apply_extraction"]
    extracted: dict = {}

    def to_action(self):
        return ApplyExtraction(extracted=ExtractedPromo.from_payload(self.extracted))


ActionBody = Annotated[
    Union[
        SetNumberBody, SetCooperationTypeBody, UpdateEntityBody, SetPeriodBody, AddProductBody,
        UpdateProductBody, RemoveProductBody, SetTaxStatusBody, SetTermsBody, ToggleCompanyTypeBody,
        SetInvoiceToBody, SetPaymentTypeBody, SetCutInvoiceToBody, UpdatePicBody, ApplyExtractionBody,
    ],
    Field(discriminator="type"),
]


class ExtractRequest(BaseModel):
    text: str


class SessionResponse(BaseModel):
    session_id: str
    document: dict


# ===== sessions =====

@router.post("/sessions", response_model=SessionResponse)
async def create_session(
    archive: ArchiveStore = Depends(get_archive),
    extractor: LLMExtractor = Depends(get_extractor),
    issuer: dict = Depends(get_issuer_config),
):
    """Start a new draft numbered after the current archive size"""
    session = EditingSession(archive, extractor=extractor, issuer=issuer)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    return SessionResponse(session_id=session_id, document=session.document.to_dict())


@router.get("/sessions/{session_id}")
async def get_document(session: EditingSession = SessionDep):
    return session.document.to_dict()


@router.delete("/sessions/{session_id}")
async def discard_session(session_id: str, session: EditingSession = SessionDep):
    """Drop a draft without archiving it"""
    SESSIONS.pop(session_id, None)
    return {"success": True}


@router.post("/sessions/{session_id}/actions")
async def apply_action(body: ActionBody, session: EditingSession = SessionDep):
    try:
        return session.dispatch(body.to_action()).to_dict()
    except SessionClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/sessions/{session_id}/extract")
async def extract(body: ExtractRequest, session: EditingSession = SessionDep):
    """AI fill: merge fields extracted from free text into the draft"""
    try:
        doc = await session.ai_fill(body.text)
    except (MergeInProgressError, SessionClosedError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ExtractionError as e:
        raise HTTPException(status_code=502, detail=f"AI gagal membaca data: {e}")
    return doc.to_dict()


# ===== preview / print / archive =====

@router.get("/sessions/{session_id}/layout")
async def get_layout(
    mode: RenderMode = Query(RenderMode.EDIT),
    session: EditingSession = SessionDep,
):
    return asdict(session.preview(mode))


@router.get("/sessions/{session_id}/print")
async def print_document(session: EditingSession = SessionDep):
    """PDF of the draft as it would be printed"""
    layout = session.preview(RenderMode.PRINT)
    pdf = SKPPrinter().render_bytes(layout)
    filename = f"SKP_{(layout.number or 'draft').replace('/', '_')}.pdf"
    return StreamingResponse(
        io.BytesIO(pdf),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/sessions/{session_id}/save")
async def save_document(session_id: str, session: EditingSession = SessionDep):
    """Archive the draft; the session is dropped once archived"""
    try:
        snapshot = session.save()
    except SessionClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ArchiveCorruptError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"archive write failed: {e}")
    SESSIONS.pop(session_id, None)
    return {
        "success": True,
        "message": "SKP berhasil disimpan",
        "document": snapshot.to_dict(),
    }


@router.get("/skp")
async def list_documents(archive: ArchiveStore = Depends(get_archive)):
    """Archived documents, newest first"""
    return [doc.to_dict() for doc in archive.load()]

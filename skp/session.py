"""Editing session for one in-progress SKP

The session exclusively owns its draft. All mutations go through dispatch()
or the AI fill; the extraction call is the only await, and a busy flag keeps
a second fill from running while one is pending.
"""
import logging
from datetime import datetime
from typing import Optional, Protocol

from .archive import ArchiveStore
from .config import MAX_SIGNATURE_BYTES, load_issuer_config
from .errors import ExtractionError, MergeInProgressError, SessionClosedError, SignatureTooLargeError
from .models import SignatureRole, SKPData, new_document
from .numbering import DEFAULT_PREFIX, ensure_number
from .print_projector import PrintLayout, RenderMode, project
from .reducer import Action, ExtractedPromo, SetSignature, apply, merge_extraction
from .signature_pad import SignaturePad

logger = logging.getLogger(__name__)


class PromoExtractor(Protocol):
    async def extract_async(self, text: str) -> ExtractedPromo: ...


class EditingSession:
    """Draft, AI fill, signatures and archiving for one document"""

    def __init__(
        self,
        archive: ArchiveStore,
        extractor: Optional[PromoExtractor] = None,
        now: Optional[datetime] = None,
        issuer: Optional[dict] = None,
        max_signature_bytes: int = MAX_SIGNATURE_BYTES,
    ):
        self.archive = archive
        self.extractor = extractor
        self.issuer = issuer if issuer is not None else load_issuer_config()
        self.max_signature_bytes = max_signature_bytes
        self.busy = False
        self.closed = False
        self.active_signer: Optional[SignatureRole] = None
        self.document = ensure_number(
            new_document(),
            archive.count(),
            now=now,
            prefix=self.issuer.get("number_prefix", DEFAULT_PREFIX),
        )

    def _check_open(self) -> None:
        if self.closed:
            raise SessionClosedError(f"document {self.document.number} is already archived")

    def dispatch(self, action: Action) -> SKPData:
        self._check_open()
        self.document = apply(self.document, action)
        return self.document

    # ---------- AI fill ----------

    async def ai_fill(self, text: str) -> SKPData:
        """Merge fields extracted from free text into the draft

        Raises:
            MergeInProgressError: another fill is still pending
            ExtractionError: service failure; the draft is left unchanged
        """
        self._check_open()
        if not text or not text.strip():
            return self.document
        if self.busy:
            raise MergeInProgressError("an AI fill is already running")
        if self.extractor is None:
            raise ExtractionError("no extraction service configured")

        self.busy = True
        try:
            extracted = await self.extractor.extract_async(text)
        except ExtractionError as e:
            logger.warning("AI fill failed, draft unchanged: %s", e)
            raise
        finally:
            self.busy = False

        self.document = merge_extraction(self.document, extracted)
        logger.info("AI fill merged %d products into %s", len(extracted.products), self.document.number)
        return self.document

    # ---------- signatures ----------

    def open_signature_pad(self, role: SignatureRole, width: Optional[int] = None, height: Optional[int] = None) -> SignaturePad:
        """Fresh pad for `role`; the other role's signature is untouched"""
        self._check_open()
        self.active_signer = SignatureRole(role)
        kwargs = {}
        if width:
            kwargs["width"] = width
        if height:
            kwargs["height"] = height
        return SignaturePad(**kwargs)

    def attach_signature(self, role: SignatureRole, image: str) -> SKPData:
        """Store an encoded signature image for `role`"""
        size = len(image.encode("utf-8"))
        if size > self.max_signature_bytes:
            raise SignatureTooLargeError(size, self.max_signature_bytes)
        return self.dispatch(SetSignature(role=SignatureRole(role), image=image))

    def save_signature(self, pad: SignaturePad) -> SKPData:
        """Commit `pad` into the role chosen by open_signature_pad()

        Raises:
            NoSignatureError: the pad has no ink
        """
        if self.active_signer is None:
            raise ValueError("open_signature_pad() must be called first")
        image = pad.commit()
        self.attach_signature(self.active_signer, image)
        self.active_signer = None
        return self.document

    def cancel_signature(self) -> None:
        self.active_signer = None

    # ---------- preview / archive ----------

    def preview(self, mode: RenderMode = RenderMode.EDIT) -> PrintLayout:
        return project(self.document, mode=mode, issuer=self.issuer)

    def save(self) -> SKPData:
        """Archive the draft; the session cannot be edited afterwards"""
        self._check_open()
        snapshot = self.archive.append(self.document)
        self.closed = True
        return snapshot

"""Signature capture endpoints

The browser canvas records pointer events and posts them here; they are
replayed through the capture engine so mouse and touch input rasterize the
same way server-side.
"""
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from skp.config import SIGNATURE_HEIGHT, SIGNATURE_WIDTH
from skp.errors import NoSignatureError, SessionClosedError, SignatureTooLargeError
from skp.models import SignatureRole
from skp.reducer import SetSignature
from skp.session import EditingSession
from skp.signature_pad import MousePointer, SignatureCapture, SurfaceRect, TouchPointer

from .deps import SessionDep

router = APIRouter()


class SurfaceBody(BaseModel):
    """Bounding rect of the canvas in client coordinates"""
    left: float = 0
    top: float = 0
    width: int = Field(SIGNATURE_WIDTH, gt=0, le=2000)
    height: int = Field(SIGNATURE_HEIGHT, gt=0, le=2000)


class PointerEventBody(BaseModel):
    kind: Literal["down", "move", "up", "leave"]
    client_x: Optional[float] = None  # mouse
    client_y: Optional[float] = None
    touches: Optional[list[tuple[float, float]]] = None  # touch

    def to_pointer(self):
        if self.touches is not None:
            return TouchPointer(touches=tuple(tuple(t) for t in self.touches))
        if self.client_x is not None and self.client_y is not None:
            return MousePointer(client_x=self.client_x, client_y=self.client_y)
        return None


class SignatureRequest(BaseModel):
    surface: SurfaceBody = SurfaceBody()
    events: list[PointerEventBody]


@router.post("/sessions/{session_id}/signatures/{role}")
async def capture_signature(role: SignatureRole, body: SignatureRequest, session: EditingSession = SessionDep):
    """Rasterize the posted strokes and attach them to `role`"""
    surface = body.surface
    try:
        pad = session.open_signature_pad(role, width=surface.width, height=surface.height)
    except SessionClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    capture = SignatureCapture(pad, SurfaceRect(surface.left, surface.top, surface.width, surface.height))
    capture.replay((event.kind, event.to_pointer()) for event in body.events)

    try:
        doc = session.save_signature(pad)
    except NoSignatureError as e:
        session.cancel_signature()
        raise HTTPException(status_code=400, detail=str(e))
    except SignatureTooLargeError as e:
        session.cancel_signature()
        raise HTTPException(status_code=413, detail=str(e))
    return doc.to_dict()


@router.delete("/sessions/{session_id}/signatures/{role}")
async def remove_signature(role: SignatureRole, session: EditingSession = SessionDep):
    try:
        return session.dispatch(SetSignature(role=role, image=None)).to_dict()
    except SessionClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))

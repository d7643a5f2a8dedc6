"""Issuer configuration endpoints"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from skp.config import load_issuer_config, save_issuer_config

router = APIRouter()


class IssuerConfig(BaseModel):
    issuer_name: str
    city: str
    payment_days: int = Field(14, ge=0)
    number_prefix: str = "SKP-ALPRO"


@router.get("/issuer-config", response_model=IssuerConfig)
async def get_issuer_config():
    """Issuer name, city, payment term and number prefix used on the form"""
    config = load_issuer_config()

    return IssuerConfig(
        issuer_name=config.get("issuer_name", ""),
        city=config.get("city", ""),
        payment_days=config.get("payment_days", 14),
        number_prefix=config.get("number_prefix", "SKP-ALPRO"),
    )


@router.post("/issuer-config")
async def save_issuer_config_endpoint(config: IssuerConfig):
    """Persist issuer information"""
    success = save_issuer_config(config.model_dump())

    if not success:
        raise HTTPException(status_code=500, detail="Gagal menyimpan konfigurasi")

    return {
        "success": True,
        "message": "Konfigurasi penerbit disimpan",
    }

"""FastAPI backend - SKP drafting service"""
import logging
import os
import sys
from pathlib import Path

# project root, for the skp package
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routes import config, signature, skp

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(name)s | %(levelname)s | %(message)s")

app = FastAPI(
    title="SKP API",
    description="Surat Kerjasama Promosi drafting, signing and archiving",
    version="1.0.0",
)

# CORS
allowed_origins = ["http://localhost:3000", "http://localhost:3001"]
if os.getenv("ENVIRONMENT") == "production":
    render_url = os.getenv("RENDER_EXTERNAL_URL")
    if render_url:
        allowed_origins.append(render_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# routers (API under /api)
app.include_router(skp.router, prefix="/api", tags=["SKP"])
app.include_router(signature.router, prefix="/api", tags=["Tanda tangan"])
app.include_router(config.router, prefix="/api", tags=["Konfigurasi"])


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api")
async def api_root():
    """API information"""
    return {
        "message": "SKP API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

"""Configuration"""
import json
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("SKP_DATA_DIR", str(BASE_DIR / "data")))
OUTPUT_DIR = Path(os.getenv("SKP_OUTPUT_DIR", str(BASE_DIR / "output")))

# Archive (single JSON array under a fixed key)
ARCHIVE_PATH = Path(os.getenv("SKP_ARCHIVE_PATH", str(DATA_DIR / "skp_data.json")))
ISSUER_CONFIG_PATH = Path(os.getenv("SKP_ISSUER_CONFIG_PATH", str(BASE_DIR / "issuer_config.json")))

# Gemini API
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
EXTRACTION_TIMEOUT = float(os.getenv("SKP_EXTRACTION_TIMEOUT", "30"))

# PDF font (Helvetica is used when the file is missing)
PDF_FONT_PATH = os.getenv("PDF_FONT_PATH", str(BASE_DIR / "fonts" / "DejaVuSans.ttf"))

# Signature pad
SIGNATURE_WIDTH = int(os.getenv("SKP_SIGNATURE_WIDTH", "400"))
SIGNATURE_HEIGHT = int(os.getenv("SKP_SIGNATURE_HEIGHT", "256"))
SIGNATURE_STROKE_WIDTH = int(os.getenv("SKP_SIGNATURE_STROKE_WIDTH", "2"))
MAX_SIGNATURE_BYTES = int(os.getenv("SKP_MAX_SIGNATURE_BYTES", str(256 * 1024)))


def default_issuer_config() -> dict:
    return {
        "issuer_name": os.getenv("SKP_ISSUER_NAME", "Apotek Alpro Indonesia"),
        "city": os.getenv("SKP_ISSUER_CITY", "Jakarta"),
        "payment_days": int(os.getenv("SKP_PAYMENT_DAYS", "14")),
        "number_prefix": os.getenv("SKP_NUMBER_PREFIX", "SKP-ALPRO"),
    }


# Issuer information (JSON managed)
def load_issuer_config(path: Optional[Path] = None) -> dict:
    """Load issuer information from JSON, creating it from env defaults on first use."""
    path = path or ISSUER_CONFIG_PATH
    defaults = default_issuer_config()
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                return {**defaults, **json.load(f)}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return defaults

    save_issuer_config(defaults, path)
    return defaults


def save_issuer_config(config: dict, path: Optional[Path] = None) -> bool:
    """Write issuer information to JSON"""
    path = path or ISSUER_CONFIG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=2)
        return True
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        return False

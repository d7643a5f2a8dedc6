"""Shared dependencies for the SKP routes"""
from fastapi import Depends, HTTPException

from skp.archive import ArchiveStore
from skp.config import load_issuer_config
from skp.llm_extractor import LLMExtractor
from skp.session import EditingSession

# in-progress editing sessions, keyed by session id
SESSIONS: dict[str, EditingSession] = {}


def get_archive() -> ArchiveStore:
    return ArchiveStore()


def get_extractor() -> LLMExtractor:
    return LLMExtractor()


def get_issuer_config() -> dict:
    return load_issuer_config()


def get_session(session_id: str) -> EditingSession:
    session = SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"unknown session: {session_id}")
    return session


SessionDep = Depends(get_session)

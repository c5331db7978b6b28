"""
Best-effort persistence helpers shared by the services
"""
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def load_state(repository, key: str) -> Optional[Any]:
    # A missing or unreadable backend means starting from in-memory defaults
    if repository is None:
        return None
    try:
        return repository.load(key)
    except Exception:
        logger.exception("Failed to load state '%s'; continuing with in-memory state", key)
        return None


def save_state(repository, key: str, data: Any) -> bool:
    # Save failures never undo the in-memory change that triggered them
    if repository is None:
        return False
    try:
        repository.save(key, data)
        return True
    except Exception:
        logger.exception("Failed to save state '%s'; in-memory state remains authoritative", key)
        return False


def load_decoded(repository, key: str, decode: Callable[[Any], Any]) -> Optional[Any]:
    # A stored document that no longer decodes is treated like a missing one
    data = load_state(repository, key)
    if data is None:
        return None
    try:
        return decode(data)
    except Exception:
        logger.exception("Stored state '%s' is malformed; continuing with in-memory state", key)
        return None

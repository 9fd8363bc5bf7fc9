"""Process-wide Firestore client (REST-based, no firebase-admin).

Initialized from Settings: FIRESTORE_SERVICE_ACCOUNT_KEY (JSON string),
FIRESTORE_KEY_FILE_PATH (file path), Application Default Credentials, or
the emulator when FIRESTORE_EMULATOR_ENABLED is set.
"""

import logging

from firestore_rest.core.config import Settings, get_settings
from firestore_rest.domain.exceptions import AuthenticationError
from firestore_rest.infrastructure.firestore._rest_client import FirestoreRESTClient

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def init_firestore(settings: Settings | None = None) -> bool:
    """Initialize the shared Firestore client.

    Idempotent if already initialized. When credentials cannot be loaded,
    logs the error and returns False so the host can start without
    Firestore.

    Returns:
        True if the client is initialized, False on credential errors.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = settings or get_settings()
    try:
        _firestore_client = FirestoreRESTClient.from_settings(settings)
    except AuthenticationError:
        logger.exception("Firestore initialization failed")
        return False
    logger.info(
        "Firestore client initialized for %s%s",
        _firestore_client.database_path,
        " (emulator)" if settings.emulator_enabled else "",
    )
    return True


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the shared Firestore client, or None if not initialized.

    - db.collection(name).document(id) -> DocumentReference
    - db.batch() -> WriteBatch
    - await db.begin_transaction() / await db.run_transaction(fn)
    """
    return _firestore_client


async def close_firestore() -> None:
    """Close the shared client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")

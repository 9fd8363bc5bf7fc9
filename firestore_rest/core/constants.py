"""Core constants: REST endpoints, OAuth scopes, and protocol limits.

Single source of truth for literal values shared by the codec, the HTTP
client, and the batch/transaction state machines.
"""

# Firestore REST v1
DEFAULT_BASE_URL = "https://firestore.googleapis.com/v1"
DEFAULT_DATABASE_ID = "(default)"

FIRESTORE_SCOPES = (
    "https://www.googleapis.com/auth/datastore",
    "https://www.googleapis.com/auth/cloud-platform",
)

# Token the emulator accepts in place of a real OAuth bearer.
EMULATOR_BEARER_TOKEN = "owner"

# Commit requests carry at most this many writes.
MAX_BATCH_OPERATIONS = 500

# Auto-generated document IDs (same alphabet/length as the official SDKs)
DOCUMENT_ID_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)
DOCUMENT_ID_LENGTH = 20

DEFAULT_PAGE_SIZE = 20

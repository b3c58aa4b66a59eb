"""Firebase REST clients."""

from travel_log.infrastructure.firebase.auth import FirebaseAuth
from travel_log.infrastructure.firebase.firestore import FirestoreDocumentStore
from travel_log.infrastructure.firebase.http import FirebaseConfig
from travel_log.infrastructure.firebase.storage import FirebaseStorage

__all__ = [
    "FirebaseAuth",
    "FirebaseConfig",
    "FirestoreDocumentStore",
    "FirebaseStorage",
]

from .connections import (
    init_database_connections,
    init_firebase_connection,
    get_firestore_client
)
from .firestore_client import FirestoreClient
from .keys import encode_email, decode_email
from .channel_repository import ChannelRepository
from .alert_repository import AlertRepository
from .admin_repository import AdminRepository
from .worker_repository import WorkerRepository

__all__ = [
    "init_database_connections",
    "init_firebase_connection",
    "get_firestore_client",
    "FirestoreClient",
    "encode_email",
    "decode_email",
    "ChannelRepository",
    "AlertRepository",
    "AdminRepository",
    "WorkerRepository"
]

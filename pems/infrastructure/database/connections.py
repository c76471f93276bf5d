"""
Thiết lập kết nối đến Firebase (Cloud Firestore).
"""
import os
import logging
import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

# Biến toàn cục lưu trữ kết nối
firebase_app = None

async def init_database_connections():
    """Khởi tạo tất cả các kết nối database."""
    global firebase_app
    firebase_app = init_firebase_connection()
    logger.info("All database connections initialized")

def init_firebase_connection():
    """Khởi tạo kết nối Firebase."""
    global firebase_app

    try:
        if firebase_app is not None:
            logger.info("Firebase app already initialized")
            return firebase_app

        # Nếu đã có một app khác được khởi tạo, sử dụng nó
        if firebase_admin._apps:
            logger.info("Using existing Firebase app")
            firebase_app = firebase_admin.get_app()
            return firebase_app

        cred_path = os.getenv("FIREBASE_CREDENTIALS_PATH")
        if not cred_path or not os.path.exists(cred_path):
            logger.error(f"Firebase credentials file not found: {cred_path}")
            raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")

        cred = credentials.Certificate(cred_path)
        firebase_app = firebase_admin.initialize_app(cred)

        logger.info(f"Firebase connection established for project {cred.project_id}")
        return firebase_app

    except Exception as e:
        logger.error(f"Failed to connect to Firebase: {str(e)}")
        raise

def get_firestore_client():
    """
    Trả về Firestore client của app đã khởi tạo.

    Returns:
        google.cloud.firestore.Client
    """
    global firebase_app

    if firebase_app is None:
        firebase_app = init_firebase_connection()

    return firestore.client(firebase_app)

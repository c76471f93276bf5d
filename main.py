"""
Điểm vào chính của ứng dụng PEMS Dashboard.
"""
import uvicorn
import os
import logging
from datetime import datetime
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from pems.api.routes import register_routes
from pems.infrastructure.logging import setup_logging
from pems.infrastructure import get_service_factory
from pems.infrastructure.database.connections import init_database_connections

# Tải biến môi trường từ .env
load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)

VERSION = os.getenv("API_VERSION", "0.1.0")
ENV = os.getenv("ENVIRONMENT", "development")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Xử lý vòng đời của ứng dụng (startup và shutdown)."""
    logger.info("Application starting up")

    await init_database_connections()

    factory = get_service_factory()
    factory.init_all_services()

    # Làm mới định kỳ chuồng đang được chọn trên dashboard
    poller = factory.create_dashboard_poller()
    poller.start()
    logger.info(f"Dashboard polling enabled (interval: {poller.interval}s)")

    yield

    logger.info("Application shutting down")
    await factory.shutdown()

app = FastAPI(
    title="PEMS Dashboard Service",
    description="""
    Dashboard giám sát môi trường chuồng gia cầm (amoniac, nhiệt độ).

    * Số đo mới nhất, trạng thái theo ngưỡng và tổng quan chi nhánh
    * Biểu đồ xu hướng, trung bình theo giờ và theo ngày
    * Danh sách cảnh báo và khuyến nghị xử lý
    * Báo cáo PDF theo tháng

    Dữ liệu cảm biến được lấy từ ThingSpeak, cấu hình và cảnh báo từ Cloud Firestore.
    """,
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
    expose_headers=["Content-Disposition"]
)

register_routes(app)

@app.get("/version", tags=["system"])
async def get_version():
    """Lấy thông tin phiên bản của API."""
    return {
        "version": VERSION,
        "environment": ENV,
        "build_date": os.getenv("BUILD_DATE", "unknown")
    }

@app.get("/health", tags=["system"])
async def health_check():
    """Kiểm tra trạng thái hoạt động của service."""
    factory = get_service_factory()
    poller = factory.services.get('dashboard_poller')
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": VERSION,
        "poller_running": bool(poller and poller.running)
    }

if __name__ == "__main__":
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", 8000))

    logger.info(f"Starting server at http://{host}:{port}")
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=ENV == "development"
    )

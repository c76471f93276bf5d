"""
Đăng ký tất cả API routes.
"""

def register_routes(app):
    """
    Đăng ký tất cả routes API với ứng dụng FastAPI.

    Args:
        app: Đối tượng FastAPI app
    """
    # Import routes ở đây để tránh circular import
    from .channel_routes import router as channel_router
    from .dashboard_routes import router as dashboard_router
    from .analytics_routes import router as analytics_router
    from .alert_routes import router as alert_router
    from .report_routes import router as report_router
    from .admin_routes import router as admin_router
    from .worker_routes import router as worker_router

    app.include_router(channel_router, prefix="/api/channels", tags=["channels"])
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])
    app.include_router(analytics_router, prefix="/api/analytics", tags=["analytics"])
    app.include_router(alert_router, prefix="/api/alerts", tags=["alerts"])
    app.include_router(report_router, prefix="/api/reports", tags=["reports"])
    app.include_router(admin_router, prefix="/api/admins", tags=["admins"])
    app.include_router(worker_router, prefix="/api/workers", tags=["workers"])

from fastapi import FastAPI

from fieldreports.web.routers.reports import router as reports_router
from fieldreports.web.routers.schedules import router as schedules_router

def register_routers(app: FastAPI):
    """Register all routers with the application."""
    app.include_router(reports_router)
    app.include_router(schedules_router)

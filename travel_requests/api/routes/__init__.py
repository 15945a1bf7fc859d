from fastapi import FastAPI

from .health import router as health_router
from .travel_requests import router as travel_requests_router


def register_routes(app: FastAPI):
    app.include_router(health_router)
    app.include_router(travel_requests_router, prefix="/v1")

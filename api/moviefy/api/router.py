"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import admin, catalog, details, site

api_router = APIRouter()
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(details.router, prefix="/details", tags=["details"])
api_router.include_router(site.router, tags=["site"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

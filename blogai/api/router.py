"""AI API router aggregator."""

from fastapi import APIRouter

from blogai.api.category.routes import router as category_router
from blogai.api.seo.routes import router as seo_router

api_router = APIRouter()

api_router.include_router(category_router, prefix="/category", tags=["Category"])
api_router.include_router(seo_router, prefix="/seo", tags=["SEO"])

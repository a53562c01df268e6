"""
API v1 router aggregating all endpoints.
"""
from fastapi import APIRouter

from sitebuilder.api.v1.generate import router as generate_router

api_router = APIRouter()

api_router.include_router(generate_router)

"""
Main API router for the Chat Gateway

This module aggregates all API routes from individual modules.
"""

from fastapi import APIRouter

from gateway.api.chat import router as chat_router

router = APIRouter(prefix="/api")

# Include sub-routers
router.include_router(chat_router)

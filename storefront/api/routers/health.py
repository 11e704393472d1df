from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.api.deps import get_connection_manager
from storefront.api.schemas.auth import HealthResponse
from storefront.infrastructure.db.connection_manager import StoreConnectionManager


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(manager: StoreConnectionManager = Depends(get_connection_manager)):
    available = manager.is_available()
    return HealthResponse(status="ok" if available else "degraded", store_available=available)

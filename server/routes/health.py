"""Health check endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends

from server.dependencies import get_config
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(config=Depends(get_config)):
    """Liveness plus a configuration sanity check; never calls upstream."""
    return HealthResponseDTO(
        status="healthy" if config.validate() else "degraded",
        timestamp=datetime.utcnow().isoformat() + "Z",
        version="1.0.0",
    )

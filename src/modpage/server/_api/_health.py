from fastapi import APIRouter

from modpage.server._schemas import HealthResponse

router = APIRouter(prefix="", tags=["health"])


@router.get("/health")
def get_health() -> HealthResponse:
    return HealthResponse(status="healthy")

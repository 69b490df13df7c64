from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["monitoring"])


@router.get("/health")
async def health_check():
    """Liveness probe for container healthchecks"""
    return {"status": "ok"}

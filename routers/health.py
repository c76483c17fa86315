from fastapi import APIRouter, Request

from config import VERSION
from schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    tools = request.app.state.factory.check_optimizers()
    return HealthResponse(
        status="ok" if all(tools.values()) else "degraded",
        tools=tools,
        version=VERSION,
    )

from fastapi import APIRouter, Depends, status

from src.app.services.realtime_gateway import RealtimeGateway
from src.depends import get_gateway

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(gateway: RealtimeGateway = Depends(get_gateway)):
    return {
        "status": "ok",
        "connections": gateway.connection_count(),
        "onlineUsers": len(gateway.online_users()),
    }

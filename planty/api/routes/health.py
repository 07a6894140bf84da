from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

@router.get("/health")
async def health(request: Request) -> dict:
    return {
        "status": "ok",
        "activeSessions": len(request.app.state.sessions),
    }

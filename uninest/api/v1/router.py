from fastapi import APIRouter

from uninest.api.v1.roommates import router as roommates_router

api_router = APIRouter()

api_router.include_router(roommates_router)

@api_router.get("/", tags=["Root"])
async def api_root() -> dict:

    return {
        "success": True,
        "data": {
            "message": "UniNest Roommates API v1",
            "version": "1.0.0",
        },
        "error": None,
    }

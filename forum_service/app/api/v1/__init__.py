from fastapi import APIRouter

from .credits import router as credits_router
from .inbox import router as inbox_router
from .moderation import router as moderation_router
from .tasks import router as tasks_router

api_router = APIRouter()
# prefix는 각 router 파일 내부에서 정의되어 있음
api_router.include_router(credits_router)
api_router.include_router(moderation_router)
api_router.include_router(inbox_router)
api_router.include_router(tasks_router)

from __future__ import annotations

from fastapi import APIRouter, Request


router = APIRouter()


@router.get("/health", summary="헬스 체크")
def health(request: Request) -> dict[str, str]:
    # 저장소 핸들은 lifespan 에서 붙는다. 연결 전이면 starting 으로 응답한다.
    database = getattr(request.app.state, "database", None)
    return {"status": "ok" if database is not None else "starting"}

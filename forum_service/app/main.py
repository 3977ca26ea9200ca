from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo.database import Database

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import create_client, ensure_indexes, open_database

from .api.errors import register_exception_handlers
from .api.health import router as health_router
from .api.v1 import api_router
from .config import AppConfig, load_config
from .scheduler.sweep_scheduler import start_sweep_scheduler, stop_sweep_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    client = None
    if app.state.database is None:
        client = create_client()
        database = open_database(client)
        ensure_indexes(database)
        app.state.database = database

    start_sweep_scheduler(app.state.database, app.state.config)
    try:
        yield
    finally:
        stop_sweep_scheduler()
        if client is not None:
            client.close()
            app.state.database = None


def create_app(
    database: Database | None = None, config: AppConfig | None = None
) -> FastAPI:
    """forum-service 앱을 만든다.

    database 를 넘기면 lifespan 에서 새로 연결하지 않고 그대로 쓴다 (테스트/임베딩용).
    """

    setup_logger()
    app = FastAPI(
        title="Campus Forum Credit Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.config = config or load_config()

    # 공통 Request/Span ID 로그 미들웨어
    app.add_middleware(RequestTraceMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "forum_service.app.main:app",
        host="0.0.0.0",
        port=app.state.config.port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()

"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.stdlib import ProcessorFormatter

from pipestation.application.services.push_fanout import PushFanoutService
from pipestation.config import settings
from pipestation.infrastructure.database.base import AsyncSessionLocal
from pipestation.infrastructure.database.engine import engine
from pipestation.infrastructure.database.schema import (
    enable_sqlite_foreign_keys,
    ensure_sqlite_schema,
)
from pipestation.infrastructure.push.web_push_transport import WebPushTransport
from pipestation.interfaces.api.container import ApiContainer
from pipestation.interfaces.api.routes import pipelines, push, webhooks

logger = logging.getLogger(__name__)

TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_log_formatter(log_format: str) -> logging.Formatter:
    """json 模式交给 structlog 渲染，每条记录输出一行 JSON"""
    if log_format != "json":
        return logging.Formatter(TEXT_LOG_FORMAT)
    return ProcessorFormatter(
        processors=[
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )


def configure_logging() -> None:
    """按 settings.log_level / settings.log_format 配置根日志"""
    handler = logging.StreamHandler()
    handler.setFormatter(build_log_formatter(settings.log_format))
    logging.basicConfig(level=settings.log_level.upper(), handlers=[handler], force=True)


def _build_container() -> ApiContainer:
    from pipestation.infrastructure.database.repositories.pipeline_repository import (
        SQLAlchemyPipelineRepository,
    )
    from pipestation.infrastructure.database.repositories.push_subscription_repository import (
        SQLAlchemyPushSubscriptionRepository,
        session_scoped_subscriptions,
    )
    from pipestation.infrastructure.database.repositories.webhook_repository import (
        SQLAlchemyWebhookRepository,
    )

    def pipeline_repository(session: AsyncSession):
        return SQLAlchemyPipelineRepository(session)

    def webhook_repository(session: AsyncSession):
        return SQLAlchemyWebhookRepository(session)

    def push_subscription_repository(session: AsyncSession):
        return SQLAlchemyPushSubscriptionRepository(session)

    transport = WebPushTransport(
        vapid_subject=settings.vapid_subject,
        vapid_private_key=settings.vapid_private_key,
        ttl=settings.push_ttl,
        timeout=settings.push_timeout,
    )
    push_fanout = PushFanoutService(
        subscription_provider=session_scoped_subscriptions(AsyncSessionLocal),
        transport=transport,
    )

    return ApiContainer(
        pipeline_repository=pipeline_repository,
        webhook_repository=webhook_repository,
        push_subscription_repository=push_subscription_repository,
        push_fanout=push_fanout,
    )


def _get_display_host() -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    display_host = _get_display_host()
    logger.info("%s v%s 启动中...", settings.app_name, settings.app_version)
    logger.info("环境: %s", settings.env)
    logger.info("服务地址: http://%s:%s", display_host, settings.port)

    if engine.url.get_backend_name() == "sqlite":
        enable_sqlite_foreign_keys(engine)
    try:
        await ensure_sqlite_schema(engine)
    except SQLAlchemyError:
        logger.exception("数据库初始化失败（请运行 Alembic 迁移）")

    if not settings.vapid_private_key:
        logger.warning("VAPID 私钥未配置，推送通知将全部失败")

    app.state.container = _build_container()

    try:
        yield
    finally:
        await engine.dispose()
        logger.info("%s 关闭中...", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="可视化自动化流水线：定义、校验、分享与 Webhook 推送",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "env": settings.env,
        }
    )


@app.get("/", tags=["Root"])
async def root() -> JSONResponse:
    display_host = _get_display_host()
    return JSONResponse(
        content={
            "message": f"欢迎使用 {settings.app_name}",
            "version": settings.app_version,
            "docs": f"http://{display_host}:{settings.port}/docs",
        }
    )


app.include_router(pipelines.router, prefix="/api")
app.include_router(webhooks.router, prefix="/api")
app.include_router(push.router, prefix="/api")
app.include_router(webhooks.trigger_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pipestation.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )

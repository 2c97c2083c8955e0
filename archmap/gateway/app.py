"""
FastAPI Gateway: HTTP API layer.

External interface for architecture views, fleet search and cache
control. Builds the snapshot cache, the GitLab client and the project
service on startup and optionally keeps the cache fresh in the background.
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from archmap.cache.store import SnapshotCacheStore
from archmap.gateway.config import GatewaySettings
from archmap.gateway.routes import architecture, cache, clients, health, projects, search, webhook
from archmap.scanner.gitlab import GitLabClient
from archmap.service.projects import ProjectService
from archmap.shared.config import ClassifierConfig
from archmap.shared.exceptions import ArchmapError, CacheUnavailableError
from archmap.shared.logging import setup_logging

logger = setup_logging("archmap.gateway.app", level="INFO")


async def _sync_loop(service: ProjectService, interval: int) -> None:
    """Reload the fleet cache every ``interval`` seconds."""
    while True:
        await asyncio.sleep(interval)
        try:
            count = await service.load_initial_cache()
            logger.info(f"Periodic sync cached {count} projects")
        except ArchmapError as e:
            logger.error(f"Periodic sync failed: {e}")


def _build_service(settings: GatewaySettings) -> tuple[ProjectService, GitLabClient, SnapshotCacheStore | None]:
    try:
        store = SnapshotCacheStore(settings.database_url)
    except CacheUnavailableError as e:
        logger.warning(f"Running without snapshot cache: {e}")
        store = None
    gitlab = GitLabClient.from_settings(settings)
    service = ProjectService(
        gitlab,
        store,
        classifier=ClassifierConfig.from_settings(settings),
        default_ignores=settings.default_ignores,
        roots=settings.scan_roots,
        architecture_dir=settings.architecture_dir,
    )
    return service, gitlab, store


def create_app(
    settings: GatewaySettings | None = None,
    service: ProjectService | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Gateway settings (read from the environment when omitted).
        service: Pre-built project service; when given, the lifespan neither
            opens a cache nor a GitLab client.
    """
    settings = settings or GatewaySettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting archmap gateway")
        gitlab = store = None
        if service is None:
            app.state.service, gitlab, store = _build_service(settings)
        else:
            app.state.service = service

        if settings.load_cache_on_startup:
            try:
                count = await app.state.service.load_initial_cache()
                logger.info(f"Initial cache load: {count} projects")
            except ArchmapError as e:
                logger.error(f"Initial cache load failed: {e}")

        sync_task = None
        if settings.sync_interval_seconds > 0:
            sync_task = asyncio.create_task(_sync_loop(app.state.service, settings.sync_interval_seconds))
            logger.info(f"Periodic sync every {settings.sync_interval_seconds}s")

        logger.info("Gateway initialized successfully")

        yield

        logger.info("Shutting down archmap gateway")
        if sync_task is not None:
            sync_task.cancel()
            with suppress(asyncio.CancelledError):
                await sync_task
        await app.state.service.wait_for_background_writes()
        if gitlab is not None:
            await gitlab.aclose()
        if store is not None:
            store.close()

    app = FastAPI(
        title="archmap",
        description="Service dependency maps for a Go service fleet",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(architecture.router, prefix="/api", tags=["Architecture"])
    app.include_router(projects.router, prefix="/api", tags=["Projects"])
    app.include_router(cache.router, prefix="/api", tags=["Cache"])
    app.include_router(search.router, prefix="/api", tags=["Search"])
    app.include_router(clients.router, prefix="/api", tags=["Clients"])
    app.include_router(webhook.router, prefix="/api", tags=["Webhook"])
    app.include_router(health.router, tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": "archmap",
            "version": "0.1.0",
            "status": "operational",
            "endpoints": {
                "architecture": "/api/architecture",
                "full_architecture": "/api/architecture/full",
                "architecture_files": "/api/architecture/files",
                "clients": "/api/clients",
                "search": "/api/projects/search",
                "cache": "/api/cache/stats",
                "health": "/health",
            },
        }

    return app


def run() -> None:
    import uvicorn

    settings = GatewaySettings()
    setup_logging("archmap", level=settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

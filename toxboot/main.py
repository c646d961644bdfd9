"""FastAPI application entry point with lifespan management.

Startup: load settings, configure logging, resolve the active registry
layout, build the registry client, parser, probe scheduler and discovery
service, mount routers.
Shutdown: wait briefly for abandoned probes so their sockets get closed.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI

from toxboot.config.registry_layouts import RegistryLayout, load_registry_layouts
from toxboot.config.settings import ToxBootSettings
from toxboot.logging_config import configure_logging
from toxboot.middleware.error_handler import UnknownLayoutError, register_error_handlers
from toxboot.middleware.request_id import RequestIdMiddleware
from toxboot.probe.scheduler import ProbeScheduler
from toxboot.registry.client import RegistryClient
from toxboot.registry.parser import RegistryParser
from toxboot.routers.health import create_health_router
from toxboot.routers.nodes import create_nodes_router
from toxboot.services.discovery import NodeDiscoveryService

logger = logging.getLogger(__name__)


def resolve_layout(settings: ToxBootSettings) -> RegistryLayout:
    """Return the layout named by ``settings.registry_layout``.

    Raises
    ------
    UnknownLayoutError
        If no layout with that name is defined.
    """
    layouts = load_registry_layouts(settings.registry_layouts_path)
    try:
        return layouts[settings.registry_layout]
    except KeyError:
        raise UnknownLayoutError(
            f"Registry layout '{settings.registry_layout}' is not defined",
            available=sorted(layouts),
        ) from None


def build_discovery_service(settings: ToxBootSettings) -> NodeDiscoveryService:
    """Wire the discovery service from settings.

    A configured ``random_seed`` seeds one RNG shared by both random
    selections, once, here.
    """
    layout = resolve_layout(settings)
    rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
    return NodeDiscoveryService(
        registry_client=RegistryClient(
            url=settings.registry_url or layout.url,
            timeout_seconds=settings.registry_timeout_seconds,
        ),
        parser=RegistryParser(layout),
        scheduler=ProbeScheduler(rng=rng, grace_seconds=settings.probe_grace_seconds),
        rng=rng,
    )


def create_app(settings: ToxBootSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The discovery service is built eagerly so that a bad layout name fails
    at startup rather than on the first request.
    """
    settings = settings or ToxBootSettings()
    discovery = build_discovery_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, json_output=settings.log_json)
        logger.info(
            "Starting bootstrap node service on port %d",
            settings.port,
            extra={"layout": settings.registry_layout},
        )

        yield

        logger.info("Shutting down bootstrap node service…")
        await discovery.scheduler.drain(
            timeout=settings.max_probe_timeout_seconds + settings.probe_grace_seconds
        )
        logger.info("Bootstrap node service shut down")

    app = FastAPI(
        title="Tox Bootstrap Node Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(
        create_health_router(
            scheduler=discovery.scheduler,
            layout_name=settings.registry_layout,
            registry_url=discovery.registry_url,
        )
    )
    app.include_router(
        create_nodes_router(
            discovery=discovery,
            default_timeout=settings.probe_timeout_seconds,
            max_timeout=settings.max_probe_timeout_seconds,
        )
    )

    app.state.settings = settings
    app.state.discovery = discovery
    return app


app = create_app()

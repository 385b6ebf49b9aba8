"""
Mounts the resource handlers onto a FastAPI application.

Every route registered in the :py:class:`RouteRegistry` becomes one API route
whose endpoint translates the Starlette request into a :py:class:`RequestInfo`,
runs the handler in the threadpool and translates the :py:class:`Response` back.
"""
import logging
import typing
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response as StarletteResponse

from .config import Settings
from .envelope import ERROR_HEADER, RequestInfo
from .logging_config import setup_logging
from .resources.base import Resource
from .routing import Route, RouteRegistry

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


def build_endpoint(resource: Resource, route: Route):
    async def endpoint(request: Request) -> StarletteResponse:
        body = await request.body() if request.method in BODY_METHODS else None
        info = RequestInfo(
            path=request.url.path,
            query_params=dict(request.query_params),
            body=body,
        )
        response = await run_in_threadpool(
            resource.dispatch, route.operation, info, **request.path_params
        )
        return StarletteResponse(
            content=response.body,
            status_code=response.status,
            headers=response.headers,
        )

    endpoint.__name__ = route.operation
    return endpoint


def create_app(
    resources: typing.Mapping[str, Resource],
    registry: RouteRegistry,
    settings: typing.Optional[Settings] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings is not None:
            setup_logging(settings.log_level, settings.log_format)
        logger.info("serving %d routes", len(registry))
        yield

    app = FastAPI(title="Totsy REST API", lifespan=lifespan)

    for route in registry:
        app.add_api_route(
            route.path,
            build_endpoint(resources[route.resource_type], route),
            methods=[route.method],
            name=f"{route.resource_type}.{route.operation}",
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return StarletteResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers={ERROR_HEADER: "An unexpected error occurred"},
        )

    return app

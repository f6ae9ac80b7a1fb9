"""
ASGI Integration
================
FastAPI router that dispatches ``/{controller}/{action}`` to ApiControllers.

Usage:
    from fastapi import FastAPI
    from signgate_core import RequestGate, InMemoryReplayGuard
    from signgate_core.asgi import create_api_router

    gate = RequestGate(InMemoryReplayGuard())
    app = FastAPI()
    app.include_router(
        create_api_router({"order": Order}, auth_factory=SessionAuth, gate=gate),
        prefix="/api",
    )
"""

import json
import time
from typing import Any, Callable, Dict, Mapping, Optional, Type

import structlog
from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from .auth import AuthService
from .config import ResponseConfig
from .controller import ApiController, RequestContext
from .errors import SignGateError
from .lang import Translator, detect_lang
from .response import ResponseEnvelope, render_response
from .signing.gate import RequestGate

logger = structlog.get_logger(__name__)


async def read_params(request: Request) -> Dict[str, Any]:
    """Merge query parameters with a form or JSON body; body values win."""
    params: Dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.body()
        if body:
            try:
                payload = json.loads(body)
            except ValueError:
                logger.info("request_body_not_json", path=request.url.path)
                payload = None
            if isinstance(payload, dict):
                params.update(payload)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})
    return params


async def build_context(request: Request, controller: str, action: str) -> RequestContext:
    params = await read_params(request)
    headers = dict(request.headers)
    return RequestContext(
        controller=controller,
        action=action,
        params=params,
        headers=headers,
        cookies=dict(request.cookies),
        request_time=int(time.time()),
        lang=detect_lang(params, headers),
    )


def create_api_router(
    controllers: Mapping[str, Type[ApiController]],
    auth_factory: Callable[[], AuthService],
    gate: RequestGate,
    response_config: Optional[ResponseConfig] = None,
) -> APIRouter:
    """
    Create a router serving the given controllers.

    Args:
        controllers: Controller name (lowercase, dots for nesting) to class
        auth_factory: Returns a fresh Auth collaborator per request
        gate: Shared request gate
        response_config: Envelope rendering configuration

    Returns:
        APIRouter with a ``/{controller}/{action}`` route
    """
    config = response_config or ResponseConfig()
    registry = {name.lower(): cls for name, cls in controllers.items()}
    router = APIRouter()

    @router.api_route("/{controller}/{action}", methods=["GET", "POST"])
    async def dispatch(controller: str, action: str, request: Request) -> Response:
        context = await build_context(request, controller, action)
        callback = context.params.get(config.jsonp_handler)
        controller_cls = registry.get(controller.lower())
        if controller_cls is None:
            logger.info("controller_not_found", controller=controller)
            envelope = ResponseEnvelope(config, context.request_time, translate=Translator(context.lang))
            return render_response(envelope.error("Action not found", None, 404), config, callback)

        instance = controller_cls(context, auth_factory(), gate, config)
        try:
            result = await run_in_threadpool(instance.run)
        except SignGateError as e:
            logger.error("request_pipeline_failed", path=context.path, error=e.message)
            result = instance.error("Service unavailable", None, 500)
        return render_response(result, config, callback)

    return router

"""HTTP routes for the power gateway."""

import logging

from aiohttp import web

from constants import (
    HTTP_ENDPOINT_NOT_FOUND,
    HTTP_INVALID_ACTION,
    HTTP_INVALID_TOKEN,
    HTTP_OK_BODY,
)
from errors import EndpointNotFound, InvalidActionError, PowerCommandError, Unauthorized
from power_gateway import PowerGateway

logger = logging.getLogger(__name__)

GATEWAY_KEY = web.AppKey("gateway", PowerGateway)


def bearer_token(request: web.Request) -> str:
    """Extract the token from `Authorization: Bearer <token>`."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Missing or malformed Authorization header")
    return token


@web.middleware
async def error_middleware(request, handler):
    """Map gateway exceptions to HTTP responses."""
    try:
        return await handler(request)
    except Unauthorized:
        return web.Response(status=401, text=HTTP_INVALID_TOKEN)
    except EndpointNotFound as e:
        return web.Response(status=404, text=HTTP_ENDPOINT_NOT_FOUND.format(e.endpoint_name))
    except InvalidActionError as e:
        logger.warning(f"Invalid action: {e.action!r}")
        return web.Response(status=400, text=HTTP_INVALID_ACTION)
    except PowerCommandError as e:
        logger.error(f"Power action error: {e.error.name}")
        return web.json_response({"error": e.error.message}, status=500)
    except web.HTTPNotFound:
        logger.info(f"Got request for unknown path {request.path}")
        raise


async def get_power_status(request: web.Request) -> web.Response:
    endpoint_id = request.match_info["endpoint_id"]
    logger.info(f"Got request for power status of endpoint {endpoint_id}")
    gateway = request.app[GATEWAY_KEY]

    status = await gateway.get_status(bearer_token(request), endpoint_id)
    return web.json_response({"status": status.value})


async def power_control(request: web.Request) -> web.Response:
    endpoint_id = request.match_info["endpoint_id"]
    logger.info(f"Got request to power control endpoint {endpoint_id}")
    gateway = request.app[GATEWAY_KEY]
    token = bearer_token(request)

    try:
        payload = await request.json()
    except (ValueError, UnicodeDecodeError):
        payload = None
    action = payload.get("action") if isinstance(payload, dict) else None

    # resolution runs before action validation, so a bad token still yields 401
    await gateway.control(token, endpoint_id, action)
    return web.Response(text=HTTP_OK_BODY)


def create_app(gateway: PowerGateway) -> web.Application:
    """Build the aiohttp application serving /power/{endpoint_id}."""
    app = web.Application(middlewares=[error_middleware])
    app[GATEWAY_KEY] = gateway
    app.router.add_get("/power/{endpoint_id}", get_power_status)
    app.router.add_post("/power/{endpoint_id}", power_control)
    return app

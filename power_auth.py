"""Bearer token to endpoint resolution."""

import hmac
import logging
from typing import Optional

from errors import EndpointNotFound, Unauthorized
from models import Config, Endpoint, Group

logger = logging.getLogger(__name__)


def _tokens_match(expected: str, given: str) -> bool:
    # non-UTF-8 header bytes arrive as lone surrogates
    return hmac.compare_digest(
        expected.encode("utf-8", "surrogatepass"), given.encode("utf-8", "surrogatepass")
    )


def find_group(config: Config, token: str) -> Optional[Group]:
    """Return the first group whose token equals `token`."""
    for group in config.groups:
        if _tokens_match(group.token, token):
            return group
    return None


def resolve(config: Config, token: str, endpoint_name: str) -> Endpoint:
    """
    Map a bearer token and endpoint name to a configured endpoint.

    Raises Unauthorized when no group owns the token, and EndpointNotFound
    when the group has no endpoint with that name (endpoints of other groups
    are never visible).
    """
    group = find_group(config, token)
    if group is None:
        logger.warning(f"Rejected request for endpoint {endpoint_name}: invalid token")
        raise Unauthorized("Invalid token")

    endpoint = group.get_endpoint(endpoint_name)
    if endpoint is None:
        logger.warning(f"Endpoint {endpoint_name} not found in group {group.name}")
        raise EndpointNotFound(endpoint_name)

    logger.debug(f"Resolved endpoint {endpoint_name} in group {group.name}")
    return endpoint

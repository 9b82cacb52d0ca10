# public/views/common.py
"""
Shared pieces for the storefront (AllowAny) views:
- throttle scopes (rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'])
- canonical error body
"""

from __future__ import annotations

from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle


class PublicWriteThrottle(AnonRateThrottle):
    """
    For public write endpoints (checkout, preference retry, subscriptions).
    """

    scope = "public_write"


class PublicPollThrottle(AnonRateThrottle):
    """
    For public polling endpoints (order status, return pages, CEP lookup).
    """

    scope = "public_poll"


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def error_response(*, code: str, message: str, http_status: int, **extra):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    body.update(extra)
    return Response({"error": body}, status=http_status)

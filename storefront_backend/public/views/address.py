# public/views/address.py
"""
GET /api/public/address/<cep>/

Postal code (CEP) lookup for pre-filling shipping forms.
- 400 invalid format, 404 unknown CEP, 502 lookup service failure
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import AddressResponseSerializer
from public.services.address_lookup import (
    AddressLookupError,
    InvalidPostalCode,
    PostalCodeNotFound,
    lookup_postal_code,
)
from public.views.common import PublicPollThrottle, error_response


class AddressLookupView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Public"],
        responses={
            200: AddressResponseSerializer,
            400: OpenApiResponse(description="CEP must have 8 digits"),
            404: OpenApiResponse(description="CEP not found"),
            502: OpenApiResponse(description="Lookup service unavailable"),
        },
    )
    def get(self, request, postal_code, *args, **kwargs):
        try:
            address = lookup_postal_code(postal_code)
        except InvalidPostalCode as exc:
            return error_response(
                code="INVALID_POSTAL_CODE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except PostalCodeNotFound as exc:
            return error_response(
                code="POSTAL_CODE_NOT_FOUND",
                message=str(exc),
                http_status=status.HTTP_404_NOT_FOUND,
            )
        except AddressLookupError as exc:
            return error_response(
                code="ADDRESS_LOOKUP_FAILED",
                message=str(exc),
                http_status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response(AddressResponseSerializer(address.as_dict()).data, status=status.HTTP_200_OK)

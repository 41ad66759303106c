"""Checkout API views.

Exposes the ``CheckoutService`` via HTTP.  Domain exceptions are caught
and translated into ``{"detail": message}`` responses with the status
listed in ``ERROR_STATUS``; anything else propagates.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.checkout.dtos import (
    CreateOrderDTO,
    QuoteRequestDTO,
    ShippingSelectionDTO,
    normalize_postal_code,
    parse_cart_lines,
)
from modules.checkout.exceptions import InsufficientStock, InvalidInput, ProductNotFound
from modules.checkout.serializers import (
    CheckoutResultSerializer,
    CreateOrderSerializer,
    QuoteSerializer,
    ShippingOptionSerializer,
)
from modules.checkout.services import build_checkout_service
from modules.core.conf import get_checkout_settings
from modules.coupons.exceptions import CouponInvalid
from modules.customers.exceptions import AddressNotFound, CustomerNotFound
from modules.payments.exceptions import PaymentGatewayFailure
from modules.shipping.exceptions import ShippingUnavailable

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    ProductNotFound: status.HTTP_404_NOT_FOUND,
    InsufficientStock: status.HTTP_409_CONFLICT,
    AddressNotFound: status.HTTP_404_NOT_FOUND,
    CustomerNotFound: status.HTTP_404_NOT_FOUND,
    CouponInvalid: status.HTTP_400_BAD_REQUEST,
    ShippingUnavailable: status.HTTP_502_BAD_GATEWAY,
    PaymentGatewayFailure: status.HTTP_502_BAD_GATEWAY,
}
CHECKOUT_ERRORS = tuple(ERROR_STATUS)


def error_response(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=ERROR_STATUS[type(exc)])


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    return str(error["msg"]).removeprefix("Value error, ")


class QuoteView(APIView):
    """Public shipping quote.

    POST takes ``{items, destination: {postal_code|cep}}``.  GET (and a
    POST without that body) quotes a single product from the query
    string: ``sku|id|productId``, ``qty`` and ``cep|postal_code``.
    """

    permission_classes = [AllowAny]
    throttle_scope = "shipping_quote"

    def get(self, request: Request) -> Response:
        return self._quote(self._payload_from_query(request))

    def post(self, request: Request) -> Response:
        data = request.data if isinstance(request.data, dict) else {}
        if "items" not in data or "destination" not in data:
            return self._quote(self._payload_from_query(request))

        serializer = QuoteSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        destination = serializer.validated_data["destination"]
        return self._quote(
            {
                "items": serializer.validated_data["items"],
                "postal_code": destination.get("postal_code") or destination.get("cep"),
            }
        )

    @staticmethod
    def _payload_from_query(request: Request) -> Dict[str, Any]:
        params = request.query_params
        reference = (
            params.get("sku")
            or params.get("id")
            or params.get("productId")
            or get_checkout_settings().default_quote_sku
        )
        return {
            "items": [{"id": reference, "qty": params.get("qty") or 1}],
            "postal_code": params.get("cep") or params.get("postal_code"),
        }

    def _quote(self, payload: Dict[str, Any]) -> Response:
        postal_code = normalize_postal_code(payload.get("postal_code"))
        if not postal_code:
            return Response(
                {"detail": "Postal code is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            dto = QuoteRequestDTO(
                items=parse_cart_lines(payload["items"]), postal_code=postal_code
            )
            options = build_checkout_service().quote(dto)
        except CHECKOUT_ERRORS as exc:
            return error_response(exc)

        return Response({"options": ShippingOptionSerializer(options, many=True).data})


class CreateOrderView(APIView):
    """Authenticated order creation.

    Returns 201 with the order identifiers and the payment redirect URL.
    Only staff callers may override catalog prices with ``price_cents``.
    """

    permission_classes = [IsAuthenticated]
    throttle_scope = "order_creation"

    def post(self, request: Request) -> Response:
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            dto = self._build_dto(data)
            result = build_checkout_service().create_order(
                dto,
                request.user,
                allow_price_override=bool(request.user.is_staff),
            )
        except CHECKOUT_ERRORS as exc:
            logger.info(
                "checkout.create_rejected",
                error_type=type(exc).__name__,
                detail=str(exc),
            )
            return error_response(exc)

        return Response(
            CheckoutResultSerializer(result).data,
            status=status.HTTP_201_CREATED,
        )

    @staticmethod
    def _build_dto(data: Dict[str, Any]) -> CreateOrderDTO:
        items = parse_cart_lines(data["items"]) if data["items"] else []
        try:
            return CreateOrderDTO(
                items=items,
                address_id=data["address_id"],
                shipping=ShippingSelectionDTO.model_validate(data["shipping"]),
                coupon_code=data.get("coupon_code"),
            )
        except PydanticValidationError as exc:
            raise InvalidInput(f"Invalid request: {_first_error(exc)}") from exc

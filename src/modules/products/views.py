"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

import structlog
from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import (
    VALIDATION_ERROR,
    error_response,
    pydantic_error_response,
)
from modules.core.pagination import StandardPageNumberPagination
from modules.products.dtos import (
    CreateProductDTO,
    ProductInputDTO,
    StockAdjustmentDTO,
    UpdateProductDTO,
)
from modules.products.exceptions import (
    DuplicateSku,
    InsufficientStock,
    InvalidArgument,
    ProductError,
    ProductNotFound,
)
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService

logger = structlog.get_logger(__name__)

INPUT_FIELDS = ("name", "description", "sku", "price", "stock", "category", "is_active")
TRUTHY = {"1", "true", "yes", "on"}


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product CRUD and stock operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "sku", "description", "category"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    pagination_class = StandardPageNumberPagination
    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    lookup_value_regex = r"\d+"
    throttle_scope = "products"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self) -> Iterable[Product]:
        """``?category=`` takes precedence over ``?active_only=true``."""
        params = self.request.query_params
        category = (params.get("category") or "").strip()
        if category:
            return self._service.list_products_by_category(category)
        if params.get("active_only", "").lower() in TRUTHY:
            return self._service.list_active_products()
        return self._service.list_all_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(int(pk))
        if product is None:
            return self._error(ProductNotFound(int(pk)))
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"], url_path=r"sku/(?P<sku>[^/]+)")
    def by_sku(self, request: Request, sku: str | None = None) -> Response:
        """GET /api/v1/products/sku/{sku}/"""
        product = self._service.get_product_by_sku(sku or "")
        if product is None:
            return self._error(ProductNotFound(sku=sku))
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        payload = _payload(request.data)
        if isinstance(payload, Response):
            return payload
        try:
            dto = CreateProductDTO.model_validate(payload)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            product = self._service.create_product(dto)
        except ProductError as exc:
            return self._error(exc)

        out = ProductSerializer(product)
        headers = {"Location": f"{request.path}{product.id}/"}
        return Response(out.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/ (every mutable field is replaced)"""
        payload = _payload(request.data)
        if isinstance(payload, Response):
            return payload
        try:
            dto: ProductInputDTO = UpdateProductDTO.model_validate(payload)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            outcome = self._service.update_product(int(pk), dto)
        except ProductError as exc:
            return self._error(exc)

        if not outcome:
            return self._error(outcome.error)
        return Response(ProductSerializer(outcome.unwrap()).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)"""
        outcome = self._service.delete_product(int(pk))
        if not outcome:
            return self._error(outcome.error)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["delete"], url_path="permanent")
    def hard_delete(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/permanent/ (irreversible)"""
        outcome = self._service.hard_delete_product(int(pk))
        if not outcome:
            return self._error(outcome.error)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"], url_path="stock/check")
    def check_stock(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/stock/check/?quantity=N (default 1)"""
        quantity = _quantity(request, default=1)
        if isinstance(quantity, Response):
            return quantity

        outcome = self._service.check_stock(int(pk), quantity)
        if not outcome:
            return self._error(outcome.error)

        availability = outcome.unwrap()
        return Response(
            {
                "product_id": availability.product_id,
                "quantity": availability.requested,
                "available": availability.available,
                "is_available": availability.is_available,
            }
        )

    @action(detail=True, methods=["post"], url_path="stock/reduce")
    def reduce_stock(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/stock/reduce/

        Accepts ``{"quantity": N}`` in the body or ``?quantity=N``.
        """
        quantity = _quantity(request)
        if isinstance(quantity, Response):
            return quantity

        try:
            outcome = self._service.reduce_stock(int(pk), quantity)
        except ProductError as exc:
            return self._error(exc)

        if not outcome:
            return self._error(outcome.error)
        product = outcome.unwrap()
        return Response(
            {"product_id": product.id, "quantity_reduced": quantity, "stock": product.stock}
        )

    @action(detail=True, methods=["post"], url_path="stock/increase")
    def increase_stock(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/stock/increase/"""
        quantity = _quantity(request)
        if isinstance(quantity, Response):
            return quantity

        try:
            outcome = self._service.increase_stock(int(pk), quantity)
        except ProductError as exc:
            return self._error(exc)

        if not outcome:
            return self._error(outcome.error)
        product = outcome.unwrap()
        return Response(
            {"product_id": product.id, "quantity_increased": quantity, "stock": product.stock}
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _error(exc: Optional[Exception]) -> Response:
        """Map a product domain exception to a standard error response."""
        if isinstance(exc, ProductNotFound):
            return error_response(exc.code, str(exc), status.HTTP_404_NOT_FOUND)
        if isinstance(exc, DuplicateSku):
            return error_response(
                exc.code, str(exc), status.HTTP_409_CONFLICT, attr="sku"
            )
        if isinstance(exc, InvalidArgument):
            return error_response(
                exc.code,
                str(exc),
                status.HTTP_400_BAD_REQUEST,
                attr=exc.field,
                error_type=VALIDATION_ERROR,
            )
        if isinstance(exc, InsufficientStock):
            return error_response(
                exc.code,
                str(exc),
                status.HTTP_409_CONFLICT,
                attr="quantity",
                available=exc.available,
                requested=exc.requested,
            )
        raise TypeError(f"Unmapped product error: {exc!r}")


def _payload(data: Any) -> Dict[str, Any] | Response:
    """Keep only the writable product fields that the client sent."""
    if not isinstance(data, Mapping):
        return error_response(
            "invalid",
            "Request body must be a JSON object.",
            status.HTTP_400_BAD_REQUEST,
            error_type=VALIDATION_ERROR,
        )
    return {field: data[field] for field in INPUT_FIELDS if field in data}


def _quantity(request: Request, default: int | None = None) -> int | Response:
    """Read ``quantity`` from the body, then the query string."""
    raw = request.data.get("quantity") if hasattr(request.data, "get") else None
    if raw is None:
        raw = request.query_params.get("quantity", default)
    if raw is None:
        return error_response(
            "required",
            "Field 'quantity' is required.",
            status.HTTP_400_BAD_REQUEST,
            attr="quantity",
            error_type=VALIDATION_ERROR,
        )
    try:
        return StockAdjustmentDTO(quantity=raw).quantity
    except PydanticValidationError as exc:
        return pydantic_error_response(exc)

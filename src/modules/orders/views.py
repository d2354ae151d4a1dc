"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.

Every handler resolves the caller's ``SessionIdentity`` first and hands it
to the service explicitly.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.accounts.context import session_identity
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.constants import OrderView
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.exceptions import (
    AllViewForbidden,
    InvalidOrderData,
    OrderDeleteForbidden,
    OrderEditDenied,
    OrderNotFound,
    OrderStoreError,
    ReportForbidden,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    BatchSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    SummarySerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService
from modules.orders.visibility import OrderFilters

NOT_FOUND = {"detail": "Order not found."}


def _validation_detail(exc: PydanticValidationError) -> str:
    return "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())


def _bad_request(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_400_BAD_REQUEST)


def _forbidden(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)


def _edit_denied(exc: OrderEditDenied) -> Response:
    return Response(
        {"detail": exc.reason.message, "reason": exc.reason.code},
        status=status.HTTP_403_FORBIDDEN,
    )


def _store_unavailable(exc: OrderStoreError) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


def _order_service() -> OrderService:
    return OrderService(order_repository=OrderDjangoRepository())


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected repository (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer, and list screens go through the
    visibility engine rather than queryset filters.
    """

    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "inbound", "outbound", "batches", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def _context(self, request: Request, identity) -> dict:
        return {"request": request, "identity": identity}

    # ------------------------------------------------------------------
    # Views (list screens)
    # ------------------------------------------------------------------

    def _list_view(self, request: Request, view: str) -> Response:
        identity = session_identity(request)
        filters = OrderFilters.from_params(request.query_params)
        try:
            orders = self._service.list_view(identity, view, filters)
        except AllViewForbidden as exc:
            return _forbidden(exc)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(orders, request, view=self)
        serializer = OrderListSerializer(
            page, many=True, context=self._context(request, identity)
        )
        return paginator.get_paginated_response(serializer.data)

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (every order; ADMIN only)

        Query params: ``date``, ``date_from``, ``date_to``, ``station``,
        ``payment_status``, ``search``, ``page``, ``page_size``.
        """
        return self._list_view(request, OrderView.ALL)

    @action(detail=False, methods=["get"])
    def inbound(self, request: Request) -> Response:
        """GET /api/v1/orders/inbound/ (hàng đến)"""
        return self._list_view(request, OrderView.INBOUND)

    @action(detail=False, methods=["get"])
    def outbound(self, request: Request) -> Response:
        """GET /api/v1/orders/outbound/ (hàng đi)"""
        return self._list_view(request, OrderView.OUTBOUND)

    @action(detail=False, methods=["get"])
    def batches(self, request: Request) -> Response:
        """GET /api/v1/orders/batches/ (inbound orders grouped by sender and day)"""
        identity = session_identity(request)
        filters = OrderFilters.from_params(request.query_params)
        batches = self._service.batches(identity, filters)
        return Response(BatchSerializer(batches, many=True).data)

    # ------------------------------------------------------------------
    # Create / Retrieve
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        identity = session_identity(request)
        payload = CreateOrderSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(**payload.validated_data)
        except PydanticValidationError as exc:
            return _bad_request(_validation_detail(exc))

        try:
            order = self._service.create_order(identity, dto)
        except InvalidOrderData as exc:
            return _bad_request(str(exc))
        except OrderStoreError as exc:
            return _store_unavailable(exc)

        out = OrderSerializer(order, context=self._context(request, identity))
        return Response(out.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        identity = session_identity(request)
        try:
            order = self._service.get_visible_order(identity, str(pk))
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        serializer = OrderSerializer(order, context=self._context(request, identity))
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Field edits only.  Payment is collected through
        ``POST /orders/{id}/mark-paid/``.
        """
        identity = session_identity(request)
        if "payment_status" in request.data or "delivery_status" in request.data:
            return _bad_request(
                "Use the mark-paid / mark-delivered endpoints for status changes."
            )

        payload = UpdateOrderSerializer(data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        try:
            dto = UpdateOrderDTO(**payload.validated_data)
        except PydanticValidationError as exc:
            return _bad_request(_validation_detail(exc))

        try:
            order = self._service.update_order(identity, str(pk), dto)
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except OrderEditDenied as exc:
            return _edit_denied(exc)
        except InvalidOrderData as exc:
            return _bad_request(str(exc))
        except OrderStoreError as exc:
            return _store_unavailable(exc)

        serializer = OrderSerializer(order, context=self._context(request, identity))
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, request: Request, pk: str | None, command) -> Response:
        identity = session_identity(request)
        try:
            order = command(identity, str(pk))
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except OrderEditDenied as exc:
            return _edit_denied(exc)
        except OrderStoreError as exc:
            return _store_unavailable(exc)

        serializer = OrderSerializer(order, context=self._context(request, identity))
        return Response(serializer.data)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/mark-paid/ (collect freight, mark delivered)"""
        return self._transition(request, pk, self._service.mark_paid)

    @action(detail=True, methods=["post"], url_path="mark-delivered")
    def mark_delivered(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/mark-delivered/"""
        return self._transition(request, pk, self._service.mark_delivered)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (ADMIN only, soft delete)"""
        identity = session_identity(request)
        try:
            self._service.delete_order(identity, str(pk))
        except OrderDeleteForbidden as exc:
            return _forbidden(exc)
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SummaryView(APIView):
    """Shared handler of the dashboard and reports endpoints."""

    def get(self, request: Request) -> Response:
        identity = session_identity(request)
        filters = self.get_filters(request)
        try:
            summary = _order_service().summary(identity, filters)
        except ReportForbidden as exc:
            return _forbidden(exc)
        return Response(
            SummarySerializer(
                summary, context={"request": request, "identity": identity}
            ).data
        )

    def get_filters(self, request: Request) -> OrderFilters | None:
        return None


class DashboardView(SummaryView):
    """GET /api/v1/dashboard/ (MANAGER/ADMIN)"""


class ReportsView(SummaryView):
    """GET /api/v1/reports/?date=YYYY-MM-DD&station=HT (MANAGER/ADMIN)"""

    def get_filters(self, request: Request) -> OrderFilters | None:
        params = request.query_params
        return OrderFilters(
            date=params.get("date"),
            date_from=params.get("date_from"),
            date_to=params.get("date_to"),
            station=params.get("station"),
        )

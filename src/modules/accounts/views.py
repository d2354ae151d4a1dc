"""Account API views.

- ``StationTokenObtainView``: login with station selection (public).
- ``MeView``: the resolved session identity.
- ``AccountViewSet``: admin-only employee provisioning.

Domain exceptions are translated into HTTP responses here; the service
re-checks the caller's role against the account store on every call.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet
from rest_framework_simplejwt.views import TokenObtainPairView

from modules.accounts.context import session_identity
from modules.accounts.dtos import ReassignAccountDTO, RegisterEmployeeDTO
from modules.accounts.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    AdminRequired,
    InvalidStationAssignment,
    SelfDeletionForbidden,
)
from modules.accounts.filters import AccountFilter
from modules.accounts.models import Account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.serializers import (
    AccountSerializer,
    IdentitySerializer,
    ReassignAccountSerializer,
    RegisterEmployeeSerializer,
    StationTokenObtainPairSerializer,
)
from modules.accounts.services import AccountService
from modules.core.pagination import StandardResultsSetPagination


def _validation_detail(exc: PydanticValidationError) -> str:
    return "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())


class StationTokenObtainView(TokenObtainPairView):
    """POST /api/v1/auth/login/ — email, password and working station."""

    serializer_class = StationTokenObtainPairSerializer
    permission_classes = [AllowAny]
    throttle_scope = "login"


class MeView(APIView):
    """GET /api/v1/me — who am I, and at which station."""

    def get(self, request: Request) -> Response:
        identity = session_identity(request)
        return Response(IdentitySerializer(identity).data)


class AccountViewSet(GenericViewSet):
    """Employee management (ADMIN only)."""

    queryset = Account.objects.all()
    serializer_class = AccountSerializer
    filterset_class = AccountFilter
    search_fields = ["name", "email", "username"]
    ordering_fields = ["name", "email", "created_at", "role"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(repository=AccountDjangoRepository())

    def _forbidden(self, exc: Exception) -> Response:
        return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/accounts/"""
        try:
            queryset = self._service.list_accounts(request.user.id)
        except AdminRequired as exc:
            return self._forbidden(exc)

        queryset = self.filter_queryset(queryset)
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = AccountSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    # ------------------------------------------------------------------
    # Create / Reassign / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/accounts/"""
        payload = RegisterEmployeeSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        try:
            dto = RegisterEmployeeDTO(**payload.validated_data)
        except PydanticValidationError as exc:
            return Response(
                {"detail": _validation_detail(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            account = self._service.register_employee(request.user.id, dto)
        except AdminRequired as exc:
            return self._forbidden(exc)
        except AccountAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/accounts/{pk}/ — role/station reassignment."""
        payload = ReassignAccountSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        dto = ReassignAccountDTO(**payload.validated_data)

        try:
            account = self._service.reassign(request.user.id, str(pk), dto)
        except AdminRequired as exc:
            return self._forbidden(exc)
        except AccountNotFound:
            return Response(
                {"detail": "Account not found."}, status=status.HTTP_404_NOT_FOUND
            )
        except InvalidStationAssignment as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(account).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/accounts/{pk}/"""
        try:
            self._service.delete_employee(request.user.id, str(pk))
        except AdminRequired as exc:
            return self._forbidden(exc)
        except SelfDeletionForbidden as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except AccountNotFound:
            return Response(
                {"detail": "Account not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

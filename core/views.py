import logging

from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.authentication import issue_token
from core.choices import AccountStatus, Role
from core.exceptions import RoleForbidden, ValidationFailed
from core.models import Member, User
from core.permissions import IsManager, IsStaff
from core.serializers import UserSerializer
from core.utils import get_or_404, require_fields

logger = logging.getLogger(__name__)


def _normalize_choice(value, choices, label):
    normalized = str(value).strip().upper()
    if normalized not in choices.values:
        raise ValidationFailed(f"Invalid {label}")
    return normalized


# ===================== LOGIN =====================
class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        username = request.data.get("username")
        password = request.data.get("password")
        role = request.data.get("role")

        if not username or not password or not role:
            return Response({"message": "Username, password, and role are required"},
                            status=status.HTTP_400_BAD_REQUEST)

        requested_role = str(role).upper()
        if requested_role not in Role.values:
            return Response({"message": "Invalid role"}, status=status.HTTP_400_BAD_REQUEST)

        user = User.objects.filter(username=username).first()
        if not user or not user.check_password(password) or user.role != requested_role:
            logger.warning(f"Failed login attempt for username: {username}")
            return Response({"message": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

        if not user.is_active_account:
            return Response({"message": "Account is inactive"}, status=status.HTTP_403_FORBIDDEN)

        logger.info(f"Login successful for user: {user.username}")
        return Response({
            "message": "Login successful",
            "token": issue_token(user),
            "user": {
                "id": user.id,
                "username": user.username,
                "role": user.role,
                "status": user.status,
            },
        }, status=status.HTTP_200_OK)


# ===================== USER VIEWSET =====================
class UserViewSet(viewsets.ViewSet):
    """
    Login accounts. Only the manager creates, lists and deletes accounts;
    employees may read and update their own account only.
    """

    def get_permissions(self):
        if self.action in ["retrieve", "update", "partial_update"]:
            return [IsStaff()]
        return [IsManager()]

    def _get_user(self, pk):
        return get_or_404(User, pk, "User")

    def list(self, request):
        users = User.objects.filter(role=Role.EMPLOYEE).select_related("member").order_by("username")
        return Response({
            "userCount": users.count(),
            "users": UserSerializer(users, many=True).data,
        })

    @transaction.atomic
    def create(self, request):
        data = request.data
        require_fields(data, ["first_name", "last_name", "username", "password", "role", "status"])
        role = _normalize_choice(data["role"], Role, "role")
        account_status = _normalize_choice(data["status"], AccountStatus, "status")

        if User.objects.filter(username=data["username"]).exists():
            raise ValidationFailed("Username already exists")
        if role == Role.MANAGER and User.objects.filter(role=Role.MANAGER).exists():
            raise RoleForbidden("Only one manager is allowed")

        user = User.objects.create_user(
            username=data["username"],
            password=data["password"],
            email=data.get("email") or "",
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=role,
            status=account_status,
        )
        logger.info(f"User {user.username} created by {request.user.id}")
        return Response({"message": "User created successfully", "user": UserSerializer(user).data},
                        status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        user = self._get_user(pk)
        if request.user.role == Role.EMPLOYEE and user.id != request.user.id:
            raise RoleForbidden("You can only view your own profile")
        return Response(UserSerializer(user).data)

    @transaction.atomic
    def update(self, request, pk=None):
        user = self._get_user(pk)
        data = request.data
        acting = request.user
        is_self = user.id == acting.id

        if acting.role == Role.EMPLOYEE and not is_self:
            raise RoleForbidden("You can only update your own account")
        if acting.role == Role.MANAGER and is_self and ("role" in data or "status" in data):
            raise RoleForbidden("Manager cannot update their own role or status")

        username = data.get("username")
        if username and username != user.username and User.objects.filter(username=username).exists():
            raise ValidationFailed("Username already exists")

        for field in ("first_name", "last_name", "username", "email"):
            if data.get(field):
                setattr(user, field, data[field])
        if data.get("password"):
            user.set_password(data["password"])

        # Role and status only change when the manager edits another account
        if acting.role == Role.MANAGER and not is_self:
            if data.get("role"):
                role = _normalize_choice(data["role"], Role, "role")
                if role == Role.MANAGER and User.objects.filter(role=Role.MANAGER).exclude(pk=user.pk).exists():
                    raise RoleForbidden("Only one manager is allowed")
                user.role = role
            if data.get("status"):
                user.status = _normalize_choice(data["status"], AccountStatus, "status")

        user.save()

        if data.get("first_name") or data.get("last_name"):
            Member.objects.filter(user=user).update(first_name=user.first_name, last_name=user.last_name)

        logger.info(f"User {user.id} updated by {acting.id}")
        return Response({"message": "User updated successfully", "user": UserSerializer(user).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        user = self._get_user(pk)
        if user.id == request.user.id:
            raise RoleForbidden("Manager cannot delete themselves")
        user.delete()
        logger.info(f"User {pk} deleted by {request.user.id}")
        return Response({"message": "User deleted successfully"})

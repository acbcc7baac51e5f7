import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.choices import AccountStatus, Gender, Role
from core.exceptions import ResourceNotFound, RoleForbidden, ValidationFailed
from core.models import Member, User
from core.payroll import work_duration_and_payment
from core.permissions import IsEmployee, IsManager, IsStaff
from core.serializers import MemberSerializer
from core.utils import eat_today, get_or_404, parse_date_value, parse_decimal, require_fields
from core.validators import validate_document_upload, validate_image_upload

logger = logging.getLogger(__name__)

MEMBER_REQUIRED_FIELDS = [
    "user_id", "first_name", "last_name", "role", "position", "salary", "joining_date", "status",
]

# Fields an employee may change on their own profile
SELF_EDITABLE_FIELDS = ["first_name", "last_name", "phone", "address", "biography"]


def _validated_uploads(request):
    uploads = {}
    photo = request.FILES.get("photo")
    certificate = request.FILES.get("certificate")
    try:
        if photo:
            validate_image_upload(photo)
            uploads["photo"] = photo
        if certificate:
            validate_document_upload(certificate)
            uploads["certificate"] = certificate
    except ValidationError as e:
        raise ValidationFailed(e.messages[0])
    return uploads


def _apply_profile_fields(member, data, fields):
    for field in fields:
        if data.get(field) is not None:
            setattr(member, field, data[field])
    if data.get("gender"):
        gender = str(data["gender"]).upper()
        if gender not in Gender.values:
            raise ValidationFailed("Invalid gender")
        member.gender = gender
    if data.get("dob"):
        member.dob = parse_date_value(data["dob"], "dob")


def _sync_user_names(member):
    User.objects.filter(pk=member.user_id).update(first_name=member.first_name, last_name=member.last_name)


# ===================== MEMBER VIEWSET =====================
class MemberViewSet(viewsets.ViewSet):

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [IsStaff()]
        if self.action == "update_self":
            return [IsEmployee()]
        return [IsManager()]

    def _get_member(self, pk):
        return get_or_404(Member.objects.select_related("user"), pk, "Member")

    def list(self, request):
        if request.user.role == Role.MANAGER:
            members = Member.objects.select_related("user").filter(
                role=Role.EMPLOYEE, status=AccountStatus.ACTIVE
            ).exclude(user=request.user)
            return Response({"memberCount": members.count(), "members": MemberSerializer(members, many=True).data})

        member = Member.objects.select_related("user").filter(user=request.user).first()
        if not member:
            raise ResourceNotFound("No member profile found for this employee")
        return Response({"memberCount": 1, "members": [MemberSerializer(member).data]})

    @action(detail=False, methods=["get"], url_path="all")
    def list_all(self, request):
        members = Member.objects.select_related("user").filter(role=Role.EMPLOYEE).exclude(user=request.user)
        return Response(MemberSerializer(members, many=True).data)

    def retrieve(self, request, pk=None):
        member = self._get_member(pk)
        if request.user.role == Role.EMPLOYEE and member.user_id != request.user.id:
            raise RoleForbidden("You can only view your own member profile")
        return Response(MemberSerializer(member).data)

    @transaction.atomic
    def create(self, request):
        data = request.data
        require_fields(data, MEMBER_REQUIRED_FIELDS)

        user = get_or_404(User, data["user_id"], "User")
        if Member.objects.filter(user=user).exists():
            raise ValidationFailed("A member already exists for this user")
        if str(data["role"]).upper() != user.role or str(data["status"]).upper() != user.status:
            raise ValidationFailed("Role and status must match the corresponding user's data")
        if data["first_name"] != user.first_name or data["last_name"] != user.last_name:
            raise ValidationFailed("First name and last name must match the corresponding user's data")

        member = Member(
            user=user,
            role=user.role,
            status=user.status,
            position=data["position"],
            salary=parse_decimal(data["salary"], "Invalid salary"),
            joining_date=parse_date_value(data["joining_date"], "joining_date"),
            created_by=request.user,
        )
        _apply_profile_fields(member, data, SELF_EDITABLE_FIELDS)
        for field, upload in _validated_uploads(request).items():
            setattr(member, field, upload)
        member.save()

        logger.info(f"Member {member.id} created for user {user.id} by {request.user.id}")
        return Response({"message": "Member created successfully", "member": MemberSerializer(member).data},
                        status=status.HTTP_201_CREATED)

    @transaction.atomic
    def update(self, request, pk=None):
        member = self._get_member(pk)
        data = request.data

        if data.get("role") and str(data["role"]).upper() != member.user.role:
            raise ValidationFailed("Role must match the corresponding user's role")
        if data.get("status") and str(data["status"]).upper() != member.user.status:
            raise ValidationFailed("Status must match the corresponding user's status")

        _apply_profile_fields(member, data, SELF_EDITABLE_FIELDS + ["position"])
        if data.get("salary") is not None:
            member.salary = parse_decimal(data["salary"], "Invalid salary")
        if data.get("joining_date"):
            member.joining_date = parse_date_value(data["joining_date"], "joining_date")
        member.role = member.user.role
        member.status = member.user.status
        for field, upload in _validated_uploads(request).items():
            setattr(member, field, upload)
        member.updated_by = request.user
        member.save()
        _sync_user_names(member)

        logger.info(f"Member {member.id} updated by {request.user.id}")
        return Response({"message": "Member updated successfully", "member": MemberSerializer(member).data})

    @action(detail=False, methods=["put"], url_path="self")
    @transaction.atomic
    def update_self(self, request):
        member = Member.objects.select_related("user").filter(user=request.user).first()
        if not member:
            raise ResourceNotFound("Member profile not found")

        _apply_profile_fields(member, request.data, SELF_EDITABLE_FIELDS)
        for field, upload in _validated_uploads(request).items():
            setattr(member, field, upload)
        member.updated_by = request.user
        member.save()
        _sync_user_names(member)

        logger.info(f"Member {member.id} updated own profile")
        return Response({"message": "Member profile updated successfully", "member": MemberSerializer(member).data})

    def destroy(self, request, pk=None):
        member = self._get_member(pk)
        if member.user_id == request.user.id:
            raise RoleForbidden("Manager cannot delete their own member profile")

        leave_date = request.data.get("leave_date")
        leave_date = parse_date_value(leave_date, "leave_date") if leave_date else eat_today()
        settlement = work_duration_and_payment(member.joining_date, leave_date, member.salary)
        member.delete()

        logger.info(f"Member {pk} deleted by {request.user.id}")
        return Response({
            "message": "Member deleted successfully",
            "workDuration": settlement["duration"],
            "finalPayment": settlement["totalPayment"],
        })

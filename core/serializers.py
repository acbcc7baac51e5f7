from rest_framework import serializers

from core.models import Member, User


class MemberSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = ["id", "first_name", "last_name", "position", "phone", "status", "photo"]


class UserSerializer(serializers.ModelSerializer):
    member = MemberSummarySerializer(read_only=True)

    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "username", "email", "role", "status", "member"]


class MemberSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)
    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)

    class Meta:
        model = Member
        fields = [
            "id", "user", "first_name", "last_name", "phone", "role", "position", "address",
            "gender", "dob", "salary", "joining_date", "status", "biography", "photo",
            "certificate", "created_by", "updated_by", "created_at", "updated_at",
        ]

    def get_user(self, obj):
        return {"id": obj.user_id, "username": obj.user.username, "email": obj.user.email}

# core/otp_views.py
import logging

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.models import User
from core.utils import generate_otp, send_otp_email

logger = logging.getLogger(__name__)


def _otp_key(email):
    return f"password_otp_{email.lower()}"


def _otp_matches(email, otp):
    cached_otp = cache.get(_otp_key(email))
    return bool(cached_otp) and str(cached_otp) == str(otp).strip()


class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        email = request.data.get("email")
        if not email:
            return Response({"message": "Email is required"}, status=status.HTTP_400_BAD_REQUEST)

        if not User.objects.filter(email__iexact=email).exists():
            return Response({"message": "No account is registered with this email"},
                            status=status.HTTP_404_NOT_FOUND)

        otp = generate_otp()
        cache.set(_otp_key(email), otp, timeout=settings.OTP_TTL_SECONDS)

        if not send_otp_email(email, otp):
            return Response({"message": "Failed to send OTP email"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"message": f"OTP sent successfully to {email}"})


class VerifyOTPView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        email = request.data.get("email")
        otp = request.data.get("otp")
        if not email or not otp:
            return Response({"message": "Email and OTP required"}, status=status.HTTP_400_BAD_REQUEST)

        if _otp_matches(email, otp):
            return Response({"verified": True, "message": "OTP verified successfully"})
        return Response({"verified": False, "message": "Invalid or expired OTP"},
                        status=status.HTTP_400_BAD_REQUEST)


class UpdatePasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        email = request.data.get("email")
        otp = request.data.get("otp")
        password = request.data.get("password")
        if not email or not otp or not password:
            return Response({"message": "Email, OTP and new password are required"},
                            status=status.HTTP_400_BAD_REQUEST)

        if not _otp_matches(email, otp):
            return Response({"message": "Invalid or expired OTP"}, status=status.HTTP_400_BAD_REQUEST)

        user = User.objects.filter(email__iexact=email).first()
        if not user:
            return Response({"message": "User not found"}, status=status.HTTP_404_NOT_FOUND)

        user.set_password(password)
        user.save(update_fields=["password"])
        cache.delete(_otp_key(email))
        logger.info(f"Password reset completed for user {user.id}")
        return Response({"message": "Password updated successfully"})

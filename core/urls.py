# core/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from core.views import LoginView, UserViewSet
from core.member_views import MemberViewSet
from core.otp_views import ForgotPasswordView, VerifyOTPView, UpdatePasswordView

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")
router.register(r"members", MemberViewSet, basename="member")

urlpatterns = [
    path("auth/login", LoginView.as_view(), name="login"),
    path("auth/forgotPassword", ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/verifyOtp", VerifyOTPView.as_view(), name="verify-otp"),
    path("auth/updatePassword", UpdatePasswordView.as_view(), name="update-password"),
    path("", include(router.urls)),
]

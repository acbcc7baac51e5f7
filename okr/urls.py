from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import KeyResultViewSet, ObjectiveViewSet

router = DefaultRouter()
router.register(r"objectives", ObjectiveViewSet, basename="objective")
router.register(r"keyresults", KeyResultViewSet, basename="keyresult")

urlpatterns = [
    path("", include(router.urls)),
]

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import LoginAPIView, MeAPIView, ProfileAPIView, RegisterAPIView, UserViewSet

router = DefaultRouter(trailing_slash=True)
router.include_root_view = False
router.register(r"users", UserViewSet, basename="users")

urlpatterns = [
    path("", include(router.urls)),
    path("auth/register/", RegisterAPIView.as_view(), name="auth-register"),
    path("auth/login/", LoginAPIView.as_view(), name="auth-login"),
    path("auth/me/", MeAPIView.as_view(), name="auth-me"),
    path("auth/profile/", ProfileAPIView.as_view(), name="auth-profile"),
]

"""Root URL configuration.

Every resource lives under ``/api/v1/`` on a single router; ``/health``
stays unversioned so load balancers can poll it without credentials.
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenBlacklistView,
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from modules.accounts.views import (
    BankInfoView,
    ChangePasswordView,
    ProfileView,
    UserViewSet,
)
from modules.core.views import CurrentUserView, health_check
from modules.orders.views import OrderViewSet
from modules.products.views import ProductViewSet

api_router = DefaultRouter(trailing_slash=True)
api_router.register("products", ProductViewSet, basename="product")
api_router.register("orders", OrderViewSet, basename="order")
api_router.register("users", UserViewSet, basename="user")

auth_patterns = [
    path("token/", TokenObtainPairView.as_view(), name="token_obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("token/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("token/blacklist/", TokenBlacklistView.as_view(), name="token_blacklist"),
]

api_v1_patterns = [
    path("me", CurrentUserView.as_view(), name="current_user"),
    path("profile/", ProfileView.as_view(), name="profile"),
    path("profile/bank-info/", BankInfoView.as_view(), name="profile_bank_info"),
    path("profile/password/", ChangePasswordView.as_view(), name="profile_password"),
    path("auth/", include(auth_patterns)),
    path("", include(api_router.urls)),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

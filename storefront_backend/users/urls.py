# users/urls.py

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import AddressDetailView, AddressListCreateView, MeView, RegisterView

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    path("token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    path("addresses/", AddressListCreateView.as_view(), name="address-list"),
    path("addresses/<uuid:address_id>/", AddressDetailView.as_view(), name="address-detail"),
]

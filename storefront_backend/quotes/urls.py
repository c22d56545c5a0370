# quotes/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from quotes.views import (
    AcceptQuoteView,
    AdminQuoteViewSet,
    MyQuoteDetailView,
    MyQuoteListCreateView,
    RejectQuoteView,
)

app_name = "quotes"

router = DefaultRouter()
router.register(r"quotes", AdminQuoteViewSet, basename="admin-quotes")

urlpatterns = [
    path("admin/", include(router.urls)),
    path("", MyQuoteListCreateView.as_view(), name="my-quotes"),
    path("<uuid:quote_id>/", MyQuoteDetailView.as_view(), name="my-quote-detail"),
    path("<uuid:quote_id>/accept/", AcceptQuoteView.as_view(), name="my-quote-accept"),
    path("<uuid:quote_id>/reject/", RejectQuoteView.as_view(), name="my-quote-reject"),
]

# users/views/addresses.py

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from users.models import Address
from users.serializers import AddressSerializer


def _clear_other_defaults(address: Address) -> None:
    # one default address per (user, type)
    if address.is_default:
        (
            Address.objects.filter(user=address.user, type=address.type, is_default=True)
            .exclude(pk=address.pk)
            .update(is_default=False)
        )


@extend_schema(tags=["Addresses"])
class AddressListCreateView(generics.ListCreateAPIView):
    serializer_class = AddressSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Address.objects.filter(user=self.request.user)

    @transaction.atomic
    def perform_create(self, serializer):
        address = serializer.save(user=self.request.user)
        _clear_other_defaults(address)


@extend_schema(tags=["Addresses"])
class AddressDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = AddressSerializer
    permission_classes = [IsAuthenticated]
    lookup_url_kwarg = "address_id"

    def get_queryset(self):
        return Address.objects.filter(user=self.request.user)

    @transaction.atomic
    def perform_update(self, serializer):
        address = serializer.save()
        _clear_other_defaults(address)

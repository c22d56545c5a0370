# products/views/category.py

from rest_framework import viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated

from permissions.roles import CAP_INVENTORY_ADJUST, HasAnyCapability
from products.models import Brand, Category
from products.serializers.category import BrandSerializer, CategorySerializer


class _CatalogReferenceViewSet(viewsets.ModelViewSet):
    """
    Policy:
    - Anyone can READ (storefront navigation)
    - Only users with inventory.adjust can CREATE/UPDATE/DELETE
    """

    pagination_class = None

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]

        self.required_any_capabilities = {CAP_INVENTORY_ADJUST}
        return [IsAuthenticated(), HasAnyCapability()]


class CategoryViewSet(_CatalogReferenceViewSet):
    queryset = Category.objects.all().order_by("position", "name")
    serializer_class = CategorySerializer


class BrandViewSet(_CatalogReferenceViewSet):
    queryset = Brand.objects.all().order_by("name")
    serializer_class = BrandSerializer

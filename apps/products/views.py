from rest_framework import viewsets

from apps.authentication.permissions import IsAdminOrReadOnly, is_admin

from .models import Product
from .serializers import ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    """
    Public storefront reads only see published products; admins see and
    manage everything.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    permission_classes = [IsAdminOrReadOnly]
    lookup_field = "slug"
    filterset_fields = ["status", "is_promotional"]
    ordering_fields = ["created_at", "base_price_cents", "title"]

    def get_queryset(self):
        qs = super().get_queryset()
        if is_admin(self.request.user):
            return qs
        return qs.filter(status="published")

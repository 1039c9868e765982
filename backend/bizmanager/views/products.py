"""Product catalog and inventory API views."""

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..serializers import InventoryItemSerializer, ProductSerializer
from ..store import get_store
from .utils import StoreViewSet


class ProductViewSet(StoreViewSet):
    """CRUD operations for the product catalog."""

    serializer_class = ProductSerializer

    def list_objects(self, search):
        return self.store.list_products(search)

    def fetch_object(self, pk):
        return self.store.get_product(pk)

    def delete_object(self, instance):
        self.store.delete_product(instance.id)


class InventoryViewSet(viewsets.ViewSet):
    """Stock levels, filterable by ``search`` and ``category``."""

    def list(self, request):
        items = get_store().list_inventory(
            search=request.query_params.get('search'),
            category=request.query_params.get('category'),
        )
        return Response(InventoryItemSerializer(items, many=True).data)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(get_store().inventory_summary())

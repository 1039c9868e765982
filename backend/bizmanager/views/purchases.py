"""Purchase related API views."""

from rest_framework import status
from rest_framework.response import Response

from ..serializers import PurchaseReadSerializer, PurchaseWriteSerializer
from .utils import StoreViewSet


class PurchaseViewSet(StoreViewSet):
    """Record supplier purchases.  Purchases are not edited once recorded."""

    http_method_names = ['get', 'post', 'delete', 'head', 'options']

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        read_serializer = PurchaseReadSerializer(serializer.instance)
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def get_serializer_class(self):
        if self.action == 'create':
            return PurchaseWriteSerializer
        return PurchaseReadSerializer

    def list_objects(self, search):
        return self.store.list_purchases(search)

    def fetch_object(self, pk):
        return self.store.get_purchase(pk)

    def delete_object(self, instance):
        self.store.delete_purchase(instance.id)

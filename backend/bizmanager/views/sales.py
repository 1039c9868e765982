"""Sales and payment API views."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from ..serializers import (
    PaymentSerializer,
    SaleDraftSerializer,
    SaleReadSerializer,
    SaleTotalsSerializer,
    SaleWriteSerializer,
)
from ..services import ledger
from .utils import StoreViewSet, ledger_errors


class SaleViewSet(StoreViewSet):
    """CRUD operations for sales; every change is applied through the ledger."""

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        read_serializer = SaleReadSerializer(serializer.instance, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        read_serializer = SaleReadSerializer(serializer.instance, context=self.get_serializer_context())
        return Response(read_serializer.data)

    def get_serializer_class(self):
        if self.action == 'preview':
            return SaleDraftSerializer
        if self.action in ['create', 'update', 'partial_update']:
            return SaleWriteSerializer
        return SaleReadSerializer

    def list_objects(self, search):
        return self.store.list_sales(search, customer_id=self.request.query_params.get('customer'))

    def fetch_object(self, pk):
        return self.store.get_sale(pk)

    def delete_object(self, instance):
        self.store.delete_sale(instance.id)

    @action(detail=False, methods=['post'])
    def preview(self, request):
        """Live totals for a sale draft.  Nothing is stored."""

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with ledger_errors():
            totals = ledger.sale_totals(serializer.build_input(serializer.validated_data))
        return Response(SaleTotalsSerializer(totals).data)


class PaymentViewSet(StoreViewSet):
    """CRUD operations for payments across all customers."""

    serializer_class = PaymentSerializer

    def list_objects(self, search):
        return self.store.list_payments(search, customer_id=self.request.query_params.get('customer'))

    def fetch_object(self, pk):
        return self.store.get_payment(pk)

    def delete_object(self, instance):
        self.store.delete_payment(instance.id)

"""Customer related API views."""

from rest_framework.decorators import action, api_view
from rest_framework.response import Response

from ..exceptions import NotFound as LedgerNotFound
from ..serializers import (
    CustomerBalanceReportSerializer,
    CustomerSerializer,
    PaymentSerializer,
    SaleReadSerializer,
)
from ..services.money import ZERO, quantize
from ..store import get_store
from .utils import StoreViewSet, ledger_errors


class CustomerViewSet(StoreViewSet):
    """Create, list and edit customers.  Customers are never deleted."""

    serializer_class = CustomerSerializer
    http_method_names = ['get', 'post', 'put', 'patch', 'head', 'options']

    def list_objects(self, search):
        return self.store.list_customers(search)

    def fetch_object(self, pk):
        return self.store.get_customer(pk)

    @action(detail=True, methods=['get'])
    def details(self, request, pk=None):
        customer = self.get_object()
        with ledger_errors():
            sales = self.store.customer_sales(customer.id)
            payments = self.store.customer_payments(customer.id)

        data = {
            'customer': CustomerSerializer(customer).data,
            'sales': SaleReadSerializer(sales, many=True).data,
            'payments': PaymentSerializer(payments, many=True).data,
            'summary': {
                'total_purchases': customer.total_purchases,
                'outstanding_balance': customer.display_balance,
                'payments_received': quantize(sum((p.amount for p in payments), ZERO)),
                'invoice_count': len(sales),
            },
        }
        return Response(data)


class CustomerPaymentViewSet(StoreViewSet):
    """Handle payments scoped to a customer."""

    serializer_class = PaymentSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['customer_id'] = self.kwargs.get('customer_pk')
        return context

    def list_objects(self, search):
        customer_pk = self.kwargs.get('customer_pk')
        self.store.get_customer(customer_pk)
        return self.store.list_payments(search, customer_id=customer_pk)

    def fetch_object(self, pk):
        payment = self.store.get_payment(pk)
        if payment.customer_id != self.kwargs.get('customer_pk'):
            raise LedgerNotFound("Payment", pk)
        return payment

    def perform_create(self, serializer):
        with ledger_errors():
            serializer.save(customer_id=self.kwargs.get('customer_pk'))

    def perform_update(self, serializer):
        # The route owns the customer; a body customer_id cannot move the payment.
        with ledger_errors():
            serializer.save(customer_id=self.kwargs.get('customer_pk'))

    def delete_object(self, instance):
        self.store.delete_payment(instance.id)


@api_view(['GET'])
def customer_balance_report(request):
    """Return every customer's balance and whether they owe us."""

    customers = sorted(get_store().list_customers(), key=lambda customer: customer.name)
    serializer = CustomerBalanceReportSerializer(customers, many=True)
    return Response(serializer.data)

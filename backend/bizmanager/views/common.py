"""Common utility views for general API endpoints."""

from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import conf
from ..serializers import BillPreviewSerializer, ReconciliationSerializer
from ..services.totals import calculate_taxed_totals
from ..store import get_store
from .utils import ledger_errors


@api_view(['GET'])
def dashboard_summary(request):
    """Provide summary data for the dashboard."""

    limit = int(conf.get_setting('RECENT_TRANSACTIONS_LIMIT'))
    return Response(get_store().dashboard(recent_limit=limit))


@api_view(['POST'])
def bill_preview(request):
    """Subtotal, tax and total of a printable bill draft."""

    serializer = BillPreviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    items = serializer.line_items()
    with ledger_errors():
        totals = calculate_taxed_totals(items, conf.tax_rate())
    return Response({
        'items': [
            {'description': item.name, 'quantity': item.quantity, 'rate': item.rate, 'amount': item.amount}
            for item in items
        ],
        'subtotal': totals.subtotal,
        'tax': totals.tax,
        'total': totals.total,
    })


@api_view(['GET', 'POST'])
def reconciliation_report(request):
    """Compare customer balances with their history; POST repairs any drift."""

    store = get_store()
    if request.method == 'POST':
        repaired = store.repair_balances()
        return Response({
            'repaired': ReconciliationSerializer(repaired, many=True).data,
        })
    results = store.reconcile()
    return Response({
        'consistent': all(result.is_consistent for result in results),
        'customers': ReconciliationSerializer(results, many=True).data,
    })

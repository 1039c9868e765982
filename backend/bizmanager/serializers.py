"""Serializers turning API payloads into ledger inputs and entities into JSON.

None of these are model serializers: the entities are plain dataclasses owned
by :class:`bizmanager.store.BusinessStore`.  Write serializers expect the
store in their context under ``"store"`` and delegate ``create``/``update`` to
it, so every change still goes through the ledger engine.
"""

from decimal import Decimal

from rest_framework import serializers
from rest_framework.exceptions import NotFound

from . import conf
from .entities import (
    PAYMENT_METHODS,
    LineItem,
    PaymentInput,
    PurchaseInput,
    PurchaseItem,
    SaleInput,
)
from .exceptions import NotFound as LedgerNotFound
from .services.money import MAX_AMOUNT, MAX_QUANTITY, quantize, to_decimal


# Numeric input policy.  With ``coerce`` (the default) blank, unparsable or
# out-of-range numbers become 0, the way the sale forms have always parsed
# them; with ``strict`` they are rejected.  Negative numbers are refused by
# the ledger engine under either policy.

class LenientDecimalField(serializers.DecimalField):
    def __init__(self, **kwargs):
        kwargs.setdefault('max_digits', 12)
        kwargs.setdefault('decimal_places', 2)
        kwargs.setdefault('max_value', MAX_AMOUNT)
        kwargs.setdefault('min_value', -MAX_AMOUNT)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None and conf.numeric_input_policy() == conf.COERCE:
            return (False, Decimal('0'))
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        if conf.numeric_input_policy() == conf.COERCE:
            data = quantize(to_decimal(data, limit=MAX_AMOUNT))
        return super().to_internal_value(data)


class LenientIntegerField(serializers.IntegerField):
    def __init__(self, **kwargs):
        kwargs.setdefault('max_value', MAX_QUANTITY)
        kwargs.setdefault('min_value', -MAX_QUANTITY)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None and conf.numeric_input_policy() == conf.COERCE:
            return (False, 0)
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        if conf.numeric_input_policy() == conf.COERCE:
            # Truncates like parseInt: "2.7" -> 2, "abc" -> 0.
            data = int(to_decimal(data, limit=Decimal(MAX_QUANTITY)))
        return super().to_internal_value(data)


def _money_field(**kwargs):
    # Aggregates can outgrow the 12 digit input bound, so output is not capped.
    return serializers.DecimalField(max_digits=None, decimal_places=2, read_only=True, **kwargs)


class StoreSerializerMixin:
    def get_store(self):
        store = self.context.get('store')
        if store is None:
            raise RuntimeError(f"{self.__class__.__name__} needs a 'store' in its context.")
        return store

    def get_product(self, product_id):
        try:
            return self.get_store().get_product(product_id)
        except LedgerNotFound as exc:
            raise NotFound(detail=str(exc)) from exc


class CustomerSerializer(StoreSerializerMixin, serializers.Serializer):
    """Customer contact details plus the read-only ledger aggregates.

    ``outstanding_balance`` is the stored ledger value; ``display_balance`` is
    the same value floored at zero, which is what lists and badges show.
    """

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=254, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    total_purchases = _money_field()
    outstanding_balance = _money_field()
    display_balance = _money_field()
    balance_status = serializers.CharField(read_only=True)
    created_at = serializers.DateField(read_only=True)

    def create(self, validated_data):
        return self.get_store().create_customer(**validated_data)

    def update(self, instance, validated_data):
        return self.get_store().update_customer(instance.id, **validated_data)


class CustomerBalanceReportSerializer(serializers.Serializer):
    """Serializer used by the customer balance report endpoint."""

    id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.CharField()
    phone = serializers.CharField()
    balance = serializers.DecimalField(source='outstanding_balance', max_digits=None, decimal_places=2)
    status = serializers.CharField(source='balance_status')


class ProductSerializer(StoreSerializerMixin, serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=255)
    size = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    rate = LenientDecimalField(required=False, default=Decimal('0'))

    def create(self, validated_data):
        return self.get_store().create_product(**validated_data)

    def update(self, instance, validated_data):
        return self.get_store().update_product(instance.id, **validated_data)


class LineItemSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    size = serializers.CharField(required=False, allow_blank=True)
    quantity = LenientIntegerField()
    rate = LenientDecimalField()
    amount = _money_field()


# This serializer is for WRITING line items; ``product_id`` prefills the rest
class LineItemWriteSerializer(StoreSerializerMixin, serializers.Serializer):
    product_id = serializers.CharField(required=False, allow_blank=True)
    name = serializers.CharField(required=False, allow_blank=True)
    size = serializers.CharField(required=False, allow_blank=True)
    quantity = LenientIntegerField(required=False, default=1)
    rate = LenientDecimalField(required=False)

    def validate(self, attrs):
        product_id = attrs.pop('product_id', '')
        if product_id:
            product = self.get_product(product_id)
            attrs.setdefault('name', product.name)
            attrs.setdefault('size', product.size)
            attrs.setdefault('rate', product.rate)
        attrs.setdefault('name', '')
        attrs.setdefault('size', '')
        attrs.setdefault('rate', Decimal('0'))
        return attrs


class SaleReadSerializer(serializers.Serializer):
    id = serializers.CharField()
    date = serializers.DateField()
    customer_id = serializers.CharField()
    customer_name = serializers.CharField()
    customer_email = serializers.CharField()
    items = LineItemSerializer(many=True)
    subtotal = _money_field()
    transport = _money_field()
    total = _money_field()
    paid_amount = _money_field()
    outstanding_amount = _money_field()
    status = serializers.CharField()


class SaleWriteSerializer(StoreSerializerMixin, serializers.Serializer):
    customer_id = serializers.CharField()
    items = LineItemWriteSerializer(many=True, required=False)
    transport = LenientDecimalField(required=False)
    paid_amount = LenientDecimalField(required=False)
    date = serializers.DateField(required=False)

    def build_input(self, validated_data, instance=None):
        """Return a :class:`SaleInput`, filling omitted fields from ``instance``."""

        if 'items' in validated_data:
            items = tuple(LineItem(**item) for item in validated_data['items'])
        else:
            items = instance.items if instance is not None else ()

        def _pick(field, fallback):
            if field in validated_data:
                return validated_data[field]
            return getattr(instance, field) if instance is not None else fallback

        return SaleInput(
            customer_id=_pick('customer_id', ''),
            items=items,
            transport=_pick('transport', Decimal('0')),
            paid_amount=_pick('paid_amount', Decimal('0')),
            date=validated_data.get('date'),
        )

    def create(self, validated_data):
        return self.get_store().create_sale(self.build_input(validated_data))

    def update(self, instance, validated_data):
        return self.get_store().update_sale(instance.id, self.build_input(validated_data, instance))


class SaleDraftSerializer(SaleWriteSerializer):
    """A sale form that may not have a customer chosen yet."""

    customer_id = serializers.CharField(required=False, allow_blank=True)


class SaleTotalsSerializer(serializers.Serializer):
    subtotal = _money_field()
    total = _money_field()
    outstanding_amount = _money_field()
    status = serializers.CharField(read_only=True)


class PaymentSerializer(StoreSerializerMixin, serializers.Serializer):
    id = serializers.CharField(read_only=True)
    customer_id = serializers.CharField(required=False)
    customer_name = serializers.CharField(read_only=True)
    invoice_id = serializers.CharField(required=False, allow_blank=True, default='')
    amount = LenientDecimalField()
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS, required=False, default='cash')
    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        # Nested customer routes supply the customer through the context.
        if self.instance is None and not (attrs.get('customer_id') or self.context.get('customer_id')):
            raise serializers.ValidationError({'customer_id': 'This field is required.'})
        return attrs

    def build_input(self, validated_data, instance=None):
        def _pick(field, fallback):
            if field in validated_data:
                return validated_data[field]
            return getattr(instance, field) if instance is not None else fallback

        return PaymentInput(
            customer_id=_pick('customer_id', self.context.get('customer_id', '')),
            amount=_pick('amount', Decimal('0')),
            payment_method=_pick('payment_method', 'cash'),
            invoice_id=_pick('invoice_id', ''),
            notes=_pick('notes', ''),
            date=validated_data.get('date'),
        )

    def create(self, validated_data):
        return self.get_store().create_payment(self.build_input(validated_data))

    def update(self, instance, validated_data):
        return self.get_store().update_payment(instance.id, self.build_input(validated_data, instance))


class PurchaseItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    size = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = _money_field()
    amount = _money_field()


class PurchaseItemWriteSerializer(StoreSerializerMixin, serializers.Serializer):
    product_id = serializers.CharField(required=False, allow_blank=True)
    name = serializers.CharField(required=False, allow_blank=True)
    size = serializers.CharField(required=False, allow_blank=True)
    quantity = LenientIntegerField(required=False, default=1)
    unit_price = LenientDecimalField(required=False)

    def validate(self, attrs):
        product_id = attrs.pop('product_id', '')
        if product_id:
            product = self.get_product(product_id)
            attrs.setdefault('name', product.name)
            attrs.setdefault('size', product.size)
            attrs.setdefault('unit_price', product.rate)
        attrs.setdefault('name', '')
        attrs.setdefault('size', '')
        attrs.setdefault('unit_price', Decimal('0'))
        return attrs


class PurchaseReadSerializer(serializers.Serializer):
    id = serializers.CharField()
    date = serializers.DateField()
    supplier = serializers.CharField()
    supplier_email = serializers.CharField()
    invoice_number = serializers.CharField()
    items = PurchaseItemSerializer(many=True)
    subtotal = _money_field()
    tax = _money_field()
    total = _money_field()
    status = serializers.CharField()


class PurchaseWriteSerializer(StoreSerializerMixin, serializers.Serializer):
    supplier = serializers.CharField(max_length=255)
    supplier_email = serializers.CharField(required=False, allow_blank=True, default='')
    invoice_number = serializers.CharField(required=False, allow_blank=True, default='')
    items = PurchaseItemWriteSerializer(many=True, required=False, default=list)
    date = serializers.DateField(required=False)

    def create(self, validated_data):
        purchase_input = PurchaseInput(
            supplier=validated_data['supplier'],
            supplier_email=validated_data.get('supplier_email', ''),
            invoice_number=validated_data.get('invoice_number', ''),
            items=tuple(PurchaseItem(**item) for item in validated_data.get('items', [])),
            date=validated_data.get('date'),
        )
        return self.get_store().create_purchase(purchase_input)


class BillItemSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, default='')
    quantity = LenientIntegerField(required=False, default=1)
    rate = LenientDecimalField(required=False, default=Decimal('0'))


class BillPreviewSerializer(serializers.Serializer):
    """Draft bill: only the line items matter for the live totals."""

    items = BillItemSerializer(many=True)

    def line_items(self):
        return [
            LineItem(name=item['description'], quantity=item['quantity'], rate=item['rate'])
            for item in self.validated_data['items']
        ]


class InventoryItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    category = serializers.CharField()
    current_stock = serializers.IntegerField()
    min_stock = serializers.IntegerField()
    unit_price = _money_field()
    total_value = _money_field()
    stock_status = serializers.CharField()
    last_updated = serializers.DateField()


class ReconciliationSerializer(serializers.Serializer):
    customer_id = serializers.CharField()
    stored_total_purchases = _money_field()
    expected_total_purchases = _money_field()
    stored_balance = _money_field()
    ledger_balance = _money_field()
    expected_balance = _money_field()
    balance_drift = _money_field()
    purchases_drift = _money_field()
    is_consistent = serializers.BooleanField()


class ActivitySerializer(serializers.Serializer):
    action_type = serializers.CharField()
    entity = serializers.CharField()
    object_id = serializers.CharField()
    description = serializers.CharField()
    timestamp = serializers.DateTimeField()

"""Utility helpers shared across API view modules."""

from contextlib import contextmanager

from rest_framework import viewsets
from rest_framework.exceptions import NotFound, ValidationError

from .. import exceptions
from ..store import get_store


@contextmanager
def ledger_errors():
    """Re-raise ledger errors as the matching DRF exceptions."""

    try:
        yield
    except exceptions.NotFound as exc:
        raise NotFound(detail=str(exc)) from exc
    except exceptions.ValidationError as exc:
        raise ValidationError(exc.as_dict()) from exc


class StoreViewSet(viewsets.ModelViewSet):
    """ModelViewSet backed by the in-memory business store.

    Subclasses implement :meth:`list_objects` and :meth:`fetch_object`, and
    :meth:`delete_object` when deletion is allowed.  Search goes through the
    ``search`` query parameter.
    """

    pagination_class = None

    @property
    def store(self):
        return get_store()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['store'] = self.store
        return context

    def get_queryset(self):
        with ledger_errors():
            return self.list_objects(self.request.query_params.get('search'))

    def get_object(self):
        with ledger_errors():
            return self.fetch_object(self.kwargs[self.lookup_url_kwarg or self.lookup_field])

    def list_objects(self, search):
        raise NotImplementedError

    def fetch_object(self, pk):
        raise NotImplementedError

    def delete_object(self, instance):
        raise NotImplementedError

    def perform_create(self, serializer):
        with ledger_errors():
            serializer.save()

    def perform_update(self, serializer):
        with ledger_errors():
            serializer.save()

    def perform_destroy(self, instance):
        with ledger_errors():
            self.delete_object(instance)

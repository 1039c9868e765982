"""Activity log related API views."""

from django.utils.dateparse import parse_date
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..serializers import ActivitySerializer
from ..store import get_store


class ActivityViewSet(viewsets.ViewSet):
    """Read-only access to the activity log, newest first."""

    def list(self, request):
        on_date = None
        date_str = request.query_params.get('date')
        if date_str:
            on_date = parse_date(date_str)
            if on_date is None:
                raise ValidationError({'date': 'Use the YYYY-MM-DD format.'})
        activities = get_store().list_activities(on_date)
        return Response(ActivitySerializer(activities, many=True).data)

"""
Dashboard endpoint.

Every role gets its own view of the numbers: administrators see the
whole hospital, doctors and customers the appointments in their scope.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.services.dashboard import dashboard_stats


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats_view(request):
    return Response({'ok': True, 'data': dashboard_stats(request.user)})

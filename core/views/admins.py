"""
Administrator account management (administrators only).
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsAdminRole
from core.serializers.admin import AdminListQuerySerializer
from core.serializers.auth import AccountSerializer
from core.services.accounts import create_admin, delete_admin, get_admin, list_admins, serialize_user


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admins_view(request):
    if request.method == 'POST':
        s = AccountSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = create_admin(request.user, s.validated_data)
        return Response({'ok': True, 'data': serialize_user(user)}, status=201)

    q = AdminListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': list_admins(q.validated_data.get('search'))})


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_detail_view(request, pk: int):
    if request.method == 'DELETE':
        delete_admin(request.user, pk)
        return Response({'ok': True, 'message': 'Admin deleted'})
    return Response({'ok': True, 'data': serialize_user(get_admin(pk))})

"""
Doctor directory endpoints.

Any signed in user may browse doctors and their availability.  Only
administrators add or remove doctors; a doctor may edit its own profile.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import require_role
from core.serializers.doctor import DoctorCreateSerializer, DoctorListQuerySerializer, DoctorSerializer
from core.services.accounts import serialize_user
from core.services.doctors import (
    create_doctor, delete_doctor, get_doctor, list_doctors, list_specializations, serialize_doctor,
    update_doctor,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def doctors_view(request):
    if request.method == 'POST':
        require_role(request, 'admin')
        s = DoctorCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        doctor, user = create_doctor(request.user, s.validated_data)
        data = serialize_doctor(doctor)
        data['user'] = serialize_user(user)
        return Response({'ok': True, 'data': data}, status=201)

    q = DoctorListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    return Response({
        'ok': True,
        'data': list_doctors(search=vd.get('search'), specialization=vd.get('specialization'),
                             status=vd.get('status')),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def specializations_view(request):
    return Response({'ok': True, 'data': list_specializations()})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def doctor_detail_view(request, pk: int):
    doctor = get_doctor(pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_doctor(doctor)})
    if request.method == 'DELETE':
        require_role(request, 'admin')
        delete_doctor(request.user, doctor)
        return Response({'ok': True, 'message': 'Doctor deleted'})

    s = DoctorSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    doctor = update_doctor(request.user, doctor, s.validated_data)
    return Response({'ok': True, 'data': serialize_doctor(doctor)})

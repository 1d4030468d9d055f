"""
Patient endpoints.

Every read goes through the caller's scope: administrators see all
patients, doctors the patients they treat and customers only their own
record.  Creating and deleting patients is reserved to administrators.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import require_role
from core.serializers.patient import PatientListQuerySerializer, PatientSerializer
from core.services.patients import (
    create_patient, delete_patient, get_patient, list_patients, serialize_patient, update_patient,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patients_view(request):
    if request.method == 'POST':
        require_role(request, 'admin')
        s = PatientSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        patient = create_patient(request.user, s.validated_data)
        return Response({'ok': True, 'data': serialize_patient(patient)}, status=201)

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page') or 1
    page_size = q.validated_data.get('pageSize') or 10
    rows, total = list_patients(
        request.user, search=q.validated_data.get('search'), page=page, page_size=page_size,
    )
    return Response({
        'ok': True,
        'data': rows,
        'pagination': {'page': page, 'pageSize': page_size, 'total': total},
    })


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def patient_detail_view(request, pk: int):
    """Read, update (anyone who can see the patient) or delete (admin) one patient."""
    patient = get_patient(request.user, pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_patient(patient)})
    if request.method == 'DELETE':
        require_role(request, 'admin')
        delete_patient(request.user, patient)
        return Response({'ok': True, 'message': 'Patient deleted'})

    s = PatientSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    patient = update_patient(request.user, patient, s.validated_data)
    return Response({'ok': True, 'data': serialize_patient(patient)})

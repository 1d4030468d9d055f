"""
Medical record endpoints.

Everyone reads through their scope.  Administrators and doctors write;
a doctor can only touch the records it authored (the scoped lookup
already hides the others).  Only administrators delete.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import require_role
from core.serializers.record import (
    MedicalRecordCreateSerializer, MedicalRecordListQuerySerializer, MedicalRecordSerializer,
)
from core.services.records import (
    create_record, delete_record, get_record, list_records, serialize_record, update_record,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def records_view(request):
    if request.method == 'POST':
        require_role(request, 'admin', 'doctor')
        s = MedicalRecordCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        record = create_record(request.user, s.validated_data)
        record = get_record(request.user, record.pk)
        return Response({'ok': True, 'data': serialize_record(record)}, status=201)

    q = MedicalRecordListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    rows = list_records(
        request.user, patient_id=q.validated_data.get('patientId'), doctor_id=q.validated_data.get('doctorId'),
    )
    return Response({'ok': True, 'data': rows})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def record_detail_view(request, pk: int):
    record = get_record(request.user, pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_record(record)})
    if request.method == 'DELETE':
        require_role(request, 'admin')
        delete_record(request.user, record)
        return Response({'ok': True, 'message': 'Medical record deleted'})

    require_role(request, 'admin', 'doctor')
    s = MedicalRecordSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    record = update_record(request.user, record, s.validated_data)
    return Response({'ok': True, 'data': serialize_record(record)})

"""
Appointment endpoints.

Booking and rescheduling are conflict checked in
``core.services.appointments``; a taken slot answers 409.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers.appointment import (
    AppointmentCreateSerializer, AppointmentListQuerySerializer, AppointmentUpdateSerializer,
)
from core.services.appointments import (
    book_appointment, cancel_appointment, delete_appointment, get_appointment, list_appointments,
    serialize_appointment, update_appointment,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments_view(request):
    if request.method == 'POST':
        s = AppointmentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        appt = book_appointment(
            request.user,
            patient_id=vd['patientId'], doctor_id=vd['doctorId'],
            on=vd['appointmentDate'], at=vd['appointmentTime'],
            reason=vd.get('reason', ''), notes=vd.get('notes', ''),
        )
        appt = get_appointment(request.user, appt.pk)
        return Response({'ok': True, 'data': serialize_appointment(appt)}, status=201)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    rows = list_appointments(
        request.user, on=vd.get('date'), status=vd.get('status'),
        patient_id=vd.get('patientId'), doctor_id=vd.get('doctorId'),
    )
    return Response({'ok': True, 'data': rows})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail_view(request, pk: int):
    appt = get_appointment(request.user, pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_appointment(appt)})
    if request.method == 'DELETE':
        delete_appointment(request.user, appt)
        return Response({'ok': True, 'message': 'Appointment deleted'})

    s = AppointmentUpdateSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    appt = update_appointment(request.user, appt, s.validated_data)
    return Response({'ok': True, 'data': serialize_appointment(appt)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cancel_appointment_view(request, pk: int):
    appt = cancel_appointment(request.user, get_appointment(request.user, pk))
    return Response({'ok': True, 'data': serialize_appointment(appt)})

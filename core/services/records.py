"""
Medical records: written by administrators and doctors, read through the
caller's scope.
"""
import logging
from typing import Optional

from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from core.models import Appointment, Doctor, MedicalRecord, Patient
from core.services.audit import log_action
from core.services.common import iso
from core.services.scope import RECORDS, scope_for

logger = logging.getLogger(__name__)

RECORD_FIELDS = ('diagnosis', 'symptoms', 'prescription', 'test_results', 'notes', 'visit_date')


def serialize_record(r: MedicalRecord) -> dict:
    return {
        'id': r.id,
        'code': r.code,
        'patientId': r.patient_id,
        'patientCode': r.patient.code,
        'patientName': r.patient.full_name,
        'doctorId': r.doctor_id,
        'doctorName': r.doctor.full_name,
        'specialization': r.doctor.specialization,
        'appointmentId': r.appointment_id,
        'diagnosis': r.diagnosis,
        'symptoms': r.symptoms,
        'prescription': r.prescription,
        'testResults': r.test_results,
        'notes': r.notes,
        'visitDate': iso(r.visit_date),
        'createdAt': iso(r.created_at),
        'updatedAt': iso(r.updated_at),
    }


def list_records(user, *, patient_id: Optional[int] = None, doctor_id: Optional[int] = None) -> list[dict]:
    qs = scope_for(user).filter(MedicalRecord.objects.select_related('patient', 'doctor'), RECORDS)
    # the caller's own link already pins these columns
    if patient_id and user.role != 'customer':
        qs = qs.filter(patient_id=patient_id)
    if doctor_id and user.role != 'doctor':
        qs = qs.filter(doctor_id=doctor_id)
    qs = qs.order_by('-visit_date', '-created_at')
    return [serialize_record(r) for r in qs]


def get_record(user, pk) -> MedicalRecord:
    return scope_for(user).get_object(
        MedicalRecord.objects.select_related('patient', 'doctor'), RECORDS, pk, label='medical record'
    )


def create_record(actor, data: dict) -> MedicalRecord:
    if actor.role == 'doctor':
        if not actor.doctor_id:
            raise PermissionDenied('No doctor profile is linked to this account')
        doctor_id = actor.doctor_id
    elif actor.role == 'admin':
        doctor_id = data.get('doctorId')
        if not doctor_id:
            raise ValidationError({'doctorId': 'Doctor ID is required'})
    else:
        raise PermissionDenied('Insufficient permissions')

    patient = Patient.objects.filter(pk=data['patientId']).first()
    if patient is None:
        raise NotFound('Patient not found')
    doctor = Doctor.objects.filter(pk=doctor_id).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    appointment = None
    if data.get('appointmentId'):
        appointment = Appointment.objects.filter(pk=data['appointmentId']).first()
        if appointment is None:
            raise NotFound('Appointment not found')
        if appointment.patient_id != patient.id:
            raise ValidationError({'appointmentId': 'Appointment belongs to another patient'})

    record = MedicalRecord.objects.create(
        patient=patient, doctor=doctor, appointment=appointment,
        **{k: v for k, v in data.items() if k in RECORD_FIELDS},
    )
    log_action(user=actor, action='record_create', object_type='medical_record', object_id=record.id)
    logger.info('medical record %s created by user %s', record.code, actor.id)
    return record


def update_record(actor, record: MedicalRecord, data: dict) -> MedicalRecord:
    for field, value in data.items():
        if field in RECORD_FIELDS:
            setattr(record, field, value)
    record.save()
    log_action(user=actor, action='record_update', object_type='medical_record', object_id=record.id,
               detail={'fields': sorted(data)})
    return record


def delete_record(actor, record: MedicalRecord) -> None:
    rid, code = record.id, record.code
    record.delete()
    log_action(user=actor, action='record_delete', object_type='medical_record', object_id=rid)
    logger.info('medical record %s deleted by user %s', code, actor.id)

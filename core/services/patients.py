"""
Patient listing and maintenance, always through the caller's scope.
"""
import logging
from typing import Optional

from django.db import transaction
from django.db.models import ProtectedError, Q

from core.exceptions import Conflict
from core.models import Patient
from core.services.audit import log_action
from core.services.common import iso, paginate
from core.services.scope import PATIENTS, scope_for

logger = logging.getLogger(__name__)

PATIENT_FIELDS = (
    'first_name', 'last_name', 'date_of_birth', 'gender', 'phone', 'email', 'address',
    'emergency_contact_name', 'emergency_contact_phone', 'blood_group', 'allergies',
)


def serialize_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'code': p.code,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'name': p.full_name,
        'dateOfBirth': iso(p.date_of_birth),
        'gender': p.gender,
        'phone': p.phone,
        'email': p.email,
        'address': p.address,
        'emergencyContactName': p.emergency_contact_name,
        'emergencyContactPhone': p.emergency_contact_phone,
        'bloodGroup': p.blood_group,
        'allergies': p.allergies,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    }


def list_patients(user, *, search: Optional[str] = None, page: int = 1,
                  page_size: int = 10) -> tuple[list[dict], int]:
    qs = scope_for(user).filter(Patient.objects.all(), PATIENTS)
    # customers only ever see themselves, searching is pointless
    if search and user.role != 'customer':
        qs = qs.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search)
            | Q(code__icontains=search) | Q(phone__icontains=search)
        )
    rows, total = paginate(qs.order_by('-created_at', '-id'), page, page_size)
    return [serialize_patient(p) for p in rows], total


def get_patient(user, pk) -> Patient:
    return scope_for(user).get_object(Patient.objects.all(), PATIENTS, pk, label='patient')


def create_patient(actor, data: dict) -> Patient:
    patient = Patient.objects.create(**{k: v for k, v in data.items() if k in PATIENT_FIELDS})
    log_action(user=actor, action='patient_create', object_type='patient', object_id=patient.id)
    logger.info('patient %s created by user %s', patient.code, actor.id)
    return patient


def update_patient(actor, patient: Patient, data: dict) -> Patient:
    for field, value in data.items():
        if field in PATIENT_FIELDS:
            setattr(patient, field, value)
    patient.save()
    log_action(user=actor, action='patient_update', object_type='patient', object_id=patient.id,
               detail={'fields': sorted(data)})
    return patient


def delete_patient(actor, patient: Patient) -> None:
    pid, code = patient.id, patient.code
    try:
        with transaction.atomic():
            patient.delete()
    except ProtectedError:
        raise Conflict('Patient still has appointments or medical records')
    log_action(user=actor, action='patient_delete', object_type='patient', object_id=pid)
    logger.info('patient %s deleted by user %s', code, actor.id)

"""
Doctor directory and profile maintenance.

Every authenticated caller may browse doctors.  Creating a doctor also
creates its ``doctor`` role login in the same transaction.
"""
import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, Q
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from core.exceptions import Conflict
from core.models import Doctor
from core.services.accounts import DUPLICATE_MESSAGE, create_account
from core.services.audit import log_action
from core.services.common import iso

User = get_user_model()
logger = logging.getLogger(__name__)

DOCTOR_FIELDS = (
    'first_name', 'last_name', 'specialization', 'phone', 'email', 'qualification',
    'experience_years', 'consultation_fee', 'available_days', 'available_time_start',
    'available_time_end', 'status',
)


def serialize_doctor(d: Doctor) -> dict:
    return {
        'id': d.id,
        'code': d.code,
        'firstName': d.first_name,
        'lastName': d.last_name,
        'name': d.full_name,
        'specialization': d.specialization,
        'phone': d.phone,
        'email': d.email,
        'qualification': d.qualification,
        'experienceYears': d.experience_years,
        'consultationFee': str(d.consultation_fee) if d.consultation_fee is not None else None,
        'availableDays': [x.strip() for x in d.available_days.split(',') if x.strip()],
        'availableTimeStart': d.available_time_start.strftime('%H:%M') if d.available_time_start else None,
        'availableTimeEnd': d.available_time_end.strftime('%H:%M') if d.available_time_end else None,
        'status': d.status,
        'createdAt': iso(d.created_at),
        'updatedAt': iso(d.updated_at),
    }


def list_doctors(*, search: Optional[str] = None, specialization: Optional[str] = None,
                 status: Optional[str] = None) -> list[dict]:
    qs = Doctor.objects.all()
    if search:
        qs = qs.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(code__icontains=search)
        )
    if specialization:
        qs = qs.filter(specialization=specialization)
    if status:
        qs = qs.filter(status=status)
    return [serialize_doctor(d) for d in qs.order_by('-created_at', '-id')]


def list_specializations() -> list[str]:
    return list(
        Doctor.objects.order_by('specialization').values_list('specialization', flat=True).distinct()
    )


def get_doctor(pk) -> Doctor:
    doctor = Doctor.objects.filter(pk=pk).first()
    if doctor is None:
        raise NotFound('doctor not found')
    return doctor


def create_doctor(actor, data: dict):
    """Create a doctor and its login; returns ``(doctor, user)``."""
    try:
        with transaction.atomic():
            doctor = Doctor.objects.create(**{k: v for k, v in data.items() if k in DOCTOR_FIELDS})
            user = create_account(
                username=data['username'], email=data['email'], password=data['password'],
                role=User.ROLE_DOCTOR, doctor=doctor,
            )
    except IntegrityError:
        raise Conflict(DUPLICATE_MESSAGE)
    log_action(user=actor, action='doctor_create', object_type='doctor', object_id=doctor.id)
    logger.info('doctor %s created by user %s with login %s', doctor.code, actor.id, user.username)
    return doctor, user


def update_doctor(actor, doctor: Doctor, data: dict) -> Doctor:
    if actor.role == User.ROLE_DOCTOR:
        if actor.doctor_id != doctor.id:
            raise PermissionDenied('You can only update your own profile')
    elif actor.role != User.ROLE_ADMIN:
        raise PermissionDenied('Insufficient permissions')
    for field, value in data.items():
        if field in DOCTOR_FIELDS:
            setattr(doctor, field, value)
    start, end = doctor.available_time_start, doctor.available_time_end
    if start and end and start >= end:
        raise ValidationError({'availableTimeEnd': 'End time must be after start time'})
    doctor.save()
    log_action(user=actor, action='doctor_update', object_type='doctor', object_id=doctor.id,
               detail={'fields': sorted(data)})
    return doctor


def delete_doctor(actor, doctor: Doctor) -> None:
    did, code = doctor.id, doctor.code
    try:
        with transaction.atomic():
            doctor.delete()
    except ProtectedError:
        raise Conflict('Doctor still has appointments or medical records')
    log_action(user=actor, action='doctor_delete', object_type='doctor', object_id=did)
    logger.info('doctor %s deleted by user %s', code, actor.id)

"""
Appointment booking with slot conflict detection.

A slot is a (doctor, date, time) triple and holds at most one
appointment whose status is not ``cancelled``.  Booking and moving an
appointment run as one transaction: the doctor row is locked, the slot
is checked and the row is written.  SQLite has no row locks; there every
transaction begins IMMEDIATE, so the second writer waits for the first.
The partial unique constraint ``uniq_active_doctor_slot`` is the last
guard and an ``IntegrityError`` from it is reported as a conflict, so of
two concurrent requests for the same slot exactly one succeeds.
"""
import logging
from datetime import date, time
from typing import Optional

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import Conflict
from core.models import Appointment, Doctor, Patient
from core.services.audit import log_action
from core.services.common import iso
from core.services.scope import APPOINTMENTS, scope_for

logger = logging.getLogger(__name__)

SLOT_TAKEN = 'Time slot already booked'


def serialize_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'code': a.code,
        'patientId': a.patient_id,
        'patientName': a.patient.full_name,
        'patientPhone': a.patient.phone,
        'doctorId': a.doctor_id,
        'doctorName': a.doctor.full_name,
        'specialization': a.doctor.specialization,
        'appointmentDate': iso(a.appointment_date),
        'appointmentTime': a.appointment_time.strftime('%H:%M'),
        'status': a.status,
        'reason': a.reason,
        'notes': a.notes,
        'createdAt': iso(a.created_at),
        'updatedAt': iso(a.updated_at),
    }


def slot_is_taken(doctor_id: int, on: date, at: time, *, exclude_id: Optional[int] = None) -> bool:
    """True when a non-cancelled appointment already holds the slot."""
    qs = Appointment.objects.filter(
        doctor_id=doctor_id, appointment_date=on, appointment_time=at,
    ).exclude(status=Appointment.STATUS_CANCELLED)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()


def _lock_doctor(doctor_id: int) -> Optional[Doctor]:
    return Doctor.objects.select_for_update().filter(pk=doctor_id).first()


def list_appointments(user, *, on: Optional[date] = None, status: Optional[str] = None,
                      patient_id: Optional[int] = None, doctor_id: Optional[int] = None) -> list[dict]:
    qs = scope_for(user).filter(Appointment.objects.select_related('patient', 'doctor'), APPOINTMENTS)
    if on:
        qs = qs.filter(appointment_date=on)
    if status:
        qs = qs.filter(status=status)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    qs = qs.order_by('-appointment_date', '-appointment_time')
    return [serialize_appointment(a) for a in qs]


def get_appointment(user, pk) -> Appointment:
    return scope_for(user).get_object(
        Appointment.objects.select_related('patient', 'doctor'), APPOINTMENTS, pk, label='appointment'
    )


def book_appointment(actor, *, patient_id: int, doctor_id: int, on: date, at: time,
                     reason: str = '', notes: str = '') -> Appointment:
    if actor.role == 'customer' and actor.patient_id != patient_id:
        raise PermissionDenied('You can only book appointments for yourself')
    if actor.role == 'doctor' and actor.doctor_id != doctor_id:
        raise PermissionDenied('Doctors can only book their own slots')
    if actor.role not in ('admin', 'customer', 'doctor'):
        raise PermissionDenied('Insufficient permissions')

    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')

    try:
        with transaction.atomic():
            doctor = _lock_doctor(doctor_id)
            if doctor is None:
                raise NotFound('Doctor not found')
            if slot_is_taken(doctor.id, on, at):
                raise Conflict(SLOT_TAKEN)
            appt = Appointment.objects.create(
                patient=patient, doctor=doctor, appointment_date=on, appointment_time=at,
                reason=reason or '', notes=notes or '', status=Appointment.STATUS_SCHEDULED,
            )
    except IntegrityError:
        logger.info('slot race lost: doctor=%s %s %s', doctor_id, on, at)
        raise Conflict(SLOT_TAKEN)
    except Conflict:
        logger.info('slot taken: doctor=%s %s %s', doctor_id, on, at)
        raise

    log_action(user=actor, action='appointment_create', object_type='appointment', object_id=appt.id,
               detail={'doctor': doctor_id, 'date': iso(on), 'time': at.strftime('%H:%M')})
    logger.info('appointment %s booked by user %s', appt.code, actor.id)
    return appt


def update_appointment(actor, appt: Appointment, changes: dict) -> Appointment:
    """Apply ``changes``; moving or reactivating re-checks the target slot."""
    if actor.role == 'customer' and changes.get('status') == Appointment.STATUS_COMPLETED:
        raise PermissionDenied('Only staff can complete an appointment')
    new_doctor = changes.get('doctor_id', appt.doctor_id)
    if actor.role == 'doctor' and new_doctor != actor.doctor_id:
        raise PermissionDenied('Doctors can only book their own slots')

    new_date = changes.get('appointment_date', appt.appointment_date)
    new_time = changes.get('appointment_time', appt.appointment_time)
    new_status = changes.get('status', appt.status)
    moves = (new_doctor, new_date, new_time) != (appt.doctor_id, appt.appointment_date, appt.appointment_time)
    reactivates = appt.status == Appointment.STATUS_CANCELLED and new_status != Appointment.STATUS_CANCELLED
    needs_slot = new_status != Appointment.STATUS_CANCELLED and (moves or reactivates)

    try:
        with transaction.atomic():
            if needs_slot:
                if _lock_doctor(new_doctor) is None:
                    raise NotFound('Doctor not found')
                if slot_is_taken(new_doctor, new_date, new_time, exclude_id=appt.pk):
                    raise Conflict(SLOT_TAKEN)
            elif new_doctor != appt.doctor_id and not Doctor.objects.filter(pk=new_doctor).exists():
                raise NotFound('Doctor not found')
            for field in ('doctor_id', 'appointment_date', 'appointment_time', 'status', 'reason', 'notes'):
                if field in changes:
                    setattr(appt, field, changes[field])
            appt.save()
    except IntegrityError:
        raise Conflict(SLOT_TAKEN)

    log_action(user=actor, action='appointment_update', object_type='appointment', object_id=appt.id,
               detail={'fields': sorted(changes)})
    return Appointment.objects.select_related('patient', 'doctor').get(pk=appt.pk)


def cancel_appointment(actor, appt: Appointment) -> Appointment:
    return update_appointment(actor, appt, {'status': Appointment.STATUS_CANCELLED})


def delete_appointment(actor, appt: Appointment) -> None:
    # customers may only get here for their own appointments (scoped lookup)
    if actor.role not in ('admin', 'customer'):
        raise PermissionDenied('Insufficient permissions')
    aid, code = appt.id, appt.code
    appt.delete()
    log_action(user=actor, action='appointment_delete', object_type='appointment', object_id=aid)
    logger.info('appointment %s deleted by user %s', code, actor.id)

"""
Database models for the hospital administration backend.

Five tables carry the data: users, patients, doctors, appointments and
medical records.  Patients, doctors, appointments and records are
independent top-level rows; a user only points at (at most) one patient
or one doctor and never owns it.  An audit trail table records logins
and writes.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q

from core.services.identifiers import new_external_code


class CodedModel(models.Model):
    """Base for rows exposed to clients by a prefixed external code."""
    CODE_PREFIX = ''

    code = models.CharField(max_length=16, unique=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = new_external_code(type(self), self.CODE_PREFIX)
        super().save(*args, **kwargs)


class Patient(CodedModel):
    """Demographic record of a patient."""
    CODE_PREFIX = 'PAT'

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=20)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)
    blood_group = models.CharField(max_length=8, blank=True)
    allergies = models.TextField(blank=True)

    class Meta:
        db_table = 'patients'

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.code})"


class Doctor(CodedModel):
    """A care provider with a weekly availability window.

    ``available_days`` is a comma separated list of weekday names (for
    example ``"Mon,Tue,Fri"``); the start/end times bound the working
    hours on those days.
    """
    CODE_PREFIX = 'DOC'

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = ((STATUS_ACTIVE, 'Active'), (STATUS_INACTIVE, 'Inactive'))

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    specialization = models.CharField(max_length=100, db_index=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    experience_years = models.PositiveIntegerField(null=True, blank=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    available_days = models.CharField(max_length=64, blank=True)
    available_time_start = models.TimeField(null=True, blank=True)
    available_time_end = models.TimeField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    class Meta:
        db_table = 'doctors'

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"Dr. {self.full_name} ({self.code})"


class User(AbstractUser):
    """Login identity with a role and an optional patient/doctor link.

    A ``customer`` is linked to the patient it books for, a ``doctor`` to
    its doctor row and an ``admin`` to neither.  Links are nulled, not
    cascaded, when the linked row goes away.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_CUSTOMER = 'customer'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_CUSTOMER, 'Customer'),
    ]
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)
    patient = models.OneToOneField(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='user_account'
    )
    doctor = models.OneToOneField(
        Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='user_account'
    )

    class Meta:
        db_table = 'users'
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(role='admin', patient__isnull=True, doctor__isnull=True)
                    | Q(role='doctor', patient__isnull=True)
                    | Q(role='customer', doctor__isnull=True)
                ),
                name='user_role_link_matches_role',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Appointment(CodedModel):
    """A booking of one doctor slot for one patient.

    Only one non-cancelled appointment may hold a (doctor, date, time)
    slot; the partial unique constraint below enforces it in storage.
    """
    CODE_PREFIX = 'APT'

    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    appointment_date = models.DateField(db_index=True)
    appointment_time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'appointments'
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'appointment_date', 'appointment_time'],
                condition=~Q(status='cancelled'),
                name='uniq_active_doctor_slot',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} d={self.doctor_id} {self.appointment_date} {self.appointment_time}"


class MedicalRecord(CodedModel):
    """Visit note written for a patient by a doctor."""
    CODE_PREFIX = 'REC'

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='medical_records')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='medical_records')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_records'
    )
    diagnosis = models.TextField(blank=True)
    symptoms = models.TextField(blank=True)
    prescription = models.TextField(blank=True)
    test_results = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    visit_date = models.DateField()

    class Meta:
        db_table = 'medical_records'

    def __str__(self) -> str:
        return f"{self.code} p={self.patient_id} d={self.doctor_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"

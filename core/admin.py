"""
Django admin registrations for the core models.

Lets staff inspect and fix rows through ``/admin/``.  External codes are
generated on save and shown read-only.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Appointment, AuditEvent, Doctor, MedicalRecord, Patient, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'role', 'patient', 'doctor', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Hospital', {'fields': ('role', 'patient', 'doctor')}),
    )


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('code', 'first_name', 'last_name', 'gender', 'date_of_birth', 'phone')
    list_filter = ('gender',)
    search_fields = ('code', 'first_name', 'last_name', 'phone')
    readonly_fields = ('code', 'created_at', 'updated_at')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('code', 'first_name', 'last_name', 'specialization', 'status')
    list_filter = ('specialization', 'status')
    search_fields = ('code', 'first_name', 'last_name')
    readonly_fields = ('code', 'created_at', 'updated_at')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('code', 'patient', 'doctor', 'appointment_date', 'appointment_time', 'status')
    list_filter = ('status', 'appointment_date')
    search_fields = ('code', 'patient__first_name', 'patient__last_name', 'doctor__last_name')
    readonly_fields = ('code', 'created_at', 'updated_at')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('code', 'patient', 'doctor', 'visit_date')
    list_filter = ('visit_date',)
    search_fields = ('code', 'patient__last_name', 'diagnosis')
    readonly_fields = ('code', 'created_at', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')

"""
URL mappings for the hospital administration API.

Trailing slashes are deliberately omitted (``APPEND_SLASH = False``).
Routes are named so tests can ``reverse()`` them.
"""
from django.urls import path

from .auth_views import login_view, logout_view, me_view, refresh_view, register_view
from .views import admins, appointments, dashboard, doctors, health, patients, records

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),

    # auth
    path('api/auth/register', register_view, name='auth-register'),
    path('api/auth/login', login_view, name='auth-login'),
    path('api/auth/me', me_view, name='auth-me'),
    path('api/auth/refresh', refresh_view, name='auth-refresh'),
    path('api/auth/logout', logout_view, name='auth-logout'),

    # patients
    path('api/patients', patients.patients_view, name='patients'),
    path('api/patients/<int:pk>', patients.patient_detail_view, name='patient-detail'),

    # doctors
    path('api/doctors', doctors.doctors_view, name='doctors'),
    path('api/doctors/specializations', doctors.specializations_view, name='doctor-specializations'),
    path('api/doctors/<int:pk>', doctors.doctor_detail_view, name='doctor-detail'),

    # appointments
    path('api/appointments', appointments.appointments_view, name='appointments'),
    path('api/appointments/<int:pk>', appointments.appointment_detail_view, name='appointment-detail'),
    path('api/appointments/<int:pk>/cancel', appointments.cancel_appointment_view, name='appointment-cancel'),

    # medical records
    path('api/medical-records', records.records_view, name='records'),
    path('api/medical-records/<int:pk>', records.record_detail_view, name='record-detail'),

    # administrators
    path('api/admins', admins.admins_view, name='admins'),
    path('api/admins/<int:pk>', admins.admin_detail_view, name='admin-detail'),

    path('api/dashboard/stats', dashboard.dashboard_stats_view, name='dashboard-stats'),
]

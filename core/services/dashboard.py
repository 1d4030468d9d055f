"""
Role specific dashboard counters.

Administrators get hospital wide totals; doctors and customers get the
same appointment counters restricted to their scope.
"""
from django.db.models import Count
from django.utils import timezone

from core.models import Appointment, Doctor, Patient
from core.services.appointments import serialize_appointment
from core.services.scope import APPOINTMENTS, scope_for


def dashboard_stats(user) -> dict:
    today = timezone.localdate()
    appts = scope_for(user).filter(Appointment.objects.select_related('patient', 'doctor'), APPOINTMENTS)
    scheduled = appts.filter(status=Appointment.STATUS_SCHEDULED)
    upcoming = scheduled.filter(appointment_date__gte=today).order_by('appointment_date', 'appointment_time')[:10]

    stats = {
        'appointmentsToday': appts.filter(appointment_date=today)
                                  .exclude(status=Appointment.STATUS_CANCELLED).count(),
        'pendingAppointments': scheduled.count(),
        'upcomingAppointments': scheduled.filter(appointment_date__gte=today).count(),
        'recentAppointments': [serialize_appointment(a) for a in upcoming],
    }
    if user.role == 'admin':
        stats.update({
            'totalPatients': Patient.objects.count(),
            'totalDoctors': Doctor.objects.filter(status=Doctor.STATUS_ACTIVE).count(),
            'appointmentsByStatus': list(
                Appointment.objects.values('status').annotate(count=Count('id')).order_by('status')
            ),
            'patientsByGender': list(
                Patient.objects.values('gender').annotate(count=Count('id')).order_by('gender')
            ),
        })
    return stats

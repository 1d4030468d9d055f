from rest_framework import serializers

from core.models import Appointment

STATUSES = [c[0] for c in Appointment.STATUS_CHOICES]


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    appointmentDate = serializers.DateField()
    appointmentTime = serializers.TimeField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class AppointmentUpdateSerializer(serializers.Serializer):
    """PUT must restate the slot; PATCH may send any subset."""
    doctorId = serializers.IntegerField(source='doctor_id', required=False, min_value=1)
    appointmentDate = serializers.DateField(source='appointment_date', required=False)
    appointmentTime = serializers.TimeField(source='appointment_time', required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate(self, attrs):
        if not self.partial:
            missing = {
                name: 'This field is required.'
                for name, source in (('appointmentDate', 'appointment_date'), ('appointmentTime', 'appointment_time'))
                if source not in attrs
            }
            if missing:
                raise serializers.ValidationError(missing)
        return attrs


class AppointmentListQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    patientId = serializers.IntegerField(required=False, min_value=1)
    doctorId = serializers.IntegerField(required=False, min_value=1)

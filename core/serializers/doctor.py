from rest_framework import serializers

from core.models import Doctor
from core.serializers.auth import AccountSerializer
from core.serializers.patient import clean_text

WEEKDAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')


class WeekdaysField(serializers.Field):
    """Weekday names as a list or a comma separated string; stored as CSV."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.split(',')
        if not isinstance(data, (list, tuple)):
            raise serializers.ValidationError('Expected a list of weekdays')
        days = []
        for raw in data:
            day = str(raw).strip()[:3].title()
            if not day:
                continue
            if day not in WEEKDAYS:
                raise serializers.ValidationError(f'Unknown weekday: {raw}')
            if day not in days:
                days.append(day)
        return ','.join(days)

    def to_representation(self, value):
        return [d for d in (value or '').split(',') if d]


class DoctorSerializer(serializers.Serializer):
    """Doctor profile and weekly availability.  PATCH validates with ``partial=True``."""
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    specialization = serializers.CharField(max_length=100)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    qualification = serializers.CharField(required=False, allow_blank=True, max_length=255)
    experienceYears = serializers.IntegerField(source='experience_years', required=False, allow_null=True, min_value=0)
    consultationFee = serializers.DecimalField(
        source='consultation_fee', max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    availableDays = WeekdaysField(source='available_days', required=False)
    availableTimeStart = serializers.TimeField(source='available_time_start', required=False, allow_null=True)
    availableTimeEnd = serializers.TimeField(source='available_time_end', required=False, allow_null=True)
    status = serializers.ChoiceField(choices=[c[0] for c in Doctor.STATUS_CHOICES], required=False)

    def validate_firstName(self, v):
        return clean_text(v)

    def validate_lastName(self, v):
        return clean_text(v)

    def validate_specialization(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Specialization is required')
        return v

    def validate(self, attrs):
        start = attrs.get('available_time_start')
        end = attrs.get('available_time_end')
        if start and end and start >= end:
            raise serializers.ValidationError({'availableTimeEnd': 'End time must be after start time'})
        return attrs


class DoctorCreateSerializer(AccountSerializer, DoctorSerializer):
    """A doctor together with the credentials of its login."""
    email = serializers.EmailField()


class DoctorListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)
    specialization = serializers.CharField(required=False, max_length=100)
    status = serializers.ChoiceField(choices=[c[0] for c in Doctor.STATUS_CHOICES], required=False)

import bleach
from rest_framework import serializers


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientSerializer(serializers.Serializer):
    """Patient demographics.  PATCH validates with ``partial=True``."""
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    dateOfBirth = serializers.DateField(source='date_of_birth')
    gender = serializers.CharField(max_length=20)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    emergencyContactName = serializers.CharField(
        source='emergency_contact_name', required=False, allow_blank=True, max_length=200
    )
    emergencyContactPhone = serializers.CharField(
        source='emergency_contact_phone', required=False, allow_blank=True, max_length=32
    )
    bloodGroup = serializers.CharField(source='blood_group', required=False, allow_blank=True, max_length=8)
    allergies = serializers.CharField(required=False, allow_blank=True)

    def validate_firstName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('First name is required')
        return v

    def validate_lastName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Last name is required')
        return v

    def validate_gender(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Gender is required')
        return v


class PatientListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)

from rest_framework import serializers


class MedicalRecordSerializer(serializers.Serializer):
    """Clinical content of a record.  PATCH validates with ``partial=True``."""
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    symptoms = serializers.CharField(required=False, allow_blank=True)
    prescription = serializers.CharField(required=False, allow_blank=True)
    testResults = serializers.CharField(source='test_results', required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    visitDate = serializers.DateField(source='visit_date')


class MedicalRecordCreateSerializer(MedicalRecordSerializer):
    patientId = serializers.IntegerField(min_value=1)
    # doctors always write as themselves; administrators must name the doctor
    doctorId = serializers.IntegerField(min_value=1, required=False)
    appointmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class MedicalRecordListQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False, min_value=1)
    doctorId = serializers.IntegerField(required=False, min_value=1)

from django.contrib.auth import password_validation
from rest_framework import serializers

from core.serializers.patient import PatientSerializer, clean_text


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField()

    def validate(self, attrs):
        attrs['email'] = (attrs.get('email') or '').strip()
        attrs['username'] = (attrs.get('username') or '').strip()
        if not attrs['email'] and not attrs['username']:
            raise serializers.ValidationError({'email': 'Email or username is required'})
        return attrs


class AccountSerializer(serializers.Serializer):
    """Login credentials for a new account of any role."""
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate_username(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        password_validation.validate_password(v)
        return v


class RegisterSerializer(AccountSerializer, PatientSerializer):
    """Self registration of a customer together with its patient row."""
    email = serializers.EmailField()


class TokenRefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)

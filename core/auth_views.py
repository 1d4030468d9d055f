"""
Authentication views.

Registration of customers, login by email (or username) and password,
the current-user endpoint, and refresh/logout of bearer tokens.  The
bearer authentication class itself lives in ``core.authentication`` so
DRF can import it without pulling in the views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from core.authentication import issue_tokens
from core.serializers.auth import LoginSerializer, LogoutSerializer, RegisterSerializer, TokenRefreshSerializer
from core.services.accounts import register_customer, serialize_user
from core.services.audit import log_action

User = get_user_model()
logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """Register a customer account together with its patient record."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = register_customer(s.validated_data)
    return Response({'ok': True, 'message': 'Registration successful. Please login.',
                     'data': serialize_user(user)}, status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login with credentials only; any ``role`` in the body is ignored.
    Accepts fields:
      - email or username
      - password
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    username = vd['username']
    if vd['email']:
        match = User.objects.filter(email__iexact=vd['email']).only('username').first()
        username = match.username if match else None

    user = authenticate(request, username=username, password=vd['password']) if username else None
    ip = request.META.get('REMOTE_ADDR')
    if not user:
        logger.warning('failed login for %s from %s', vd['email'] or vd['username'], ip)
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'login': vd['email'] or vd['username'], 'ip': ip})
        raise AuthenticationFailed('Invalid credentials')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})
    update_last_login(None, user)
    logger.info('user %s logged in', user.username)

    refresh = issue_tokens(user)
    return Response({
        'ok': True,
        'token': str(refresh.access_token),
        'refresh': str(refresh),
        'role': user.role,
        'user': serialize_user(user),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = User.objects.select_related('patient', 'doctor').get(pk=request.user.pk)
    return Response({'ok': True, 'data': serialize_user(user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        refresh = RefreshToken(s.validated_data['refresh'])
    except TokenError as e:
        raise AuthenticationFailed(str(e))
    return Response({'ok': True, 'token': str(refresh.access_token)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist one refresh token, or every outstanding one of the caller."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            token = RefreshToken(refresh)
        except TokenError as e:
            raise ValidationError({'refresh': str(e)})
        if str(token.get('user_id')) != str(request.user.pk):
            raise ValidationError({'refresh': 'Token does not belong to the current user'})
        token.blacklist()
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})

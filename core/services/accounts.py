"""
User accounts: customer self registration and administrator management.

Credentials are checked for duplicates up front and the insert is still
guarded by the unique indexes on username and email, so two concurrent
registrations with the same credentials cannot both succeed.
"""
import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import Conflict
from core.models import Patient
from core.services.audit import log_action
from core.services.common import iso
from core.services.patients import PATIENT_FIELDS

User = get_user_model()
logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = 'User with this email or username already exists'


def serialize_user(u) -> dict:
    data = {
        'id': u.id,
        'username': u.username,
        'email': u.email,
        'role': u.role,
        'createdAt': iso(u.date_joined),
        'patientId': u.patient_id,
        'doctorId': u.doctor_id,
    }
    if u.patient_id:
        data['patientCode'] = u.patient.code
        data['name'] = u.patient.full_name
    elif u.doctor_id:
        data['doctorCode'] = u.doctor.code
        data['name'] = u.doctor.full_name
    else:
        data['name'] = u.get_full_name() or u.username
    return data


def ensure_credentials_free(username: str, email: str) -> None:
    if User.objects.filter(Q(username__iexact=username) | Q(email__iexact=email)).exists():
        raise Conflict(DUPLICATE_MESSAGE)


def create_account(*, username: str, email: str, password: str, role: str, **links):
    """Create a login; the caller owns the surrounding transaction."""
    ensure_credentials_free(username, email)
    return User.objects.create_user(username=username, email=email, password=password, role=role, **links)


def register_customer(data: dict):
    """Create a customer login and its patient row as one unit."""
    try:
        with transaction.atomic():
            patient = Patient.objects.create(
                **{k: v for k, v in data.items() if k in PATIENT_FIELDS and k != 'email'},
                email=data['email'],
            )
            user = create_account(
                username=data['username'], email=data['email'], password=data['password'],
                role=User.ROLE_CUSTOMER, patient=patient,
            )
    except IntegrityError:
        raise Conflict(DUPLICATE_MESSAGE)
    log_action(user=user, action='register', object_type='user', object_id=user.id)
    logger.info('customer %s registered with patient %s', user.username, patient.code)
    return user


# ---------------------------------------------------------------------
# Administrators
# ---------------------------------------------------------------------
def list_admins(search: Optional[str] = None) -> list[dict]:
    qs = User.objects.filter(role=User.ROLE_ADMIN)
    if search:
        qs = qs.filter(Q(username__icontains=search) | Q(email__icontains=search))
    return [serialize_user(u) for u in qs.order_by('-date_joined', '-id')]


def get_admin(pk):
    admin = User.objects.filter(pk=pk, role=User.ROLE_ADMIN).first()
    if admin is None:
        raise NotFound('admin not found')
    return admin


def create_admin(actor, data: dict):
    try:
        with transaction.atomic():
            user = create_account(
                username=data['username'], email=data['email'], password=data['password'],
                role=User.ROLE_ADMIN,
            )
    except IntegrityError:
        raise Conflict(DUPLICATE_MESSAGE)
    log_action(user=actor, action='admin_create', object_type='user', object_id=user.id)
    logger.info('admin %s created by user %s', user.username, actor.id)
    return user


def delete_admin(actor, pk) -> None:
    if str(pk) == str(actor.pk):
        raise PermissionDenied('You cannot delete your own account')
    admin = get_admin(pk)
    admin.delete()
    log_action(user=actor, action='admin_delete', object_type='user', object_id=int(pk))
    logger.info('admin %s deleted by user %s', admin.username, actor.id)

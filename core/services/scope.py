"""
Role scoped visibility of patients, appointments and medical records.

Each role has a resolver that turns the caller into a row predicate per
resource.  Views never branch on the role themselves; they ask
:func:`scope_for` for the caller's resolver and filter through it.

* ``admin`` sees every row.
* ``customer`` sees the linked patient and that patient's appointments
  and records.
* ``doctor`` sees its own appointments and records, and the patients it
  has an appointment or record with.

A customer or doctor without a linked row, and any unknown role, sees
nothing.
"""
from __future__ import annotations

from typing import Optional

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound, PermissionDenied

PATIENTS = 'patients'
APPOINTMENTS = 'appointments'
RECORDS = 'records'


class ScopeResolver:
    role: Optional[str] = None
    # patient predicates that walk reverse relations need DISTINCT
    joins_patients = False

    def __init__(self, user):
        self.user = user

    def predicate(self, resource: str) -> Optional[Q]:
        """Return the row filter for ``resource``, or ``None`` for "no rows"."""
        return None

    def filter(self, qs: QuerySet, resource: str) -> QuerySet:
        q = self.predicate(resource)
        if q is None:
            return qs.none()
        qs = qs.filter(q)
        if resource == PATIENTS and self.joins_patients:
            qs = qs.distinct()
        return qs

    def get_object(self, qs: QuerySet, resource: str, pk, *, label: str = 'object'):
        """Fetch ``pk`` from ``qs``; NotFound if missing, Forbidden if out of scope."""
        obj = qs.filter(pk=pk).first()
        if obj is None:
            raise NotFound(f'{label} not found')
        if not self.filter(qs.filter(pk=pk), resource).exists():
            raise PermissionDenied(f'forbidden for this {label}')
        return obj


class AdminScope(ScopeResolver):
    role = 'admin'

    def predicate(self, resource: str) -> Optional[Q]:
        return Q()


class CustomerScope(ScopeResolver):
    role = 'customer'

    def predicate(self, resource: str) -> Optional[Q]:
        patient_id = getattr(self.user, 'patient_id', None)
        if not patient_id:
            return None
        if resource == PATIENTS:
            return Q(pk=patient_id)
        return Q(patient_id=patient_id)


class DoctorScope(ScopeResolver):
    role = 'doctor'
    joins_patients = True

    def predicate(self, resource: str) -> Optional[Q]:
        doctor_id = getattr(self.user, 'doctor_id', None)
        if not doctor_id:
            return None
        if resource == PATIENTS:
            return Q(appointments__doctor_id=doctor_id) | Q(medical_records__doctor_id=doctor_id)
        return Q(doctor_id=doctor_id)


class NoAccessScope(ScopeResolver):
    pass


RESOLVERS = {cls.role: cls for cls in (AdminScope, CustomerScope, DoctorScope)}


def scope_for(user) -> ScopeResolver:
    """Pick the resolver for the caller's role."""
    if not (user and getattr(user, 'is_authenticated', False)):
        return NoAccessScope(user)
    return RESOLVERS.get(getattr(user, 'role', None), NoAccessScope)(user)

"""Row builders shared by the API tests."""
from datetime import date, time

from rest_framework.test import APIClient

from core.models import Appointment, Doctor, MedicalRecord, Patient, User

PASSWORD = 'P@ssw0rd1'


def make_patient(first='Ann', last='Lee', **kw) -> Patient:
    kw.setdefault('date_of_birth', date(1990, 1, 1))
    kw.setdefault('gender', 'female')
    return Patient.objects.create(first_name=first, last_name=last, **kw)


def make_doctor(first='Greg', last='House', specialization='Cardiology', **kw) -> Doctor:
    return Doctor.objects.create(first_name=first, last_name=last, specialization=specialization, **kw)


def make_user(username, role, **kw) -> User:
    kw.setdefault('email', f'{username}@example.com')
    return User.objects.create_user(username=username, password=PASSWORD, role=role, **kw)


def make_appointment(patient, doctor, on=date(2030, 1, 7), at=time(9, 0), **kw) -> Appointment:
    return Appointment.objects.create(
        patient=patient, doctor=doctor, appointment_date=on, appointment_time=at, **kw
    )


def make_record(patient, doctor, **kw) -> MedicalRecord:
    kw.setdefault('visit_date', date(2030, 1, 7))
    kw.setdefault('diagnosis', 'Flu')
    return MedicalRecord.objects.create(patient=patient, doctor=doctor, **kw)


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client

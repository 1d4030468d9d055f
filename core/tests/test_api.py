"""
Integration tests for the hospital administration API.

These tests exercise role based visibility of patients, doctors, medical
records and administrator accounts through the HTTP layer, using Django
REST Framework's APIClient within the APITestCase base class.

To run the tests:

```
pytest -q core/tests
```
"""
from datetime import date, timedelta

from django.core.exceptions import FieldDoesNotExist
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.models import Doctor, MedicalRecord, Patient, User
from core.services.common import iso
from core.tests.helpers import (
    PASSWORD, client_for, make_appointment, make_doctor, make_patient, make_record, make_user,
)


class HospitalAPITests(APITestCase):
    def setUp(self) -> None:
        """Two patients with customer logins, two doctors, one administrator."""
        self.admin = make_user('admin1', User.ROLE_ADMIN)

        self.patient1 = make_patient('Ann', 'Lee', phone='555-0101')
        self.patient2 = make_patient('Bob', 'Stone', gender='male')
        self.customer1 = make_user('ann', User.ROLE_CUSTOMER, patient=self.patient1)
        self.customer2 = make_user('bob', User.ROLE_CUSTOMER, patient=self.patient2)

        self.doctor1 = make_doctor('Greg', 'House', 'Diagnostics')
        self.doctor2 = make_doctor('Lisa', 'Cuddy', 'Endocrinology')
        self.doc_user1 = make_user('house', User.ROLE_DOCTOR, doctor=self.doctor1)
        self.doc_user2 = make_user('cuddy', User.ROLE_DOCTOR, doctor=self.doctor2)

        # doctor1 treats patient1 only
        self.appt = make_appointment(self.patient1, self.doctor1)

    # ------------------------------------------------------------------
    # patients
    # ------------------------------------------------------------------
    def test_admin_lists_all_patients_with_pagination(self):
        response = client_for(self.admin).get(reverse('patients'), {'page': 1, 'pageSize': 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['pagination'], {'page': 1, 'pageSize': 1, 'total': 2})

    def test_customer_sees_only_own_patient(self):
        response = client_for(self.customer1).get(reverse('patients'), {'search': 'Stone'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [p['id'] for p in response.data['data']]
        self.assertEqual(ids, [self.patient1.id])

    def test_doctor_sees_patients_it_treats(self):
        response = client_for(self.doc_user1).get(reverse('patients'))
        self.assertEqual([p['id'] for p in response.data['data']], [self.patient1.id])

        response = client_for(self.doc_user2).get(reverse('patients'))
        self.assertEqual(response.data['data'], [])

    def test_doctor_sees_patient_through_a_record(self):
        make_record(self.patient2, self.doctor2)
        response = client_for(self.doc_user2).get(reverse('patients'))
        self.assertEqual([p['id'] for p in response.data['data']], [self.patient2.id])

    def test_patient_search_matches_name_and_phone(self):
        client = client_for(self.admin)
        by_name = client.get(reverse('patients'), {'search': 'ston'})
        self.assertEqual([p['id'] for p in by_name.data['data']], [self.patient2.id])
        by_phone = client.get(reverse('patients'), {'search': '555-0101'})
        self.assertEqual([p['id'] for p in by_phone.data['data']], [self.patient1.id])

    def test_out_of_scope_patient_is_forbidden_and_missing_is_not_found(self):
        client = client_for(self.customer1)
        response = client.get(reverse('patient-detail', args=[self.patient2.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['code'], 'forbidden')

        response = client.get(reverse('patient-detail', args=[999999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'not_found')

    def test_admin_creates_patient_with_external_code(self):
        payload = {'firstName': 'Cara', 'lastName': 'Diaz', 'dateOfBirth': '1985-05-20', 'gender': 'female'}
        response = client_for(self.admin).post(reverse('patients'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        code = response.data['data']['code']
        self.assertTrue(code.startswith('PAT'))
        self.assertEqual(len(code), 11)
        self.assertTrue(code[3:].isdigit())

    def test_patient_without_gender_is_rejected_and_not_saved(self):
        before = Patient.objects.count()
        payload = {'firstName': 'Cara', 'lastName': 'Diaz', 'dateOfBirth': '1985-05-20'}
        response = client_for(self.admin).post(reverse('patients'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'validation_failed')
        self.assertIn('gender', response.data['error']['message'])
        self.assertEqual(Patient.objects.count(), before)

    def test_customer_cannot_create_patient(self):
        payload = {'firstName': 'X', 'lastName': 'Y', 'dateOfBirth': '2000-01-01', 'gender': 'male'}
        response = client_for(self.customer1).post(reverse('patients'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_updates_own_patient(self):
        response = client_for(self.customer1).patch(
            reverse('patient-detail', args=[self.patient1.id]), {'phone': '555-9999'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.patient1.refresh_from_db()
        self.assertEqual(self.patient1.phone, '555-9999')

    def test_put_requires_the_full_patient(self):
        url = reverse('patient-detail', args=[self.patient1.id])
        client = client_for(self.admin)
        response = client.put(url, {'phone': '555-7777'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'validation_failed')
        self.patient1.refresh_from_db()
        self.assertEqual(self.patient1.phone, '555-0101')

        payload = {'firstName': 'Anne', 'lastName': 'Lee', 'dateOfBirth': '1990-02-03', 'gender': 'female',
                   'phone': '555-7777'}
        response = client.put(url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['firstName'], 'Anne')
        self.assertEqual(response.data['data']['phone'], '555-7777')

    def test_deleting_referenced_patient_conflicts(self):
        response = client_for(self.admin).delete(reverse('patient-detail', args=[self.patient1.id]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Patient.objects.filter(pk=self.patient1.id).exists())

    def test_admin_deletes_unreferenced_patient(self):
        response = client_for(self.admin).delete(reverse('patient-detail', args=[self.patient2.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Patient.objects.filter(pk=self.patient2.id).exists())
        # the customer keeps its login but loses the link
        self.customer2.refresh_from_db()
        self.assertIsNone(self.customer2.patient_id)

    def test_unlinked_customer_sees_nothing(self):
        orphan = make_user('orphan', User.ROLE_CUSTOMER)
        response = client_for(orphan).get(reverse('patients'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])
        self.assertEqual(response.data['pagination']['total'], 0)

    # ------------------------------------------------------------------
    # doctors
    # ------------------------------------------------------------------
    def test_any_role_lists_doctors_and_specializations(self):
        client = client_for(self.customer1)
        response = client.get(reverse('doctors'), {'specialization': 'Diagnostics'})
        self.assertEqual([d['id'] for d in response.data['data']], [self.doctor1.id])

        response = client.get(reverse('doctor-specializations'))
        self.assertEqual(response.data['data'], ['Diagnostics', 'Endocrinology'])

    def test_admin_creates_doctor_with_login(self):
        payload = {
            'firstName': 'James', 'lastName': 'Wilson', 'specialization': 'Oncology',
            'username': 'wilson', 'email': 'wilson@example.com', 'password': PASSWORD,
            'availableDays': ['Mon', 'wednesday'], 'availableTimeStart': '09:00', 'availableTimeEnd': '17:00',
        }
        response = client_for(self.admin).post(reverse('doctors'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertTrue(data['code'].startswith('DOC'))
        self.assertEqual(data['availableDays'], ['Mon', 'Wed'])
        self.assertEqual(data['user']['role'], User.ROLE_DOCTOR)
        login = User.objects.get(username='wilson')
        self.assertEqual(login.doctor_id, data['id'])

    def test_doctor_with_duplicate_login_conflicts_and_rolls_back(self):
        payload = {
            'firstName': 'James', 'lastName': 'Wilson', 'specialization': 'Oncology',
            'username': 'house', 'email': 'new@example.com', 'password': PASSWORD,
        }
        before = Doctor.objects.count()
        response = client_for(self.admin).post(reverse('doctors'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Doctor.objects.count(), before)

    def test_doctor_time_window_must_be_ordered(self):
        response = client_for(self.admin).patch(
            reverse('doctor-detail', args=[self.doctor1.id]),
            {'availableTimeStart': '17:00', 'availableTimeEnd': '09:00'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_doctor_updates_only_own_profile(self):
        url_own = reverse('doctor-detail', args=[self.doctor1.id])
        url_other = reverse('doctor-detail', args=[self.doctor2.id])
        client = client_for(self.doc_user1)
        self.assertEqual(client.patch(url_own, {'phone': '555-1'}, format='json').status_code, 200)
        self.assertEqual(client.patch(url_other, {'phone': '555-2'}, format='json').status_code, 403)

    def test_put_requires_the_full_doctor(self):
        url = reverse('doctor-detail', args=[self.doctor1.id])
        client = client_for(self.admin)
        response = client.put(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'validation_failed')

        payload = {'firstName': 'Gregory', 'lastName': 'House', 'specialization': 'Nephrology'}
        response = client.put(url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.doctor1.refresh_from_db()
        self.assertEqual(self.doctor1.specialization, 'Nephrology')

    def test_customer_cannot_delete_doctor(self):
        response = client_for(self.customer1).delete(reverse('doctor-detail', args=[self.doctor2.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # medical records
    # ------------------------------------------------------------------
    def test_doctor_writes_record_as_itself(self):
        payload = {'patientId': self.patient1.id, 'doctorId': self.doctor2.id,
                   'visitDate': '2030-01-07', 'diagnosis': 'Lupus', 'appointmentId': self.appt.id}
        response = client_for(self.doc_user1).post(reverse('records'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['doctorId'], self.doctor1.id)
        self.assertTrue(response.data['data']['code'].startswith('REC'))

    def test_admin_must_name_doctor_for_record(self):
        payload = {'patientId': self.patient1.id, 'visitDate': '2030-01-07'}
        response = client_for(self.admin).post(reverse('records'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_appointment_must_belong_to_patient(self):
        payload = {'patientId': self.patient2.id, 'doctorId': self.doctor1.id,
                   'visitDate': '2030-01-07', 'appointmentId': self.appt.id}
        response = client_for(self.admin).post(reverse('records'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(MedicalRecord.objects.count(), 0)

    def test_customer_cannot_write_records(self):
        payload = {'patientId': self.patient1.id, 'visitDate': '2030-01-07'}
        response = client_for(self.customer1).post(reverse('records'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_records_are_scoped(self):
        own = make_record(self.patient1, self.doctor1, visit_date=date(2030, 1, 7))
        other = make_record(self.patient2, self.doctor2, visit_date=date(2030, 1, 8))

        response = client_for(self.customer1).get(reverse('records'))
        self.assertEqual([r['id'] for r in response.data['data']], [own.id])

        response = client_for(self.doc_user2).get(reverse('records'))
        self.assertEqual([r['id'] for r in response.data['data']], [other.id])

        response = client_for(self.doc_user1).get(reverse('record-detail', args=[other.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = client_for(self.admin).get(reverse('records'), {'patientId': self.patient2.id})
        self.assertEqual([r['id'] for r in response.data['data']], [other.id])

    def test_put_requires_the_record_visit_date(self):
        record = make_record(self.patient1, self.doctor1)
        url = reverse('record-detail', args=[record.id])
        client = client_for(self.doc_user1)
        response = client.put(url, {'diagnosis': 'Flu'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'validation_failed')

        response = client.put(url, {'diagnosis': 'Flu', 'visitDate': '2030-02-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.diagnosis, 'Flu')
        self.assertEqual(record.visit_date, date(2030, 2, 1))

    def test_only_admin_deletes_records(self):
        record = make_record(self.patient1, self.doctor1)
        url = reverse('record-detail', args=[record.id])
        self.assertEqual(client_for(self.doc_user1).delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client_for(self.admin).delete(url).status_code, status.HTTP_200_OK)
        self.assertFalse(MedicalRecord.objects.filter(pk=record.id).exists())

    # ------------------------------------------------------------------
    # administrators
    # ------------------------------------------------------------------
    def test_admin_cannot_delete_itself(self):
        response = client_for(self.admin).delete(reverse('admin-detail', args=[self.admin.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=self.admin.id).exists())

    def test_admin_deletes_another_admin(self):
        other = make_user('admin2', User.ROLE_ADMIN)
        response = client_for(self.admin).delete(reverse('admin-detail', args=[other.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=other.id).exists())

    def test_deleting_non_admin_through_admin_route_is_not_found(self):
        response = client_for(self.admin).delete(reverse('admin-detail', args=[self.customer1.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_creates_admin_and_duplicate_conflicts(self):
        client = client_for(self.admin)
        payload = {'username': 'admin3', 'email': 'admin3@example.com', 'password': PASSWORD}
        self.assertEqual(client.post(reverse('admins'), payload, format='json').status_code, 201)
        self.assertEqual(client.post(reverse('admins'), payload, format='json').status_code, 409)
        listing = client.get(reverse('admins'))
        self.assertEqual({u['username'] for u in listing.data['data']}, {'admin1', 'admin3'})

    def test_admin_listing_reports_join_time_newest_first(self):
        other = make_user('admin2', User.ROLE_ADMIN)
        User.objects.filter(pk=self.admin.id).update(date_joined=timezone.now() - timedelta(days=3))
        self.admin.refresh_from_db()
        other.refresh_from_db()

        response = client_for(self.admin).get(reverse('admins'))
        rows = response.data['data']
        self.assertEqual([u['id'] for u in rows], [other.id, self.admin.id])
        self.assertEqual(rows[1]['createdAt'], iso(self.admin.date_joined))
        with self.assertRaises(FieldDoesNotExist):
            User._meta.get_field('created_at')

    def test_non_admin_cannot_manage_admins(self):
        response = client_for(self.doc_user1).get(reverse('admins'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # dashboard
    # ------------------------------------------------------------------
    def test_dashboard_counters_per_role(self):
        admin_stats = client_for(self.admin).get(reverse('dashboard-stats')).data['data']
        self.assertEqual(admin_stats['totalPatients'], 2)
        self.assertEqual(admin_stats['totalDoctors'], 2)
        self.assertEqual(admin_stats['pendingAppointments'], 1)

        customer_stats = client_for(self.customer2).get(reverse('dashboard-stats')).data['data']
        self.assertNotIn('totalPatients', customer_stats)
        self.assertEqual(customer_stats['pendingAppointments'], 0)

        doctor_stats = client_for(self.doc_user1).get(reverse('dashboard-stats')).data['data']
        self.assertEqual(doctor_stats['upcomingAppointments'], 1)
        self.assertEqual(len(doctor_stats['recentAppointments']), 1)

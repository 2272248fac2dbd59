import datetime

import jwt
from django.conf import settings

from .base import APITestCase


class RegistrationTests(APITestCase):

    def test_register_patient_returns_account_and_token(self):
        user, token = self.register('patient', email='Asha@Example.com ', name='Asha')

        self.assertEqual(user['email'], 'asha@example.com')
        self.assertEqual(user['role'], 'patient')
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=['HS256'])
        self.assertEqual(payload['id'], user['id'])
        self.assertEqual(payload['name'], 'Asha')
        self.assertEqual(payload['email'], 'asha@example.com')
        self.assertEqual(payload['role'], 'patient')

    def test_token_expires_after_configured_hours(self):
        _, token = self.register('patient')
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=['HS256'])
        self.assertEqual(payload['exp'] - payload['iat'], settings.JWT_EXPIRY_HOURS * 3600)

    def test_password_is_not_stored_in_plain_text(self):
        user, _ = self.register('patient', email='p@example.com')
        stored = self.db.patients.find_one({"email": 'p@example.com'})
        self.assertNotEqual(stored['password'], 'secret123')

    def test_duplicate_email_same_role_conflicts(self):
        self.register('patient', email='dup@example.com')
        response = self.client.post('/api/auth/register', {
            "email": "dup@example.com", "password": "x", "name": "Again", "role": "patient"
        }, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['code'], 'DUPLICATE_ACCOUNT')

    def test_same_email_different_role_is_allowed(self):
        self.register('patient', email='shared@example.com')
        user, _ = self.register('hospital', email='shared@example.com', name='Shared Hospital')
        self.assertEqual(user['role'], 'hospital')

    def test_missing_fields_rejected(self):
        response = self.client.post('/api/auth/register', {"email": "a@b.com", "role": "patient"}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_hospital_requires_city(self):
        response = self.client.post('/api/auth/register', {
            "email": "h@example.com", "password": "x", "name": "H", "role": "hospital"
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_admin_registration_is_restricted(self):
        response = self.client.post('/api/auth/register', {
            "email": "root@example.com", "password": "x", "name": "Root", "role": "admin"
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_unknown_role_rejected(self):
        response = self.client.post('/api/auth/register', {
            "email": "x@example.com", "password": "x", "name": "X", "role": "donor"
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_hospital_registration_creates_geolocated_profile(self):
        user, _ = self.register('hospital', name='Apollo', city='Chennai', phone='9876543210')
        hospital = self.db.hospitals.find_one({"userId": user['id']})

        self.assertEqual(hospital['name'], 'Apollo')
        self.assertEqual(hospital['location'], {"type": "Point", "coordinates": [80.2707, 13.0827]})
        self.assertEqual(hospital['bloodInventory'], {})
        self.assertEqual(hospital['beds'], [])
        self.assertEqual(hospital['staff'], [])

    def test_unknown_city_leaves_location_empty(self):
        user, _ = self.register('hospital', name='Rural Clinic', city='Atlantis')
        hospital = self.db.hospitals.find_one({"userId": user['id']})
        self.assertIsNone(hospital['location'])


class LoginTests(APITestCase):

    def test_login_success(self):
        self.register('patient', email='login@example.com')
        response = self.client.post('/api/auth/login', {
            "email": "login@example.com", "password": "secret123", "role": "patient", "fcmToken": "device-1"
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertIn('token', response.json())
        self.assertNotIn('password', response.json()['user'])
        self.assertEqual(self.db.patients.find_one({"email": "login@example.com"})['fcmToken'], 'device-1')

    def test_wrong_password(self):
        self.register('patient', email='login@example.com')
        response = self.client.post('/api/auth/login', {
            "email": "login@example.com", "password": "nope", "role": "patient"
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 'INVALID_CREDENTIALS')

    def test_login_checks_role(self):
        self.register('patient', email='login@example.com')
        response = self.client.post('/api/auth/login', {
            "email": "login@example.com", "password": "secret123", "role": "hospital"
        }, format='json')
        self.assertEqual(response.status_code, 401)

    def test_body_must_be_an_object(self):
        for body in ([], "login", 42):
            response = self.client.post('/api/auth/login', body, format='json')
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {
                "error": "Request body must be a JSON object.", "code": "INVALID_INPUT"
            })

        response = self.client.post('/api/auth/register', [{"email": "a@b.com"}], format='json')
        self.assertEqual(response.status_code, 400)


class TokenGateTests(APITestCase):

    def test_missing_token(self):
        response = self.client.get('/api/hospitals')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 'AUTH_REQUIRED')

    def test_bad_signature(self):
        user, _ = self.register('patient')
        forged = jwt.encode({"id": user['id'], "role": "patient"}, 'not-the-secret', algorithm='HS256')
        response = self.client.get('/api/hospitals', **self.auth(forged))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 'INVALID_TOKEN')

    def test_expired_token(self):
        user, _ = self.register('patient')
        past = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(hours=25)
        expired = jwt.encode(
            {"id": user['id'], "role": "patient", "iat": past, "exp": past + datetime.timedelta(hours=24)},
            settings.JWT_SECRET, algorithm='HS256'
        )
        response = self.client.get('/api/hospitals', **self.auth(expired))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 'TOKEN_EXPIRED')

    def test_deleted_account_is_rejected(self):
        user, token = self.register('patient', email='gone@example.com')
        self.db.patients.delete_many({"email": "gone@example.com"})
        response = self.client.get('/api/hospitals', **self.auth(token))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 'USER_NOT_FOUND')

from types import SimpleNamespace
from unittest import mock

from django.test import SimpleTestCase, override_settings
from twilio.base.exceptions import TwilioException

from blooddoc import notifications

from .base import APITestCase


@override_settings(TWILIO_PHONE_NUMBER_PREFIX='+91')
class NormalizePhoneTests(SimpleTestCase):

    def test_adds_prefix(self):
        self.assertEqual(notifications.normalize_phone('98765 43210'), '+919876543210')

    def test_keeps_existing_prefix(self):
        self.assertEqual(notifications.normalize_phone('+919876543210'), '+919876543210')

    def test_keeps_other_country_code(self):
        self.assertEqual(notifications.normalize_phone('+14155550100'), '+14155550100')


class SendPushTests(SimpleTestCase):

    def test_noop_without_firebase_app(self):
        with mock.patch.object(notifications.firebase_admin, '_apps', {}):
            self.assertEqual(notifications.send_push(['tok'], 'title', 'body'), 0)

    def test_noop_without_tokens(self):
        self.assertEqual(notifications.send_push([None, ''], 'title', 'body'), 0)


@override_settings(TWILIO_MESSAGING_SERVICE_SID='MG123', TWILIO_PHONE_NUMBER_PREFIX='+91')
class SendBloodRequestSMSTests(APITestCase):

    def setUp(self):
        super().setUp()
        _, self.token = self.register('hospital', name='Sender')
        self.payload = {
            "targetHospitalPhone": "9876543210",
            "patientBloodType": "B+",
            "patientName": "Ravi",
            "message": "Need 2 units of B+ urgently",
        }

    def send(self, payload):
        return self.client.post('/api/sms/send-blood-request', payload, format='json', **self.auth(self.token))

    def test_sends_through_messaging_service(self):
        twilio = mock.Mock()
        twilio.messages.create.return_value = SimpleNamespace(sid='SM42')
        with mock.patch.object(notifications, 'get_twilio_client', return_value=twilio):
            response = self.send(self.payload)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['twilioSid'], 'SM42')
        twilio.messages.create.assert_called_once_with(
            body="Need 2 units of B+ urgently", messaging_service_sid='MG123', to='+919876543210'
        )

    def test_missing_fields(self):
        del self.payload['patientName']
        response = self.send(self.payload)
        self.assertEqual(response.status_code, 400)

    def test_provider_failure(self):
        twilio = mock.Mock()
        twilio.messages.create.side_effect = TwilioException("Unverified number")
        with mock.patch.object(notifications, 'get_twilio_client', return_value=twilio):
            response = self.send(self.payload)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['code'], 'SMS_DELIVERY_FAILED')
        self.assertEqual(response.json()['details'], 'Unverified number')

    def test_requires_token(self):
        response = self.client.post('/api/sms/send-blood-request', self.payload, format='json')
        self.assertEqual(response.status_code, 401)

"""
Outbound notifications: Firebase push to hospital devices and Twilio SMS.

Push is best effort and never fails the request that triggered it. SMS is an
explicit user action, so provider failures are surfaced to the caller.
"""
import json
import logging
import os

import firebase_admin
from django.conf import settings
from firebase_admin import credentials, exceptions as firebase_exceptions, messaging
from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from .exceptions import SMSDeliveryError

logger = logging.getLogger(__name__)

_twilio_client = None


def initialize_firebase():
    if firebase_admin._apps:
        return

    firebase_creds = settings.FIREBASE_CREDENTIALS
    if not firebase_creds:
        logger.warning("FIREBASE_CREDENTIALS not set. Push notifications will not send.")
        return

    try:
        # Either inline JSON (hosted environments) or a path to the key file.
        if firebase_creds.lstrip().startswith('{'):
            cred = credentials.Certificate(json.loads(firebase_creds))
        elif os.path.exists(firebase_creds):
            cred = credentials.Certificate(firebase_creds)
        else:
            logger.warning("Firebase credentials file %s not found. Push notifications will not send.", firebase_creds)
            return
        firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin initialized")
    except (ValueError, OSError) as e:
        logger.error("Failed to initialize Firebase: %s", e)


def send_push(tokens, title, body, data=None):
    tokens = [t for t in tokens if t]
    if not tokens or not firebase_admin._apps:
        return 0
    try:
        message = messaging.MulticastMessage(
            notification=messaging.Notification(title=title, body=body),
            data={k: str(v) for k, v in (data or {}).items()},
            tokens=tokens,
        )
        response = messaging.send_each_for_multicast(message)
        logger.info("Push '%s': %s/%s sent", title, response.success_count, len(tokens))
        return response.success_count
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        logger.warning("Push Error: %s", e)
        return 0


def normalize_phone(phone, prefix=None):
    """Prefix the configured country code unless the number already carries one."""
    prefix = prefix if prefix is not None else settings.TWILIO_PHONE_NUMBER_PREFIX
    phone = ''.join(str(phone).split())
    if phone.startswith(prefix) or phone.startswith('+'):
        return phone
    return f"{prefix}{phone}"


def get_twilio_client():
    global _twilio_client
    if _twilio_client is None:
        _twilio_client = TwilioClient(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    return _twilio_client


def send_sms(to_phone, body):
    """Send one SMS through the Twilio messaging service and return its SID."""
    to = normalize_phone(to_phone)
    logger.info("Sending SMS to %s", to)
    try:
        client = get_twilio_client()
        result = client.messages.create(
            body=body,
            messaging_service_sid=settings.TWILIO_MESSAGING_SERVICE_SID,
            to=to,
        )
    except TwilioException as e:
        logger.error("Error sending SMS via Twilio: %s", e)
        raise SMSDeliveryError("Failed to send SMS via Twilio.", details=str(e))
    logger.info("SMS sent via Twilio. SID: %s", result.sid)
    return result.sid

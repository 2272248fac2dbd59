"""
Patient SOS requests fanned out to nearby hospitals.

Each notified hospital gets its own response slot, stored in
`hospitalResponses` keyed by the hospital user id:

    pending --accept--> accepted   (that hospital's stock drops by a fixed amount)
    pending --deny----> denied

Slots are independent; the request's own status is never changed by a response.
"""
import logging

from django.conf import settings

from ..auth_utils import ensure_authorized
from ..constants import (ROLE_HOSPITAL, SLOT_ACCEPTED, SLOT_DENIED, SLOT_PENDING, SOS_ACTIVE,
                         URGENCY_LEVELS)
from ..exceptions import AlreadyProcessed, Forbidden, NotFound, ValidationError
from ..geo import GeoPoint
from ..notifications import send_push
from ..utils import now_iso, serialize_doc, to_object_id, validate_blood_type

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (SLOT_ACCEPTED, SLOT_DENIED)


def serialize_sos(doc):
    sos = serialize_doc(doc)
    if sos is None:
        return None
    sos['hospitalResponses'] = list((doc.get('hospitalResponses') or {}).values())
    return sos


class SOSService:

    def __init__(self, db, hospitals, inventory, accounts):
        self.db = db
        self.hospitals = hospitals
        self.inventory = inventory
        self.accounts = accounts

    @property
    def sos_requests(self):
        return self.db.sos_requests

    def create(self, account, data):
        if not data.get('bloodType') or not data.get('urgency') or data.get('lat') in (None, '') \
                or data.get('lng') in (None, ''):
            raise ValidationError("Blood type, urgency, and location (lat/lng) are required for SOS.")
        blood_type = validate_blood_type(data['bloodType'])
        if data['urgency'] not in URGENCY_LEVELS:
            raise ValidationError(f"Invalid urgency. Must be one of {', '.join(URGENCY_LEVELS)}.")
        origin = GeoPoint.parse(data['lat'], data['lng'])

        nearby = self.hospitals.nearby(origin)
        responses = {}
        for hospital in nearby:
            owner = hospital.get('userId')
            # Slots belong to hospital accounts; admin-created profiles have no responder.
            if hospital.get('ownerRole') != ROLE_HOSPITAL:
                continue
            if owner and owner not in responses:
                responses[owner] = {
                    "hospitalId": owner,
                    "status": SLOT_PENDING,
                    "responseMessage": None,
                    "respondedAt": None,
                }

        now = now_iso()
        doc = {
            "patientId": account['id'],
            "bloodType": blood_type,
            "urgency": data['urgency'],
            "message": data.get('message') or None,
            "location": origin.to_geojson(),
            "status": SOS_ACTIVE,
            "hospitalResponses": responses,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.sos_requests.insert_one(doc)
        doc['_id'] = result.inserted_id
        logger.info("SOS %s for %s (%s) notified %s hospitals",
                    result.inserted_id, blood_type, data['urgency'], len(responses))

        if responses:
            send_push(
                self.accounts.fcm_tokens(ROLE_HOSPITAL, list(responses)),
                "Emergency Blood Needed!",
                f"{data['urgency'].title()}: {blood_type} blood needed nearby.",
                {"type": "SOS", "requestId": str(result.inserted_id)},
            )
        return doc

    def list_incoming(self, account, hospital_id):
        ensure_authorized(account, hospital_id, "Forbidden: You can only view SOS requests for your hospital.")
        return list(self.sos_requests.find(
            {f"hospitalResponses.{hospital_id}.status": SLOT_PENDING}
        ).sort("createdAt", -1))

    def list_own(self, account, patient_id):
        ensure_authorized(account, patient_id, "Forbidden: You can only view your own SOS requests.")
        return list(self.sos_requests.find({"patientId": patient_id}).sort("createdAt", -1))

    def respond(self, account, sos_id, data):
        new_status = data.get('status')
        if not new_status:
            raise ValidationError("SOS ID and status are required.")
        if new_status not in RESPONSE_STATUSES:
            raise ValidationError("Invalid status. Must be 'accepted' or 'denied'.")

        sos = self.sos_requests.find_one({"_id": to_object_id(sos_id, 'SOS ID')})
        if not sos:
            raise NotFound("SOS request not found.")

        hospital_id = account['id']
        slot = (sos.get('hospitalResponses') or {}).get(hospital_id)
        if slot is None:
            raise Forbidden("Forbidden: You are not authorized to respond to this SOS request.")
        if slot['status'] != SLOT_PENDING:
            raise AlreadyProcessed("Cannot respond to an already processed SOS for your hospital.")

        units = settings.SOS_UNITS_PER_ACCEPTANCE
        if new_status == SLOT_ACCEPTED:
            self.hospitals.get_by_owner(hospital_id)
            # Fails with InsufficientInventory and leaves the slot pending.
            self.inventory.decrement(
                hospital_id, sos['bloodType'], units,
                "Insufficient blood inventory to fulfill SOS request."
            )

        now = now_iso()
        path = f"hospitalResponses.{hospital_id}"
        result = self.sos_requests.update_one(
            {"_id": sos['_id'], f"{path}.status": SLOT_PENDING},
            {"$set": {
                f"{path}.status": new_status,
                f"{path}.responseMessage": data.get('responseMessage') or None,
                f"{path}.respondedAt": now,
                "updatedAt": now,
            }}
        )
        if result.modified_count == 0:
            if new_status == SLOT_ACCEPTED:
                self.inventory.refund(hospital_id, sos['bloodType'], units)
            raise AlreadyProcessed("Cannot respond to an already processed SOS for your hospital.")

        logger.info("SOS %s: hospital %s %s", sos['_id'], hospital_id, new_status)
        return self.sos_requests.find_one({"_id": sos['_id']})

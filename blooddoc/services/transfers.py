"""
Hospital-to-hospital blood transfer requests.

pending --approve--> fulfilled   (target inventory decremented by unitsRequested)
pending --deny-----> denied
Both end states are terminal.
"""
import logging

from ..auth_utils import ensure_authorized
from ..constants import (REQUEST_APPROVED, REQUEST_DENIED, REQUEST_FULFILLED, REQUEST_PENDING,
                         ROLE_HOSPITAL)
from ..exceptions import AlreadyProcessed, InsufficientInventory, NotFound, ValidationError
from ..notifications import send_push
from ..utils import now_iso, parse_units, serialize_doc, to_object_id, validate_blood_type
from .inventory import units_of

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (REQUEST_APPROVED, REQUEST_DENIED)


class BloodTransferService:

    def __init__(self, db, hospitals, inventory, accounts):
        self.db = db
        self.hospitals = hospitals
        self.inventory = inventory
        self.accounts = accounts

    @property
    def requests(self):
        return self.db.bloodRequests

    def create(self, account, data):
        target_id = data.get('targetHospitalId')
        if not target_id or not data.get('bloodType') or 'unitsRequested' not in data:
            raise ValidationError("Target Hospital ID, blood type, and valid units requested are required.")
        blood_type = validate_blood_type(data['bloodType'])
        units = parse_units(data['unitsRequested'], allow_zero=False, label='unitsRequested')
        if target_id == account['id']:
            raise ValidationError("Cannot request blood from your own hospital.")

        target = self.hospitals.get_by_owner(target_id, required=False)
        if not target:
            raise NotFound("Target hospital not found.")

        now = now_iso()
        doc = {
            "requestingHospitalId": account['id'],
            "targetHospitalId": target['userId'],
            "bloodType": blood_type,
            "unitsRequested": units,
            "status": REQUEST_PENDING,
            "responseMessage": None,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.requests.insert_one(doc)
        doc['_id'] = result.inserted_id
        logger.info("Blood request %s: %s -> %s, %s x %s",
                    result.inserted_id, account['id'], target['userId'], units, blood_type)

        send_push(
            self.accounts.fcm_tokens(ROLE_HOSPITAL, [target['userId']]),
            "New Blood Request",
            f"{account.get('name') or 'A hospital'} requested {units} units of {blood_type}.",
            {"type": "BLOOD_REQUEST", "requestId": str(result.inserted_id)},
        )
        return doc

    def list_outgoing(self, account, hospital_id):
        ensure_authorized(account, hospital_id, "Forbidden: You can only view your own outgoing blood requests.")
        return list(self.requests.find({"requestingHospitalId": hospital_id}).sort("createdAt", -1))

    def list_incoming(self, account, hospital_id):
        ensure_authorized(account, hospital_id, "Forbidden: You can only view your own incoming blood requests.")
        return list(self.requests.find({"targetHospitalId": hospital_id}).sort("createdAt", -1))

    def respond(self, account, request_id, data):
        new_status = data.get('status')
        if not new_status:
            raise ValidationError("Request ID and status are required.")
        if new_status not in RESPONSE_STATUSES:
            raise ValidationError("Invalid status. Must be 'approved' or 'denied'.")

        req = self.requests.find_one({"_id": to_object_id(request_id, 'Request ID')})
        if not req:
            raise NotFound("Blood request not found.")
        ensure_authorized(
            account, req['targetHospitalId'],
            "Forbidden: You can only respond to requests sent to your hospital."
        )
        if req['status'] != REQUEST_PENDING:
            raise AlreadyProcessed()

        update = {
            "status": REQUEST_DENIED,
            "responseMessage": data.get('responseMessage') or None,
            "updatedAt": now_iso(),
        }

        if new_status == REQUEST_APPROVED:
            target = self.hospitals.get_by_owner(req['targetHospitalId'], required=False)
            if not target:
                raise NotFound("Responding hospital profile not found.")
            if req['bloodType'] not in (target.get('bloodInventory') or {}):
                raise InsufficientInventory("Blood type not found in hospital inventory.")
            if units_of(target, req['bloodType']) < req['unitsRequested']:
                raise InsufficientInventory("Insufficient blood units in inventory to fulfill request.")

            self.inventory.decrement(req['targetHospitalId'], req['bloodType'], req['unitsRequested'])
            # Approval and fulfilment happen together; "approved" is never stored.
            update['status'] = REQUEST_FULFILLED

        result = self.requests.update_one(
            {"_id": req['_id'], "status": REQUEST_PENDING},
            {"$set": update}
        )
        if result.modified_count == 0:
            if update['status'] == REQUEST_FULFILLED:
                self.inventory.refund(req['targetHospitalId'], req['bloodType'], req['unitsRequested'])
            raise AlreadyProcessed()

        updated = self.requests.find_one({"_id": req['_id']})
        logger.info("Blood request %s -> %s", req['_id'], updated['status'])

        send_push(
            self.accounts.fcm_tokens(ROLE_HOSPITAL, [req['requestingHospitalId']]),
            "Blood Request Update",
            f"Your request for {req['unitsRequested']} units of {req['bloodType']} was {updated['status']}.",
            {"type": "BLOOD_REQUEST_RESPONSE", "requestId": str(req['_id'])},
        )
        return updated


def serialize_request(doc):
    return serialize_doc(doc)

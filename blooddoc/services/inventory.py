"""
Blood inventory stored inside each hospital profile.

`bloodInventory` is a map keyed by blood type, so an entry for a type is a plain
field path (`bloodInventory.O+`) and at most one entry per type can exist.
Blood types are always validated before they are placed in a field path.
"""
import logging

from bson import ObjectId

from ..auth_utils import ensure_authorized
from ..constants import BLOOD_TYPES, ROLE_HOSPITAL
from ..exceptions import InsufficientInventory, NotFound, ValidationError
from ..utils import now_iso, parse_expiry, parse_units, to_object_id, validate_blood_type

logger = logging.getLogger(__name__)


def inventory_list(hospital):
    """Render the keyed inventory as a list in canonical blood-type order."""
    entries = (hospital or {}).get('bloodInventory') or {}
    return [dict(entries[bt]) for bt in BLOOD_TYPES if bt in entries]


def units_of(hospital, blood_type):
    entry = ((hospital or {}).get('bloodInventory') or {}).get(blood_type)
    return entry['units'] if entry else 0


class InventoryService:

    def __init__(self, db):
        self.db = db

    @property
    def hospitals(self):
        return self.db.hospitals

    def _load_owned(self, account, hospital_id, action):
        hospital = self.hospitals.find_one({"_id": to_object_id(hospital_id, 'Hospital ID')})
        if not hospital:
            raise NotFound("Hospital not found.")
        ensure_authorized(
            account, hospital.get('userId'),
            f"Forbidden: You can only {action} your own hospital's blood inventory."
        )
        return hospital

    def _find_entry(self, hospital, entry_id):
        for blood_type, entry in (hospital.get('bloodInventory') or {}).items():
            if entry.get('id') == entry_id:
                return blood_type, entry
        raise NotFound("Blood inventory entry not found.")

    def upsert_entry(self, account, hospital_id, data):
        """Set the units for a blood type, creating the entry on first use."""
        if not data.get('bloodType') or 'units' not in data:
            raise ValidationError("Blood type and units are required.")
        blood_type = validate_blood_type(data['bloodType'])
        units = parse_units(data['units'])
        expiry = parse_expiry(data.get('expiryDate'))

        hospital = self._load_owned(account, hospital_id, 'update')
        now = now_iso()
        path = f"bloodInventory.{blood_type}"
        existing = (hospital.get('bloodInventory') or {}).get(blood_type)

        if existing:
            update = {f"{path}.units": units, f"{path}.lastUpdated": now, "updatedAt": now}
            if expiry is not None:
                update[f"{path}.expiryDate"] = expiry
        else:
            update = {
                path: {
                    "id": str(ObjectId()),
                    "bloodType": blood_type,
                    "units": units,
                    "expiryDate": expiry,
                    "lastUpdated": now,
                },
                "updatedAt": now,
            }

        self.hospitals.update_one({"_id": hospital['_id']}, {"$set": update})
        return inventory_list(self.hospitals.find_one({"_id": hospital['_id']}))

    def update_entry(self, account, hospital_id, entry_id, data):
        if 'units' not in data and 'expiryDate' not in data:
            raise ValidationError("At least units or expiryDate must be provided for update.")
        units = parse_units(data['units']) if 'units' in data else None
        expiry = parse_expiry(data.get('expiryDate'))

        hospital = self._load_owned(account, hospital_id, 'update')
        blood_type, _ = self._find_entry(hospital, entry_id)

        now = now_iso()
        path = f"bloodInventory.{blood_type}"
        update = {f"{path}.lastUpdated": now, "updatedAt": now}
        if units is not None:
            update[f"{path}.units"] = units
        if 'expiryDate' in data:
            update[f"{path}.expiryDate"] = expiry

        self.hospitals.update_one({"_id": hospital['_id']}, {"$set": update})
        return inventory_list(self.hospitals.find_one({"_id": hospital['_id']}))

    def delete_entry(self, account, hospital_id, entry_id):
        hospital = self._load_owned(account, hospital_id, 'delete')
        blood_type, _ = self._find_entry(hospital, entry_id)
        self.hospitals.update_one(
            {"_id": hospital['_id']},
            {"$unset": {f"bloodInventory.{blood_type}": ""}, "$set": {"updatedAt": now_iso()}}
        )

    def decrement(self, owner_id, blood_type, units, message=None):
        """
        Take `units` of a blood type from the hospital owned by `owner_id`.

        A single conditional update: it only matches while the entry holds at
        least `units`, so stock never goes negative.
        """
        validate_blood_type(blood_type)
        path = f"bloodInventory.{blood_type}"
        now = now_iso()
        result = self.hospitals.update_one(
            {"userId": owner_id, "ownerRole": ROLE_HOSPITAL, f"{path}.units": {"$gte": units}},
            {"$inc": {f"{path}.units": -units},
             "$set": {f"{path}.lastUpdated": now, "updatedAt": now}}
        )
        if result.modified_count == 0:
            raise InsufficientInventory(message)
        logger.info("Decremented %s units of %s for hospital user %s", units, blood_type, owner_id)

    def refund(self, owner_id, blood_type, units):
        validate_blood_type(blood_type)
        path = f"bloodInventory.{blood_type}"
        now = now_iso()
        self.hospitals.update_one(
            {"userId": owner_id, "ownerRole": ROLE_HOSPITAL, path: {"$exists": True}},
            {"$inc": {f"{path}.units": units},
             "$set": {f"{path}.lastUpdated": now, "updatedAt": now}}
        )
        logger.warning("Refunded %s units of %s to hospital user %s", units, blood_type, owner_id)

"""
Hospital profiles: creation, lookup, update, deletion and search.
"""
import logging

from django.conf import settings
from pymongo.errors import DuplicateKeyError

from ..auth_utils import ensure_authorized
from ..constants import ROLE_HOSPITAL
from ..exceptions import Conflict, NotFound, ValidationError
from ..geo import GeoPoint, StaticCityGeocoder, within_radius
from ..utils import now_iso, require_fields, serialize_doc, to_object_id, validate_blood_type
from .inventory import inventory_list, units_of

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('name', 'address', 'phone', 'email', 'beds', 'staff')


def serialize_hospital(doc):
    hospital = serialize_doc(doc)
    if hospital is None:
        return None
    hospital['bloodInventory'] = inventory_list(doc)
    return hospital


class HospitalService:

    def __init__(self, db, geocoder=None):
        self.db = db
        self.geocoder = geocoder or StaticCityGeocoder()

    @property
    def hospitals(self):
        return self.db.hospitals

    def _location_for(self, city):
        point = self.geocoder.resolve(city)
        return point.to_geojson() if point else None

    def create_profile(self, owner_id, name, address, phone, email, city, owner_role=ROLE_HOSPITAL):
        """
        Insert a profile owned by `owner_id`.

        A hospital account owns at most one profile. Admins may create any number.
        """
        if owner_role == ROLE_HOSPITAL and self.hospitals.find_one(
                {"userId": owner_id, "ownerRole": ROLE_HOSPITAL}, {"_id": 1}):
            raise Conflict("A hospital profile already exists for this account.")

        now = now_iso()
        doc = {
            "name": name,
            "address": address or None,
            "phone": phone or None,
            "email": email,
            "city": city,
            "location": self._location_for(city),
            "bloodInventory": {},
            "beds": [],
            "staff": [],
            "createdAt": now,
            "updatedAt": now,
            "userId": owner_id,
            "ownerRole": owner_role,
        }
        try:
            result = self.hospitals.insert_one(doc)
        except DuplicateKeyError:
            raise Conflict("A hospital profile already exists for this account.")
        doc['_id'] = result.inserted_id
        logger.info("Created hospital profile %s for user %s", result.inserted_id, owner_id)
        return doc

    def create_for_account(self, account, data):
        require_fields(
            data, 'name', 'address', 'phone', 'email', 'city',
            message='Name, address, phone, email, and city are required for hospital creation.'
        )
        return self.create_profile(
            account['id'], data['name'], data['address'], data['phone'], data['email'], data['city'],
            owner_role=account['role']
        )

    def list_profiles(self):
        return list(self.hospitals.find({}))

    def get_profile(self, hospital_id):
        hospital = self.hospitals.find_one({"_id": to_object_id(hospital_id, 'Hospital ID')})
        if not hospital:
            raise NotFound("Hospital not found.")
        return hospital

    def get_by_owner(self, owner_id, required=True):
        hospital = self.hospitals.find_one({"userId": owner_id, "ownerRole": ROLE_HOSPITAL})
        if not hospital and required:
            raise NotFound("Hospital profile not found for this user.")
        return hospital

    def get_for_account(self, account, owner_id):
        ensure_authorized(account, owner_id, "Forbidden: You can only view your own hospital profile.")
        return self.get_by_owner(owner_id)

    def update_profile(self, account, hospital_id, data):
        hospital = self.get_profile(hospital_id)
        ensure_authorized(account, hospital.get('userId'), "Forbidden: You can only update your own hospital entry.")

        update = {field: data[field] for field in PROFILE_FIELDS if data.get(field) is not None}
        for field in ('beds', 'staff'):
            if field in update and not isinstance(update[field], list):
                raise ValidationError(f"{field} must be a list.")
        if data.get('city'):
            update['city'] = data['city']
            update['location'] = self._location_for(data['city'])
        update['updatedAt'] = now_iso()

        self.hospitals.update_one({"_id": hospital['_id']}, {"$set": update})
        return self.hospitals.find_one({"_id": hospital['_id']})

    def delete_profile(self, account, hospital_id):
        hospital = self.get_profile(hospital_id)
        ensure_authorized(account, hospital.get('userId'), "Forbidden: You can only delete your own hospital entry.")
        self.hospitals.delete_one({"_id": hospital['_id']})
        logger.info("Deleted hospital profile %s", hospital['_id'])

    def nearby(self, origin, radius_km=None):
        """Profiles within the search radius of origin, nearest first."""
        radius_km = settings.SEARCH_RADIUS_KM if radius_km is None else radius_km
        candidates = self.hospitals.find({"location": {"$ne": None}})
        return within_radius(origin, candidates, radius_km)

    def search(self, blood_type=None, lat=None, lng=None, city=None):
        if blood_type:
            validate_blood_type(blood_type)

        origin = None
        if lat not in (None, '') and lng not in (None, ''):
            origin = GeoPoint.parse(lat, lng)
        elif city:
            origin = self.geocoder.resolve(city)
        elif lat not in (None, '') or lng not in (None, ''):
            logger.warning("Only one of lat/lng provided for search; ignoring geo filter.")

        hospitals = self.nearby(origin) if origin else self.list_profiles()
        if blood_type:
            hospitals = [h for h in hospitals if units_of(h, blood_type) >= 1]
        logger.info("Hospital search (bloodType=%s, origin=%s) matched %s", blood_type, origin, len(hospitals))
        return hospitals

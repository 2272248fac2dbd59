import logging

from django.core.management.base import BaseCommand
from pymongo import ASCENDING, DESCENDING, GEOSPHERE

from blooddoc.constants import ACCOUNT_COLLECTIONS, ROLE_HOSPITAL
from blooddoc.db import get_db

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create the MongoDB indexes the API relies on"

    def handle(self, *args, **options):
        db = get_db()

        for collection in ACCOUNT_COLLECTIONS.values():
            db[collection].create_index([("email", ASCENDING)], unique=True)

        # One profile per hospital account; admin-created profiles are not limited.
        db.hospitals.create_index(
            [("userId", ASCENDING)], unique=True, partialFilterExpression={"ownerRole": ROLE_HOSPITAL}
        )
        db.hospitals.create_index([("location", GEOSPHERE)])

        db.bloodRequests.create_index([("requestingHospitalId", ASCENDING), ("createdAt", DESCENDING)])
        db.bloodRequests.create_index([("targetHospitalId", ASCENDING), ("createdAt", DESCENDING)])
        db.sos_requests.create_index([("patientId", ASCENDING), ("createdAt", DESCENDING)])

        self.stdout.write(self.style.SUCCESS("Indexes created"))

"""
Account registration and login for patients, hospital users and admins.
"""
import logging

from bson import ObjectId
from django.contrib.auth.hashers import check_password, make_password
from pymongo.errors import DuplicateKeyError

from ..auth_utils import issue_token
from ..constants import ACCOUNT_COLLECTIONS, ROLE_ADMIN, ROLE_HOSPITAL
from ..exceptions import DuplicateAccount, Forbidden, InvalidCredentials, ValidationError
from ..utils import now_iso, require_fields

logger = logging.getLogger(__name__)


def public_account(doc):
    return {
        "id": str(doc['_id']),
        "email": doc['email'],
        "name": doc['name'],
        "role": doc['role'],
    }


class AccountService:

    def __init__(self, db, hospitals=None):
        self.db = db
        self.hospitals = hospitals

    def _collection(self, role):
        return self.db[ACCOUNT_COLLECTIONS[role]]

    def register(self, data):
        role = data.get('role')
        require_fields(data, 'email', 'password', 'name', 'role',
                       message='All required fields must be provided, including city for hospitals.')
        if role == ROLE_ADMIN:
            raise Forbidden("Admin registration is restricted")
        if role not in ACCOUNT_COLLECTIONS:
            raise ValidationError("Invalid role")
        if role == ROLE_HOSPITAL and not data.get('city'):
            raise ValidationError('All required fields must be provided, including city for hospitals.')

        email = str(data['email']).strip().lower()
        logger.info("Registration attempt for %s (%s)", email, role)

        collection = self._collection(role)
        if collection.find_one({"email": email}):
            raise DuplicateAccount(f"User with this email and role ({role}) already exists")

        doc = {
            "email": email,
            "password": make_password(str(data['password'])),
            "name": data['name'],
            "role": role,
            "createdAt": now_iso(),
        }
        try:
            result = collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateAccount(f"User with this email and role ({role}) already exists")
        doc['_id'] = result.inserted_id
        account = public_account(doc)

        if role == ROLE_HOSPITAL:
            self.hospitals.create_profile(
                account['id'],
                name=data['name'],
                address=data.get('address'),
                phone=data.get('phone'),
                email=email,
                city=data.get('city'),
            )

        return {"user": account, "token": issue_token(account)}

    def login(self, data):
        email = str(data.get('email') or '').strip().lower()
        password = data.get('password')
        role = data.get('role')
        logger.info("Login attempt for %s (%s)", email, role)

        if role not in ACCOUNT_COLLECTIONS or not email or not password:
            raise InvalidCredentials()

        collection = self._collection(role)
        doc = collection.find_one({"email": email})
        if not doc or not check_password(str(password), doc.get('password')):
            raise InvalidCredentials()

        update = {"lastLogin": now_iso()}
        if data.get('fcmToken'):
            update['fcmToken'] = data['fcmToken']
        collection.update_one({"_id": doc['_id']}, {"$set": update})

        account = public_account(doc)
        return {"user": account, "token": issue_token(account)}

    def create_admin(self, email, name, password):
        email = email.strip().lower()
        collection = self._collection(ROLE_ADMIN)
        collection.update_one(
            {"email": email},
            {"$set": {
                "email": email,
                "name": name,
                "role": ROLE_ADMIN,
                "password": make_password(password),
            }, "$setOnInsert": {"createdAt": now_iso()}},
            upsert=True
        )
        return public_account(collection.find_one({"email": email}))

    def fcm_tokens(self, role, account_ids):
        ids = [aid for aid in account_ids if aid]
        if not ids:
            return []
        docs = self._collection(role).find(
            {"_id": {"$in": [ObjectId(aid) for aid in ids if ObjectId.is_valid(aid)]}},
            {"fcmToken": 1}
        )
        return [d['fcmToken'] for d in docs if d.get('fcmToken')]

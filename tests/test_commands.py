from io import StringIO

from django.core.management import call_command
from pymongo.errors import DuplicateKeyError

from .base import APITestCase


class CreateAdminCommandTests(APITestCase):

    def test_created_admin_can_log_in(self):
        out = StringIO()
        call_command('create_admin', email='Root@Example.com', password='pa55word', stdout=out)

        self.assertIn('root@example.com', out.getvalue())
        response = self.client.post(
            '/api/auth/login',
            {"email": "root@example.com", "password": "pa55word", "role": "admin"},
            format='json'
        )
        self.assertEqual(response.status_code, 200)

    def test_rerun_updates_password(self):
        call_command('create_admin', email='root@example.com', password='old', stdout=StringIO())
        call_command('create_admin', email='root@example.com', password='new', stdout=StringIO())

        self.assertEqual(self.db.admins.count_documents({}), 1)
        response = self.client.post(
            '/api/auth/login', {"email": "root@example.com", "password": "new", "role": "admin"}, format='json'
        )
        self.assertEqual(response.status_code, 200)


class SeedHospitalsCommandTests(APITestCase):

    def test_seeds_geolocated_hospitals_with_full_inventory(self):
        call_command('seed_hospitals', count=3, stdout=StringIO())

        self.assertEqual(self.db.hospitalUsers.count_documents({}), 3)
        for hospital in self.db.hospitals.find():
            self.assertIsNotNone(hospital['location'])
            self.assertEqual(len(hospital['bloodInventory']), 8)

    def test_rerun_skips_existing_accounts(self):
        call_command('seed_hospitals', count=2, stdout=StringIO())
        out = StringIO()
        call_command('seed_hospitals', count=2, stdout=out)

        self.assertEqual(self.db.hospitals.count_documents({}), 2)
        self.assertIn('Skipping existing hospital', out.getvalue())


class EnsureIndexesCommandTests(APITestCase):

    def test_creates_unique_account_and_owner_indexes(self):
        call_command('ensure_indexes', stdout=StringIO())

        for collection in ('patients', 'hospitalUsers', 'admins'):
            self.assertTrue(self.db[collection].index_information()['email_1']['unique'])
        owner_index = self.db.hospitals.index_information()['userId_1']
        self.assertTrue(owner_index['unique'])
        self.assertEqual(owner_index['partialFilterExpression'], {"ownerRole": "hospital"})

    def test_duplicate_email_rejected_by_index(self):
        call_command('ensure_indexes', stdout=StringIO())
        self.db.patients.insert_one({"email": "dup@example.com"})
        with self.assertRaises(DuplicateKeyError):
            self.db.patients.insert_one({"email": "dup@example.com"})

    def test_second_hospital_owned_profile_rejected_by_index(self):
        call_command('ensure_indexes', stdout=StringIO())
        self.db.hospitals.insert_one({"userId": "64b000000000000000000001", "ownerRole": "hospital"})
        with self.assertRaises(DuplicateKeyError):
            self.db.hospitals.insert_one({"userId": "64b000000000000000000001", "ownerRole": "hospital"})

import random

from django.core.management.base import BaseCommand

from blooddoc.constants import BLOOD_TYPES, ROLE_HOSPITAL
from blooddoc.exceptions import DuplicateAccount
from blooddoc.services import build_services


class Command(BaseCommand):
    help = "Seed hospital accounts with profiles and random stock across the supported cities"

    def add_arguments(self, parser):
        parser.add_argument('--count', type=int, default=10)
        parser.add_argument('--password', default='hospital123')

    def handle(self, *args, **options):
        services = build_services()
        cities = services.hospitals.geocoder.cities()

        self.stdout.write(f"--- Seeding {options['count']} hospitals across {', '.join(cities)} ---")

        seeded = 0
        for i in range(options['count']):
            city = cities[i % len(cities)]
            try:
                result = services.accounts.register({
                    "email": f"hospital_{city.lower()}_{i + 1}@test.com",
                    "password": options['password'],
                    "name": f"{city} General Hospital {i + 1}",
                    "role": ROLE_HOSPITAL,
                    "address": f"{random.randint(1, 200)} Main Road, {city}",
                    "phone": f"9{random.randint(100000000, 999999999)}",
                    "city": city,
                })
            except DuplicateAccount:
                self.stdout.write(f"Skipping existing hospital #{i + 1} in {city}")
                continue

            account = result['user']
            hospital = services.hospitals.get_by_owner(account['id'])

            stock = []
            for blood_type in BLOOD_TYPES:
                units = random.randint(0, 50)
                services.inventory.upsert_entry(
                    account, str(hospital['_id']), {"bloodType": blood_type, "units": units}
                )
                if units:
                    stock.append(f"{blood_type}:{units}")

            seeded += 1
            self.stdout.write(f"Seeded {account['name']} - Inventory: {', '.join(stock[:3])}...")

        self.stdout.write(self.style.SUCCESS(f"--- Successfully seeded {seeded} hospitals with inventory ---"))

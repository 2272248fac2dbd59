from django.core.management.base import BaseCommand

from blooddoc.services import build_services


class Command(BaseCommand):
    help = "Create or update an admin account"

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--name', default='Super Admin')
        parser.add_argument('--password', required=True)

    def handle(self, *args, **options):
        admin = build_services().accounts.create_admin(options['email'], options['name'], options['password'])
        self.stdout.write(self.style.SUCCESS(f"Admin user created/updated: {admin['email']} ({admin['id']})"))

import logging

from django.core.management.base import BaseCommand

from core.choices import AccountStatus, Role
from core.models import User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create the sample manager account when no manager exists yet."

    def add_arguments(self, parser):
        parser.add_argument("--username", default="Admin")
        parser.add_argument("--password", default="1234")
        parser.add_argument("--email", default="admin@example.com")

    def handle(self, *args, **options):
        existing = User.objects.filter(role=Role.MANAGER).first()
        if existing:
            self.stdout.write(f"Manager account already exists (username: {existing.username}), skipping.")
            return

        manager = User.objects.create_user(
            username=options["username"],
            password=options["password"],
            email=options["email"],
            first_name="Sample",
            last_name="Manager",
            role=Role.MANAGER,
            status=AccountStatus.ACTIVE,
        )
        logger.info(f"Seeded manager account {manager.username}")
        self.stdout.write(self.style.SUCCESS(f"Manager account created: {manager.username}"))

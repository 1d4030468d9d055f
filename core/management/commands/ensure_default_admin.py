# core/management/commands/ensure_default_admin.py
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.models import User


class Command(BaseCommand):
    help = "Ensure the default administrator exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=settings.DEFAULT_ADMIN_USERNAME)
        parser.add_argument("--email", default=settings.DEFAULT_ADMIN_EMAIL)
        parser.add_argument("--password", default=settings.DEFAULT_ADMIN_PASSWORD)
        parser.add_argument("--reset-password", action="store_true",
                            help="Overwrite the password of an existing administrator.")

    def handle(self, *args, **opts):
        username, email, password = opts["username"], opts["email"], opts["password"]
        user = User.objects.filter(username=username).first()
        if user and user.role != User.ROLE_ADMIN:
            raise CommandError(f"user {username} exists with role {user.role}")

        if user is None:
            if not password:
                raise CommandError("no password given (set DEFAULT_ADMIN_PASSWORD or pass --password)")
            if User.objects.filter(email__iexact=email).exists():
                raise CommandError(f"email {email} is already taken")
            User.objects.create_user(
                username=username, email=email, password=password,
                role=User.ROLE_ADMIN, is_staff=True, is_superuser=True,
            )
            self.stdout.write(self.style.SUCCESS(f"created: {username} ({email})"))
            return

        if opts["reset_password"]:
            if not password:
                raise CommandError("--reset-password needs a password")
            user.set_password(password)
            user.is_active = True
            user.save(update_fields=["password", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"password reset: {username}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"ok: {username} already exists"))

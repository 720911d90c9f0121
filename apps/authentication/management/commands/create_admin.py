from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Create (or promote) the storefront admin user."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--password", help="Password for a newly created admin.")

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip().lower()

        user = User.objects.filter(email=email).first()
        if user:
            user.role = "admin"
            user.is_staff = True
            user.save(update_fields=["role", "is_staff"])
            self.stdout.write(self.style.SUCCESS(f"Promoted {email} to admin"))
            return

        password = options.get("password")
        if not password:
            raise CommandError("--password is required when creating a new admin")

        User.objects.create_superuser(email=email, password=password)
        self.stdout.write(self.style.SUCCESS(f"Created admin {email}"))

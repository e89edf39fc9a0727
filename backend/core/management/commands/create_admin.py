"""
Management command to create an ADMIN account or promote an existing user
"""
from django.core.management.base import BaseCommand, CommandError
from backend.core.models import User


class Command(BaseCommand):
    help = "Creates an ADMIN user, or promotes an existing user to the ADMIN role"

    def add_arguments(self, parser):
        parser.add_argument('email', help='Email address of the admin account')
        parser.add_argument(
            '--password',
            help='Password for a newly created account (required when the user does not exist)',
        )
        parser.add_argument(
            '--staff',
            action='store_true',
            help='Also grant access to the Django admin site',
        )

    def handle(self, *args, **options):
        email = User.objects.normalize_email(options['email'])
        password = options.get('password')

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            if not password:
                raise CommandError(f'User {email} does not exist; pass --password to create it.')
            user = User.objects.create_user(email=email, password=password, role=User.ROLE_ADMIN)
            self.stdout.write(self.style.SUCCESS(f'✓ Created admin user: {email}'))
        elif user.role == User.ROLE_ADMIN:
            self.stdout.write(f'- {email} is already an admin')
        else:
            user.role = User.ROLE_ADMIN
            user.save(update_fields=['role', 'updated_at'])
            self.stdout.write(self.style.SUCCESS(f'✓ Promoted {email} to admin'))

        if options['staff'] and not user.is_staff:
            user.is_staff = True
            user.save(update_fields=['is_staff', 'updated_at'])
            self.stdout.write(self.style.SUCCESS(f'✓ Granted admin site access to {email}'))

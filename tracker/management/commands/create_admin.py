from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth.models import User
from django.db import transaction

from tracker.models import Profile


class Command(BaseCommand):
    help = 'Grant the admin role to a user, creating the account if it does not exist'

    def add_arguments(self, parser):
        parser.add_argument(
            'email',
            type=str,
            help='E-mail address of the account to promote'
        )
        parser.add_argument(
            '--password',
            type=str,
            default=None,
            help='Password for a newly created account (required when the account does not exist yet)'
        )
        parser.add_argument(
            '--first-name',
            type=str,
            default='Admin',
            help='First name for a newly created account'
        )
        parser.add_argument(
            '--last-name',
            type=str,
            default='User',
            help='Last name for a newly created account'
        )

    def handle(self, *args, **options):
        email = options['email'].strip()
        password = options['password']

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()
            if user is None:
                if not password:
                    raise CommandError(f'User "{email}" does not exist; pass --password to create it')
                user = User.objects.create_user(
                    username=email.lower(),
                    email=email,
                    password=password,
                    first_name=options['first_name'],
                    last_name=options['last_name'],
                )
                self.stdout.write(self.style.WARNING(f'Created user "{email}"'))
            elif password:
                user.set_password(password)
                user.save(update_fields=['password'])

            Profile.objects.update_or_create(user=user, defaults={'role': 'admin'})

        self.stdout.write(self.style.SUCCESS(f'User "{email}" (id {user.id}) now has the admin role'))

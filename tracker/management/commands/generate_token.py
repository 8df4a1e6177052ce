from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth.models import User
from django.conf import settings

from musical_tracker.api_modules.auth import generate_jwt_token, get_user_role


class Command(BaseCommand):
    help = 'Print a bearer token for a user, for scripting and manual API calls'

    def add_arguments(self, parser):
        parser.add_argument(
            'email',
            type=str,
            help='E-mail address of the user to generate a token for'
        )
        parser.add_argument(
            '--quiet',
            action='store_true',
            help='Print only the token'
        )

    def handle(self, *args, **options):
        email = options['email'].strip()

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise CommandError(f'User "{email}" does not exist')
        if not user.is_active:
            raise CommandError(f'User "{email}" is inactive')

        token = generate_jwt_token(user)
        if options['quiet']:
            self.stdout.write(token)
            return

        self.stdout.write(f"User: {user.get_full_name()} ({user.email})")
        self.stdout.write(f"Role: {get_user_role(user)}")
        self.stdout.write(f"Valid for: {settings.AUTH_TOKEN_LIFETIME_HOURS} hours")
        self.stdout.write("")
        self.stdout.write(self.style.WARNING("Bearer token:"))
        self.stdout.write(self.style.HTTP_INFO(token))

"""Shared fixtures for API tests."""

import datetime

from django.contrib.auth.models import User
from django.test import TestCase

from musical_tracker.api_modules.auth import generate_jwt_token
from tracker.models import Actor, Musical, Performance, Profile, Role, Theater


class ApiTestCase(TestCase):
    """TestCase with helpers for calling the /v2 API as a given user."""

    def create_user(self, email='user@example.com', role='user', password='password123'):
        user = User.objects.create_user(
            username=email.lower(),
            email=email,
            password=password,
            first_name='Test',
            last_name='User',
        )
        if role != 'user':
            Profile.objects.filter(user=user).update(role=role)
        return user

    def create_admin(self, email='admin@example.com'):
        return self.create_user(email=email, role='admin')

    def headers(self, user=None):
        if user is None:
            return {}
        return {'HTTP_AUTHORIZATION': f'Bearer {generate_jwt_token(user)}'}

    def api_get(self, path, params=None, user=None):
        return self.client.get(f'/v2{path}', params or {}, **self.headers(user))

    def api_post(self, path, data=None, user=None):
        return self.client.post(f'/v2{path}', data or {}, content_type='application/json', **self.headers(user))

    def api_put(self, path, data=None, user=None):
        return self.client.put(f'/v2{path}', data or {}, content_type='application/json', **self.headers(user))

    def api_delete(self, path, user=None):
        return self.client.delete(f'/v2{path}', **self.headers(user))

    # ------------------------------------------------------------------
    # Catalogue rows
    # ------------------------------------------------------------------

    def create_musical(self, name='Hamilton', approved=True, **kwargs):
        kwargs.setdefault('composer', 'Lin-Manuel Miranda')
        kwargs.setdefault('lyricist', 'Lin-Manuel Miranda')
        return Musical.objects.create(name=name, approved=approved, **kwargs)

    def create_theater(self, name='Richard Rodgers Theatre', verified=True, **kwargs):
        kwargs.setdefault('city', 'New York')
        kwargs.setdefault('state', 'NY')
        return Theater.objects.create(name=name, verified=verified, **kwargs)

    def create_actor(self, name='Renée Elise Goldsberry', approved=True, **kwargs):
        kwargs.setdefault('email', 'renee@example.com')
        return Actor.objects.create(name=name, approved=approved, **kwargs)

    def create_role(self, musical, name='Angelica Schuyler'):
        return Role.objects.create(name=name, musical=musical)

    def create_performance(self, musical, theater, created_by=None, date=datetime.date(2024, 5, 1)):
        return Performance.objects.create(musical=musical, theater=theater, created_by=created_by, date=date)

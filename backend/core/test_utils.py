"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.inventory.models import Sweet
from decimal import Decimal
import random
import string

User = get_user_model()

DEFAULT_PASSWORD = 'Candyfloss-2024!'


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password=DEFAULT_PASSWORD, role=User.ROLE_USER, is_active=True):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            role=role,
            is_active=is_active,
        )

    @staticmethod
    def create_admin(email=None, password=DEFAULT_PASSWORD):
        """Create a test user with the ADMIN role"""
        if not email:
            email = f'admin_{TestDataFactory.random_string(6).lower()}@test.com'
        return TestDataFactory.create_user(email=email, password=password, role=User.ROLE_ADMIN)

    @staticmethod
    def create_sweet(name=None, category='Chocolate', price=None, quantity=10, is_active=True):
        """Create a test sweet"""
        if not name:
            name = f'Sweet_{TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('2.50')
        return Sweet.objects.create(
            name=name,
            category=category,
            price=price,
            quantity=quantity,
            is_active=is_active,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()

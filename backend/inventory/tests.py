"""
Test suite for Inventory module
Tests: sweet CRUD, filtering, purchase/restock stock mutations, permissions, caching
"""
import os
import threading
from decimal import Decimal
from io import StringIO
from unittest import mock, skipUnless

from django.core.cache import cache
from django.core.management import call_command, CommandError
from django.db import DatabaseError, IntegrityError, connections, transaction
from django.test import TestCase, TransactionTestCase
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Sweet, StockMovement
from backend.inventory.services import (
    purchase_sweet, restock_sweet, InsufficientStock, InvalidQuantity, StockLimitExceeded
)


class SweetModelTests(TestCase):
    """Test Sweet and StockMovement model behaviour"""

    def test_sweet_str(self):
        sweet = TestDataFactory.create_sweet(name='Fudge', quantity=3)
        self.assertEqual(str(sweet), 'Fudge (3)')

    def test_in_stock(self):
        self.assertTrue(TestDataFactory.create_sweet(quantity=1).in_stock)
        self.assertFalse(TestDataFactory.create_sweet(quantity=0).in_stock)

    def test_movement_str(self):
        sweet = TestDataFactory.create_sweet(name='Toffee', quantity=5)
        movement = StockMovement.objects.create(
            sweet=sweet,
            movement_type=StockMovement.MOVEMENT_RESTOCK,
            quantity=2,
            quantity_after=7,
        )
        self.assertEqual(str(movement), 'Restock 2 x Toffee')


class StockServiceTests(TestCase):
    """Test purchase_sweet and restock_sweet directly"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.sweet = TestDataFactory.create_sweet(quantity=10)

    def test_purchase_decrements_by_requested_amount(self):
        sweet = purchase_sweet(self.sweet.id, 4, user=self.user)
        self.assertEqual(sweet.quantity, 6)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 6)

    def test_purchase_entire_stock(self):
        sweet = purchase_sweet(self.sweet.id, 10)
        self.assertEqual(sweet.quantity, 0)

    def test_purchase_more_than_available_is_rejected(self):
        with self.assertRaises(InsufficientStock) as ctx:
            purchase_sweet(self.sweet.id, 11, user=self.user)
        self.assertEqual(ctx.exception.extra['available'], 10)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_purchase_out_of_stock(self):
        empty = TestDataFactory.create_sweet(quantity=0)
        with self.assertRaises(InsufficientStock):
            purchase_sweet(empty.id, 1)

    def test_purchase_rejects_non_positive_amounts(self):
        for amount in (0, -1, True, '3', 1.5):
            with self.assertRaises(InvalidQuantity):
                purchase_sweet(self.sweet.id, amount)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_restock_increments_by_requested_amount(self):
        sweet = restock_sweet(self.sweet.id, 15, user=self.user)
        self.assertEqual(sweet.quantity, 25)

    def test_restock_rejects_non_positive_amounts(self):
        for amount in (0, -5):
            with self.assertRaises(InvalidQuantity):
                restock_sweet(self.sweet.id, amount)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_amounts_above_max_quantity_rejected(self):
        for mutate in (purchase_sweet, restock_sweet):
            with self.assertRaises(InvalidQuantity):
                mutate(self.sweet.id, Sweet.MAX_QUANTITY + 1)
            with self.assertRaises(InvalidQuantity):
                mutate(self.sweet.id, 10 ** 19)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_restock_past_max_quantity_rejected(self):
        full = TestDataFactory.create_sweet(quantity=Sweet.MAX_QUANTITY - 5)
        with self.assertRaises(StockLimitExceeded) as ctx:
            restock_sweet(full.id, 10)
        self.assertEqual(ctx.exception.extra['available'], Sweet.MAX_QUANTITY - 5)
        full.refresh_from_db()
        self.assertEqual(full.quantity, Sweet.MAX_QUANTITY - 5)
        self.assertEqual(restock_sweet(full.id, 5).quantity, Sweet.MAX_QUANTITY)

    def test_database_rejects_negative_quantity(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Sweet.objects.filter(pk=self.sweet.pk).update(quantity=-1)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_mutations_on_inactive_sweet(self):
        retired = TestDataFactory.create_sweet(quantity=5, is_active=False)
        with self.assertRaises(Sweet.DoesNotExist):
            purchase_sweet(retired.id, 1)
        with self.assertRaises(Sweet.DoesNotExist):
            restock_sweet(retired.id, 1)

    def test_movements_are_recorded(self):
        purchase_sweet(self.sweet.id, 3, user=self.user)
        restock_sweet(self.sweet.id, 5, user=self.user)
        purchase_ledger = StockMovement.objects.get(movement_type=StockMovement.MOVEMENT_PURCHASE)
        restock_ledger = StockMovement.objects.get(movement_type=StockMovement.MOVEMENT_RESTOCK)
        self.assertEqual((purchase_ledger.quantity, purchase_ledger.quantity_after), (3, 7))
        self.assertEqual((restock_ledger.quantity, restock_ledger.quantity_after), (5, 12))
        self.assertEqual(purchase_ledger.user, self.user)

    def test_sequence_of_mutations_keeps_arithmetic(self):
        expected = self.sweet.quantity
        for kind, amount in [('restock', 7), ('purchase', 2), ('purchase', 9), ('restock', 1), ('purchase', 7)]:
            if kind == 'purchase':
                purchase_sweet(self.sweet.id, amount)
                expected -= amount
            else:
                restock_sweet(self.sweet.id, amount)
                expected += amount
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, expected)
        self.assertEqual(expected, 0)


(os.getenv('DB_ENGINE') == 'postgres', 'Row locking needs PostgreSQL; set DB_ENGINE=postgres')
class ConcurrentPurchaseTests(TransactionTestCase):
    """Concurrent purchases against a real row lock must never oversell"""

    def _purchase_in_threads(self, sweet_id, buyers):
        start = threading.Barrier(buyers)
        outcomes = []
        lock = threading.Lock()

        def buyer():
            try:
                start.wait(timeout=5)
                try:
                    purchase_sweet(sweet_id, 1)
                    outcome = 'ok'
                except InsufficientStock:
                    outcome = 'insufficient'
                with lock:
                    outcomes.append(outcome)
            finally:
                connections['default'].close()

        threads = [threading.Thread(target=buyer, name=f'buyer-{i}') for i in range(buyers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
        return outcomes

    def test_stock_never_oversold(self):
        sweet = TestDataFactory.create_sweet(quantity=5)
        outcomes = self._purchase_in_threads(sweet.id, buyers=12)

        self.assertEqual(len(outcomes), 12)
        self.assertEqual(outcomes.count('ok'), 5)
        self.assertEqual(outcomes.count('insufficient'), 7)
        sweet.refresh_from_db()
        self.assertEqual(sweet.quantity, 0)
        self.assertEqual(StockMovement.objects.filter(sweet=sweet).count(), 5)


class SweetAPITests(TestCase):
    """Test sweet list/create/detail endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_list_requires_authentication(self):
        response = self.client.get('/api/sweets')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_sweets(self):
        TestDataFactory.create_sweet(name='Barfi')
        TestDataFactory.create_sweet(name='Almond Brittle')
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['Almond Brittle', 'Barfi'])

    def test_list_hides_inactive_sweets(self):
        TestDataFactory.create_sweet(name='Visible')
        TestDataFactory.create_sweet(name='Retired', is_active=False)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets/')
        self.assertEqual([s['name'] for s in response.data], ['Visible'])

    def test_filter_by_name_and_category(self):
        TestDataFactory.create_sweet(name='Milk Chocolate', category='Chocolate')
        TestDataFactory.create_sweet(name='Dark Chocolate', category='Chocolate')
        TestDataFactory.create_sweet(name='Chocolate Fudge', category='Fudge')
        TestDataFactory.create_sweet(name='Lemon Drop', category='Candy')
        self.client.authenticate_user(self.user)

        response = self.client.get('/api/sweets?name=chocolate')
        self.assertEqual(len(response.data), 3)

        response = self.client.get('/api/sweets?name=chocolate&category=fudge')
        self.assertEqual([s['name'] for s in response.data], ['Chocolate Fudge'])

        response = self.client.get('/api/sweets?category=candy')
        self.assertEqual([s['name'] for s in response.data], ['Lemon Drop'])

    def test_search_by_price_range(self):
        TestDataFactory.create_sweet(name='Cheap', price=Decimal('1.00'))
        TestDataFactory.create_sweet(name='Mid', price=Decimal('5.00'))
        TestDataFactory.create_sweet(name='Pricey', price=Decimal('20.00'))
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets/search?min_price=2&max_price=10')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['Mid'])

    def test_search_term_and_stock_filter(self):
        TestDataFactory.create_sweet(name='Rasgulla', category='Milk Based', quantity=0)
        TestDataFactory.create_sweet(name='Peda', category='Milk Based', quantity=4)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets/search?search=milk&in_stock=true')
        self.assertEqual([s['name'] for s in response.data], ['Peda'])
        response = self.client.get('/api/sweets/search?search=milk&in_stock=false')
        self.assertEqual([s['name'] for s in response.data], ['Rasgulla'])

    def test_invalid_filter_value(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets?min_price=lots')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('min_price', response.data)

    def test_admin_creates_sweet(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets', {
            'name': 'Kaju Katli',
            'category': 'Dry Fruit',
            'price': '25.00',
            'quantity': 40,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 40)
        self.assertEqual(Decimal(response.data['price']), Decimal('25.00'))
        self.assertTrue(Sweet.objects.filter(name='Kaju Katli').exists())
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Sweet').exists())

    def test_create_defaults_quantity_to_zero(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets', {
            'name': 'Jalebi', 'category': 'Fried', 'price': '8.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 0)

    def test_create_rejects_quantity_above_max(self):
        self.client.authenticate_user(self.admin)
        for amount in (Sweet.MAX_QUANTITY + 1, 10 ** 19):
            response = self.client.post('/api/sweets', {
                'name': 'Huge Stock', 'category': 'Candy', 'price': '1.00', 'quantity': amount,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('quantity', response.data)
        self.assertFalse(Sweet.objects.filter(name='Huge Stock').exists())

    def test_non_admin_cannot_create_sweet(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/sweets', {
            'name': 'Kaju Katli', 'category': 'Dry Fruit', 'price': '25.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Sweet.objects.exists())

    def test_unauthenticated_cannot_create_sweet(self):
        response = self.client.post('/api/sweets', {
            'name': 'Kaju Katli', 'category': 'Dry Fruit', 'price': '25.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_validation_errors(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets', {'name': 'No Price'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)
        self.assertIn('category', response.data)

        response = self.client.post('/api/sweets', {
            'name': 'Negative', 'category': 'Candy', 'price': '-1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

        response = self.client.post('/api/sweets', {
            'name': 'Negative Stock', 'category': 'Candy', 'price': '1.00', 'quantity': -3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_create_trims_and_rejects_blank_text(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets', {
            'name': '   ', 'category': ' ', 'price': '1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)
        self.assertIn('category', response.data)

        response = self.client.post('/api/sweets', {
            'name': '  Kaju Katli ', 'category': ' Dry Fruit', 'price': '25.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual((response.data['name'], response.data['category']), ('Kaju Katli', 'Dry Fruit'))

    def test_duplicate_name_rejected(self):
        TestDataFactory.create_sweet(name='Ladoo')
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets', {
            'name': 'ladoo', 'category': 'Gram Flour', 'price': '9.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_get_sweet_detail(self):
        sweet = TestDataFactory.create_sweet(name='Peda')
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/sweets/{sweet.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Peda')

    def test_get_unknown_sweet(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/sweets/999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_updates_sweet_but_not_quantity(self):
        sweet = TestDataFactory.create_sweet(name='Barfi', price=Decimal('10.00'), quantity=5)
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/sweets/{sweet.id}', {'price': '12.50', 'quantity': 999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sweet.refresh_from_db()
        self.assertEqual(sweet.price, Decimal('12.50'))
        self.assertEqual(sweet.quantity, 5)
        log = AuditLog.objects.get(action='update')
        self.assertEqual(log.changes['price'], {'old': '10.00', 'new': '12.50'})

    def test_non_admin_cannot_update_sweet(self):
        sweet = TestDataFactory.create_sweet()
        self.client.authenticate_user(self.user)
        response = self.client.patch(f'/api/sweets/{sweet.id}', {'price': '0.10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_delete_is_soft(self):
        sweet = TestDataFactory.create_sweet(name='Old Stock')
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/sweets/{sweet.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        sweet.refresh_from_db()
        self.assertFalse(sweet.is_active)
        response = self.client.get(f'/api/sweets/{sweet.id}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_non_admin_cannot_delete_sweet(self):
        sweet = TestDataFactory.create_sweet()
        self.client.authenticate_user(self.user)
        response = self.client.delete(f'/api/sweets/{sweet.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        sweet.refresh_from_db()
        self.assertTrue(sweet.is_active)


class PurchaseRestockAPITests(TestCase):
    """Test purchase and restock endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.sweet = TestDataFactory.create_sweet(name='Gulab Jamun', quantity=10)
        self.client = AuthenticatedAPIClient()

    def test_purchase_decrements_stock(self):
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sweet']['quantity'], 7)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 7)
        self.assertTrue(AuditLog.objects.filter(action='stock_purchase', user=self.user).exists())

    def test_purchase_defaults_to_one(self):
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 9)

    def test_admin_can_purchase(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_purchase_insufficient_stock(self):
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 11}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertEqual(response.data['available'], 10)
        self.assertIn('error', response.data)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_purchase_invalid_quantity(self):
        self.client.authenticate_user(self.user)
        for amount in (0, -2, 'many'):
            response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': amount}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('quantity', response.data)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_purchase_requires_authentication(self):
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_purchase_unknown_sweet(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/sweets/999999/purchase', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_restocks(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': 15}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sweet']['quantity'], 25)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 25)
        self.assertTrue(AuditLog.objects.filter(action='stock_restock').exists())

    def test_restock_rejects_non_positive(self):
        self.client.authenticate_user(self.admin)
        for amount in (0, -4):
            response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': amount}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_quantity_above_max_rejected(self):
        self.client.authenticate_user(self.admin)
        for action in ('purchase', 'restock'):
            response = self.client.post(f'/api/sweets/{self.sweet.id}/{action}', {'quantity': 10 ** 19}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('quantity', response.data)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_restock_past_max_quantity(self):
        full = TestDataFactory.create_sweet(quantity=Sweet.MAX_QUANTITY - 5)
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{full.id}/restock', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'stock_limit_exceeded')
        self.assertEqual(response.data['maximum'], Sweet.MAX_QUANTITY)
        full.refresh_from_db()
        self.assertEqual(full.quantity, Sweet.MAX_QUANTITY - 5)

    def test_non_admin_cannot_restock(self):
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 10)

    def test_unauthenticated_cannot_restock(self):
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_restock_soft_deleted_sweet(self):
        self.sweet.is_active = False
        self.sweet.save()
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_movement_history_admin_only(self):
        self.client.authenticate_user(self.user)
        self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 2}, format='json')
        response = self.client.get(f'/api/sweets/{self.sweet.id}/movements')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        self.client.post(f'/api/sweets/{self.sweet.id}/restock', {'quantity': 4}, format='json')
        response = self.client.get(f'/api/sweets/{self.sweet.id}/movements')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['movement_type'] for m in response.data], ['restock', 'purchase'])
        self.assertEqual(response.data[1]['user_email'], self.user.email)

        response = self.client.get(f'/api/sweets/{self.sweet.id}/movements?type=purchase')
        self.assertEqual(len(response.data), 1)

    def test_database_error_returns_500(self):
        self.client.authenticate_user(self.user)
        with mock.patch('backend.inventory.views.purchase_sweet', side_effect=DatabaseError('disk I/O error')):
            with self.assertLogs('backend.core.exceptions', level='ERROR'):
                response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Internal server error')


class SweetListCacheTests(TestCase):
    """Test list caching and invalidation"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_second_request_hits_cache(self):
        TestDataFactory.create_sweet(name='Ladoo')
        first = self.client.get('/api/sweets')
        second = self.client.get('/api/sweets')
        self.assertEqual(first['X-Cache'], 'MISS')
        self.assertEqual(second['X-Cache'], 'HIT')
        self.assertEqual(first.data, second.data)

    def test_purchase_invalidates_cached_list(self):
        sweet = TestDataFactory.create_sweet(name='Ladoo', quantity=5)
        self.client.get('/api/sweets')
        self.client.post(f'/api/sweets/{sweet.id}/purchase', {'quantity': 2}, format='json')
        response = self.client.get('/api/sweets')
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertEqual(response.data[0]['quantity'], 3)

    def test_create_invalidates_cached_list(self):
        self.client.get('/api/sweets')
        self.client.post('/api/sweets', {'name': 'Peda', 'category': 'Milk Based', 'price': '6.00'}, format='json')
        response = self.client.get('/api/sweets')
        self.assertEqual([s['name'] for s in response.data], ['Peda'])


class AddSweetsCommandTests(TestCase):
    """Test the add_sweets management command"""

    def test_seeds_catalogue_once(self):
        call_command('add_sweets', '--quantity', '5', stdout=StringIO())
        count = Sweet.objects.count()
        self.assertGreater(count, 0)
        self.assertTrue(all(s.quantity == 5 for s in Sweet.objects.all()))
        call_command('add_sweets', stdout=StringIO())
        self.assertEqual(Sweet.objects.count(), count)

    def test_rejects_negative_quantity(self):
        with self.assertRaises(CommandError):
            call_command('add_sweets', quantity=-5, stdout=StringIO())
        self.assertFalse(Sweet.objects.exists())


class FrontendPageTests(TestCase):
    """Test the HTML page served at the site root"""

    def test_index_served_without_authentication(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTemplateUsed(response, 'inventory/index.html')
        self.assertContains(response, '<title>Sweet Shop</title>', html=False)

    def test_index_drops_expired_session(self):
        response = self.client.get('/')
        self.assertContains(response, "response.status === 401")
        self.assertContains(response, 'Session expired, please log in again.')

"""
Stock mutations for sweets.

Purchase and restock each run in a single transaction: the sweet row is
locked with SELECT ... FOR UPDATE, the requested amount is checked against
the current quantity, the new quantity is written and a StockMovement ledger
row is appended. Isolation between concurrent requests is left to the
database's row lock.
"""
import logging

from django.db import transaction

from backend.core.exceptions import ServiceError
from .models import Sweet, StockMovement

logger = logging.getLogger(__name__)


class InvalidQuantity(ServiceError):
    """Raised when a requested stock amount is not an integer in 1..Sweet.MAX_QUANTITY."""

    code = 'invalid_quantity'
    default_message = f'Quantity must be an integer between 1 and {Sweet.MAX_QUANTITY}.'


class InsufficientStock(ServiceError):
    """
    Raised when a purchase asks for more units than are available.

    The available quantity is included in the error payload.
    """

    code = 'insufficient_stock'
    default_message = 'Insufficient stock.'


class StockLimitExceeded(ServiceError):
    """Raised when a restock would push the quantity past Sweet.MAX_QUANTITY."""

    code = 'stock_limit_exceeded'
    default_message = 'Restock would exceed the maximum stock quantity.'


def _validate_quantity(quantity):
    # bool is an int subclass; True must not count as one unit
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 0 < quantity <= Sweet.MAX_QUANTITY:
        raise InvalidQuantity(requested=quantity if isinstance(quantity, int) else str(quantity))
    return quantity


def _locked_sweet(sweet_id):
    return Sweet.objects.select_for_update().get(pk=sweet_id, is_active=True)


def purchase_sweet(sweet_id, quantity=1, user=None):
    """
    Decrement a sweet's stock by `quantity`.

    Raises InvalidQuantity for amounts outside 1..Sweet.MAX_QUANTITY,
    InsufficientStock when `quantity` exceeds the available stock and
    Sweet.DoesNotExist for unknown or inactive sweets. The quantity is left
    untouched on every failure.
    """
    quantity = _validate_quantity(quantity)

    with transaction.atomic():
        sweet = _locked_sweet(sweet_id)
        if quantity > sweet.quantity:
            logger.warning(f"Purchase rejected for sweet {sweet.id}: requested {quantity}, available {sweet.quantity}")
            raise InsufficientStock(
                f"Insufficient stock for {sweet.name}: requested {quantity}, available {sweet.quantity}.",
                requested=quantity,
                available=sweet.quantity,
            )

        sweet.quantity -= quantity
        sweet.save(update_fields=['quantity', 'updated_at'])
        StockMovement.objects.create(
            sweet=sweet,
            movement_type=StockMovement.MOVEMENT_PURCHASE,
            quantity=quantity,
            quantity_after=sweet.quantity,
            user=user if user is not None and user.is_authenticated else None,
        )

    logger.info(f"Purchased {quantity} x sweet {sweet.id}; {sweet.quantity} left")
    return sweet


def restock_sweet(sweet_id, quantity, user=None):
    """
    Increment a sweet's stock by `quantity`.

    Raises InvalidQuantity for amounts outside 1..Sweet.MAX_QUANTITY,
    StockLimitExceeded when the result would exceed Sweet.MAX_QUANTITY and
    Sweet.DoesNotExist for unknown or inactive sweets.
    """
    quantity = _validate_quantity(quantity)

    with transaction.atomic():
        sweet = _locked_sweet(sweet_id)
        if sweet.quantity + quantity > Sweet.MAX_QUANTITY:
            logger.warning(f"Restock rejected for sweet {sweet.id}: {sweet.quantity} + {quantity} exceeds {Sweet.MAX_QUANTITY}")
            raise StockLimitExceeded(
                requested=quantity,
                available=sweet.quantity,
                maximum=Sweet.MAX_QUANTITY,
            )
        sweet.quantity += quantity
        sweet.save(update_fields=['quantity', 'updated_at'])
        StockMovement.objects.create(
            sweet=sweet,
            movement_type=StockMovement.MOVEMENT_RESTOCK,
            quantity=quantity,
            quantity_after=sweet.quantity,
            user=user if user is not None and user.is_authenticated else None,
        )

    logger.info(f"Restocked {quantity} x sweet {sweet.id}; {sweet.quantity} now in stock")
    return sweet

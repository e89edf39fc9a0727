from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Sweet(models.Model):
    """A sweet on sale, with its available quantity"""
    # Largest value a PositiveIntegerField column holds on every supported backend
    MAX_QUANTITY = 2147483647

    name = models.CharField(max_length=200, unique=True)
    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def in_stock(self):
        return self.quantity > 0

    def __str__(self):
        return f"{self.name} ({self.quantity})"

    class Meta:
        db_table = 'sweets'
        ordering = ['name']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name='sweet_quantity_non_negative'),
            models.CheckConstraint(condition=models.Q(price__gte=0), name='sweet_price_non_negative'),
        ]
        indexes = [
            models.Index(fields=['category', 'name'], name='idx_sweet_category_name'),
        ]


class StockMovement(models.Model):
    """Stock ledger entry written for every purchase and restock"""
    MOVEMENT_PURCHASE = 'purchase'
    MOVEMENT_RESTOCK = 'restock'
    MOVEMENT_TYPE_CHOICES = [
        (MOVEMENT_PURCHASE, 'Purchase'),
        (MOVEMENT_RESTOCK, 'Restock'),
    ]

    sweet = models.ForeignKey(Sweet, on_delete=models.CASCADE, related_name='movements')
    movement_type = models.CharField(max_length=10, choices=MOVEMENT_TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    quantity_after = models.PositiveIntegerField()
    user = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.quantity} x {self.sweet.name}"

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['sweet', '-created_at'], name='idx_movement_sweet_created'),
        ]

from django.contrib import admin
from .models import Sweet, StockMovement


@admin.register(Sweet)
class SweetAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'quantity', 'is_active', 'updated_at']
    list_filter = ['category', 'is_active', 'updated_at']
    search_fields = ['name', 'category', 'description']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        # Deactivate instead
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['sweet', 'movement_type', 'quantity', 'quantity_after', 'user', 'created_at']
    list_filter = ['movement_type', 'created_at']
    search_fields = ['sweet__name', 'user__email']
    ordering = ['-created_at']
    readonly_fields = ['sweet', 'movement_type', 'quantity', 'quantity_after', 'user', 'created_at']

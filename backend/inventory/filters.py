import django_filters
from django.db.models import Q
from .models import Sweet


class SweetFilter(django_filters.FilterSet):
    """Query-string filters for the sweets list and search endpoints"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    name = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    category = django_filters.CharFilter(field_name='category', lookup_expr='icontains')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    in_stock = django_filters.BooleanFilter(method='filter_in_stock', label='In Stock')

    class Meta:
        model = Sweet
        fields = ['search', 'name', 'category', 'min_price', 'max_price', 'in_stock']

    def filter_search(self, queryset, name, value):
        """Match any word against name or category"""
        terms = value.split()
        for term in terms:
            queryset = queryset.filter(Q(name__icontains=term) | Q(category__icontains=term))
        return queryset

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__gt=0)
        return queryset.filter(quantity=0)

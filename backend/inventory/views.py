from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import PermissionDenied
from django.http import Http404
from django.shortcuts import get_object_or_404
from django_filters.utils import translate_validation
import logging
from .models import Sweet, StockMovement
from .filters import SweetFilter
from .serializers import (
    SweetSerializer, SweetCreateSerializer, SweetUpdateSerializer,
    StockChangeSerializer, PurchaseSerializer, StockMovementSerializer
)
from .services import purchase_sweet, restock_sweet
from backend.core.cache_utils import get_cached_sweets_list, cache_sweets_list
from backend.core.permissions import IsAdminRole
from backend.core.utils import create_audit_log

logger = logging.getLogger(__name__)


def _require_admin(request):
    if not IsAdminRole().has_permission(request, None):
        raise PermissionDenied(IsAdminRole.message)


def _filtered_sweets(request):
    """Apply SweetFilter to active sweets; invalid filter values raise a 400"""
    sweet_filter = SweetFilter(request.query_params, queryset=Sweet.objects.filter(is_active=True))
    if not sweet_filter.is_valid():
        raise translate_validation(sweet_filter.errors)
    return sweet_filter.qs


def _sweet_list_response(request):
    filters_dict = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
    cached_data, cache_key = get_cached_sweets_list(filters_dict)
    if cached_data is not None:
        response = Response(cached_data)
        response['X-Cache'] = 'HIT'
        return response

    queryset = _filtered_sweets(request)

    data = [dict(item) for item in SweetSerializer(queryset, many=True).data]
    cache_sweets_list(cache_key, data)
    response = Response(data)
    response['X-Cache'] = 'MISS'
    return response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sweet_list_create(request):
    """List active sweets or create a new sweet (admin only)"""
    if request.method == 'GET':
        return _sweet_list_response(request)

    _require_admin(request)

    serializer = SweetCreateSerializer(data=request.data)
    if serializer.is_valid():
        sweet = serializer.save()
        logger.info(f"Sweet {sweet.id} '{sweet.name}' created by {request.user.email}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Sweet',
            object_id=sweet.id,
            object_name=sweet.name,
            changes={
                'category': sweet.category,
                'price': str(sweet.price),
                'quantity': sweet.quantity,
            }
        )
        return Response(SweetSerializer(sweet).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sweet_search(request):
    """Search active sweets by name, category and price range"""
    return _sweet_list_response(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sweet_detail(request, pk):
    """Retrieve, update or soft-delete a sweet"""
    sweet = get_object_or_404(Sweet, pk=pk, is_active=True)

    if request.method == 'GET':
        return Response(SweetSerializer(sweet).data)

    _require_admin(request)

    if request.method in ('PUT', 'PATCH'):
        before = SweetSerializer(sweet).data
        serializer = SweetUpdateSerializer(sweet, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            sweet = serializer.save()
            after = SweetSerializer(sweet).data
            changes = {
                field: {'old': str(before[field]), 'new': str(after[field])}
                for field in ('name', 'category', 'description', 'price')
                if before[field] != after[field]
            }
            create_audit_log(
                request=request,
                action='update',
                model_name='Sweet',
                object_id=sweet.id,
                object_name=sweet.name,
                changes=changes,
            )
            return Response(after)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE: sweets are deactivated, never removed
    sweet.is_active = False
    sweet.save(update_fields=['is_active', 'updated_at'])
    logger.info(f"Sweet {sweet.id} '{sweet.name}' deactivated by {request.user.email}")
    create_audit_log(
        request=request,
        action='delete',
        model_name='Sweet',
        object_id=sweet.id,
        object_name=sweet.name,
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sweet_purchase(request, pk):
    """Purchase units of a sweet, decrementing its stock"""
    serializer = PurchaseSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data['quantity']
    try:
        sweet = purchase_sweet(pk, quantity, user=request.user)
    except Sweet.DoesNotExist:
        raise Http404('Sweet not found.')

    create_audit_log(
        request=request,
        action='stock_purchase',
        model_name='Sweet',
        object_id=sweet.id,
        object_name=sweet.name,
        changes={'quantity': quantity, 'new_stock_quantity': sweet.quantity},
    )
    return Response({
        'message': f'Purchased {quantity} x {sweet.name}',
        'purchased': quantity,
        'sweet': SweetSerializer(sweet).data,
    })


@api_view(['POST'])
@permission_classes([IsAdminRole])
def sweet_restock(request, pk):
    """Restock a sweet, incrementing its stock (admin only)"""
    serializer = StockChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data['quantity']
    try:
        sweet = restock_sweet(pk, quantity, user=request.user)
    except Sweet.DoesNotExist:
        raise Http404('Sweet not found.')

    create_audit_log(
        request=request,
        action='stock_restock',
        model_name='Sweet',
        object_id=sweet.id,
        object_name=sweet.name,
        changes={'quantity': quantity, 'new_stock_quantity': sweet.quantity},
    )
    return Response({
        'message': f'Restocked {quantity} x {sweet.name}',
        'restocked': quantity,
        'sweet': SweetSerializer(sweet).data,
    })


@api_view(['GET'])
@permission_classes([IsAdminRole])
def sweet_movements(request, pk):
    """Stock movement history for a sweet (admin only)"""
    sweet = get_object_or_404(Sweet, pk=pk)
    movements = StockMovement.objects.filter(sweet=sweet).select_related('sweet', 'user')
    movement_type = request.query_params.get('type')
    if movement_type:
        movements = movements.filter(movement_type=movement_type)
    serializer = StockMovementSerializer(movements, many=True)
    return Response(serializer.data)

# partners/views.py

import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from workshop_system.exceptions import NotFound
from .models import Customer
from .serializers import CustomerSerializer

logger = logging.getLogger(__name__)


def _get_customer(pk):
    try:
        return Customer.active.get(pk=pk)
    except Customer.DoesNotExist:
        raise NotFound('Customer not found')


@api_view(['GET', 'POST'])
def customer_list(request):
    if request.method == 'POST':
        serializer = CustomerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = serializer.save()
        logger.info(f"Customer '{customer.name}' created by {request.user.username}")
        return Response({
            'success': True,
            'message': 'Customer created successfully',
            'data': CustomerSerializer(customer).data,
        }, status=status.HTTP_201_CREATED)

    customers = Customer.active.all()
    search = request.query_params.get('search')
    if search:
        customers = customers.filter(
            Q(name__icontains=search) | Q(phone__icontains=search) |
            Q(email__icontains=search) | Q(company__icontains=search)
        )
    data = CustomerSerializer(customers, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
def customer_detail(request, pk):
    customer = _get_customer(pk)

    if request.method == 'GET':
        return Response({'success': True, 'data': CustomerSerializer(customer).data})

    if request.method == 'PUT':
        serializer = CustomerSerializer(customer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({
            'success': True,
            'message': 'Customer updated successfully',
            'data': serializer.data,
        })

    customer.is_deleted = True
    customer.save(update_fields=['is_deleted', 'updated_at'])
    logger.info(f"Customer '{customer.name}' (#{customer.pk}) deleted by {request.user.username}")
    return Response({'success': True, 'message': 'Customer deleted successfully'})

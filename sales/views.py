# sales/views.py

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from .models import Invoice, SalesReturn
from .serializers import (
    InvoiceSerializer, InvoiceCreateSerializer, SalesReturnSerializer,
    SalesReturnCreateSerializer, SalesReturnUpdateSerializer,
)
from .services import InvoiceService, SalesReturnStateMachine, get_invoice, get_sales_return

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def invoice_list(request):
    if request.method == 'POST':
        serializer = InvoiceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = InvoiceService.create(serializer.validated_data, user=request.user)
        return Response({
            'success': True,
            'message': 'Invoice created successfully',
            'data': InvoiceSerializer(get_invoice(invoice.pk)).data,
        }, status=status.HTTP_201_CREATED)

    invoices = Invoice.objects.select_related('job_card', 'customer')
    invoice_status = request.query_params.get('status')
    if invoice_status and invoice_status != 'all':
        invoices = invoices.filter(status=invoice_status)
    data = InvoiceSerializer(invoices, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def invoice_detail(request, pk):
    return Response({'success': True, 'data': InvoiceSerializer(get_invoice(pk)).data})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def sales_return_list(request):
    if request.method == 'POST':
        serializer = SalesReturnCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        sales_return = SalesReturnStateMachine.create(serializer.validated_data, user=request.user)
        return Response({
            'success': True,
            'message': 'Sales return created successfully',
            'data': SalesReturnSerializer(get_sales_return(sales_return.pk)).data,
        }, status=status.HTTP_201_CREATED)

    returns = SalesReturn.objects.select_related(
        'invoice__customer', 'invoice__job_card__customer', 'job_card__customer', 'created_by',
    ).prefetch_related('items__inventory_item')
    return_status = request.query_params.get('status')
    if return_status and return_status != 'all':
        returns = returns.filter(status=return_status)
    data = SalesReturnSerializer(returns, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def sales_return_detail(request, pk):
    if request.method == 'GET':
        return Response({'success': True, 'data': SalesReturnSerializer(get_sales_return(pk)).data})

    if request.method == 'PUT':
        serializer = SalesReturnUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if not data:
            return Response({'success': False, 'error': 'No fields to update'}, status=status.HTTP_400_BAD_REQUEST)
        sales_return = SalesReturnStateMachine.update_status(
            pk, new_status=data.get('status'), reason=data.get('reason'), user=request.user,
        )
        message = 'Sales return updated successfully'
        if sales_return.status == SalesReturn.STATUS_APPROVED:
            message += ' and stock adjusted'
        return Response({
            'success': True,
            'message': message,
            'data': SalesReturnSerializer(get_sales_return(pk)).data,
        })

    SalesReturnStateMachine.delete(pk, user=request.user)
    return Response({'success': True, 'message': 'Sales return deleted successfully'})

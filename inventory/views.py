# inventory/views.py

import logging
from io import BytesIO

import barcode
from barcode.writer import ImageWriter
from django.db.models import ProtectedError, Q
from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import IsAdminOrStorekeeper
from stock.services import InventoryLedger, ActivityRecorder
from workshop_system.exceptions import Conflict
from .models import InventoryCategory, InventoryItem, STATUS_LOW, STATUS_OK
from .serializers import (
    InventoryCategorySerializer, InventoryItemSerializer, StockInSerializer,
    StockOutSerializer, StockTransactionSerializer, ItemActivitySerializer,
)

logger = logging.getLogger(__name__)


def apply_inventory_filters(items, params):
    category = params.get('category')
    if category and category != 'all':
        items = items.filter(category=category)

    item_status = params.get('status')
    if item_status == STATUS_LOW:
        items = items.low_stock()
    elif item_status == STATUS_OK:
        items = items.in_stock()

    search = params.get('search')
    if search:
        items = items.filter(
            Q(part_name__icontains=search) | Q(part_code__icontains=search) |
            Q(barcode__icontains=search) | Q(supplier__icontains=search)
        )
    return items


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrStorekeeper])
def inventory_list(request):
    if request.method == 'POST':
        serializer = InventoryItemSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        opening_stock = fields.pop('available_stock', 0)
        item = InventoryLedger.create_item(fields, opening_stock=opening_stock, user=request.user)
        return Response({
            'success': True,
            'message': 'Inventory item created successfully',
            'data': InventoryItemSerializer(item, context={'request': request}).data,
        }, status=status.HTTP_201_CREATED)

    items = apply_inventory_filters(InventoryItem.objects.all(), request.query_params)
    data = InventoryItemSerializer(items, many=True, context={'request': request}).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrStorekeeper])
def inventory_detail(request, pk):
    item = InventoryLedger.get_item(pk)

    if request.method == 'GET':
        return Response({'success': True, 'data': InventoryItemSerializer(item, context={'request': request}).data})

    if request.method == 'PUT':
        serializer = InventoryItemSerializer(item, data=request.data, partial=True, context={'request': request})
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            return Response({'success': False, 'error': 'No fields to update'}, status=status.HTTP_400_BAD_REQUEST)
        item = serializer.save()
        logger.info(f"Inventory item '{item.part_name}' (#{item.pk}) updated by {request.user.username}")
        return Response({
            'success': True,
            'message': 'Inventory item updated successfully',
            'data': InventoryItemSerializer(item, context={'request': request}).data,
        })

    try:
        item.delete()
    except ProtectedError:
        raise Conflict('Cannot delete inventory item: it has stock history or is used on job cards.')
    logger.info(f"Inventory item #{pk} deleted by {request.user.username}")
    return Response({'success': True, 'message': 'Inventory item deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAdminOrStorekeeper])
def stock_in(request, pk):
    serializer = StockInSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    change = InventoryLedger.stock_in(
        pk, data['quantity'], user=request.user,
        notes=data.get('notes') or None,
        bill_no=data.get('billNo') or None,
        supplier_name=data.get('supplierName') or None,
        purchase_date=data.get('purchaseDate'),
        unit_price=data.get('unitPrice'),
    )
    change.item.refresh_from_db()
    return Response({
        'success': True,
        'message': f'Stock added successfully. New stock: {change.new_stock}',
        'data': InventoryItemSerializer(change.item, context={'request': request}).data,
    })


@api_view(['POST'])
@permission_classes([IsAdminOrStorekeeper])
def stock_out(request, pk):
    serializer = StockOutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    change = InventoryLedger.stock_out(pk, data['quantity'], user=request.user, notes=data.get('notes') or None)
    return Response({
        'success': True,
        'message': f'Stock deducted successfully. Remaining stock: {change.new_stock}',
        'data': InventoryItemSerializer(change.item, context={'request': request}).data,
    })


@api_view(['GET'])
@permission_classes([IsAdminOrStorekeeper])
def stock_transactions(request, pk):
    item = InventoryLedger.get_item(pk)
    transactions = item.stock_transactions.select_related('created_by')
    data = StockTransactionSerializer(transactions, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET'])
@permission_classes([IsAdminOrStorekeeper])
def item_activity(request, pk):
    item = InventoryLedger.get_item(pk)
    summary = ActivityRecorder.activity_summary(item)
    last_purchase = summary['last_purchase']
    activities = item.activities.select_related('created_by')

    return Response({
        'success': True,
        'data': {
            'item': InventoryItemSerializer(item, context={'request': request}).data,
            'summary': {
                'totalPurchased': summary['total_purchased'],
                'totalSold': summary['total_sold'],
                'totalReturned': summary['total_returned'],
                'availableStock': summary['available_stock'],
                'lastPurchase': ItemActivitySerializer(last_purchase).data if last_purchase else None,
            },
            'activities': ItemActivitySerializer(activities, many=True).data,
        },
    })


@api_view(['GET'])
@permission_classes([IsAdminOrStorekeeper])
def export_item_activity_excel(request, pk):
    item = InventoryLedger.get_item(pk)

    wb = Workbook()
    ws = wb.active
    ws.title = "Item Activity"

    ws.append([f"{item.part_name} ({item.part_code or '-'})"])
    ws['A1'].font = Font(bold=True, size=13)
    ws.append([])

    headers = ['Date', 'Activity', 'Quantity', 'Unit Price', 'Total', 'Reference', 'Supplier', 'Customer', 'Notes']
    ws.append(headers)
    for cell in ws[3]:
        cell.font = Font(bold=True, color="2B3674")
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for activity in item.activities.all():
        reference = ' '.join(part for part in (activity.reference_type, activity.reference_no) if part)
        ws.append([
            activity.activity_date.strftime('%Y-%m-%d'),
            activity.activity_type,
            activity.quantity,
            float(activity.unit_price),
            float(activity.total_price),
            reference,
            activity.supplier_name or '',
            activity.customer_name or '',
            activity.notes or '',
        ])

    summary = ActivityRecorder.activity_summary(item)
    ws.append([])
    ws.append(['Total Purchased', summary['total_purchased']])
    ws.append(['Total Used/Sold', summary['total_sold']])
    ws.append(['Total Returned', summary['total_returned']])
    ws.append(['Available Stock', summary['available_stock']])

    for col in ws.iter_cols(min_row=3):
        column = col[0].column_letter
        max_length = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
        ws.column_dimensions[column].width = max_length + 2

    response = HttpResponse(content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    filename = f"item_activity_{item.part_code or item.pk}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    wb.save(response)
    return response


@api_view(['GET'])
@permission_classes([IsAdminOrStorekeeper])
def item_barcode(request, pk):
    item = InventoryLedger.get_item(pk)

    Code128 = barcode.get_barcode_class('code128')
    code = Code128(item.barcode, writer=ImageWriter())
    buffer = BytesIO()
    code.write(buffer, options={'module_height': 12.0, 'font_size': 8, 'text_distance': 4.0})

    response = HttpResponse(buffer.getvalue(), content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="{item.barcode}.png"'
    return response


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrStorekeeper])
def category_list(request):
    if request.method == 'POST':
        serializer = InventoryCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info(f"Inventory category '{category.name}' created by {request.user.username}")
        return Response({'success': True, 'data': serializer.data}, status=status.HTTP_201_CREATED)

    categories = InventoryCategory.objects.all()
    data = InventoryCategorySerializer(categories, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})

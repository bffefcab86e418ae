# jobcards/views.py

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.http import HttpResponse
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch, mm
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from accounts.permissions import can_see_purchase_prices, is_restricted_technician
from workshop_system.exceptions import NotFound
from . import testing_data
from .models import JobCard, TestingRecord
from .serializers import (
    JobCardSerializer, JobCardDetailSerializer, JobCardWriteSerializer, JobCardMaterialSerializer,
    AddMaterialSerializer, TestingRecordSerializer, TestingRecordWriteSerializer,
)
from .services import MaterialsLedger, JobCardStateMachine, get_job_card

logger = logging.getLogger(__name__)


def apply_job_card_filters(job_cards, params):
    job_status = params.get('status')
    if job_status and job_status != 'all':
        job_cards = job_cards.filter(status=job_status)

    technician = params.get('technician')
    if technician:
        if technician.isdigit():
            job_cards = job_cards.filter(technician_id=int(technician))
        else:
            job_cards = job_cards.filter(
                Q(technician__username=technician) |
                Q(technician__first_name__icontains=technician) |
                Q(technician__last_name__icontains=technician)
            )

    vehicle_type = params.get('vehicleType')
    if vehicle_type and vehicle_type != 'all':
        job_cards = job_cards.filter(vehicle_type=vehicle_type)

    search = params.get('search')
    if search:
        job_cards = job_cards.filter(
            Q(job_no__icontains=search) | Q(customer__name__icontains=search) |
            Q(customer__phone__icontains=search) | Q(vehicle_number__icontains=search) |
            Q(brand__icontains=search) | Q(pump_injector_serial__icontains=search)
        )
    return job_cards


@api_view(['GET', 'POST'])
def job_card_list(request):
    if request.method == 'POST':
        serializer = JobCardWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job_card = JobCardStateMachine.create(serializer.validated_data, user=request.user)
        return Response({
            'success': True,
            'message': 'Job card created successfully',
            'data': JobCardSerializer(get_job_card(job_card.pk), context={'request': request}).data,
        }, status=status.HTTP_201_CREATED)

    job_cards = JobCard.objects.select_related('customer', 'technician')
    job_cards = apply_job_card_filters(job_cards, request.query_params)
    data = JobCardSerializer(job_cards, many=True, context={'request': request}).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
def job_card_detail(request, pk):
    if request.method == 'GET':
        job_card = get_job_card(pk)
        return Response({'success': True, 'data': JobCardDetailSerializer(job_card, context={'request': request}).data})

    if request.method == 'PUT':
        serializer = JobCardWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            return Response({'success': False, 'error': 'No fields to update'}, status=status.HTTP_400_BAD_REQUEST)
        job_card = JobCardStateMachine.update(pk, serializer.validated_data, user=request.user)
        return Response({
            'success': True,
            'message': 'Job card updated successfully',
            'data': JobCardDetailSerializer(job_card, context={'request': request}).data,
        })

    JobCardStateMachine.delete(pk, user=request.user)
    return Response({'success': True, 'message': 'Job card deleted successfully'})


@api_view(['GET', 'POST'])
def job_card_materials(request, pk):
    if request.method == 'POST':
        serializer = AddMaterialSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        material = MaterialsLedger.add_material(
            pk,
            inventory_item_id=data.get('inventoryItemId'),
            material_name=data.get('materialName') or None,
            quantity=data['quantity'],
            unit_price=data.get('unitPrice'),
            user=request.user,
            defer_deduction=data['deferDeduction'],
        )
        return Response({
            'success': True,
            'message': 'Material added successfully',
            'data': JobCardMaterialSerializer(material, context={'request': request}).data,
        }, status=status.HTTP_201_CREATED)

    materials = MaterialsLedger.list_materials(pk)
    data = JobCardMaterialSerializer(materials, many=True, context={'request': request}).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['DELETE'])
def job_card_material_detail(request, pk, material_id):
    MaterialsLedger.remove_material(pk, material_id, user=request.user)
    return Response({'success': True, 'message': 'Material removed successfully'})


class NumberedCanvas(canvas.Canvas):
    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        """add page info to each page (page x of y)"""
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(num_pages)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_page_number(self, page_count):
        self.setFont("Helvetica", 9)
        self.drawRightString(200*mm, 10*mm, f"Page {self._pageNumber} of {page_count}")


@api_view(['GET'])
def export_job_card_pdf(request, pk):
    job_card = get_job_card(pk)
    config = settings.WORKSHOP_CONFIG
    currency = config['CURRENCY_SYMBOL']
    show_costs = can_see_purchase_prices(request.user)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{job_card.job_no}.pdf"'

    doc = SimpleDocTemplate(response, pagesize=A4, rightMargin=30, leftMargin=30, topMargin=30, bottomMargin=30)
    story = []

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name='TitleStyle', fontSize=22, fontName='Helvetica-Bold', alignment=TA_RIGHT, textColor=colors.HexColor("#444444")))
    styles.add(ParagraphStyle(name='CompanyInfo', fontSize=9, fontName='Helvetica', alignment=TA_RIGHT, leading=12))
    styles.add(ParagraphStyle(name='CustomerInfo', fontSize=10, fontName='Helvetica', leading=14))
    styles.add(ParagraphStyle(name='HeaderStyle', fontSize=10, fontName='Helvetica-Bold', alignment=TA_LEFT))
    styles.add(ParagraphStyle(name='TotalHeaderStyle', fontSize=10, fontName='Helvetica-Bold', alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='SignatureStyle', fontSize=10, fontName='Helvetica', alignment=TA_CENTER))
    styles.add(ParagraphStyle(name='BoldText', fontName='Helvetica-Bold'))

    # Header
    company_info = f"<b>{config['COMPANY_NAME']}</b><br/>{config['COMPANY_ADDRESS']}"
    header_table = Table(
        [[Paragraph(company_info, styles['CustomerInfo']), Paragraph("JOB CARD", styles['TitleStyle'])]],
        colWidths=[4*inch, 3.5*inch], style=[('VALIGN', (0, 0), (-1, -1), 'TOP')],
    )
    story.append(header_table)
    story.append(Spacer(1, 0.4*inch))

    # Customer and job details
    customer = job_card.customer
    customer_details = f"""
    <b>CUSTOMER:</b><br/>
    {customer.name if customer else 'Walk-in Customer'}<br/>
    {customer.company if customer and customer.company else ''}<br/>
    {customer.phone if customer and customer.phone else ''}
    """
    job_details = [
        ['Job #:', job_card.job_no],
        ['Received:', job_card.received_date.strftime('%d %b, %Y')],
        ['Delivery:', job_card.expected_delivery_date.strftime('%d %b, %Y') if job_card.expected_delivery_date else '-'],
        [Paragraph('Status:', styles['Normal']), Paragraph(job_card.status, styles['BoldText'])],
    ]
    job_details_table = Table(job_details, colWidths=[0.9*inch, 1.6*inch], style=[('ALIGN', (0, 0), (-1, -1), 'LEFT')])
    customer_table = Table(
        [[Paragraph(customer_details, styles['CustomerInfo']), job_details_table]],
        colWidths=[4*inch, 3*inch], style=[('VALIGN', (0, 0), (-1, -1), 'TOP')],
    )
    story.append(customer_table)
    story.append(Spacer(1, 0.3*inch))

    # Equipment
    technician = job_card.technician.display_name if job_card.technician else '-'
    equipment_data = [
        ['Vehicle', f"{job_card.vehicle_type} {job_card.vehicle_number or ''}".strip(), 'Engine', job_card.engine_model or '-'],
        ['Job', f"{job_card.job_type} {job_card.job_sub_type or ''}".strip(), 'Brand', job_card.brand],
        ['Serial', job_card.pump_injector_serial or '-', 'Quantity', job_card.quantity],
        ['Technician', technician, '', ''],
    ]
    equipment_table = Table(equipment_data, colWidths=[1*inch, 2.6*inch, 1*inch, 2.6*inch])
    equipment_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 1, colors.HexColor("#E0E5F2")),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    story.append(equipment_table)

    if job_card.description:
        story.append(Spacer(1, 0.2*inch))
        story.append(Paragraph("<b>Problem Description:</b>", styles['HeaderStyle']))
        story.append(Paragraph(job_card.description, styles['CustomerInfo']))
    story.append(Spacer(1, 0.3*inch))

    # Materials
    items_data = [['#', 'MATERIAL', 'QTY', 'UNIT PRICE', 'TOTAL']]
    for i, material in enumerate(job_card.materials.order_by('id'), 1):
        items_data.append([
            i,
            Paragraph(material.material_name, styles['Normal']),
            material.quantity,
            f"{material.unit_price:,.2f}",
            f"{material.total_price:,.2f}",
        ])

    items_data.append(['', '', '', Paragraph('Materials', styles['TotalHeaderStyle']), f"{job_card.materials_amount:,.2f}"])
    if job_card.quotation_amount is not None:
        items_data.append(['', '', '', Paragraph('Quotation', styles['TotalHeaderStyle']), f"{job_card.quotation_amount:,.2f}"])
    final_text = f"{currency} {job_card.final_amount:,.2f}" if job_card.final_amount is not None else '-'
    items_data.append(['', '', '', Paragraph('Final Amount', styles['TotalHeaderStyle']), Paragraph(final_text, styles['BoldText'])])
    footer_rows = len(items_data) - job_card.materials_count - 1

    items_table = Table(items_data, colWidths=[0.4*inch, 3.6*inch, 0.7*inch, 1.1*inch, 1.4*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#E0E5F2")),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor("#2B3674")),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -footer_rows - 1), 1, colors.HexColor("#E0E5F2")),
        ('GRID', (3, -footer_rows), (-1, -1), 1, colors.HexColor("#E0E5F2")),
        ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    story.append(items_table)

    if show_costs:
        story.append(Spacer(1, 0.3*inch))
        costing = Table([
            ['Materials Cost', f"{job_card.materials_cost:,.2f}"],
            ['Labour Cost', f"{job_card.labour_cost:,.2f}"],
            ['Profit', f"{currency} {job_card.profit:,.2f}"],
        ], colWidths=[1.5*inch, 1.4*inch], hAlign='RIGHT')
        costing.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEABOVE', (0, -1), (-1, -1), 1, colors.HexColor("#2B3674")),
        ]))
        story.append(costing)

    story.append(Spacer(1, 1*inch))

    signature_data = [
        [Paragraph('--------------------------------<br/>Technician', styles['SignatureStyle']),
         Paragraph('--------------------------------<br/>Customer Signature', styles['SignatureStyle'])]
    ]
    story.append(Table(signature_data, colWidths=[3.5*inch, 3.5*inch], hAlign='CENTER'))

    doc.build(story, canvasmaker=NumberedCanvas)
    logger.info(f"Job card PDF for {job_card.job_no} generated by {request.user.username}")
    return response


def _resolve_job_card(data):
    job_card_id = data.get('jobCardId')
    if job_card_id:
        return get_job_card(job_card_id)
    try:
        return JobCard.objects.select_related('customer', 'technician').get(job_no=data.get('jobCardNumber'))
    except JobCard.DoesNotExist:
        raise NotFound('Job card not found')


def _check_ownership(user, job_card):
    if is_restricted_technician(user) and job_card.technician_id != user.pk:
        raise PermissionDenied('You can only record tests for job cards assigned to you.')


def _get_testing_record(pk):
    try:
        return TestingRecord.objects.select_related('job_card__customer').get(pk=pk)
    except TestingRecord.DoesNotExist:
        raise NotFound('Testing record not found')


@api_view(['GET', 'POST'])
def testing_record_list(request):
    if request.method == 'POST':
        serializer = TestingRecordWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job_card = _resolve_job_card(serializer.validated_data)
        _check_ownership(request.user, job_card)

        record = TestingRecord(job_card=job_card)
        if serializer.validated_data.get('testDate'):
            record.test_date = serializer.validated_data['testDate']
        testing_data.apply_to_record(record, testing_data.normalize(request.data))
        with transaction.atomic():
            record.save()
        logger.info(f"Testing record #{record.pk} (v{record.schema_version}) created for {job_card.job_no} by {request.user.username}")
        return Response({
            'success': True,
            'message': 'Testing record created successfully',
            'data': TestingRecordSerializer(_get_testing_record(record.pk)).data,
        }, status=status.HTTP_201_CREATED)

    records = TestingRecord.objects.select_related('job_card__customer')
    if is_restricted_technician(request.user):
        records = records.filter(job_card__technician=request.user)
    job_card_id = request.query_params.get('jobCardId')
    if job_card_id:
        records = records.filter(job_card_id=job_card_id)
    job_card_number = request.query_params.get('jobCardNumber')
    if job_card_number:
        records = records.filter(job_card__job_no=job_card_number)
    data = TestingRecordSerializer(records, many=True).data
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
def testing_record_detail(request, pk):
    record = _get_testing_record(pk)

    if request.method == 'GET':
        if is_restricted_technician(request.user) and record.job_card.technician_id != request.user.pk:
            raise NotFound('Testing record not found')
        return Response({'success': True, 'data': TestingRecordSerializer(record).data})

    _check_ownership(request.user, record.job_card)

    if request.method == 'PUT':
        serializer = TestingRecordWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if serializer.validated_data.get('testDate'):
            record.test_date = serializer.validated_data['testDate']
        testing_data.apply_to_record(record, testing_data.normalize(request.data))
        with transaction.atomic():
            record.save()
        logger.info(f"Testing record #{record.pk} updated by {request.user.username}")
        return Response({
            'success': True,
            'message': 'Testing record updated successfully',
            'data': TestingRecordSerializer(_get_testing_record(record.pk)).data,
        })

    record.delete()
    logger.info(f"Testing record #{pk} deleted by {request.user.username}")
    return Response({'success': True, 'message': 'Testing record deleted successfully'})

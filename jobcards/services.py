# jobcards/services.py

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.models import User
from partners.models import Customer
from stock.models import ItemActivity
from stock.services import InventoryLedger, ActivityRecorder
from workshop_system.exceptions import NotFound, Conflict, InsufficientStock
from workshop_system.numbering import next_sequence_number
from .models import JobCard, JobCardMaterial

logger = logging.getLogger(__name__)


def deduction_status():
    return settings.WORKSHOP_CONFIG['DEDUCTION_STATUS']


def get_job_card(job_card_id, lock=False):
    queryset = JobCard.objects.select_related('customer', 'technician')
    if lock:
        # select_for_update() cannot lock the nullable side of an outer join
        queryset = JobCard.objects.select_for_update()
    try:
        return queryset.get(pk=job_card_id)
    except JobCard.DoesNotExist:
        raise NotFound('Job card not found')


def resolve_technician(value):
    """Accepts a user id or a technician's name/username; unknown names resolve to None."""
    if value in (None, ''):
        return None
    technicians = User.objects.filter(role=User.ROLE_TECHNICIAN)
    if isinstance(value, int) or str(value).isdigit():
        return technicians.filter(pk=int(value)).first()
    value = str(value).strip()
    technician = technicians.filter(username=value).first()
    if technician is None:
        technician = next((t for t in technicians if t.display_name == value), None)
    return technician


class MaterialsLedger:
    """Parts and consumables booked against a job card."""

    @staticmethod
    def add_material(job_card_id, inventory_item_id=None, material_name=None, quantity=None,
                     unit_price=None, user=None, defer_deduction=False):
        """
        Adds a line to a job card.

        With an inventory item the stock is taken immediately, unless
        ``defer_deduction`` is set and the job card has not reached the
        deduction status yet; such lines are picked up by the deduction
        sweep in JobCardStateMachine.update_status. A free-text line never
        touches inventory.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError('Quantity must be a positive whole number.')
        if inventory_item_id is None and not material_name:
            raise ValidationError('Either an inventory item or a material name is required.')

        with transaction.atomic():
            job_card = get_job_card(job_card_id, lock=True)

            if inventory_item_id is None:
                material = JobCardMaterial.objects.create(
                    job_card=job_card,
                    material_name=material_name,
                    quantity=quantity,
                    unit_price=Decimal(str(unit_price or 0)),
                    stock_deducted=False,
                )
                logger.info(f"Free-text material '{material_name}' x{quantity} added to {job_card.job_no}")
                return material

            item = InventoryLedger.lock_item(inventory_item_id)
            if item.available_stock < quantity:
                raise InsufficientStock(item.part_name, item.available_stock, quantity)

            deduct_now = not defer_deduction or job_card.status == deduction_status()
            material = JobCardMaterial(
                job_card=job_card,
                inventory_item=item,
                material_name=item.part_name,
                quantity=quantity,
                unit_price=item.selling_price,
                unit_cost=item.purchase_price,
                stock_deducted=deduct_now,
            )

            if deduct_now:
                change = InventoryLedger.adjust_stock(item.pk, -quantity)
                material.inventory_item = change.item
                ActivityRecorder.record_stock_out(
                    change, quantity, ItemActivity.JOB_USAGE,
                    unit_price=material.unit_price,
                    reference_type='Job Card',
                    reference_id=job_card.pk,
                    reference_no=job_card.job_no,
                    notes=f"Used in Job Card {job_card.job_no}",
                    customer_name=job_card.customer.name if job_card.customer else None,
                    created_by=user,
                )
            material.save()

        logger.info(
            f"Material '{material.material_name}' x{quantity} added to {job_card.job_no} "
            f"({'deducted' if material.stock_deducted else 'deduction deferred'})"
        )
        return material

    @staticmethod
    def remove_material(job_card_id, material_id, user=None):
        with transaction.atomic():
            try:
                material = (
                    JobCardMaterial.objects.select_for_update()
                    .get(pk=material_id, job_card_id=job_card_id)
                )
            except JobCardMaterial.DoesNotExist:
                raise NotFound('Material not found')

            if material.stock_deducted and material.inventory_item_id:
                job_card = JobCard.objects.get(pk=job_card_id)
                change = InventoryLedger.adjust_stock(material.inventory_item_id, material.quantity)
                ActivityRecorder.record_stock_in(
                    change, material.quantity,
                    reference_no=job_card.job_no,
                    notes=f"Removed from Job Card {job_card.job_no}",
                    created_by=user,
                )
            material.delete()

        logger.info(
            f"Material #{material_id} removed from job card #{job_card_id}"
            f"{' and stock restored' if material.stock_deducted else ''}"
        )
        return material

    @staticmethod
    def list_materials(job_card_id):
        get_job_card(job_card_id)
        return (
            JobCardMaterial.objects.filter(job_card_id=job_card_id)
            .select_related('inventory_item')
            .order_by('-created_at', '-id')
        )


class JobCardStateMachine:

    UPDATABLE_FIELDS = (
        'vehicle_type', 'vehicle_number', 'engine_model', 'job_type', 'job_sub_type', 'brand',
        'pump_injector_serial', 'quantity', 'received_date', 'expected_delivery_date',
        'description', 'quotation_amount', 'final_amount', 'labour_cost',
    )

    @staticmethod
    def create(data, user=None):
        """``data`` is the validated payload of JobCardWriteSerializer."""
        data = dict(data)
        with transaction.atomic():
            customer = Customer.find_or_create(data.pop('customer_name'), data.pop('customer_phone', None))
            company = data.pop('company_name', None)
            if company and not customer.company:
                customer.company = company
                customer.save(update_fields=['company', 'updated_at'])

            technician = resolve_technician(data.pop('technician', None))
            data['status'] = data.get('status') or JobCard.STATUS_RECEIVED

            job_no = next_sequence_number(JobCard, 'job_no', settings.WORKSHOP_CONFIG['JOB_NUMBER_PREFIX'])
            job_card = JobCard.objects.create(job_no=job_no, customer=customer, technician=technician, **data)

        logger.info(f"Job card {job_card.job_no} created for '{customer.name}' by {getattr(user, 'username', 'system')}")
        return job_card

    @staticmethod
    def update(job_card_id, changes, user=None):
        """
        Applies a partial update. Only keys present in ``changes`` are
        touched. A status change runs through update_status in the same
        transaction, so a failed deduction sweep also discards the field
        edits.
        """
        changes = dict(changes)
        new_status = changes.pop('status', None)

        with transaction.atomic():
            job_card = get_job_card(job_card_id, lock=True)

            customer_fields = {
                field: changes.pop(key) or None
                for key, field in (('customer_name', 'name'), ('customer_phone', 'phone'), ('company_name', 'company'))
                if key in changes
            }
            if customer_fields and job_card.customer_id:
                customer = job_card.customer
                for field, value in customer_fields.items():
                    if field != 'name' or value:
                        setattr(customer, field, value)
                customer.save()
            elif customer_fields.get('name'):
                job_card.customer = Customer.find_or_create(customer_fields['name'], customer_fields.get('phone'))

            if 'technician' in changes:
                technician = resolve_technician(changes.pop('technician'))
                if technician is not None:
                    job_card.technician = technician

            for field in JobCardStateMachine.UPDATABLE_FIELDS:
                if field in changes:
                    setattr(job_card, field, changes[field])
            job_card.save()

            if new_status:
                job_card = JobCardStateMachine.update_status(job_card.pk, new_status, user=user)

        return get_job_card(job_card.pk)

    @staticmethod
    def update_status(job_card_id, new_status, user=None):
        with transaction.atomic():
            job_card = get_job_card(job_card_id, lock=True)
            previous = job_card.status
            job_card.status = new_status
            job_card.save(update_fields=['status', 'updated_at'])

            swept = 0
            target = deduction_status()
            if previous != target and new_status == target:
                swept = JobCardStateMachine._deduction_sweep(job_card, user)

        if previous != new_status:
            logger.info(f"Job card {job_card.job_no} status: '{previous}' -> '{new_status}'"
                        + (f", {swept} material line(s) deducted" if swept else ''))
        return job_card

    @staticmethod
    def _deduction_sweep(job_card, user=None):
        """
        Takes stock for every line not yet deducted, locking inventory rows
        in item id order so sweeps sharing parts cannot deadlock. Must run
        inside the caller's transaction: an InsufficientStock on any line
        rolls back the lines before it and the status change with them.
        """
        pending = (
            JobCardMaterial.objects.select_for_update()
            .filter(job_card=job_card, stock_deducted=False, inventory_item__isnull=False)
            .order_by('inventory_item_id', 'id')
        )
        customer_name = job_card.customer.name if job_card.customer_id else None

        count = 0
        for material in pending:
            item = InventoryLedger.lock_item(material.inventory_item_id)
            if item.available_stock < material.quantity:
                logger.warning(
                    f"Deduction sweep for {job_card.job_no} stopped: '{item.part_name}' "
                    f"has {item.available_stock}, needs {material.quantity}"
                )
                raise InsufficientStock(item.part_name, item.available_stock, material.quantity)

            change = InventoryLedger.adjust_stock(item.pk, -material.quantity)
            material.stock_deducted = True
            material.save(update_fields=['stock_deducted'])

            ActivityRecorder.record_stock_out(
                change, material.quantity, ItemActivity.JOB_USAGE,
                unit_price=material.unit_price,
                reference_type='Job Card',
                reference_id=job_card.pk,
                reference_no=job_card.job_no,
                notes=f"Used in Job Card {job_card.job_no}",
                customer_name=customer_name,
                created_by=user,
            )
            count += 1
        return count

    @staticmethod
    def delete(job_card_id, user=None):
        """
        Refused while testing records exist. Stock taken by the job card's
        lines goes back to inventory before the card and its lines are removed.
        """
        with transaction.atomic():
            job_card = get_job_card(job_card_id, lock=True)
            if job_card.testing_records.exists():
                raise Conflict('Cannot delete job card with existing testing records')

            deducted = (
                job_card.materials.select_for_update()
                .filter(stock_deducted=True, inventory_item__isnull=False)
                .order_by('inventory_item_id', 'id')
            )
            for material in deducted:
                change = InventoryLedger.adjust_stock(material.inventory_item_id, material.quantity)
                ActivityRecorder.record_stock_in(
                    change, material.quantity,
                    reference_no=job_card.job_no,
                    notes=f"Job Card {job_card.job_no} deleted",
                    created_by=user,
                )
            job_no = job_card.job_no
            job_card.delete()

        logger.info(f"Job card {job_no} deleted by {getattr(user, 'username', 'system')}")

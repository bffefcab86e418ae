from django.core.management.base import BaseCommand, CommandError
from inventory.models import InventoryItem
from stock.models import StockTransaction


class Command(BaseCommand):
    help = ("Compares each item's available stock with the new_stock snapshot of its latest "
            "stock transaction and reports discrepancies. Nothing is written.")

    def add_arguments(self, parser):
        parser.add_argument('--item', type=int, help='Only check the inventory item with this id.')

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('Starting stock reconciliation...'))

        items = InventoryItem.objects.all().order_by('pk')
        if options.get('item'):
            items = items.filter(pk=options['item'])
            if not items.exists():
                raise CommandError(f"Inventory item #{options['item']} does not exist.")

        discrepancies = 0
        for item in items:
            latest = (
                StockTransaction.objects.filter(inventory_item=item)
                .order_by('-created_at', '-id')
                .first()
            )
            # Items that never moved have nothing to compare against.
            if latest is None:
                continue

            if latest.new_stock != item.available_stock:
                discrepancies += 1
                self.stdout.write(
                    self.style.WARNING(
                        f'Discrepancy found for "{item.part_name}" (#{item.pk}): '
                        f'Available = {item.available_stock}, Last transaction = {latest.new_stock} '
                        f'({latest.transaction_type} #{latest.pk}).'
                    )
                )

        if discrepancies:
            self.stdout.write(self.style.WARNING(f'Stock reconciliation finished with {discrepancies} discrepancies.'))
        else:
            self.stdout.write(self.style.SUCCESS('Stock reconciliation completed successfully. No discrepancies.'))

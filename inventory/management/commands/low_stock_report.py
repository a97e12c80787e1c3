from common.choices import ItemType
from django.core.management.base import BaseCommand, CommandError
from inventory.selectors import low_stock_items


class Command(BaseCommand):
    help = "List materials and fragrances at or below their safety stock level."

    def add_arguments(self, parser):
        parser.add_argument("--type", dest="item_type", choices=ItemType.values, default=None)
        parser.add_argument("--fail-on-shortage", action="store_true", help="Exit non-zero when any item is low.")

    def handle(self, *args, **options):
        rows = low_stock_items(options.get("item_type"))
        for row in rows:
            self.stdout.write(
                f"{row['item_type']:<10} {row['code']:<12} {row['name']:<30} "
                f"{row['current_stock']}/{row['safety_stock_level']} {row['unit']} (short {row['shortage']})"
            )
        self.stdout.write(self.style.SUCCESS(f"Low-stock items: {len(rows)}"))
        if rows and options.get("fail_on_shortage"):
            raise CommandError(f"{len(rows)} item(s) below safety stock")

"""Django management command that seeds the credit packs sold at checkout.

Idempotent: packs are looked up by SKU, so running it again only reports the
packs that already exist. Pass ``--update`` to overwrite their price and size.
"""

from django.core.management.base import BaseCommand

from ghiblify.models import CreditPack

DEFAULT_PACKS = [
    {"sku": "basic", "name": "Basic", "credits": 5, "amount": 99},
    {"sku": "standard", "name": "Standard", "credits": 15, "amount": 249},
    {"sku": "premium", "name": "Premium", "credits": 50, "amount": 699},
]


class Command(BaseCommand):
    help = "Create the default credit packs"

    def add_arguments(self, parser):
        parser.add_argument(
            "--update",
            action="store_true",
            help="Overwrite existing packs with the default values",
        )

    def handle(self, *args, **options):
        for pack_data in DEFAULT_PACKS:
            defaults = {
                "name": pack_data["name"],
                "credits": pack_data["credits"],
                "amount": pack_data["amount"],
                "currency": "INR",
                "active": True,
            }
            if options["update"]:
                pack, created = CreditPack.objects.update_or_create(sku=pack_data["sku"], defaults=defaults)
            else:
                pack, created = CreditPack.objects.get_or_create(sku=pack_data["sku"], defaults=defaults)

            if created:
                self.stdout.write(
                    self.style.SUCCESS(f"Created credit pack: {pack.sku} - {pack.credits} credits")
                )
            elif options["update"]:
                self.stdout.write(self.style.SUCCESS(f"Updated credit pack: {pack.sku}"))
            else:
                self.stdout.write(self.style.WARNING(f"Credit pack already exists: {pack.sku}"))

        self.stdout.write(self.style.SUCCESS("Credit packs initialization complete"))

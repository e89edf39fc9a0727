"""
Management command to add a starter catalogue of sweets to the database
"""
from decimal import Decimal
from django.core.management.base import BaseCommand, CommandError
from backend.inventory.models import Sweet


class Command(BaseCommand):
    help = "Adds a predefined catalogue of sweets to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            '--quantity',
            type=int,
            default=20,
            help='Opening stock quantity for each newly created sweet',
        )

    def handle(self, *args, **options):
        quantity = options['quantity']
        if not 0 <= quantity <= Sweet.MAX_QUANTITY:
            raise CommandError(f"--quantity must be between 0 and {Sweet.MAX_QUANTITY}, got {quantity}")

        # (name, category, price)
        sweets = [
            ('Gulab Jamun', 'Milk Based', '12.00'),
            ('Rasgulla', 'Milk Based', '10.00'),
            ('Kaju Katli', 'Dry Fruit', '25.00'),
            ('Jalebi', 'Fried', '8.00'),
            ('Ladoo', 'Gram Flour', '9.50'),
            ('Barfi', 'Milk Based', '15.00'),
            ('Mysore Pak', 'Gram Flour', '14.00'),
            ('Chocolate Truffle', 'Chocolate', '30.00'),
            ('Dark Chocolate Bar', 'Chocolate', '22.00'),
            ('Lemon Drops', 'Candy', '3.50'),
            ('Gummy Bears', 'Candy', '4.00'),
            ('Salted Caramel Fudge', 'Fudge', '18.00'),
        ]

        created_count = 0
        skipped_count = 0

        for name, category, price in sweets:
            sweet, created = Sweet.objects.get_or_create(
                name=name,
                defaults={
                    'category': category,
                    'price': Decimal(price),
                    'quantity': quantity,
                }
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'✓ Created: {name}'))
            else:
                skipped_count += 1
                self.stdout.write(f'- Skipped (already exists): {name}')

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS(f'Summary: {created_count} created, {skipped_count} skipped'))

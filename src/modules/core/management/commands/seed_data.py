from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.models import Address, User, UserRole
from modules.cart.dtos import AddToCartDTO
from modules.cart.views import build_cart_service
from modules.catalog.models import Product, ProductStatus
from modules.core.exceptions import DomainError
from modules.orders.dtos import CreateOrderFromCartDTO
from modules.orders.views import build_order_service


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=15,
            help="Number of checkouts to simulate.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        self._seed_admin()
        artisans = self._seed_artisans()
        customers = self._seed_customers()
        products = self._seed_products(artisans)
        orders_created = self._seed_orders(customers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"artisans={len(artisans)}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_admin(self) -> None:
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser(
                "admin", password="admin123", role=UserRole.ADMIN
            )

    def _seed_artisans(self) -> list[User]:
        self.stdout.write("Creating artisans...")
        artisans = []
        for username in ("potter", "weaver", "woodworker"):
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com", "role": UserRole.ARTISAN},
            )
            if created:
                user.set_password(f"{username}123")
                user.save()
            artisans.append(user)
        self.stdout.write(self.style.SUCCESS("Creating artisans... Done!"))
        return artisans

    def _seed_customers(self) -> list[User]:
        self.stdout.write("Creating customers...")
        customers = []
        seed_customers = [
            ("ana", "Ana Souza", "Lisbon", "PT"),
            ("bruno", "Bruno Lima", "Porto", "PT"),
            ("carla", "Carla Mendes", "Madrid", "ES"),
            ("daniel", "Daniel Costa", "Berlin", "DE"),
            ("helena", "Helena Ferreira", "Paris", "FR"),
        ]
        for username, full_name, city, country in seed_customers:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com", "role": UserRole.CUSTOMER},
            )
            if created:
                user.set_password(f"{username}123")
                user.save()
            Address.objects.get_or_create(
                user=user,
                is_default=True,
                defaults={
                    "full_name": full_name,
                    "street": f"{random.randint(1, 200)} Main Street",
                    "city": city,
                    "state": city,
                    "zip_code": f"{random.randint(10000, 99999)}",
                    "country": country,
                },
            )
            customers.append(user)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_products(self, artisans: list[User]) -> list[Product]:
        self.stdout.write("Creating products...")
        products = []
        catalog = [
            ("Stoneware mug", Decimal("24.00"), False),
            ("Serving bowl", Decimal("58.00"), True),
            ("Glazed vase", Decimal("95.00"), True),
            ("Linen table runner", Decimal("42.00"), False),
            ("Wool throw", Decimal("130.00"), True),
            ("Woven basket", Decimal("36.50"), False),
            ("Oak cutting board", Decimal("48.00"), True),
            ("Walnut bowl", Decimal("75.00"), True),
            ("Spoon set", Decimal("22.00"), False),
        ]
        for index, (name, price, customizable) in enumerate(catalog):
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "seller": artisans[index % len(artisans)],
                    "description": f"Handmade {name.lower()}.",
                    "price": price,
                    "quantity": random.randint(5, 40),
                    "status": ProductStatus.PUBLISHED,
                    "is_customizable": customizable,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(
        self, customers: list[User], products: list[Product], count: int
    ) -> int:
        """Place orders through the real checkout so stock and history stay consistent."""
        self.stdout.write("Creating orders...")
        cart_service = build_cart_service()
        order_service = build_order_service()
        created = 0

        for _ in range(count):
            customer = random.choice(customers)
            address = customer.addresses.first()
            for product in random.sample(products, k=random.randint(1, 3)):
                try:
                    cart_service.add_to_cart(
                        customer.id,
                        AddToCartDTO(product_id=product.id, quantity=random.randint(1, 2)),
                    )
                except DomainError as exc:
                    self.stdout.write(self.style.WARNING(f"Skipping item: {exc}"))
            try:
                order_service.create_order_from_cart(
                    customer.id, CreateOrderFromCartDTO(address_id=address.id)
                )
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipping checkout: {exc}"))
                cart_service.clear_cart(customer.id)
                continue
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created

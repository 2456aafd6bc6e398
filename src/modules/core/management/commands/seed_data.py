from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.management.base import BaseCommand

from modules.products.dtos import CreateProductDTO
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

logger = structlog.get_logger(__name__)

CATALOG = [
    (
        "DELL-XPS15-001",
        "Laptop Dell XPS 15",
        "High performance laptop with Intel i7 and 16GB RAM",
        "Electronics",
        Decimal("1299.99"),
        50,
    ),
    (
        "LOGI-MX3-001",
        "Wireless Mouse Logitech MX Master 3",
        "Ergonomic wireless mouse for productivity",
        "Accessories",
        Decimal("99.99"),
        150,
    ),
    (
        "KEY-K2-001",
        "Mechanical Keyboard Keychron K2",
        "Compact wireless mechanical keyboard",
        "Accessories",
        Decimal("79.99"),
        100,
    ),
    (
        "ANK-HUB-001",
        "USB-C Hub Anker 7-in-1",
        "Multi-port USB-C hub with HDMI and SD card reader",
        "Accessories",
        Decimal("49.99"),
        200,
    ),
    (
        "LG-27UK-001",
        "Monitor LG 27 UltraFine 4K",
        "27-inch 4K UHD IPS monitor",
        "Electronics",
        Decimal("599.99"),
        30,
    ),
]


class Command(BaseCommand):
    help = "Seed an empty catalog with sample products."

    def handle(self, *args, **options):
        repository = ProductDjangoRepository()
        if repository.get_all().exists():
            logger.info("seed.skipped", reason="catalog_not_empty")
            self.stdout.write(
                self.style.WARNING("Catalog already contains data. Skipping seed.")
            )
            return

        self.stdout.write("Creating products...")
        service = ProductService(repository=repository)
        for sku, name, description, category, price, stock in CATALOG:
            service.create_product(
                CreateProductDTO(
                    sku=sku,
                    name=name,
                    description=description,
                    category=category,
                    price=price,
                    stock=stock,
                )
            )

        logger.info("seed.completed", products=len(CATALOG))
        self.stdout.write(
            self.style.SUCCESS(f"Seed completed: products={len(CATALOG)}")
        )

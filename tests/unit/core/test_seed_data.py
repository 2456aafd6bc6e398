"""Unit tests for the seed_data management command."""

from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command

from modules.core.management.commands.seed_data import CATALOG
from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestSeedData:
    def test_seeds_empty_catalog(self):
        out = StringIO()
        call_command("seed_data", stdout=out)
        assert Product.objects.count() == len(CATALOG)
        assert "Seed completed" in out.getvalue()

    def test_seeded_products_are_active_and_normalised(self):
        call_command("seed_data", stdout=StringIO())
        product = Product.objects.get(sku="DELL-XPS15-001")
        assert product.is_active is True
        assert product.category == "Electronics"
        assert product.stock == 50

    def test_skips_when_catalog_not_empty(self, make_product):
        make_product()
        out = StringIO()
        call_command("seed_data", stdout=out)
        assert Product.objects.count() == 1
        assert "Skipping seed" in out.getvalue()

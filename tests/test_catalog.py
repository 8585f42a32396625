import pytest

from ofertas.errors import Conflict, NotFound
from ofertas.logic import catalog
from ofertas.schemas import CategoryInput, ProductInput

from conftest import CATEGORY_ID, LECHE_ID

MISSING_ID = "99999999-9999-4999-8999-999999999999"


def test_create_and_list_products(seeded_engine):
    created = catalog.create_product(seeded_engine, ProductInput(name="Arroz 1kg", categoryId=CATEGORY_ID))
    names = [product["name"] for product in catalog.list_products(seeded_engine)]
    assert created["name"] in names
    assert names == sorted(names)


def test_duplicate_product_name_conflicts(seeded_engine):
    with pytest.raises(Conflict) as excinfo:
        catalog.create_product(seeded_engine, ProductInput(name="Yerba mate 1kg", categoryId=CATEGORY_ID))
    assert excinfo.value.message == "Ya existe un producto con ese nombre"


def test_update_product(seeded_engine):
    updated = catalog.update_product(seeded_engine, LECHE_ID, ProductInput(name="Leche descremada 1L", categoryId=CATEGORY_ID))
    assert updated["name"] == "Leche descremada 1L"
    assert "Leche descremada 1L" in [p["name"] for p in catalog.list_products(seeded_engine)]


def test_update_to_existing_name_conflicts(seeded_engine):
    with pytest.raises(Conflict):
        catalog.update_product(seeded_engine, LECHE_ID, ProductInput(name="Yerba mate 1kg", categoryId=CATEGORY_ID))


def test_update_unknown_product(seeded_engine):
    with pytest.raises(NotFound):
        catalog.update_product(seeded_engine, MISSING_ID, ProductInput(name="X", categoryId=CATEGORY_ID))


def test_unknown_category(seeded_engine):
    with pytest.raises(NotFound):
        catalog.create_product(seeded_engine, ProductInput(name="X", categoryId=MISSING_ID))


def test_categories(seeded_engine):
    catalog.create_category(seeded_engine, CategoryInput(name="Bebidas"))
    assert [c["name"] for c in catalog.list_categories(seeded_engine)] == ["Almacén", "Bebidas"]
    with pytest.raises(Conflict):
        catalog.create_category(seeded_engine, CategoryInput(name="Bebidas"))


def test_commerces(seeded_engine):
    assert [c["name"] for c in catalog.list_commerces(seeded_engine)] == [
        "Autoservicio La Esquina",
        "Supermercado Centro",
    ]

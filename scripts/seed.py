"""Seed database with the demo catalog and a demo user."""

from __future__ import annotations

import pathlib
import uuid

import yaml
from dotenv import load_dotenv
from sqlalchemy import select

from ofertas.db.migrate import run_migrations
from ofertas.db.session import create_engine_from_env
from ofertas.db.tables import categories, commerces, products, users

CATALOG_PATH = pathlib.Path(__file__).with_name("catalog.yml")

DEMO_USER = {"id": "demo-user", "name": "Demo", "email": "demo@example.com", "image": None}


def load_catalog(path: pathlib.Path = CATALOG_PATH) -> dict:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def seed(engine, catalog: dict) -> None:
    with engine.begin() as conn:
        for category in catalog.get("categories", []):
            category_id = conn.execute(
                select(categories.c.id).where(categories.c.name == category["name"])
            ).scalar_one_or_none()
            if category_id is None:
                category_id = str(uuid.uuid4())
                conn.execute(categories.insert().values(id=category_id, name=category["name"]))
            for name in category.get("products", []):
                exists = conn.execute(select(products.c.id).where(products.c.name == name)).first()
                if not exists:
                    conn.execute(
                        products.insert().values(id=str(uuid.uuid4()), name=name, category_id=category_id)
                    )
        for commerce in catalog.get("commerces", []):
            exists = conn.execute(select(commerces.c.id).where(commerces.c.name == commerce["name"])).first()
            if not exists:
                conn.execute(commerces.insert().values(id=str(uuid.uuid4()), **commerce))
        if not conn.execute(select(users.c.id).where(users.c.id == DEMO_USER["id"])).first():
            conn.execute(users.insert().values(**DEMO_USER))


def main() -> None:
    load_dotenv()
    engine = create_engine_from_env()
    run_migrations(engine)
    seed(engine, load_catalog())
    print("Seed complete")


if __name__ == "__main__":
    main()

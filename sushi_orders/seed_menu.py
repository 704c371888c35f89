"""
Sample sushi menu for local runs.

Usage:
    python -m sushi_orders.seed_menu
"""

import logging
from typing import List

from .db import SessionLocal, init_db
from .logging_config import setup_logging
from .models import Product

logger = logging.getLogger(__name__)


def sample_products() -> List[Product]:
    return [
        # Sets
        Product(
            name="Zestaw 5",
            subcategory="zestawy",
            base_price=59.0,
            description=(
                "20 szt: 6x Futomaki łosoś surowy, 6x Futomaki krewetka w tempurze, 8x Hosomaki ogórek\n"
                "Powiększ zestaw: 20 szt + 6 szt za 1 zł = 26 szt"
            ),
        ),
        Product(
            name="Zestaw 10",
            subcategory="zestawy",
            base_price=89.0,
            description=(
                "32 szt: 8x Futomaki tuńczyk surowy, 8x California łosoś pieczony, "
                "8x Hosomaki awokado, 8x Nigiri łosoś surowy"
            ),
        ),
        Product(
            name="Zestaw miesiąca",
            subcategory="zestawy",
            base_price=49.0,
            description="16 szt: 8x Futomaki łosoś surowy, 8x Hosomaki ogórek",
        ),
        Product(
            name="Zestaw Nigiri",
            subcategory="zestawy",
            base_price=42.0,
            description="10 szt: 4x Nigiri łosoś surowy, 4x Nigiri tuńczyk surowy, 2x Nigiri tamago",
            restaurant_slug="przasnysz",
        ),
        # Rolls
        Product(
            name="Futomak Łosoś",
            subcategory="futomaki",
            base_price=24.0,
            description="Surowy łosoś, ogórek, serek, 8 szt",
        ),
        Product(
            name="Futomak Vege",
            subcategory="futomaki",
            base_price=19.0,
            description="Ogórek, awokado, tamago, 8 szt",
        ),
        Product(
            name="California Krewetka",
            subcategory="california",
            base_price=26.0,
            description="Krewetka w tempurze, awokado, 8 szt",
        ),
        # Starters
        Product(
            name="Tempura Mix",
            subcategory="przystawki",
            base_price=32.0,
            description="Krewetki i warzywa w tempurze",
        ),
        Product(
            name="Frytki z batatów",
            subcategory="przystawki",
            base_price=14.0,
        ),
        Product(
            name="Edamame",
            subcategory="przystawki",
            base_price=15.0,
            option_prices={"Sól morska": 0, "Chili": 200},
        ),
        Product(
            name="Tatar z łososia",
            subcategory="tatary",
            base_price=34.0,
        ),
    ]


def seed_menu() -> None:
    db = SessionLocal()
    try:
        existing = db.query(Product).count()
        if existing > 0:
            logger.info("Menu already has %d products. Not seeding again.", existing)
            return

        products = sample_products()
        db.add_all(products)
        db.commit()
        logger.info("Seeded %d products", len(products))
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    init_db()
    seed_menu()

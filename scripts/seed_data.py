import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import delete

from inventory_api.config import get_settings
from inventory_api.core.errors import ConflictError
from inventory_api.core.logging import setup_logging
from inventory_api.core.security import PasswordHasher, TokenService
from inventory_api.database import Database
from inventory_api.models.product import Product
from inventory_api.models.user import User
from inventory_api.schemas.auth import RegisterRequest
from inventory_api.schemas.product import ProductCreate
from inventory_api.services.auth_service import register_user
from inventory_api.services.product_service import create_product

SAMPLE_PRODUCTS = [
    {
        "name": "Laptop",
        "description": "14 inch ultrabook",
        "sku": "lap-001",
        "category": "Electronics",
        "price": 999.99,
        "cost": 720.0,
        "quantity": 10,
        "minQuantity": 3,
        "unit": "pcs",
        "supplier": {"name": "Northwind", "contact": "sales@northwind.example.com"},
        "location": "A1",
    },
    {
        "name": "Wireless Mouse",
        "sku": "mou-002",
        "category": "Electronics",
        "price": 29.99,
        "cost": 12.5,
        "quantity": 2,
        "minQuantity": 5,
        "unit": "pcs",
    },
    {
        "name": "Printer Paper",
        "sku": "pap-003",
        "category": "Office",
        "price": 6.5,
        "cost": 3.1,
        "quantity": 0,
        "unit": "ream",
    },
]


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a demo user with sample products.")
    parser.add_argument("--reset", action="store_true", help="Clear existing data before seeding.")
    parser.add_argument("--username", default="demo_user")
    parser.add_argument("--email", default="demo@example.com")
    parser.add_argument("--password", default="Password123")
    return parser.parse_args()


def main():
    settings = get_settings()
    setup_logging(settings)
    args = parse_args()

    database = Database(settings.DATABASE_URL)
    database.create_all()
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    tokens = TokenService.from_settings(settings)

    db = database.SessionLocal()
    try:
        if args.reset:
            db.execute(delete(Product))
            db.execute(delete(User))
            db.commit()

        try:
            user, token = register_user(
                db,
                hasher,
                tokens,
                RegisterRequest(username=args.username, email=args.email, password=args.password),
            )
        except ConflictError as exc:
            print("Seed skipped: {}".format(exc.message))
            return

        for fields in SAMPLE_PRODUCTS:
            create_product(db, user.id, ProductCreate.model_validate(fields))

        print("Seed data created for {} ({} products).".format(user.username, len(SAMPLE_PRODUCTS)))
        print("Bearer token: {}".format(token))
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    main()

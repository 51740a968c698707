# phenofarm/seed_demo.py
"""Seed demo accounts and a small grower catalog.

    python -m phenofarm.seed_demo

Demo users are created or reset to the shared demo password. The catalog is
only added when the demo grower has no products yet.
"""
import logging
from datetime import date

from phenofarm.database import SessionLocal, init_db
from phenofarm.models.batch import Batch
from phenofarm.models.dispensary import Dispensary
from phenofarm.models.grower import Grower
from phenofarm.models.product import Product
from phenofarm.models.strain import Strain
from phenofarm.models.users import User, UserRole
from phenofarm.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"email": "admin@phenofarm.com", "role": UserRole.ADMIN, "name": "Admin User"},
    {"email": "grower@vtnurseries.com", "role": UserRole.GROWER, "name": "Green Mountain Grower"},
    {"email": "dispensary@greenvermont.com", "role": UserRole.DISPENSARY, "name": "Green Vermont Dispensary"},
]

# (strain, genetics, batch number, thc, cbd, products: (name, type, price cents, qty))
DEMO_CATALOG = [
    ("Blue Dream", "Sativa dominant hybrid", "BD-2401", 18.5, 0.4, [
        ("Blue Dream 3.5g", "Flower", 3200, 120),
        ("Blue Dream Pre-roll", "Pre-roll", 900, 300),
    ]),
    ("Northern Lights", "Indica", "NL-2402", 22.0, 0.1, [
        ("Northern Lights 3.5g", "Flower", 3600, 80),
        ("Northern Lights Cartridge", "Cartridge", 4500, 40),
    ]),
    ("Harlequin", "Hybrid", "HQ-2403", 7.0, 12.0, [
        ("Harlequin Tincture 30ml", "Tincture", 2800, 25),
    ]),
]


def _upsert_user(session, entry, password_hash) -> User:
    user = session.query(User).filter(User.email == entry["email"]).first()
    if user:
        user.password_hash = password_hash
        user.name = entry["name"]
        user.role = entry["role"].value
        logger.info("Updated existing user: %s", entry["email"])
    else:
        user = User(email=entry["email"], password_hash=password_hash, name=entry["name"], role=entry["role"].value)
        session.add(user)
        logger.info("Created new user: %s", entry["email"])

    if entry["role"] == UserRole.GROWER and user.grower is None:
        user.grower = Grower(business_name=entry["name"], city="Burlington", state="VT", is_verified=True)
    if entry["role"] == UserRole.DISPENSARY and user.dispensary is None:
        user.dispensary = Dispensary(business_name=entry["name"], city="Montpelier", state="VT")
    return user


def _seed_catalog(session, grower: Grower) -> int:
    if session.query(Product).filter(Product.grower_id == grower.id).count():
        return 0

    created = 0
    for strain_name, genetics, batch_number, thc, cbd, products in DEMO_CATALOG:
        strain = Strain(grower_id=grower.id, name=strain_name, genetics=genetics)
        batch = Batch(grower_id=grower.id, strain=strain, batch_number=batch_number,
                      harvest_date=date(2024, 9, 15), thc=thc, cbd=cbd,
                      terpenes={"myrcene": 0.8, "limonene": 0.4})
        session.add_all([strain, batch])
        for name, product_type, price_cents, qty in products:
            session.add(Product(
                grower_id=grower.id, name=name, product_type=product_type,
                unit="gram" if product_type == "Flower" else "each",
                price_cents=price_cents, inventory_qty=qty,
                strain=strain, batch=batch, images=[],
            ))
            created += 1
    return created


def seed_demo() -> None:
    init_db()
    session = SessionLocal()
    try:
        password_hash = get_password_hash(DEMO_PASSWORD)
        users = [_upsert_user(session, entry, password_hash) for entry in DEMO_USERS]
        session.flush()

        grower = next(u.grower for u in users if u.grower is not None)
        created = _seed_catalog(session, grower)
        session.commit()
        logger.info("Demo data seeded: %d user(s), %d product(s)", len(users), created)
    except Exception:
        session.rollback()
        logger.exception("Seeding demo data failed")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed_demo()

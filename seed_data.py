from sqlmodel import Session
from newsroom.db.session import engine, create_db_and_tables
from newsroom.core.config import settings
from newsroom.core.logging import configure_logging
from newsroom.models.category import CategoryCreate
from newsroom.services.auth import AuthService
from newsroom.services.storage import DatabaseStorage
from loguru import logger

DEFAULT_CATEGORIES = [
    ("Politics", "politics"),
    ("Business", "business"),
    ("Technology", "technology"),
    ("Sports", "sports"),
    ("Entertainment", "entertainment"),
    ("Health", "health"),
    ("World", "world"),
]

def seed():
    configure_logging(settings.LOG_LEVEL)
    logger.info("Creating database and tables...")
    create_db_and_tables()

    with Session(engine) as session:
        storage = DatabaseStorage(session)

        username = settings.ADMIN_USERNAME or "admin"
        password = settings.ADMIN_PASSWORD or "admin123"
        admin = AuthService(storage).ensure_admin(username, password)
        logger.info(f"Administrator ready: {admin.username}")

        existing = storage.get_categories()
        if existing:
            logger.info(f"Database already contains {len(existing)} categories. Skipping seed.")
            return

        for name, slug in DEFAULT_CATEGORIES:
            storage.create_category(CategoryCreate(name=name, slug=slug))
        logger.info(f"Successfully seeded {len(DEFAULT_CATEGORIES)} categories!")

if __name__ == "__main__":
    seed()

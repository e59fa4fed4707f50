from reset_api.core.config import get_settings
from loguru import logger
from sqlmodel import Session

from reset_api.database.database import engine, create_db_and_tables
from reset_api.database.init_db import init_db


def init() -> None:
    """
    Create the database schema and, outside production, seed the first account.
    """
    create_db_and_tables()
    if get_settings().ENVIRONMENT.lower() == "production":
        logger.info("Production environment, skipping account seeding")
        return
    with Session(engine) as session:
        init_db(session)


def main() -> None:
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")


if __name__ == "__main__":
    main()

from sqlalchemy import text

from core.log import logger
from models import db, engine


def health_check() -> bool:
    logger.info("run app with")
    logger.info(f"database backend = {engine.dialect.name}")
    logger.info(f"database host = {engine.url.host}")
    logger.info("try echo database")
    with db() as session:
        session.execute(text("SELECT 1"))
        logger.info(not session.connection().closed)
    logger.info("successfully connect to database")
    return True

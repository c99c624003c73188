import logging

from areuok.db.session import engine
from areuok.models import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("database schema ready on %s", engine.url.render_as_string(hide_password=True))

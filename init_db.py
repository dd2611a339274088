import logging

from sqlalchemy.engine import Engine

from db import engine
from models import Base

logger = logging.getLogger(__name__)


def create_schema(bind: Engine = engine) -> None:
    """Create every table and natural-key index that does not exist yet."""
    Base.metadata.create_all(bind=bind)
    logger.info("schema ready on %s", bind.url.render_as_string(hide_password=True))


def main():
    logging.basicConfig(level=logging.INFO)
    create_schema()


if __name__ == "__main__":
    main()

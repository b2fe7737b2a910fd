from sqlalchemy.engine import Engine

from shared.database import Base, get_engine


def _load_models():
    """Import every module that declares tables so they register on ``Base.metadata``."""
    import catalogue.item.item  # noqa: F401
    import inventory.stock.stock  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401


def setup_db(engine: Engine | None = None):
    """Setup database schema"""
    _load_models()
    Base.metadata.create_all(engine or get_engine())


def drop_db(engine: Engine | None = None):
    """Drop database schema"""
    _load_models()
    Base.metadata.drop_all(engine or get_engine())

from chantier.db.session import get_engine
from chantier.db.base import Base
from chantier.models.collection_record import CollectionRecord  # noqa: F401  注册表结构


def init_db(engine=None):
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)

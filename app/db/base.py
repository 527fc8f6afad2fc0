# import models so SQLAlchemy registers them on Base.metadata
from app.db.base_class import Base  # noqa: F401
from app.models import (  # noqa: F401
    class_session,
    course,
    file,
    material,
    notification,
    raport,
    section,
    user,
)

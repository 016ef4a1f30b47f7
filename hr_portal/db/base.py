from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

# Import models so Alembic and the record store can discover them
from hr_portal.models import *  # noqa

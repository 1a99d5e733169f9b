from sqlalchemy import Column, String, LargeBinary, func
from sqlalchemy.sql.sqltypes import DateTime
from src.conf.base import Base


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

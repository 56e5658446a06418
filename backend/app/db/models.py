from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ArchitectureRecord(Base):
    __tablename__ = "architectures"

    id = Column(String(64), primary_key=True)
    project_id = Column(String(64), index=True, nullable=True)
    name = Column(String(255), nullable=False)
    snapshot = Column(Text, nullable=False)  # serialized graph JSON
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Uuid
from sqlalchemy.orm import relationship

from rbac_admin.db.base import Base
from rbac_admin.db.models.associations import menu_permissions, role_permissions


class Permission(Base):
    """A single capability, identified by a ``resource:action`` code."""
    __tablename__ = "permissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    resource = Column(String(50), nullable=False, index=True)
    action = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    roles = relationship("Role", secondary=role_permissions, back_populates="permissions")
    menus = relationship("Menu", secondary=menu_permissions, back_populates="permissions")

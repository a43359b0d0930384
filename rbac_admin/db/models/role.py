import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Uuid
from sqlalchemy.orm import relationship

from rbac_admin.db.base import Base
from rbac_admin.db.models.associations import role_permissions, user_roles


class Role(Base):
    __tablename__ = "roles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False, index=True)  # machine name, immutable
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    users = relationship("User", secondary=user_roles, back_populates="roles")
    permissions = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        order_by="Permission.code",
    )

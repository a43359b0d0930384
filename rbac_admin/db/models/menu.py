import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from rbac_admin.db.base import Base
from rbac_admin.db.models.associations import menu_permissions


class Menu(Base):
    """Navigation node. Siblings sort by ``order``, then creation time."""
    __tablename__ = "menus"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(50), unique=True, nullable=False, index=True)  # immutable
    name = Column(String(100), nullable=False)
    path = Column(String(255), nullable=True)
    icon = Column(String(100), nullable=True)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("menus.id"), nullable=True, index=True)
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    parent = relationship("Menu", remote_side=[id], back_populates="children")
    children = relationship("Menu", back_populates="parent", order_by=lambda: [Menu.order, Menu.created_at])
    permissions = relationship(
        "Permission",
        secondary=menu_permissions,
        back_populates="menus",
        order_by="Permission.code",
    )

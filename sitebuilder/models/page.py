"""
Page model holding a site's block content.
"""
from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from sitebuilder.models.base import Base, BaseModel


class Page(Base, BaseModel):
    """A page of a site; draft and published content are block lists."""

    __tablename__ = "pages"

    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    path = Column(String(255), nullable=False, default="/")
    draft_content = Column(JSONB, default=list)
    published_content = Column(JSONB, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)
    is_home_page = Column(Boolean, default=False, nullable=False)

    # Relationships
    site = relationship("Site", back_populates="pages")

    def __repr__(self) -> str:
        return f"<Page {self.name} ({self.path})>"

"""Category row - flat storage of the tree with a self-referencing parent."""
from sqlalchemy import Integer, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from src.models.database import Base


class CategoryRecord(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # NULL marks the root row
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<CategoryRecord id={self.id} name={self.name!r} parent_id={self.parent_id}>"

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from reviews_design.models.base import Base, TimestampMixin


class Option(Base, TimestampMixin):
    """Key-value option row. Values are stored as JSON documents."""

    __tablename__ = "options"

    key: Mapped[str] = mapped_column(String(191), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

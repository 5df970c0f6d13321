"""SQLAlchemy ORM models for persistent indexed stores."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from access_journal.storage.base_model import Base


class IndexedEntryModel(Base):
    """ORM model for one entry of a named indexed store.

    Several named stores share one table; each row belongs to exactly one
    store and holds one 64-bit value per key.

    Attributes:
        store_name: Name of the indexed store the entry belongs to
        entry_key: Serialized key
        entry_value: Serialized 64-bit value
    """

    __tablename__ = "indexed_entries"

    store_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    entry_key: Mapped[str] = mapped_column(String, primary_key=True)
    entry_value: Mapped[int] = mapped_column(BigInteger, nullable=False)

from sqlalchemy import Column, String, Text
from models.base import Base, TimestampMixin

class SavedState(Base, TimestampMixin):
    __tablename__ = "saved_states"

    # Full namespaced key, e.g. "quiz:player-42"
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)

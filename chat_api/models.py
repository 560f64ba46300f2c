from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, func
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()

class Room(Base):
    __tablename__ = "rooms"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    created_by_user_id = Column(String(255), nullable=False)

    messages = relationship("Message", back_populates="room")

class User(Base):
    __tablename__ = "users"
    user_id = Column(String(255), primary_key=True)
    display_name = Column(String(255), unique=True, nullable=False)

class Message(Base):
    __tablename__ = "messages"
    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    # Snapshot of the sender's display name at send time
    user_name = Column(String(255), nullable=False)
    message_text = Column(Text, nullable=False)
    timestamp = Column(DateTime, server_default=func.now(), nullable=False)

    room = relationship("Room", back_populates="messages")

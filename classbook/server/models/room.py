from sqlalchemy.orm import relationship
from sqlalchemy import Boolean, Column, Integer, JSON, String
from classbook.server.db import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    location = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False)
    equipments = Column(JSON, nullable=False, default=list)
    available = Column(Boolean, nullable=False, default=True)

    reservations = relationship(
        "Reservation", back_populates="room", cascade="all, delete-orphan"
    )

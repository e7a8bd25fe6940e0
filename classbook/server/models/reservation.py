from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, JSON, String, Time
from sqlalchemy.orm import relationship
from classbook.server.db import Base


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    purpose = Column(String, nullable=False, default="")
    participants = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="confirmed")
    reminded = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    room = relationship("Room", back_populates="reservations")
    user = relationship("User", back_populates="reservations")

    @property
    def room_name(self):
        return self.room.name if self.room else None

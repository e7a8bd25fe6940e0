from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time
from classbook.server.db import Base


class WaitlistEntry(Base):
    __tablename__ = "waitlist"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default="waiting")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

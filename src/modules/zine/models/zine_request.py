from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from database import Base


class ZineRequest(Base):
    __tablename__ = 'zine_requests'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=False, default="")
    city = Column(String(128), nullable=False)
    state = Column(String(128), nullable=False)
    zip = Column(String(32), nullable=False)
    emailed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

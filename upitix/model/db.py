from sqlalchemy.orm import declarative_base
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
)


Base = declarative_base()

STATUS_PENDING = "PENDING"
STATUS_CONFIRMED = "CONFIRMED"
PAYMENT_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)


# ----------------------------
# ORM models
# ----------------------------
class TicketCounter(Base):
    # singleton row, id is always 1
    __tablename__ = "ticket_counters"
    id = Column(Integer, primary_key=True)
    sold_a = Column(Integer, nullable=False, default=0)
    sold_b = Column(Integer, nullable=False, default=0)
    sold_c = Column(Integer, nullable=False, default=0)


class Payment(Base):
    __tablename__ = "payments"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    dept = Column(String, nullable=False)
    student_id = Column(String, nullable=False)
    phone = Column(String, nullable=False)

    ticket_type = Column(String, nullable=False, index=True)
    price = Column(Integer, nullable=False)  # rupees
    currency = Column(String, nullable=False, default="INR")

    # bank transfer reference, set by the buyer on verification
    utr = Column(String, nullable=True)

    # PENDING | CONFIRMED (confirmation is a manual step)
    status = Column(String, nullable=False, default=STATUS_PENDING)
    created_at = Column(Float, nullable=False)
    submitted_at = Column(Float, nullable=True)

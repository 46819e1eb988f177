# milk_ledger/models.py

from sqlalchemy import Column, Integer, String, Float, Date, Text
from .database import Base

# Table names match the schema the mobile client was originally built against.
# seller_id / buyer_id references are informal: no foreign keys are declared.

class Account(Base):
    __tablename__ = "role"
    id       = Column(Integer, primary_key=True, index=True)
    name     = Column(String(255), nullable=False)
    role     = Column(String(50), nullable=False)
    username = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash

class Pairing(Base):
    __tablename__ = "seller_buyer_mapping"
    id          = Column(Integer, primary_key=True, index=True)
    seller_id   = Column(Integer, nullable=False, index=True)
    buyer_id    = Column(Integer, nullable=False, index=True)
    seller_name = Column(String(255), nullable=False)
    buyer_name  = Column(String(255), nullable=False)

class MilkEntry(Base):
    __tablename__ = "milk_info"
    id             = Column(Integer, primary_key=True, index=True)
    seller_id      = Column(Integer, nullable=False, index=True)
    buyer_id       = Column(Integer, nullable=False, index=True)
    date           = Column(Date, nullable=False)
    milk_in_litres = Column(Float, nullable=False)
    fat            = Column(Float, nullable=False)
    shift          = Column(String(50), nullable=False)

class Transaction(Base):
    __tablename__ = "transaction"
    id           = Column(Integer, primary_key=True, index=True)
    seller_id    = Column(Integer, nullable=False, index=True)
    buyer_id     = Column(Integer, nullable=False)
    start_date   = Column(Date, nullable=False)
    end_date     = Column(Date, nullable=False)
    rate         = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)

class RevokedToken(Base):
    __tablename__ = "blacklisttoken"
    id    = Column(Integer, primary_key=True, index=True)
    token = Column(Text, nullable=False, index=True)

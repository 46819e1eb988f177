from pydantic import BaseModel, ConfigDict, Field, FiniteFloat
from datetime import date
from typing import Annotated, Literal

VALID_ROLES = {"buyer", "seller"}
VALID_SHIFTS = {"morning", "evening"}

# Non-empty strings; missing or blank fields are rejected with 400
NonEmptyStr = Annotated[str, Field(min_length=1)]
# Account ids start at 1; 0 counts as missing
RecordId = Annotated[int, Field(gt=0)]


class UserCreate(BaseModel):
    name: NonEmptyStr
    role: NonEmptyStr
    username: NonEmptyStr
    password: NonEmptyStr

class UserLogin(BaseModel):
    username: NonEmptyStr
    password: NonEmptyStr

class UserSchema(BaseModel):
    id: int
    name: str
    role: str
    username: str

    model_config = ConfigDict(from_attributes=True)

class UserInfo(BaseModel):
    userid: int
    name: str
    role: str

class CurrentUser(BaseModel):
    """Identity decoded from a verified bearer token."""
    id: int
    username: str
    role: Literal["buyer", "seller"]


class PairingCreate(BaseModel):
    seller_id: RecordId
    buyer_id: RecordId
    seller_name: NonEmptyStr
    buyer_name: NonEmptyStr

class PairingSchema(PairingCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class Counterparty(BaseModel):
    id: int
    name: str


# Range checks on shift/fat/litres happen in the handler, after the
# ownership check, so their messages stay specific. NaN and Infinity
# never reach them.
class MilkEntryCreate(BaseModel):
    seller_id: RecordId
    buyer_id: RecordId
    date: date
    milk_in_litres: FiniteFloat
    fat: FiniteFloat
    shift: str

class MilkEntrySchema(MilkEntryCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class MilkEntryRow(BaseModel):
    id: int
    date: date
    shift: str
    milk_in_litres: float
    fat: float

    model_config = ConfigDict(from_attributes=True)


class AmountRequest(BaseModel):
    buyer_id: RecordId
    seller_id: RecordId
    start_date: date
    end_date: date
    rate: FiniteFloat

class TransactionCreate(BaseModel):
    seller_id: RecordId
    buyer_id: RecordId
    start_date: date
    end_date: date
    rate: FiniteFloat
    total_amount: FiniteFloat

class TransactionSchema(TransactionCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class TransactionRow(BaseModel):
    start_date: date
    end_date: date
    rate: float
    total_amount: float

    model_config = ConfigDict(from_attributes=True)


class RevokedTokenSchema(BaseModel):
    id: int
    token: str

    model_config = ConfigDict(from_attributes=True)

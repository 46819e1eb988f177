import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Depends, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from milk_ledger import crud
from milk_ledger.auth import (
    authenticate_user,
    ensure_owner,
    get_current_user,
    get_token,
    issue_token,
    require_buyer,
    require_seller,
)
from milk_ledger.config import CORS_ORIGINS, LOG_LEVEL
from milk_ledger.database import init_db, get_db
from milk_ledger.errors import register_exception_handlers
from milk_ledger.schemas import (
    AmountRequest,
    Counterparty,
    CurrentUser,
    MilkEntryCreate,
    MilkEntryRow,
    MilkEntrySchema,
    PairingCreate,
    PairingSchema,
    RevokedTokenSchema,
    TransactionCreate,
    TransactionRow,
    TransactionSchema,
    UserCreate,
    UserInfo,
    UserLogin,
    UserSchema,
    VALID_ROLES,
    VALID_SHIFTS,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create missing tables at startup
    await init_db()
    yield

app = FastAPI(title="Milk Ledger API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


def validate_milk_reading(entry: MilkEntryCreate) -> None:
    if entry.shift not in VALID_SHIFTS:
        raise HTTPException(status_code=400, detail='Shift must be either "morning" or "evening"')
    if entry.fat < 0 or entry.fat > 10:
        raise HTTPException(status_code=400, detail="Fat must be between 0 and 10")
    if entry.milk_in_litres <= 0:
        raise HTTPException(status_code=400, detail="Milk quantity must be greater than 0")


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return "<h1>Hello, World!</h1>\n"

@app.get("/vividh", response_class=HTMLResponse)
async def read_vividh(current_user: CurrentUser = Depends(get_current_user)):
    return "<h1>Hello, World! My name is vividh</h1>\n"


@app.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    if user.role not in VALID_ROLES:
        raise HTTPException(status_code=400, detail='Role must be either "buyer" or "seller"')
    account = await crud.create_account(db, user)
    return {"message": "User registered successfully", "data": UserSchema.model_validate(account)}

@app.post("/login")
async def login(form_data: UserLogin, db: AsyncSession = Depends(get_db)):
    account = await authenticate_user(form_data.username, form_data.password, db)
    if not account:
        logger.info(f"Failed login for {form_data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    logger.info(f"Login for account {account.id}")
    return {"message": "Login successful", "token": issue_token(account)}

@app.post("/logout")
async def logout(
    token: str = Depends(get_token),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    revoked = await crud.revoke_token(db, token)
    logger.info(f"Account {current_user.id} logged out")
    return {
        "message": "Logout successful. Token added to blacklist.",
        "data": RevokedTokenSchema.model_validate(revoked),
    }

@app.post("/addToBlacklist", status_code=status.HTTP_201_CREATED)
async def add_to_blacklist(
    token: str = Depends(get_token),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    revoked = await crud.revoke_token(db, token)
    logger.info(f"Account {current_user.id} revoked its token")
    return {
        "message": "Token added to blacklist successfully",
        "data": RevokedTokenSchema.model_validate(revoked),
    }


@app.post("/addSellerBuyerMapping")
async def add_seller_buyer_mapping(
    pairing: PairingCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_seller),
):
    ensure_owner(pairing.seller_id, current_user, "You can only register yourself as a seller")
    db_pairing, created = await crud.upsert_pairing(db, pairing)
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "Seller added successfully"
    else:
        message = "Seller updated successfully"
    return {"message": message, "data": PairingSchema.model_validate(db_pairing)}


@app.post("/addMilkInfo", status_code=status.HTTP_201_CREATED)
async def add_milk_info(
    entry: MilkEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    ensure_owner(entry.buyer_id, current_user, "You can only add milk info as the logged-in buyer")
    validate_milk_reading(entry)
    db_entry = await crud.create_milk_entry(db, entry)
    return {
        "message": "Milk info data inserted successfully",
        "data": MilkEntrySchema.model_validate(db_entry),
    }

@app.put("/updateMilkInfo/{entry_id}")
async def update_milk_info(
    entry_id: int,
    entry: MilkEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    ensure_owner(entry.buyer_id, current_user, "You can only update your own entries")
    validate_milk_reading(entry)
    # ownership comes from the stored row, not the request body
    db_entry = await crud.get_milk_entry(db, entry_id)
    if not db_entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    ensure_owner(db_entry.buyer_id, current_user, "You can only update your own entries")
    db_entry = await crud.update_milk_entry(db, db_entry, entry)
    return {"message": "Entry updated successfully", "data": MilkEntrySchema.model_validate(db_entry)}

@app.delete("/deleteMilkInfo/{entry_id}")
async def delete_milk_info(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    # any buyer may delete; update is the only ownership-checked write
    db_entry = await crud.delete_milk_entry(db, entry_id)
    if not db_entry:
        raise HTTPException(status_code=404, detail="Milk info not found")
    logger.info(f"Buyer {current_user.id} deleted milk entry {entry_id}")
    return {"message": "Milk info deleted successfully", "data": MilkEntrySchema.model_validate(db_entry)}

@app.get("/getMilkInfoBySeller", response_model=List[MilkEntryRow])
async def get_milk_info_by_seller(
    seller_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    # buyers may read any seller; the client limits them to their own sellers
    if current_user.role == "seller":
        ensure_owner(seller_id, current_user, "You can only view your own milk information")
    return await crud.get_milk_entries_for_seller(db, seller_id)


@app.post("/calculateAmount")
async def calculate_amount(
    amount: AmountRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    ensure_owner(
        amount.buyer_id, current_user, "You can only calculate amounts for your own transactions"
    )
    if amount.rate <= 0:
        raise HTTPException(status_code=400, detail="Rate must be greater than 0")
    total_amount = await crud.calculate_amount(
        db,
        buyer_id=amount.buyer_id,
        seller_id=amount.seller_id,
        start_date=amount.start_date,
        end_date=amount.end_date,
        rate=amount.rate,
    )
    return {"message": "Amount calculated successfully", "totalAmount": total_amount}

@app.post("/addTransaction", status_code=status.HTTP_201_CREATED)
async def add_transaction(
    transaction: TransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    ensure_owner(
        transaction.buyer_id, current_user, "You can only add transactions as the logged-in buyer"
    )
    db_transaction = await crud.create_transaction(db, transaction)
    return {
        "message": "Transaction data inserted successfully",
        "data": TransactionSchema.model_validate(db_transaction),
    }

@app.get("/getTransactionDetails", response_model=List[TransactionRow])
async def get_transaction_details(
    seller_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    if current_user.role == "seller":
        ensure_owner(seller_id, current_user, "You can only view your own transaction details")
    return await crud.get_transactions_for_seller(db, seller_id)


@app.get("/getUserInfo", response_model=UserInfo)
async def get_user_info(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    account = await crud.get_account_by_username(db, username)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    return UserInfo(userid=account.id, name=account.name, role=account.role)

@app.get("/getSellersByBuyer", response_model=List[Counterparty])
async def get_sellers_by_buyer(
    buyer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_buyer),
):
    ensure_owner(buyer_id, current_user, "You can only view your own associated sellers")
    pairings = await crud.get_sellers_for_buyer(db, buyer_id)
    if not pairings:
        raise HTTPException(status_code=404, detail="No sellers found for the given buyer")
    return [Counterparty(id=p.seller_id, name=p.seller_name) for p in pairings]

@app.get("/getBuyers", response_model=List[Counterparty])
async def get_buyers(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_seller),
):
    buyers = await crud.list_buyers(db)
    return [Counterparty(id=b.id, name=b.name) for b in buyers]

@app.get("/getBuyerBySeller", response_model=List[Counterparty])
async def get_buyer_by_seller(
    seller_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_seller),
):
    ensure_owner(seller_id, current_user, "You can only view your own associated buyer")
    pairings = await crud.get_buyers_for_seller(db, seller_id)
    return [Counterparty(id=p.buyer_id, name=p.buyer_name) for p in pairings]

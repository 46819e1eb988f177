import logging
from datetime import date
from typing import List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from milk_ledger.auth import get_password_hash
from milk_ledger.models import Account, MilkEntry, Pairing, RevokedToken, Transaction
from milk_ledger.schemas import (
    MilkEntryCreate,
    PairingCreate,
    TransactionCreate,
    UserCreate,
)

logger = logging.getLogger(__name__)


async def create_account(db: AsyncSession, user: UserCreate) -> Account:
    db_account = Account(
        name=user.name,
        role=user.role,
        username=user.username,
        password=get_password_hash(user.password),
    )
    db.add(db_account)
    # Commit once, surface the unique-username violation as a conflict
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"Registration rejected, username taken: {user.username}")
        raise HTTPException(status_code=409, detail="Username already exists")
    await db.refresh(db_account)
    logger.info(f"Registered {db_account.role} account {db_account.id}")
    return db_account


async def get_account_by_username(db: AsyncSession, username: str) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.username == username))
    return result.scalars().first()


async def list_buyers(db: AsyncSession) -> List[Account]:
    result = await db.execute(select(Account).where(Account.role == "buyer"))
    return result.scalars().all()


async def revoke_token(db: AsyncSession, token: str) -> RevokedToken:
    revoked = RevokedToken(token=token)
    db.add(revoked)
    await db.commit()
    await db.refresh(revoked)
    return revoked


async def upsert_pairing(db: AsyncSession, pairing: PairingCreate) -> Tuple[Pairing, bool]:
    """Point the seller at a buyer, returning ``(row, created)``.

    Check-then-act across two statements: concurrent calls for the same
    seller can both miss the existing row and insert twice.
    """
    result = await db.execute(select(Pairing).where(Pairing.seller_id == pairing.seller_id))
    db_pairing = result.scalars().first()
    created = db_pairing is None
    if created:
        db_pairing = Pairing(**pairing.model_dump())
        db.add(db_pairing)
    else:
        # seller_name stays as first registered
        db_pairing.buyer_id = pairing.buyer_id
        db_pairing.buyer_name = pairing.buyer_name
    await db.commit()
    await db.refresh(db_pairing)
    logger.info(
        f"Seller {pairing.seller_id} paired with buyer {pairing.buyer_id} "
        f"({'created' if created else 'updated'})"
    )
    return db_pairing, created


async def get_sellers_for_buyer(db: AsyncSession, buyer_id: int) -> List[Pairing]:
    result = await db.execute(select(Pairing).where(Pairing.buyer_id == buyer_id))
    return result.scalars().all()


async def get_buyers_for_seller(db: AsyncSession, seller_id: int) -> List[Pairing]:
    result = await db.execute(select(Pairing).where(Pairing.seller_id == seller_id))
    return result.scalars().all()


async def find_milk_entry(
    db: AsyncSession, seller_id: int, buyer_id: int, day: date, shift: str
) -> Optional[MilkEntry]:
    result = await db.execute(
        select(MilkEntry).where(
            MilkEntry.seller_id == seller_id,
            MilkEntry.buyer_id == buyer_id,
            MilkEntry.date == day,
            MilkEntry.shift == shift,
        )
    )
    return result.scalars().first()


async def create_milk_entry(db: AsyncSession, entry: MilkEntryCreate) -> MilkEntry:
    # Not atomic with the insert below; no unique constraint backs it up.
    existing = await find_milk_entry(
        db, entry.seller_id, entry.buyer_id, entry.date, entry.shift
    )
    if existing:
        logger.info(f"Duplicate milk entry for {entry.date} {entry.shift}, existing id {existing.id}")
        raise HTTPException(
            status_code=409,
            detail={
                "message": (
                    f"Entry already exists for {entry.date.isoformat()} ({entry.shift} shift). "
                    "Please edit the existing entry instead."
                ),
                "existingId": existing.id,
            },
        )
    db_entry = MilkEntry(**entry.model_dump())
    db.add(db_entry)
    await db.commit()
    await db.refresh(db_entry)
    return db_entry


async def get_milk_entry(db: AsyncSession, entry_id: int) -> Optional[MilkEntry]:
    result = await db.execute(select(MilkEntry).where(MilkEntry.id == entry_id))
    return result.scalars().first()


async def update_milk_entry(
    db: AsyncSession, db_entry: MilkEntry, entry: MilkEntryCreate
) -> MilkEntry:
    # seller_id/buyer_id are fixed once recorded
    db_entry.date = entry.date
    db_entry.milk_in_litres = entry.milk_in_litres
    db_entry.fat = entry.fat
    db_entry.shift = entry.shift
    await db.commit()
    await db.refresh(db_entry)
    return db_entry


async def delete_milk_entry(db: AsyncSession, entry_id: int) -> Optional[MilkEntry]:
    db_entry = await get_milk_entry(db, entry_id)
    if not db_entry:
        return None
    await db.delete(db_entry)
    await db.commit()
    return db_entry


async def get_milk_entries_for_seller(db: AsyncSession, seller_id: int) -> List[MilkEntry]:
    result = await db.execute(
        select(MilkEntry)
        .where(MilkEntry.seller_id == seller_id)
        .order_by(MilkEntry.date, MilkEntry.id)
    )
    return result.scalars().all()


async def calculate_amount(
    db: AsyncSession,
    buyer_id: int,
    seller_id: int,
    start_date: date,
    end_date: date,
    rate: float,
) -> float:
    """Sum ``litres * fat * rate`` over the pair's entries in the inclusive range."""
    result = await db.execute(
        select(MilkEntry.milk_in_litres, MilkEntry.fat).where(
            MilkEntry.buyer_id == buyer_id,
            MilkEntry.seller_id == seller_id,
            MilkEntry.date >= start_date,
            MilkEntry.date <= end_date,
        )
    )
    total = 0.0
    for litres, fat in result.all():
        total += litres * fat * rate
    return total


async def create_transaction(db: AsyncSession, transaction: TransactionCreate) -> Transaction:
    db_transaction = Transaction(**transaction.model_dump())
    db.add(db_transaction)
    await db.commit()
    await db.refresh(db_transaction)
    return db_transaction


async def get_transactions_for_seller(db: AsyncSession, seller_id: int) -> List[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.seller_id == seller_id)
        .order_by(Transaction.start_date, Transaction.id)
    )
    return result.scalars().all()

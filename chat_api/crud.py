from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from . import models
from typing import List, Optional

# Dialects with INSERT ... ON CONFLICT (user_id) DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class UniqueViolation(Exception):
    """Raised when a unique constraint rejects a write."""


# --- Room CRUD ---
async def get_rooms(db: AsyncSession) -> List[models.Room]:
    result = await db.execute(select(models.Room).order_by(models.Room.id.asc()))
    return result.scalars().all()

async def get_room_by_name(db: AsyncSession, name: str) -> Optional[models.Room]:
    result = await db.execute(select(models.Room).filter(models.Room.name == name))
    return result.scalars().first()

async def create_room(db: AsyncSession, name: str, user_id: str) -> models.Room:
    db_room = models.Room(name=name, created_by_user_id=user_id)
    db.add(db_room)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise UniqueViolation(f"room name {name!r} already exists") from exc
    await db.refresh(db_room)
    return db_room

# --- Profile CRUD ---
async def get_user(db: AsyncSession, user_id: str) -> Optional[models.User]:
    result = await db.execute(select(models.User).filter(models.User.user_id == user_id))
    return result.scalars().first()

async def get_other_user_by_display_name(db: AsyncSession, display_name: str, user_id: str) -> Optional[models.User]:
    result = await db.execute(
        select(models.User).filter(
            models.User.display_name == display_name,
            models.User.user_id != user_id,
        )
    )
    return result.scalars().first()

async def upsert_user(db: AsyncSession, user_id: str, display_name: str) -> models.User:
    dialect_insert = UPSERT_INSERTS.get(db.get_bind().dialect.name)
    try:
        if dialect_insert is not None:
            stmt = dialect_insert(models.User).values(user_id=user_id, display_name=display_name)
            stmt = stmt.on_conflict_do_update(
                index_elements=[models.User.user_id],
                set_={"display_name": stmt.excluded.display_name},
            )
            await db.execute(stmt)
        else:
            await db.merge(models.User(user_id=user_id, display_name=display_name))
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        # merge() can also collide on user_id when the row appeared after its select
        if await get_other_user_by_display_name(db, display_name=display_name, user_id=user_id):
            raise UniqueViolation(f"display name {display_name!r} already taken") from exc
        raise
    return models.User(user_id=user_id, display_name=display_name)

# --- Message CRUD ---
async def create_message(db: AsyncSession, room_id: int, user_id: str, user_name: str, message_text: str) -> models.Message:
    db_message = models.Message(
        room_id=room_id, user_id=user_id, user_name=user_name, message_text=message_text
    )
    db.add(db_message)
    await db.commit()
    await db.refresh(db_message)
    return db_message

async def get_messages_for_room(db: AsyncSession, room_id: int, last_id: int = 0) -> List[models.Message]:
    query = (
        select(models.Message)
        .filter(models.Message.room_id == room_id, models.Message.id > last_id)
        .order_by(models.Message.timestamp.asc(), models.Message.id.asc())
    )
    result = await db.execute(query)
    return result.scalars().all()

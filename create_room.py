import argparse
import asyncio
from chat_api import crud
from chat_api.database import build_engine, build_sessionmaker, create_db_and_tables
from chat_api.settings import Settings, load_settings

async def create_room_script(name: str, user_id: str, settings: Settings):
    engine = build_engine(settings)
    try:
        await create_db_and_tables(engine)
        async with build_sessionmaker(engine)() as db:
            if await crud.get_room_by_name(db, name.strip()):
                print(f"Room already exists: {name.strip()}")
                return None
            created_room = await crud.create_room(db, name=name.strip(), user_id=user_id)
            print(f"Successfully created room: {created_room.name}")
            print(f"   ID: {created_room.id}")
            return created_room
    finally:
        await engine.dispose()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a chat room")
    parser.add_argument("name")
    parser.add_argument("user_id", nargs="?", default="admin")
    args = parser.parse_args()
    asyncio.run(create_room_script(args.name, args.user_id, load_settings()))

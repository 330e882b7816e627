"""Create an API user.

    python scripts/create_user.py <username> <password> [display name] [--super-admin]
"""

import asyncio
import pathlib
import sys
import uuid

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from sqlalchemy import select

from inventory_api.core.db import SessionLocal, engine
from inventory_api.core.security import get_password_hash_async
from inventory_api.models.inv_user import InvUserMaster


async def main(argv: list[str]) -> int:
    super_admin = "--super-admin" in argv
    args = [arg for arg in argv if arg != "--super-admin"]
    if len(args) < 2:
        print(__doc__)
        return 2
    username, password = args[0], args[1]
    display_name = args[2] if len(args) > 2 else username

    async with SessionLocal() as s:
        exists = await s.scalar(
            select(InvUserMaster.inv_user_code).where(InvUserMaster.inv_user_name == username)
        )
        if exists:
            print(f"user {username!r} already exists ({exists})")
            return 1
        user = InvUserMaster(
            inv_user_code=uuid.uuid4().hex[:12].upper(),
            inv_user_name=username,
            inv_user_pwd=await get_password_hash_async(password),
            inv_display_name=display_name,
            is_super_admin="Y" if super_admin else "N",
            active_flag="Y",
            created_by="script",
        )
        s.add(user)
        await s.commit()
        print(f"created {username!r} code={user.inv_user_code} super_admin={user.is_super_admin}")
    await engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))

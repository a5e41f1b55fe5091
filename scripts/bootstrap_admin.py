# scripts/bootstrap_admin.py
# Usage: python scripts/bootstrap_admin.py admin@example.com "Ada Admin" [department]
import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
import uuid
from datetime import datetime, timezone

from opsconsole.domain.models.user import User
from opsconsole.infrastructure.database.session import AsyncSessionLocal, init_models
from opsconsole.infrastructure.database.user_repository_db import DbUserRepository
from opsconsole.security.roles import Role


async def bootstrap_admin(email: str, name: str, department: str | None) -> None:
    await init_models()

    async with AsyncSessionLocal() as db:
        repo = DbUserRepository(db)
        if await repo.count_active_admins() > 0:
            print("An active admin already exists; nothing to do.")
            return
        existing = await repo.get_by_email(email)
        if existing is not None:
            await repo.change_role(existing.id, Role.ADMIN, keep_one_admin=False)
            print("Promoted existing user to admin:", existing.id)
            return
        admin = await repo.add(
            User(
                id=str(uuid.uuid4()),
                email=email.lower(),
                name=name,
                role=Role.ADMIN,
                department=department,
                created_at=datetime.now(timezone.utc),
            )
        )
        print("Created admin:", admin.id)


if __name__ == "__main__":
    if len(sys.argv) < 3:
        sys.exit("usage: bootstrap_admin.py EMAIL NAME [DEPARTMENT]")
    asyncio.run(bootstrap_admin(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else None))

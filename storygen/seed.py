"""초기 데이터 시드 스크립트 — 샘플 사용자와 스토리 생성.

Seed script — Creates two sample parent accounts and three stories.

Usage:
    python -m storygen.seed

Creates:
    - 2개 사용자 계정: parent1@example.com, parent2@example.com / password123
    - 3개 스토리: "The Magic Forest", "Space Adventure" (parent1), "The Friendly Dragon" (parent2)
"""

import asyncio

from sqlalchemy import select

from storygen.database import Base, async_session, engine
from storygen.models import Story, User
from storygen.utils.password import hash_password

SEED_PASSWORD: str = "password123"


async def seed() -> None:
    """데이터베이스를 샘플 데이터로 시드합니다.

    Seed the database with sample data. Creates tables if they don't exist.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        result = await db.execute(select(User).where(User.email == "parent1@example.com"))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        password_hash: str = hash_password(SEED_PASSWORD)
        parent1: User = User(email="parent1@example.com", name="Parent One", password_hash=password_hash)
        parent2: User = User(email="parent2@example.com", name="Parent Two", password_hash=password_hash)
        db.add_all([parent1, parent2])
        await db.flush()  # flush로 user.id 생성 (Flush to generate user ids)

        db.add_all([
            Story(
                title="The Magic Forest",
                content="Deep in the forest, there was a magical tree...",
                age_range="5-7",
                author="AI",
                user_id=parent1.id,
            ),
            Story(
                title="Space Adventure",
                content="In a galaxy far away...",
                age_range="8-10",
                author="AI",
                user_id=parent1.id,
            ),
            Story(
                title="The Friendly Dragon",
                content="Once there was a dragon who loved to bake cookies...",
                age_range="5-7",
                author="AI",
                user_id=parent2.id,
            ),
        ])

        await db.commit()
        print(f"Seeded: users={parent1.email}, {parent2.email} (password: {SEED_PASSWORD}), 3 stories")


if __name__ == "__main__":
    asyncio.run(seed())

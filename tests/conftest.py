"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
A fresh schema is created for every test, so tests never share rows.
The generation gateway is replaced by an in-process fake.
"""

import os

# 앱 임포트 전에 설정 — Must be set before storygen.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-bytes!!")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from storygen.api.deps import get_generation_service  # noqa: E402
from storygen.database import Base, get_db  # noqa: E402
from storygen.main import app  # noqa: E402
from storygen.models import *  # noqa: F401,F403,E402 — register all models with metadata
from storygen.models import Story, User  # noqa: E402
from storygen.services.generation_service import (  # noqa: E402
    GeneratedAsset,
    GeneratedStory,
    IllustrationPrompt,
    StoryPrompt,
)
from storygen.utils.jwt import create_access_token  # noqa: E402
from storygen.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeGenerationService:
    """생성 게이트웨이 대체 — 호출을 기록하고 고정 결과를 반환합니다."""

    def __init__(self) -> None:
        self.story_prompts: list[StoryPrompt] = []
        self.illustration_prompts: list[IllustrationPrompt] = []
        self.audio_inputs: list[str] = []

    async def generate_story(self, prompt: StoryPrompt) -> GeneratedStory:
        self.story_prompts.append(prompt)
        return GeneratedStory(
            title=prompt.title or "The Brave Little Fox",
            content="Once upon a time, a little fox lived in the woods.\n\nThe end.",
        )

    async def generate_illustration(self, prompt: IllustrationPrompt) -> GeneratedAsset:
        self.illustration_prompts.append(prompt)
        key = f"illustrations/{prompt.type}_{len(self.illustration_prompts)}.png"
        return GeneratedAsset(url=f"https://bucket.s3.us-east-1.amazonaws.com/{key}", key=key)

    async def generate_story_audio(self, content: str) -> GeneratedAsset:
        self.audio_inputs.append(content)
        key = f"stories/audio_{len(self.audio_inputs)}.mp3"
        return GeneratedAsset(url=f"https://bucket.s3.us-east-1.amazonaws.com/{key}", key=key)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def generator() -> FakeGenerationService:
    return FakeGenerationService()


@pytest_asyncio.fixture
async def client(db: AsyncSession, generator: FakeGenerationService) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션과 생성 게이트웨이를 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_generation_service] = lambda: generator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def create_user(db: AsyncSession, email: str, name: str, password: str = "secret123!") -> User:
    user = User(email=email, name=name, password_hash=hash_password(password))
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def create_story(db: AsyncSession, user: User, title: str = "The Magic Forest") -> Story:
    story = Story(
        title=title,
        content="Deep in the forest, there was a magical tree.\n\nIts leaves sang at night.",
        age_range="5-7",
        author="AI",
        user_id=user.id,
    )
    db.add(story)
    await db.flush()
    await db.refresh(story)
    return story


@pytest_asyncio.fixture
async def parent(db: AsyncSession) -> User:
    """스토리 소유자 사용자를 생성합니다."""
    return await create_user(db, "parent1@example.com", "Parent One")


@pytest_asyncio.fixture
async def other_parent(db: AsyncSession) -> User:
    return await create_user(db, "parent2@example.com", "Parent Two")


@pytest_asyncio.fixture
async def story(db: AsyncSession, parent: User) -> Story:
    """parent 소유의 스토리를 생성합니다."""
    return await create_story(db, parent)


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token(user.id)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

"""스토리 API 테스트 — 생성, 조회, 수정, 삭제, AI 생성, 오디오.

Story API tests — Manual creation, listing, updates, deletion with
cascade, AI generation and narrated audio.
"""

import uuid

from httpx import AsyncClient

from storygen.models import Audio, Illustration
from tests.conftest import auth_header, create_story, make_token

STORIES = "/stories"


# ===== Create =====

class TestCreateStory:
    """스토리 직접 생성 테스트."""

    async def test_create_story_for_self(self, client: AsyncClient, parent):
        res = await client.post(STORIES, json={
            "title": "A Quiet Night",
            "content": "The moon rose over the hill.",
            "ageRange": "3-5",
            "userId": str(parent.id),
            "characters": "Owl, Mouse",
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 201
        data = res.json()
        assert data["title"] == "A Quiet Night"
        assert data["ageRange"] == "3-5"
        assert data["userId"] == str(parent.id)
        assert data["user"] == {"name": "Parent One", "email": "parent1@example.com"}
        assert data["illustrations"] == []
        assert data["audio"] is None

    async def test_create_story_unknown_user(self, client: AsyncClient, parent):
        """존재하지 않는 사용자로 생성 시 404."""
        res = await client.post(STORIES, json={
            "title": "Lost",
            "content": "Nobody owns this.",
            "ageRange": "3-5",
            "userId": str(uuid.uuid4()),
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 404
        assert res.json()["error"] == "User not found"

    async def test_create_story_for_other_user_forbidden(self, client: AsyncClient, parent, other_parent):
        res = await client.post(STORIES, json={
            "title": "Not Mine",
            "content": "Some text.",
            "ageRange": "3-5",
            "userId": str(other_parent.id),
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 403

    async def test_create_story_requires_auth(self, client: AsyncClient, parent):
        res = await client.post(STORIES, json={
            "title": "Anon",
            "content": "Some text.",
            "ageRange": "3-5",
            "userId": str(parent.id),
        })
        assert res.status_code == 401

    async def test_create_story_missing_fields(self, client: AsyncClient, parent):
        res = await client.post(STORIES, json={"title": "Only a title"}, headers=auth_header(make_token(parent)))
        assert res.status_code == 400
        assert set(res.json()["details"]) >= {"content", "ageRange", "userId"}


# ===== Read =====

class TestReadStories:
    """스토리 조회 테스트."""

    async def test_list_stories(self, client: AsyncClient, story):
        res = await client.get(STORIES)
        assert res.status_code == 200
        data = res.json()
        assert len(data) == 1
        assert data[0]["user"]["name"] == "Parent One"

    async def test_get_story(self, client: AsyncClient, story):
        res = await client.get(f"{STORIES}/{story.id}")
        assert res.status_code == 200
        assert res.json()["title"] == "The Magic Forest"

    async def test_get_story_not_found(self, client: AsyncClient):
        res = await client.get(f"{STORIES}/{uuid.uuid4()}")
        assert res.status_code == 404
        assert res.json()["error"] == "Story not found"

    async def test_list_user_stories_newest_first(self, client: AsyncClient, db, parent, story):
        newer = await create_story(db, parent, title="Space Adventure")
        res = await client.get(f"{STORIES}/user/{parent.id}")
        assert res.status_code == 200
        titles = [s["title"] for s in res.json()]
        assert titles == [newer.title, story.title]

    async def test_list_user_stories_empty(self, client: AsyncClient, other_parent):
        """스토리가 없는 사용자 조회 시 404."""
        res = await client.get(f"{STORIES}/user/{other_parent.id}")
        assert res.status_code == 404
        assert res.json()["error"] == "No stories found for this user"


# ===== Update =====

class TestUpdateStory:
    """스토리 수정 테스트."""

    async def test_update_story_partial(self, client: AsyncClient, parent, story):
        res = await client.patch(
            f"{STORIES}/{story.id}",
            json={"title": "The Singing Forest"},
            headers=auth_header(make_token(parent)),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["title"] == "The Singing Forest"
        assert data["ageRange"] == "5-7"

    async def test_update_story_not_owner(self, client: AsyncClient, other_parent, story):
        res = await client.patch(
            f"{STORIES}/{story.id}",
            json={"title": "Hijacked"},
            headers=auth_header(make_token(other_parent)),
        )
        assert res.status_code == 403


# ===== Delete =====

class TestDeleteStory:
    """스토리 삭제 테스트."""

    async def test_delete_cascades_to_illustrations_and_audio(self, client: AsyncClient, db, parent, story):
        """삭제 시 일러스트와 오디오도 함께 삭제."""
        illustration = Illustration(url="https://x/cover.png", s3_key="illustrations/cover_1.png", type="cover", story_id=story.id)
        audio = Audio(url="https://x/a.mp3", s3_key="stories/a.mp3", story_id=story.id)
        db.add_all([illustration, audio])
        await db.flush()

        res = await client.delete(f"{STORIES}/{story.id}", headers=auth_header(make_token(parent)))
        assert res.status_code == 200
        assert res.json() == {"message": "Story deleted successfully"}

        assert (await client.get(f"{STORIES}/{story.id}")).status_code == 404
        assert (await client.get(f"/illustrations/{illustration.id}")).status_code == 404
        assert (await client.get(f"{STORIES}/{story.id}/audio")).status_code == 404
        assert await db.get(Audio, audio.id) is None

    async def test_delete_not_owner(self, client: AsyncClient, other_parent, story):
        """소유자가 아니면 403, 스토리는 유지."""
        res = await client.delete(f"{STORIES}/{story.id}", headers=auth_header(make_token(other_parent)))
        assert res.status_code == 403
        assert res.json()["error"] == "Not authorized to delete this story"

        assert (await client.get(f"{STORIES}/{story.id}")).status_code == 200

    async def test_delete_not_found(self, client: AsyncClient, parent):
        res = await client.delete(f"{STORIES}/{uuid.uuid4()}", headers=auth_header(make_token(parent)))
        assert res.status_code == 404


# ===== Generate =====

class TestGenerateStory:
    """AI 스토리 생성 테스트."""

    async def test_generate_story(self, client: AsyncClient, parent, generator):
        res = await client.post(f"{STORIES}/generate-story", json={
            "ageRange": "5-7",
            "theme": "friendship",
            "characters": ["Fox", " Owl "],
            "setting": "a snowy forest",
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 201
        data = res.json()
        assert data["title"] == "The Brave Little Fox"
        assert data["author"] == "AI"
        assert data["userId"] == str(parent.id)
        assert data["characters"] == "Fox, Owl"

        prompt = generator.story_prompts[0]
        assert prompt.characters == ("Fox", "Owl")
        assert prompt.theme == "friendship"

    async def test_generate_story_missing_age_range(self, client: AsyncClient, parent):
        res = await client.post(
            f"{STORIES}/generate-story",
            json={"title": "No Age"},
            headers=auth_header(make_token(parent)),
        )
        assert res.status_code == 400
        assert res.json()["details"] == ["ageRange"]

    async def test_generate_story_requires_auth(self, client: AsyncClient):
        res = await client.post(f"{STORIES}/generate-story", json={"ageRange": "5-7"})
        assert res.status_code == 401


# ===== Audio =====

class TestStoryAudio:
    """낭독 오디오 테스트."""

    async def test_generate_audio(self, client: AsyncClient, parent, story, generator):
        res = await client.post(f"{STORIES}/generate-audio/{story.id}", headers=auth_header(make_token(parent)))
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Audio generated successfully"
        assert data["audio"]["s3Key"] == "stories/audio_1.mp3"
        assert generator.audio_inputs == [story.content]

        res = await client.get(f"{STORIES}/{story.id}/audio")
        assert res.status_code == 200
        assert res.json()["url"] == data["audio"]["url"]

    async def test_generate_audio_replaces_previous(self, client: AsyncClient, parent, story):
        """오디오 재생성 시 기존 오디오 교체."""
        headers = auth_header(make_token(parent))
        await client.post(f"{STORIES}/generate-audio/{story.id}", headers=headers)
        await client.post(f"{STORIES}/generate-audio/{story.id}", headers=headers)

        res = await client.get(f"{STORIES}/{story.id}")
        assert res.json()["audio"]["url"].endswith("stories/audio_2.mp3")

    async def test_generate_audio_not_owner(self, client: AsyncClient, other_parent, story, generator):
        res = await client.post(f"{STORIES}/generate-audio/{story.id}", headers=auth_header(make_token(other_parent)))
        assert res.status_code == 403
        assert generator.audio_inputs == []

    async def test_get_audio_missing(self, client: AsyncClient, story):
        res = await client.get(f"{STORIES}/{story.id}/audio")
        assert res.status_code == 404

"""일러스트 API 테스트 — 생성, 표지, 조회, 삭제.

Illustration API tests — Prompt and cover generation, lookup and deletion.
"""

import uuid

from httpx import AsyncClient

from tests.conftest import auth_header, make_token

ILLUSTRATIONS = "/illustrations"


class TestGenerateIllustration:
    """일러스트 생성 테스트."""

    async def test_generate_scene_from_prompt(self, client: AsyncClient, parent, story, generator):
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(story.id),
            "prompt": "The fox meets the owl under the moon",
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 201
        data = res.json()
        assert data["type"] == "illustration"
        assert data["storyId"] == str(story.id)
        assert data["s3Key"] == "illustrations/illustration_1.png"

        prompt = generator.illustration_prompts[0]
        assert prompt.story_title == story.title
        assert prompt.story_content == "The fox meets the owl under the moon"

    async def test_generate_scene_with_sequence_uses_story(self, client: AsyncClient, parent, story, generator):
        """장면 번호가 있으면 스토리 본문에서 발췌."""
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(story.id),
            "prompt": "ignored",
            "sequence": 2,
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 201
        prompt = generator.illustration_prompts[0]
        assert prompt.story_content == story.content
        assert prompt.sequence == 2

    async def test_generate_invalid_type(self, client: AsyncClient, parent, story):
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(story.id),
            "prompt": "x",
            "type": "poster",
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 400
        assert res.json()["details"] == ["cover", "illustration"]

    async def test_generate_unknown_story(self, client: AsyncClient, parent):
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(uuid.uuid4()),
            "prompt": "x",
        }, headers=auth_header(make_token(parent)))
        assert res.status_code == 404

    async def test_generate_not_owner(self, client: AsyncClient, other_parent, story, generator):
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(story.id),
            "prompt": "x",
        }, headers=auth_header(make_token(other_parent)))
        assert res.status_code == 403
        assert generator.illustration_prompts == []

    async def test_generate_requires_auth(self, client: AsyncClient, story):
        res = await client.post(f"{ILLUSTRATIONS}/generate", json={
            "storyId": str(story.id),
            "prompt": "x",
        })
        assert res.status_code == 401


class TestCoverIllustration:
    """표지 생성 테스트."""

    async def test_generate_cover(self, client: AsyncClient, parent, story, generator):
        res = await client.post(f"{ILLUSTRATIONS}/cover/{story.id}", headers=auth_header(make_token(parent)))
        assert res.status_code == 201
        assert res.json()["type"] == "cover"
        assert generator.illustration_prompts[0].type == "cover"

        detail = (await client.get(f"/stories/{story.id}")).json()
        assert [i["type"] for i in detail["illustrations"]] == ["cover"]

    async def test_generate_cover_unknown_story(self, client: AsyncClient, parent):
        res = await client.post(f"{ILLUSTRATIONS}/cover/{uuid.uuid4()}", headers=auth_header(make_token(parent)))
        assert res.status_code == 404
        assert res.json()["error"] == "Story not found"


class TestReadAndDeleteIllustrations:
    """일러스트 조회/삭제 테스트."""

    async def test_list_story_illustrations_in_order(self, client: AsyncClient, parent, story):
        headers = auth_header(make_token(parent))
        await client.post(f"{ILLUSTRATIONS}/cover/{story.id}", headers=headers)
        await client.post(f"{ILLUSTRATIONS}/generate", json={"storyId": str(story.id), "prompt": "scene"}, headers=headers)

        res = await client.get(f"{ILLUSTRATIONS}/story/{story.id}")
        assert res.status_code == 200
        assert [i["type"] for i in res.json()] == ["cover", "illustration"]

    async def test_list_unknown_story(self, client: AsyncClient):
        res = await client.get(f"{ILLUSTRATIONS}/story/{uuid.uuid4()}")
        assert res.status_code == 404

    async def test_get_illustration_not_found(self, client: AsyncClient):
        res = await client.get(f"{ILLUSTRATIONS}/{uuid.uuid4()}")
        assert res.status_code == 404
        assert res.json()["error"] == "Illustration not found"

    async def test_delete_illustration(self, client: AsyncClient, parent, story):
        headers = auth_header(make_token(parent))
        created = (await client.post(f"{ILLUSTRATIONS}/cover/{story.id}", headers=headers)).json()

        res = await client.delete(f"{ILLUSTRATIONS}/{created['id']}", headers=headers)
        assert res.status_code == 200
        assert (await client.get(f"{ILLUSTRATIONS}/{created['id']}")).status_code == 404

    async def test_delete_illustration_not_owner(self, client: AsyncClient, parent, other_parent, story):
        created = (await client.post(
            f"{ILLUSTRATIONS}/cover/{story.id}", headers=auth_header(make_token(parent))
        )).json()

        res = await client.delete(f"{ILLUSTRATIONS}/{created['id']}", headers=auth_header(make_token(other_parent)))
        assert res.status_code == 403
        assert (await client.get(f"{ILLUSTRATIONS}/{created['id']}")).status_code == 200

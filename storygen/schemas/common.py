"""공통 Pydantic 스키마 정의.

Common Pydantic schema definitions.
The public JSON API uses camelCase keys (``ageRange``, ``s3Key``, ``createdAt``);
request bodies accept both camelCase and snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 별칭을 사용하는 베이스 모델.

    Base model serializing field names as camelCase aliases.
    ORM objects can be validated directly (``from_attributes``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """단순 메시지 응답 — Generic message response."""

    message: str

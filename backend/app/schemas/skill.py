from pydantic import BaseModel, Field

from app.schemas.common import RequestModel


class SkillCreate(RequestModel):
    name: str = Field(min_length=1, max_length=200)


class SkillOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}

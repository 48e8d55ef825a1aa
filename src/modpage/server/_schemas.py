from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    status: str


class PreviewRequest(BaseModel):
    """An unsaved edit to one template file."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    filename: str = ""
    content: str = ""

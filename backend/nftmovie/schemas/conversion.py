"""Pydantic v2 schemas for the /convert-to-video endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from nftmovie.services.batch_converter import BatchResult, ConversionRequest, is_absolute_url


class ConvertToVideoRequest(BaseModel):
    """Request body: one job per image URL, all sharing model and prompt."""

    model: str = Field(min_length=1)
    image_urls: list[str] = Field(alias="imageUrls", min_length=1)
    prompt_text: str = Field(alias="promptText", min_length=1)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("image_urls")
    @classmethod
    def _check_urls(cls, urls: list[str]) -> list[str]:
        bad = [u for u in urls if not is_absolute_url(u)]
        if bad:
            raise ValueError(f"Invalid image URL(s): {', '.join(bad)}")
        return urls

    def to_domain(self) -> ConversionRequest:
        return ConversionRequest(
            model=self.model,
            image_urls=tuple(self.image_urls),
            prompt_text=self.prompt_text,
        )


class ConversionResultItem(BaseModel):
    id: str
    video_url: str = Field(alias="videoUrl")

    model_config = {"populate_by_name": True}


class ConversionFailureItem(BaseModel):
    image_url: str = Field(alias="imageUrl")
    task_id: str | None = Field(default=None, alias="taskId")
    kind: str
    reason: str

    model_config = {"populate_by_name": True}


class ConvertToVideoResponse(BaseModel):
    """Successful batch. ``failures`` lists the items dropped from ``results``."""

    success: bool = True
    results: list[ConversionResultItem]
    failures: list[ConversionFailureItem] = []

    @classmethod
    def from_result(cls, result: BatchResult) -> ConvertToVideoResponse:
        return cls(
            success=result.success,
            results=[
                ConversionResultItem(id=s.task_id, video_url=s.video_url)
                for s in result.successes
            ],
            failures=[
                ConversionFailureItem(
                    image_url=f.source_url,
                    task_id=f.task_id,
                    kind=f.kind.value,
                    reason=f.reason,
                )
                for f in result.failures
            ],
        )


class ErrorResponse(BaseModel):
    error: str

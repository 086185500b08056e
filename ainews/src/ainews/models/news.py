from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class RawNewsItem(BaseModel):
    """
    News record as delivered by the aggregation API.
    """
    title: str
    description: str = ""
    source: str = ""
    published: str = Field("", alias="ctime")
    url: str = ""
    image_url: Optional[str] = Field(None, alias="picUrl")

    class Config:
        populate_by_name = True
        frozen = True
        extra = "ignore"

    @field_validator("description", "source", "published", "url", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        # Upstream sends null for fields it has no value for
        return "" if value is None else value


class SourceLink(BaseModel):
    title: str
    url: str

    class Config:
        frozen = True


class ScoredTopic(BaseModel):
    """
    A news item after analysis. Serialized with the camelCase keys used by
    analyzed-news-*.json files.
    """
    title: str
    description: str = ""
    source: str = ""
    date: str = ""
    url: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")

    interestingness: int = Field(..., ge=0, le=80)
    usefulness: int = Field(..., ge=0, le=20)
    total_score: int = Field(..., alias="totalScore", ge=0, le=100)

    timeline: List[str] = Field(default_factory=list)
    product_details: str = Field("", alias="productDetails")
    analysis: str = ""
    sources: List[SourceLink] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _total_is_sum(self):
        if self.total_score != self.interestingness + self.usefulness:
            raise ValueError(
                f"totalScore {self.total_score} != interestingness {self.interestingness}"
                f" + usefulness {self.usefulness}"
            )
        return self

    @classmethod
    def from_raw(
        cls,
        item: RawNewsItem,
        *,
        interestingness: int,
        usefulness: int,
        timeline: List[str],
        product_details: str,
        analysis: str,
        sources: List[SourceLink],
    ) -> "ScoredTopic":
        """Combine a raw item with its scores; total_score is always derived."""
        return cls(
            title=item.title,
            description=item.description,
            source=item.source,
            date=item.published,
            url=item.url,
            image_url=item.image_url,
            interestingness=interestingness,
            usefulness=usefulness,
            total_score=interestingness + usefulness,
            timeline=timeline,
            product_details=product_details,
            analysis=analysis,
            sources=sources,
        )

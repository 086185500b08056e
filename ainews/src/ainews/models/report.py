from pydantic import BaseModel, Field


class ReportStatistics(BaseModel):
    """
    Summary counts over a set of scored topics.
    """
    total: int = 0
    excellent: int = 0
    good: int = 0
    normal: int = 0
    avg_score: float = Field(0.0, alias="avgScore")

    class Config:
        populate_by_name = True
        frozen = True

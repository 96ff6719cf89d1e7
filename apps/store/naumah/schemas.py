"""Pydantic schemas for records kept in local storage."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PregnancyRecord(BaseModel):
    current_week: int = Field(..., alias="currentWeek", ge=1)
    # date-only strings stay dates; timed ISO strings become datetimes
    due_date: Optional[
        Annotated[Union[date, datetime], Field(union_mode="left_to_right")]
    ] = Field(default=None, alias="dueDate")
    user_id: Optional[int] = Field(default=None, alias="userId")
    user_specified: bool = Field(
        default=False,
        alias="_userSpecified",
        description="Set when the user entered this value directly",
    )
    local_timestamp: Optional[int] = Field(
        default=None,
        alias="_localTimestamp",
        description="Epoch milliseconds of the local user-specified write",
    )

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_storage(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class BabyDevelopmentRecord(BaseModel):
    week: int
    description: str
    key_developments: List[str] = Field(default_factory=list, alias="keyDevelopments")
    fun_fact: Optional[str] = Field(default=None, alias="funFact")
    size: Optional[str] = None
    image_description: Optional[str] = Field(default=None, alias="imageDescription")

    model_config = ConfigDict(populate_by_name=True)

    def to_storage(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class StageType(str, Enum):
    WEEK = "week"
    MONTH = "month"
    TRIMESTER = "trimester"


class PregnancyStageUpdate(BaseModel):
    stage_type: StageType = Field(..., alias="stageType")
    stage_value: str = Field(..., alias="stageValue", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


RecordInput = Union[PregnancyRecord, Dict[str, Any]]
DevelopmentInput = Union[BabyDevelopmentRecord, Dict[str, Any]]

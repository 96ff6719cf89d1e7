"""Pregnancy stage arithmetic used when the user picks their own stage."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Union

from .schemas import PregnancyRecord, PregnancyStageUpdate, StageType

FULL_TERM_WEEKS = 40
WEEKS_PER_MONTH = 4.3

# Middle week of each trimester.
TRIMESTER_MIDPOINTS = {1: 7, 2: 20, 3: 33}


def _clamp_week(week: int) -> int:
    return max(1, min(FULL_TERM_WEEKS, week))


def week_from_stage(stage_type: Union[StageType, str], stage_value: str) -> int:
    stage_type = StageType(stage_type)
    raw = (stage_value or "").strip()
    if not raw:
        raise ValueError("stage_value is required")

    if stage_type is StageType.WEEK:
        try:
            week = int(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid week value: {stage_value!r}") from exc
    elif stage_type is StageType.MONTH:
        try:
            months = float(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid month value: {stage_value!r}") from exc
        # round half up, not to even
        week = int(months * WEEKS_PER_MONTH + 0.5)
    else:
        trimester = int(raw[0]) if raw[0].isdigit() else None
        if trimester not in TRIMESTER_MIDPOINTS:
            raise ValueError(f"Invalid trimester value: {stage_value!r}")
        week = TRIMESTER_MIDPOINTS[trimester]
    return _clamp_week(week)


def due_date_for_week(current_week: int, today: Optional[date] = None) -> date:
    today = today or date.today()
    return today + timedelta(weeks=FULL_TERM_WEEKS - current_week)


def trimester_for_week(week: int) -> str:
    if week <= 13:
        return "first"
    if week <= 26:
        return "second"
    return "third"


def trimester_label(week: int) -> str:
    return {
        "first": "1st Trimester",
        "second": "2nd Trimester",
        "third": "3rd Trimester",
    }[trimester_for_week(week)]


def completion_percent(week: int) -> int:
    return int(week / FULL_TERM_WEEKS * 100 + 0.5)


def build_stage_record(
    update: PregnancyStageUpdate,
    *,
    user_id: Optional[int] = None,
    today: Optional[date] = None,
) -> PregnancyRecord:
    """Turn a stage picker selection into a pregnancy record."""
    current_week = week_from_stage(update.stage_type, update.stage_value)
    return PregnancyRecord(
        current_week=current_week,
        due_date=due_date_for_week(current_week, today),
        user_id=user_id,
    )

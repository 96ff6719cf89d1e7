"""Reconcile server pregnancy responses with the local store."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from pydantic import ValidationError

from .local_store import LocalDataStore
from .schemas import PregnancyRecord, PregnancyStageUpdate, RecordInput
from .stages import build_stage_record

logger = logging.getLogger(__name__)


def sync_server_pregnancy(
    store: LocalDataStore, server_record: Optional[RecordInput]
) -> Optional[PregnancyRecord]:
    """Cache a server response and return the record the caller should display."""
    record: Optional[PregnancyRecord] = None
    if server_record is not None:
        try:
            record = (
                server_record
                if isinstance(server_record, PregnancyRecord)
                else PregnancyRecord.model_validate(server_record)
            )
        except ValidationError as exc:
            logger.warning("Ignoring malformed server pregnancy data", exc_info=exc)

    if record is not None and not record.user_specified:
        store.save_pregnancy_data(record)

    local = store.get_pregnancy_data()
    return local if local is not None else record


def record_user_stage(
    store: LocalDataStore,
    update: PregnancyStageUpdate,
    *,
    user_id: Optional[int] = None,
    today: Optional[date] = None,
) -> Optional[PregnancyRecord]:
    record = build_stage_record(update, user_id=user_id, today=today)
    if not store.save_user_pregnancy_data(record):
        return None
    return store.get_pregnancy_data()

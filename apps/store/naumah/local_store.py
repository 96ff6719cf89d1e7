"""Local fallback persistence for pregnancy and baby development data.

Used when server-session persistence is unavailable, or to avoid refetching
content the client already has. Two rules sit on top of a plain key-value
medium:

* a user-specified pregnancy record wins over the server-sourced one, and
* once the user has written a record, ``prevent_overwrite`` keeps later server
  responses from replacing it.

Every public method fails soft: storage problems are logged and reported as
``False``/``None``, never raised.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .results import Err, Ok, Result, capture
from .schemas import BabyDevelopmentRecord, DevelopmentInput, PregnancyRecord, RecordInput
from .storage import StoragePort

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "naumah_"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class LocalDataStore:
    def __init__(
        self,
        storage: StoragePort,
        *,
        prefix: str = DEFAULT_PREFIX,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.storage = storage
        self.prefix = prefix
        self._clock = clock or _utc_now

        self.pregnancy_key = f"{prefix}pregnancy_data"
        self.user_pregnancy_key = f"{prefix}user_pregnancy_data"
        self.prevent_overwrite_key = f"{prefix}prevent_overwrite"
        self.last_update_key = f"{prefix}last_update"
        self.development_prefix = f"{prefix}baby_development_"
        self.development_index_key = f"{prefix}development_index"
        self._probe_key = f"{prefix}_test_"

    # -- availability -----------------------------------------------------

    def _probe(self) -> None:
        self.storage.set(self._probe_key, self._probe_key)
        self.storage.delete(self._probe_key)

    def is_available(self) -> bool:
        return capture(self._probe, reason="Local storage not available").is_ok

    # -- low-level helpers --------------------------------------------------

    def _development_key(self, week: int) -> str:
        return f"{self.development_prefix}{week}"

    def _now_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    def _read(self, key: str) -> Result:
        return capture(self.storage.get, key, reason=f"Error reading {key} from local storage")

    def _write(self, key: str, value: str) -> Result:
        return capture(self.storage.set, key, value, reason=f"Error saving {key} to local storage")

    def _delete(self, key: str) -> Result:
        return capture(self.storage.delete, key, reason=f"Error removing {key} from local storage")

    def _load(self, key: str, model: Type[ModelT]) -> Result:
        raw = self._read(key)
        if not raw.is_ok or raw.value is None:
            return raw
        try:
            return Ok(model.model_validate_json(raw.value))
        except ValidationError as exc:
            logger.warning("Discarding unreadable %s at %s", model.__name__, key, exc_info=exc)
            return Err(f"corrupt {model.__name__}", exc)

    def _coerce(self, record: object, model: Type[ModelT]) -> Result:
        if isinstance(record, model):
            return Ok(record)
        try:
            return Ok(model.model_validate(record))
        except ValidationError as exc:
            logger.warning("Rejected invalid %s: %s", model.__name__, exc)
            return Err(f"invalid {model.__name__}", exc)

    def _serialize(self, record: BaseModel) -> Result:
        return capture(
            record.to_storage,
            reason=f"Unable to serialize {type(record).__name__} for local storage",
        )

    def _touch_last_update(self) -> Result:
        return self._write(self.last_update_key, self._clock().isoformat())

    def _overwrite_blocked(self) -> bool:
        flag = self._read(self.prevent_overwrite_key)
        user = self._read(self.user_pregnancy_key)
        if not flag.is_ok or not user.is_ok:
            # Unknown state; keep whatever the user may have written.
            return True
        return flag.value == "true" and user.value is not None

    # -- pregnancy data ------------------------------------------------------

    def get_pregnancy_data(self) -> Optional[PregnancyRecord]:
        """Return the user-specified record, else the server copy, else None."""
        if not self.is_available():
            return None
        user = self._load(self.user_pregnancy_key, PregnancyRecord)
        if user.is_ok and user.value is not None:
            return user.value
        return self._load(self.pregnancy_key, PregnancyRecord).unwrap_or(None)

    def save_pregnancy_data(self, record: RecordInput) -> bool:
        """Persist a server-sourced record unless the user's choice must be kept."""
        if not self.is_available():
            return False
        parsed = self._coerce(record, PregnancyRecord)
        if not parsed.is_ok:
            return False
        if self._overwrite_blocked():
            logger.info("Skipping server pregnancy data; user-specified data takes precedence")
            return False
        payload = self._serialize(parsed.value)
        if not payload.is_ok:
            return False
        if not self._write(self.pregnancy_key, payload.value).is_ok:
            return False
        return self._touch_last_update().is_ok

    def save_user_pregnancy_data(self, record: RecordInput) -> bool:
        if not self.is_available():
            return False
        parsed = self._coerce(record, PregnancyRecord)
        if not parsed.is_ok:
            return False
        stamped = parsed.value.model_copy(
            update={"user_specified": True, "local_timestamp": self._now_ms()}
        )
        payload = self._serialize(stamped)
        if not payload.is_ok:
            return False
        previous = self._read(self.user_pregnancy_key)
        if not previous.is_ok:
            return False
        if not self._write(self.user_pregnancy_key, payload.value).is_ok:
            return False
        if not self._write(self.prevent_overwrite_key, "true").is_ok:
            # Never leave a user record behind without its guard flag.
            if previous.value is None:
                self._delete(self.user_pregnancy_key)
            else:
                self._write(self.user_pregnancy_key, previous.value)
            return False
        return self._touch_last_update().is_ok

    def clear_user_pregnancy_data(self) -> bool:
        """Drop the user-specified record and let server data through again."""
        if not self.is_available():
            return False
        removed = [self._delete(self.user_pregnancy_key), self._delete(self.prevent_overwrite_key)]
        return all(result.is_ok for result in removed)

    def is_overwrite_prevented(self) -> bool:
        if not self.is_available():
            return False
        return self._read(self.prevent_overwrite_key).unwrap_or(None) == "true"

    # -- baby development ----------------------------------------------------

    def _index_weeks(self) -> Result:
        raw = self._read(self.development_index_key)
        if not raw.is_ok:
            return raw
        if raw.value is None:
            return Ok([])
        try:
            weeks = json.loads(raw.value)
            return Ok(sorted({int(week) for week in weeks}))
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding unreadable development index", exc_info=exc)
            return Err("corrupt development index", exc)

    def _add_to_index(self, week: int) -> Result:
        weeks = self._index_weeks().unwrap_or([])
        if week in weeks:
            return Ok(weeks)
        updated = sorted([*weeks, week])
        written = self._write(self.development_index_key, json.dumps(updated))
        return Ok(updated) if written.is_ok else written

    def get_baby_development_data(self, week: int) -> Optional[BabyDevelopmentRecord]:
        if not self.is_available():
            return None
        return self._load(self._development_key(week), BabyDevelopmentRecord).unwrap_or(None)

    def save_baby_development_data(self, week: int, record: DevelopmentInput) -> bool:
        if isinstance(week, bool) or not isinstance(week, int):
            logger.warning("Rejected baby development data for non-integer week %r", week)
            return False
        if not self.is_available():
            return False
        if isinstance(record, BabyDevelopmentRecord):
            parsed = Ok(record.model_copy(update={"week": week}))
        elif isinstance(record, dict):
            parsed = self._coerce({**record, "week": week}, BabyDevelopmentRecord)
        else:
            parsed = self._coerce(record, BabyDevelopmentRecord)
        if not parsed.is_ok:
            return False
        payload = self._serialize(parsed.value)
        if not payload.is_ok:
            return False
        if not self._write(self._development_key(week), payload.value).is_ok:
            return False
        # The prefix sweep in clear_all still finds the record if this fails.
        self._add_to_index(week)
        return True

    def cached_development_weeks(self) -> List[int]:
        if not self.is_available():
            return []
        return self._index_weeks().unwrap_or([])

    # -- bookkeeping ---------------------------------------------------------

    def get_last_update_timestamp(self) -> Optional[datetime]:
        if not self.is_available():
            return None
        raw = self._read(self.last_update_key).unwrap_or(None)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Ignoring malformed last update timestamp %r", raw)
            return None

    def clear_all(self) -> bool:
        """Remove every key owned by this store, including all per-week records."""
        if not self.is_available():
            return False
        keys = {
            self.pregnancy_key,
            self.user_pregnancy_key,
            self.prevent_overwrite_key,
            self.last_update_key,
            self.development_index_key,
        }
        keys.update(self._development_key(week) for week in self._index_weeks().unwrap_or([]))
        listed = capture(
            self.storage.list_keys,
            self.development_prefix,
            reason="Error listing baby development keys",
        )
        keys.update(listed.unwrap_or([]))
        removed = [self._delete(key) for key in sorted(keys)]
        return listed.is_ok and all(result.is_ok for result in removed)

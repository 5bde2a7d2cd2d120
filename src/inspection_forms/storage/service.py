from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Protocol, TypeVar

from inspection_forms.config import Settings
from inspection_forms.errors import FormNotFoundError
from inspection_forms.models import InspectionForm, utc_now
from inspection_forms.storage.local import JsonFileStorage, LocalFormStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FormStore(Protocol):
    async def list(self) -> List[InspectionForm]: ...

    async def get(self, form_id: str) -> Optional[InspectionForm]: ...

    async def create(self, form: InspectionForm) -> InspectionForm: ...

    async def update(self, form_id: str, updates: Mapping[str, Any]) -> InspectionForm: ...

    async def delete(self, form_id: str) -> None: ...


class CircuitBreaker:
    """
    Consecutive-failure breaker for the remote backend.

    closed: calls go remote. open: calls skip remote until `reset_after_sec` has
    elapsed, then one probe is let through (half-open).
    """

    def __init__(
        self,
        *,
        failure_threshold: int = 3,
        reset_after_sec: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = max(1, int(failure_threshold))
        self.reset_after_sec = max(0.0, float(reset_after_sec))
        self._clock = clock
        self._failures = 0
        self._opened_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self._opened_at is not None

    def allow(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() - self._opened_at >= self.reset_after_sec

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info("Remote form store recovered; circuit closed")
        self._failures = 0
        self._opened_at = None

    def record_failure(self) -> None:
        self._failures += 1
        if self._opened_at is not None or self._failures >= self.failure_threshold:
            if self._opened_at is None:
                logger.warning("Remote form store failed %s times; circuit opened", self._failures)
            self._opened_at = self._clock()


class FormService:
    """
    Single list/get/create/update/delete surface over a remote and a local store.

    Remote availability is decided once at construction (`remote` is None when the
    backend is not configured). Per call, a healthy remote is tried first; any remote
    error is logged and that call is served from local storage. Local errors propagate.
    """

    def __init__(
        self,
        local: FormStore,
        remote: Optional[FormStore] = None,
        *,
        breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self.local = local
        self.remote = remote
        self.breaker = breaker or CircuitBreaker()

    @property
    def remote_configured(self) -> bool:
        return self.remote is not None

    @property
    def degraded(self) -> bool:
        """True while a configured remote is being bypassed after repeated failures."""
        return self.remote is not None and self.breaker.is_open

    async def _route(
        self,
        op: str,
        remote_call: Optional[Callable[[FormStore], Awaitable[T]]],
        local_call: Callable[[FormStore], Awaitable[T]],
        *,
        use_local_if: Callable[[T], bool] = lambda _result: False,
    ) -> T:
        if self.remote is not None and remote_call is not None and self.breaker.allow():
            try:
                result = await remote_call(self.remote)
            except FormNotFoundError:
                self.breaker.record_success()
                logger.debug("Remote %s found no record; checking local store", op)
            except Exception as e:
                self.breaker.record_failure()
                logger.warning("Remote %s failed, using local store: %s", op, e)
            else:
                self.breaker.record_success()
                if not use_local_if(result):
                    return result
        return await local_call(self.local)

    async def list_forms(self) -> List[InspectionForm]:
        return await self._route("list", lambda s: s.list(), lambda s: s.list())

    async def get_form(self, form_id: str) -> Optional[InspectionForm]:
        return await self._route(
            "get",
            lambda s: s.get(form_id),
            lambda s: s.get(form_id),
            use_local_if=lambda found: found is None,
        )

    async def create_form(self, form: InspectionForm) -> InspectionForm:
        now = utc_now()
        stamped = form.model_copy(update={"created_at": now, "updated_at": now})
        return await self._route("create", lambda s: s.create(stamped), lambda s: s.create(stamped))

    async def update_form(self, form_id: str, updates: Mapping[str, Any]) -> InspectionForm:
        """
        Merge `updates` into the stored form, bump `version` and stamp `updated_at`.

        Raises FormNotFoundError when neither backend holds `form_id`.
        """

        async def apply(store: FormStore) -> InspectionForm:
            current = await store.get(form_id)
            if current is None:
                raise FormNotFoundError(form_id)
            changes = {k: v for k, v in updates.items() if k not in {"id", "version", "createdAt", "created_at"}}
            changes.update(version=current.version + 1, updated_at=max(utc_now(), current.created_at))
            return await store.update(form_id, changes)

        return await self._route("update", apply, apply)

    async def delete_form(self, form_id: str) -> None:
        # Also clear any copy written locally while the remote was down.
        await self._route(
            "delete",
            lambda s: s.delete(form_id),
            lambda s: s.delete(form_id),
            use_local_if=lambda _result: True,
        )

    async def save_form(self, form: InspectionForm) -> InspectionForm:
        """Create on first save, update when a record with the same id exists."""
        if await self.get_form(form.id) is None:
            return await self.create_form(form)
        return await self.update_form(form.id, form.model_dump(exclude={"id", "created_at", "version"}))


def build_form_service(settings: Settings, *, data_dir: Optional[Path] = None) -> FormService:
    local = LocalFormStore(JsonFileStorage(data_dir or settings.data_dir))
    breaker = CircuitBreaker(
        failure_threshold=settings.circuit_failure_threshold,
        reset_after_sec=settings.circuit_reset_sec,
    )
    remote: Optional[FormStore] = None
    if settings.remote_configured:
        from inspection_forms.storage.remote import SupabaseFormStore, create_supabase_client

        client = create_supabase_client(settings)
        if client is not None:
            remote = SupabaseFormStore(client)
    logger.info("Form storage: %s", "supabase with local fallback" if remote else "local only")
    return FormService(local, remote, breaker=breaker)

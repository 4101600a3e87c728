"""
Main Orchestrator for Solat Qada Tracker

This module ties together the ledger, the cycle reset engine, the local
cache, the remote user store and the backup notifier, and defines the
flows a host application drives:
1. Load (remote → cache → default, then cycle check)
2. Mutate (apply → persist locally → schedule remote save → cycle check)
3. Session (login / register / logout)
4. Transfer (export / import) and manual backup

DESIGN DECISION: Local first, remote detached.
Every mutation is written to the local cache before anything else
happens. The remote save runs as a background task whose outcome only
updates sync_status; it never rolls the ledger back.

Collaborators are passed in through TrackerContext rather than being
module-level singletons, so tests can substitute in-memory fakes.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Coroutine, Optional

import structlog

from src.activity import ActivityLogger
from src.config import TrackerSettings, get_settings
from src.cycle.calendar import days_left_in_cycle, utc_now
from src.cycle.reset_engine import CycleResetEngine
from src.models.activity import ActivityEventType
from src.models.ledger import Ledger, SyncStatus, TrackerSnapshot
from src.models.prayer import PrayerName
from src.services.auth import AuthGate, AuthResult, InvalidPinError, validate_pin
from src.services.notification import (
    NotificationError,
    SmtpNotificationSink,
    WeeklySummaryNotifier,
)
from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsUserStore,
    JsonFileCache,
    LocalCacheInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UserStoreInterface,
)
from src.sync import (
    ImportFormatError,
    LedgerSource,
    LoadResult,
    apply_import,
    export_document,
    export_filename,
    parse_import_document,
    read_cached_snapshot,
    resolve_ledger,
    write_cached_snapshot,
)


SESSION_CACHE_KEY = "solat-qada-user"

logger = structlog.get_logger(__name__)


class TrackerContext:
    """
    Collaborators the tracker works with.

    Only the local cache is required. Without a user store the tracker
    runs local-only; without a notifier no backup emails are sent.
    """

    def __init__(
        self,
        cache: LocalCacheInterface,
        user_store: Optional[UserStoreInterface] = None,
        notifier: Optional[WeeklySummaryNotifier] = None,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[TrackerSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.cache = cache
        self.user_store = user_store
        self.auth_gate = AuthGate(user_store) if user_store else None
        self.notifier = notifier
        self.activity_logger = activity_logger or ActivityLogger()
        self.settings = settings or TrackerSettings()
        self.clock = clock


class QadaTracker:
    """
    Host-facing tracker.

    All entry points are coroutines and must run on one event loop.
    Each runs to completion before the next one observes the ledger.
    """

    def __init__(self, context: TrackerContext):
        self._ctx = context
        self._settings = context.settings
        self._clock = context.clock
        self._activity = context.activity_logger

        self._reset_engine = CycleResetEngine(
            clock=self._clock,
            cycle_days=self._settings.cycle_length_days,
        )
        self._reset_engine.add_before_reset_listener(self._on_before_reset)

        self._ledger = Ledger.default(self._clock())
        self._source = LedgerSource.DEFAULT
        self._username: Optional[str] = None
        self._sync_status = SyncStatus.OFFLINE

        # Set by wholesale replacements from outside; eaten by the next save
        self._suppress_next_save = False

        self._save_lock = asyncio.Lock()
        self._save_generation = 0
        self._background_tasks: set[asyncio.Task] = set()

        self.last_notification_error: Optional[str] = None

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def source(self) -> LedgerSource:
        return self._source

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def sync_status(self) -> SyncStatus:
        return self._sync_status

    @property
    def suppress_next_save(self) -> bool:
        return self._suppress_next_save

    @property
    def days_left(self) -> int:
        return days_left_in_cycle(
            self._ledger.cycle_start,
            self._clock(),
            self._settings.cycle_length_days,
        )

    def progress(self, name: PrayerName) -> int:
        return self._ledger.progress(name)

    def is_behind_target(self, name: PrayerName) -> bool:
        return self._ledger.is_behind_target(
            name,
            self.days_left,
            self._settings.warning_days_left,
        )

    # =========================================================================
    # Load
    # =========================================================================

    async def load(self) -> LoadResult:
        """
        Startup load.

        Resumes a saved session, awaits the remote tracker once if there
        is a session, then applies the load precedence and checks the
        cycle.
        """
        if self._username is None:
            self._username = self._read_saved_session()

        remote = await self._fetch_remote() if self._username else None
        result = resolve_ledger(remote, self._read_cache(), self._clock())
        self._apply_load(result)
        return result

    def _apply_load(self, result: LoadResult) -> None:
        self._ledger = result.ledger
        self._source = result.source
        if result.source == LedgerSource.REMOTE:
            self._suppress_next_save = True
            self._sync_status = SyncStatus.SYNCED

        self._activity.log_ledger_loaded(
            result.source.value, self._username, result.migrated
        )
        self._persist()
        self._check_cycle()

    def _read_saved_session(self) -> Optional[str]:
        try:
            return self._ctx.cache.get(SESSION_CACHE_KEY) or None
        except StorageReadError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_READ_FAILED, str(e)
            )
            return None

    def _read_cache(self) -> Optional[TrackerSnapshot]:
        try:
            return read_cached_snapshot(self._ctx.cache, self._clock())
        except StorageReadError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_READ_FAILED, str(e), self._username
            )
            return None

    async def _fetch_remote(self) -> Optional[TrackerSnapshot]:
        if self._ctx.user_store is None:
            return None
        try:
            return await self._ctx.user_store.load_tracker(self._username)
        except StorageError as e:
            self._sync_status = SyncStatus.ERROR
            self._activity.log_storage_failure(
                ActivityEventType.REMOTE_LOAD_FAILED, str(e), self._username
            )
            return None

    # =========================================================================
    # Mutations
    # =========================================================================

    async def set_total(self, name: PrayerName, raw_value: Any) -> None:
        self._ledger.set_total(name, raw_value)
        self._after_mutation("set_total", name, self._ledger.prayers[PrayerName(name)].total_qada)

    async def set_weekly_target(self, name: PrayerName, raw_value: Any) -> None:
        self._ledger.set_weekly_target(name, raw_value)
        self._after_mutation(
            "set_weekly_target", name, self._ledger.prayers[PrayerName(name)].weekly_target
        )

    async def record_completion(self, name: PrayerName, raw_count: Any) -> bool:
        """
        Record completed prayers.

        Returns:
            False if the count parsed to 0 (nothing changed, nothing saved)
        """
        if not self._ledger.record_completion(name, raw_count):
            return False
        self._after_mutation(
            "record_completion", name, self._ledger.prayers[PrayerName(name)].completed_this_week
        )
        return True

    async def reset_week(self) -> TrackerSnapshot:
        """Manually start a new cycle now. Returns the finished week."""
        previous = self._ledger.cycle_start
        snapshot = self._reset_engine.reset_cycle(self._ledger)
        self._activity.log_cycle_reset(
            previous.isoformat(),
            self._ledger.cycle_start.isoformat(),
            manual=True,
            username=self._username,
        )
        self._persist()
        return snapshot

    async def check_and_maybe_reset_cycle(self) -> bool:
        """Roll into a new cycle if the current one expired."""
        return self._check_cycle()

    def _after_mutation(self, operation: str, name: PrayerName, value: int) -> None:
        self._activity.log_mutation(operation, PrayerName(name).value, value, self._username)
        self._persist()
        self._check_cycle()

    def _check_cycle(self) -> bool:
        previous = self._ledger.cycle_start
        if self._reset_engine.check_and_maybe_reset(self._ledger) is None:
            return False
        self._activity.log_cycle_reset(
            previous.isoformat(),
            self._ledger.cycle_start.isoformat(),
            manual=False,
            username=self._username,
        )
        self._persist()
        return True

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist(self) -> None:
        """Write the local cache, then schedule the remote save."""
        try:
            write_cached_snapshot(self._ctx.cache, self._ledger)
        except StorageWriteError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_WRITE_FAILED, str(e), self._username
            )
        self._schedule_remote_save()

    def _schedule_remote_save(self) -> None:
        username = self._username
        if username is None or self._ctx.user_store is None:
            return

        if self._suppress_next_save:
            self._suppress_next_save = False
            self._activity.log_remote_save_suppressed(username)
            return

        self._save_generation += 1
        self._sync_status = SyncStatus.PENDING
        self._spawn(
            self._remote_save(username, self._ledger.to_snapshot(), self._save_generation)
        )

    async def _remote_save(
        self,
        username: str,
        snapshot: TrackerSnapshot,
        generation: int,
    ) -> None:
        # The lock keeps saves in the order they were scheduled
        async with self._save_lock:
            try:
                await self._ctx.user_store.save_tracker(username, snapshot)
            except StorageError as e:
                self._activity.log_remote_save(username, str(e))
                if generation == self._save_generation and username == self._username:
                    self._sync_status = SyncStatus.ERROR
                return

        self._activity.log_remote_save(username)
        if generation == self._save_generation and username == self._username:
            self._sync_status = SyncStatus.SYNCED

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def wait_for_background_tasks(self) -> None:
        """Wait for every detached remote save and backup email."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    # =========================================================================
    # Session
    # =========================================================================

    async def login(self, username: str, pin: str) -> AuthResult:
        """
        Log in and adopt the user's remote tracker.

        A stored tracker replaces the local ledger outright. A user
        without one gets the current local ledger uploaded.
        """
        if self._ctx.auth_gate is None:
            return AuthResult(success=False, error="Remote sync is not configured")

        try:
            result = await self._ctx.auth_gate.login(username, pin)
        except StorageError as e:
            self._activity.log_auth_failed(username, str(e))
            return AuthResult(
                success=False,
                error="Could not reach the server, try again later",
                error_type=type(e).__name__,
            )

        if not result.success:
            self._activity.log_auth_failed(username, result.error or "")
            return result

        self._start_session(result.username, ActivityEventType.USER_LOGGED_IN)
        if result.data is not None:
            self._apply_load(resolve_ledger(result.data, None, self._clock()))
        else:
            self._persist()
        return result

    async def register(self, username: str, pin: str) -> AuthResult:
        """Create an account and upload the current local ledger to it."""
        if self._ctx.auth_gate is None:
            return AuthResult(success=False, error="Remote sync is not configured")

        try:
            validate_pin(pin, self._settings.min_pin_length)
        except InvalidPinError as e:
            return AuthResult.failed(e)

        try:
            result = await self._ctx.auth_gate.register(username, pin)
        except StorageError as e:
            self._activity.log_auth_failed(username, str(e))
            return AuthResult(
                success=False,
                error="Could not reach the server, try again later",
                error_type=type(e).__name__,
            )

        if not result.success:
            self._activity.log_auth_failed(username, result.error or "")
            return result

        self._start_session(result.username, ActivityEventType.USER_REGISTERED)
        self._persist()
        return result

    async def logout(self) -> None:
        """End the session. The local ledger is kept."""
        username = self._username
        self._username = None
        self._suppress_next_save = False
        self._sync_status = SyncStatus.OFFLINE
        try:
            self._ctx.cache.delete(SESSION_CACHE_KEY)
        except StorageWriteError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_WRITE_FAILED, str(e)
            )
        if username:
            self._activity.log_session(ActivityEventType.USER_LOGGED_OUT, username)

    def _start_session(self, username: str, event_type: ActivityEventType) -> None:
        self._username = username
        self._sync_status = SyncStatus.PENDING
        try:
            self._ctx.cache.set(SESSION_CACHE_KEY, username)
        except StorageWriteError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_WRITE_FAILED, str(e), username
            )
        self._activity.log_session(event_type, username)

    # =========================================================================
    # Transfer
    # =========================================================================

    async def export_data(self) -> tuple[str, str]:
        """
        Returns:
            (filename, document text)
        """
        filename = export_filename(self._clock().date())
        self._activity.log_export(filename, self._username)
        return filename, export_document(self._ledger)

    async def import_data(self, text: str) -> list[str]:
        """
        Apply a backup document.

        Returns:
            Names of the fields that were applied

        Raises:
            ImportFormatError: If the document is malformed (ledger untouched)
        """
        try:
            document = parse_import_document(text)
        except ImportFormatError as e:
            self._activity.log_import_rejected(str(e), self._username)
            raise

        applied = apply_import(self._ledger, document)
        self._source = LedgerSource.IMPORT
        self._suppress_next_save = True
        self._activity.log_import(applied, self._username)
        self._persist()
        self._check_cycle()
        return applied

    # =========================================================================
    # Backup email
    # =========================================================================

    async def send_backup_now(self) -> bool:
        """
        Send the summary of the current ledger, ignoring the daily guard.

        Raises:
            NotificationError: If no notifier is configured or delivery fails
        """
        if self._ctx.notifier is None:
            raise NotificationError("Backup email is not configured")
        try:
            sent = await self._ctx.notifier.maybe_send_weekly_summary(
                self._ledger.to_snapshot(), force_bypass_guard=True
            )
        except NotificationError as e:
            self.last_notification_error = str(e)
            self._activity.log_backup(ActivityEventType.BACKUP_FAILED, True, str(e))
            raise
        except StorageWriteError as e:
            # Delivered, but the daily guard could not be recorded
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_WRITE_FAILED, str(e), self._username
            )
            sent = True
        self.last_notification_error = None
        self._activity.log_backup(ActivityEventType.BACKUP_SENT, True)
        return sent

    def _on_before_reset(self, snapshot: TrackerSnapshot) -> None:
        if self._ctx.notifier is not None:
            self._spawn(self._send_cycle_backup(snapshot))

    async def _send_cycle_backup(self, snapshot: TrackerSnapshot) -> None:
        try:
            sent = await self._ctx.notifier.maybe_send_weekly_summary(snapshot)
        except NotificationError as e:
            self.last_notification_error = str(e)
            self._activity.log_backup(ActivityEventType.BACKUP_FAILED, False, str(e))
            return
        except StorageWriteError as e:
            self._activity.log_storage_failure(
                ActivityEventType.CACHE_WRITE_FAILED, str(e), self._username
            )
            sent = True
        self.last_notification_error = None
        self._activity.log_backup(
            ActivityEventType.BACKUP_SENT if sent else ActivityEventType.BACKUP_SKIPPED,
            False,
        )


def create_app_components(
    use_remote: bool = True,
    clock: Callable[[], datetime] = utc_now,
) -> QadaTracker:
    """
    Factory function to build a tracker from settings.

    Args:
        use_remote: Whether to try Google Sheets and SMTP.
                    Set to False for a purely local tracker.

    Integrations that are not configured are skipped with a warning.
    """
    settings = get_settings()
    tracker_settings = settings.tracker

    cache = JsonFileCache(tracker_settings.resolved_cache_path)

    user_store = None
    notifier = None
    if use_remote:
        try:
            user_store = GoogleSheetsUserStore(
                GoogleSheetsClient(settings.google_sheets),
                timeout_seconds=tracker_settings.remote_timeout_seconds,
            )
        except Exception as e:
            # Remote store not configured - continue local-only
            logger.warning("remote_store_not_configured", error=str(e))

        try:
            notifier = WeeklySummaryNotifier(
                SmtpNotificationSink(settings.email),
                cache,
                clock=clock,
            )
        except Exception as e:
            logger.warning("backup_email_not_configured", error=str(e))

    context = TrackerContext(
        cache=cache,
        user_store=user_store,
        notifier=notifier,
        settings=tracker_settings,
        clock=clock,
    )
    return QadaTracker(context)

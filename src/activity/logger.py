"""
Activity Logger

Every significant tracker action is written to a structured log.
This gives:
1. Debugging capability when a sync or backup misbehaves
2. A record of which load path (remote, cache, default) was taken

The activity logger:
- Never raises (logging must not break a mutation)
- Only logs locally; nothing is persisted
"""

from typing import Optional

import structlog

from src.models.activity import ActivityEvent, ActivityEventBuilder, ActivityEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """Central activity logging service."""

    def __init__(self, logger_name: str = "solat_qada"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: ActivityEvent) -> None:
        """Emit an event at the level matching its severity."""
        log_dict = event.to_log_dict()
        severity = event.severity.value

        if severity == "error":
            self._logger.error("activity_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("activity_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

    def log_ledger_loaded(
        self,
        source: str,
        username: Optional[str],
        migrated: bool = False,
    ) -> None:
        self.log(ActivityEventBuilder.ledger_loaded(source, username, migrated))

    def log_mutation(
        self,
        operation: str,
        prayer: str,
        value: int,
        username: Optional[str],
    ) -> None:
        self.log(ActivityEventBuilder.ledger_mutated(operation, prayer, value, username))

    def log_cycle_reset(
        self,
        previous_cycle_start: str,
        new_cycle_start: str,
        manual: bool,
        username: Optional[str],
    ) -> None:
        self.log(
            ActivityEventBuilder.cycle_reset(
                previous_cycle_start=previous_cycle_start,
                new_cycle_start=new_cycle_start,
                manual=manual,
                username=username,
            )
        )

    def log_storage_failure(
        self,
        event_type: ActivityEventType,
        error_message: str,
        username: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.storage_failed(event_type, error_message, username))

    def log_remote_save(
        self,
        username: str,
        error_message: Optional[str] = None,
    ) -> None:
        """Log the outcome of a background remote save."""
        if error_message is None:
            self.log(ActivityEventBuilder.remote_save_succeeded(username))
        else:
            self.log(ActivityEventBuilder.remote_save_failed(username, error_message))

    def log_remote_save_suppressed(self, username: str) -> None:
        self.log(ActivityEventBuilder.remote_save_suppressed(username))

    def log_session(self, event_type: ActivityEventType, username: str) -> None:
        self.log(ActivityEventBuilder.user_session(event_type, username))

    def log_auth_failed(self, username: str, reason: str) -> None:
        self.log(ActivityEventBuilder.auth_failed(username, reason))

    def log_export(self, filename: str, username: Optional[str]) -> None:
        self.log(ActivityEventBuilder.data_exported(filename, username))

    def log_import(self, fields: list[str], username: Optional[str]) -> None:
        self.log(ActivityEventBuilder.data_imported(fields, username))

    def log_import_rejected(self, error_message: str, username: Optional[str]) -> None:
        self.log(ActivityEventBuilder.import_rejected(error_message, username))

    def log_backup(
        self,
        event_type: ActivityEventType,
        forced: bool,
        error_message: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.backup(event_type, forced, error_message))

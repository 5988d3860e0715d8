from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.factory import DuplicateDetectorFactory
from .attendance.locks import UserLockRegistry
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import PunchReconciler
from .calendars.classifier import CalendarClassifier
from .calendars.holiday_calendar import HolidayCalendar, HolidaysLibraryCalendar
from .core.config import EngineConfig
from .database.connection import DBConfig, DatabaseConnection
from .imports.progress import ImportProgressRegistry
from .imports.service import BatchImporter
from .payroll.service import PayrollReportService
from .payroll.summary import PeriodSummaryAggregator
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository, UserProfileRepository
from .schedules.service import ScheduleResolver, ScheduleService


@dataclass(frozen=True)
class Container:
    config: EngineConfig

    attendance_repo: AttendanceRepository
    schedules_repo: ScheduleRepository
    users_repo: Optional[UserProfileRepository]

    locks: UserLockRegistry
    progress: ImportProgressRegistry

    reconciler: PunchReconciler
    importer: BatchImporter
    schedule_resolver: ScheduleResolver
    schedule_service: ScheduleService
    classifier: CalendarClassifier
    payroll_service: PayrollReportService


def build_engine(
    *,
    attendance_repo: AttendanceRepository,
    schedules_repo: ScheduleRepository,
    users_repo: Optional[UserProfileRepository] = None,
    config: Optional[EngineConfig] = None,
    holiday_calendar: Optional[HolidayCalendar] = None,
) -> Container:
    """Wire services around already-built repositories."""

    config = config or EngineConfig()
    if holiday_calendar is None:
        holiday_calendar = HolidaysLibraryCalendar(config.holiday_country, special_names=config.special_holidays)

    # One lock registry: punches and import rows for the same user serialize.
    locks = UserLockRegistry()
    progress = ImportProgressRegistry(retention_seconds=config.progress_retention_seconds)

    resolver = ScheduleResolver(
        schedules_repo,
        default_start=config.default_schedule_start,
        default_end=config.default_schedule_end,
    )
    classifier = CalendarClassifier(holiday_calendar)

    return Container(
        config=config,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        users_repo=users_repo,
        locks=locks,
        progress=progress,
        reconciler=PunchReconciler(attendance_repo, locks=locks),
        importer=BatchImporter(
            attendance_repo,
            detector_factory=DuplicateDetectorFactory(tolerance_minutes=config.duplicate_tolerance_minutes),
            policy=config.duplicate_policy,
            progress=progress,
            locks=locks,
            progress_every=config.progress_every,
        ),
        schedule_resolver=resolver,
        schedule_service=ScheduleService(schedules_repo),
        classifier=classifier,
        payroll_service=PayrollReportService(
            attendance_repo,
            resolver,
            classifier,
            users_repo,
            aggregator=PeriodSummaryAggregator(basic_daily_rate=config.basic_daily_rate),
        ),
    )


def build_container(*, db_config: dict, engine_config: Optional[Mapping] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    schedules_repo = MySQLScheduleRepository(conn)
    return build_engine(
        attendance_repo=MySQLAttendanceRepository(conn),
        schedules_repo=schedules_repo,
        users_repo=schedules_repo,
        config=EngineConfig.from_mapping(engine_config),
    )

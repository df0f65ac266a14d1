from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .calendar_rules.repository import StoreCalendarRepository
from .calendar_rules.service import CalendarRules
from .core.enums import ApproverPolicy
from .database.connection import DBConfig, DatabaseConnection
from .database.memory_store import InMemoryStore
from .database.mysql_store import MySQLTabularStore
from .database.store import TabularStore
from .notifications.calendar import CalendarPublisher, LoggingCalendarPublisher, WebhookCalendarPublisher
from .notifications.notifier import EmailNotifier, LoggingNotifier, Notifier, SmtpSettings
from .pto.authorization import PtoAuthorizer
from .pto.balance import PtoBalanceEngine
from .pto.report import PtoBalanceReport
from .pto.store_pto_repository import StorePtoBalanceRepository, StorePtoRequestRepository
from .pto.workflow import PtoRequestWorkflow
from .system_config.repository import StoreSystemConfigRepository
from .system_config.service import SystemConfigService
from .users.directory import UserDirectory
from .users.service import UserService
from .users.store_user_repository import StoreUserRepository


@dataclass(frozen=True)
class Container:
    store: TabularStore

    users_repo: StoreUserRepository
    requests_repo: StorePtoRequestRepository
    balances_repo: StorePtoBalanceRepository
    calendar_repo: StoreCalendarRepository
    config_repo: StoreSystemConfigRepository

    directory: UserDirectory
    user_service: UserService
    config_service: SystemConfigService
    calendar_rules: CalendarRules
    authorizer: PtoAuthorizer
    balance_engine: PtoBalanceEngine
    pto_workflow: PtoRequestWorkflow
    balance_report: PtoBalanceReport
    notifier: Notifier
    calendar_publisher: CalendarPublisher


def build_store(*, backend: str, db_config: Optional[dict] = None) -> TabularStore:
    if backend == "memory":
        return InMemoryStore()
    if backend != "mysql":
        raise ValueError(f"Unknown STORE_BACKEND: {backend}")

    return MySQLTabularStore(DatabaseConnection.get_instance(DBConfig.from_mapping(db_config or {})))


def build_notifier(smtp: Optional[dict]) -> Notifier:
    if not smtp or not smtp.get("host"):
        return LoggingNotifier()
    return EmailNotifier(
        SmtpSettings(
            host=str(smtp["host"]),
            port=int(smtp.get("port", 587)),
            username=smtp.get("username") or None,
            password=smtp.get("password") or None,
            use_tls=bool(smtp.get("use_tls", True)),
            use_ssl=bool(smtp.get("use_ssl", False)),
            mail_from=str(smtp.get("mail_from") or "no-reply@localhost"),
        )
    )


def build_container(
    *,
    db_config: Optional[dict] = None,
    store_backend: str = "mysql",
    store: Optional[TabularStore] = None,
    approver_policy: str = ApproverPolicy.LIVE.value,
    enforce_blackout_on_submit: bool = False,
    smtp: Optional[dict] = None,
    calendar_webhook_url: Optional[str] = None,
    notifier: Optional[Notifier] = None,
    calendar_publisher: Optional[CalendarPublisher] = None,
) -> Container:
    if store is None:
        store = build_store(backend=store_backend, db_config=db_config)

    users_repo = StoreUserRepository(store)
    requests_repo = StorePtoRequestRepository(store)
    balances_repo = StorePtoBalanceRepository(store)
    calendar_repo = StoreCalendarRepository(store)
    config_repo = StoreSystemConfigRepository(store)

    notifier = notifier or build_notifier(smtp)
    if calendar_publisher is None:
        if calendar_webhook_url:
            calendar_publisher = WebhookCalendarPublisher(calendar_webhook_url)
        else:
            calendar_publisher = LoggingCalendarPublisher()

    directory = UserDirectory(users_repo)
    user_service = UserService(users_repo, directory)
    config_service = SystemConfigService(config_repo)
    calendar_rules = CalendarRules(calendar_repo)
    authorizer = PtoAuthorizer(directory, ApproverPolicy(approver_policy))
    balance_engine = PtoBalanceEngine(
        directory=directory,
        requests=requests_repo,
        balances=balances_repo,
        configs=config_repo,
        authorizer=authorizer,
    )
    pto_workflow = PtoRequestWorkflow(
        requests=requests_repo,
        directory=directory,
        calendar=calendar_rules,
        balances=balance_engine,
        configs=config_repo,
        authorizer=authorizer,
        notifier=notifier,
        calendar_publisher=calendar_publisher,
        enforce_blackout_on_submit=enforce_blackout_on_submit,
    )
    balance_report = PtoBalanceReport(balance_engine)

    return Container(
        store=store,
        users_repo=users_repo,
        requests_repo=requests_repo,
        balances_repo=balances_repo,
        calendar_repo=calendar_repo,
        config_repo=config_repo,
        directory=directory,
        user_service=user_service,
        config_service=config_service,
        calendar_rules=calendar_rules,
        authorizer=authorizer,
        balance_engine=balance_engine,
        pto_workflow=pto_workflow,
        balance_report=balance_report,
        notifier=notifier,
        calendar_publisher=calendar_publisher,
    )

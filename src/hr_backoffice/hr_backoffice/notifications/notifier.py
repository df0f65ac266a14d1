from __future__ import annotations

import smtplib
from dataclasses import dataclass
from datetime import date
from email.message import EmailMessage
from typing import List, Optional, Protocol, Tuple

from ..common.logging import get_logger
from ..core.constants import OUTBOUND_TIMEOUT_SECONDS
from ..pto.model import PtoRequest
from ..users.model import User

log = get_logger(__name__)

SIGNATURE = "Best regards,\nHR Management System"

# (recipient, subject, body)
Message = Tuple[str, str, str]


class Notifier(Protocol):
    """Human-readable notifications for PTO transitions.

    Callers treat every method as fire-and-forget.
    """

    def request_submitted(self, request: PtoRequest, employee: User, approver: Optional[User], *, short_notice: bool = False) -> None:
        raise NotImplementedError

    def request_approved(self, request: PtoRequest, employee: User, approver: User) -> None:
        raise NotImplementedError

    def request_denied(self, request: PtoRequest, employee: User, approver: User) -> None:
        raise NotImplementedError

    def request_cancelled(self, request: PtoRequest, employee: User, approver: Optional[User], *, was_pending: bool = False) -> None:
        raise NotImplementedError


def _format_day(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


def format_date_range(start: date, end: date) -> str:
    if start == end:
        return _format_day(start)
    return f"{_format_day(start)} - {_format_day(end)}"


def _details(request: PtoRequest) -> str:
    return (
        f"- Type: {request.type.value}\n"
        f"- Dates: {format_date_range(request.start_date, request.end_date)}\n"
        f"- Total Days: {request.total_days:g}"
    )


def submission_messages(request: PtoRequest, employee: User, approver: Optional[User], *, short_notice: bool = False) -> List[Message]:
    dates = format_date_range(request.start_date, request.end_date)
    reason = request.reason or "Not specified"
    approver_name = approver.name if approver else request.approver_name
    notice = "\nNote: this request was submitted on short notice.\n" if short_notice else ""

    messages = [
        (
            employee.email,
            f"PTO Request Submitted - {dates}",
            f"Hello {employee.name},\n\n"
            "Your PTO request has been submitted successfully and is pending approval.\n\n"
            f"Request Details:\n{_details(request)}\n- Reason: {reason}\n- Approver: {approver_name}\n"
            f"{notice}\n"
            "You will receive an email once your request has been reviewed.\n\n"
            f"{SIGNATURE}",
        )
    ]
    if approver:
        messages.append(
            (
                approver.email,
                f"PTO Request Pending Approval - {employee.name}",
                f"Hello {approver.name},\n\n"
                "A new PTO request requires your approval.\n\n"
                f"Employee: {employee.name}\nRequest Details:\n{_details(request)}\n- Reason: {reason}\n"
                f"{notice}\n"
                "Please log in to the HR Management System to review and approve/deny this request.\n\n"
                f"{SIGNATURE}",
            )
        )
    return messages


def approval_messages(request: PtoRequest, employee: User, approver: User) -> List[Message]:
    comment = f"- Manager Comment: {request.manager_comment}\n" if request.manager_comment else ""
    return [
        (
            employee.email,
            f"PTO Request Approved - {format_date_range(request.start_date, request.end_date)}",
            f"Hello {employee.name},\n\n"
            "Great news! Your PTO request has been approved.\n\n"
            f"Request Details:\n{_details(request)}\n- Approved by: {approver.name}\n{comment}\n"
            "Enjoy your time off!\n\n"
            f"{SIGNATURE}",
        )
    ]


def denial_messages(request: PtoRequest, employee: User, approver: User) -> List[Message]:
    return [
        (
            employee.email,
            f"PTO Request Denied - {format_date_range(request.start_date, request.end_date)}",
            f"Hello {employee.name},\n\n"
            "Unfortunately, your PTO request has been denied.\n\n"
            f"Request Details:\n{_details(request)}\n- Reviewed by: {approver.name}\n"
            f"- Reason for Denial: {request.manager_comment}\n\n"
            "If you have questions, please speak with your manager directly.\n\n"
            f"{SIGNATURE}",
        )
    ]


def cancellation_messages(request: PtoRequest, employee: User, approver: Optional[User], *, was_pending: bool = False) -> List[Message]:
    dates = format_date_range(request.start_date, request.end_date)
    released = f"{request.total_days:g} pending day(s) have been released back to your balance.\n\n" if was_pending else ""
    messages = [
        (
            employee.email,
            f"PTO Request Cancelled - {dates}",
            f"Hello {employee.name},\n\n"
            "Your PTO request has been cancelled successfully.\n\n"
            f"Cancelled Request Details:\n{_details(request)}\n\n"
            f"{released}"
            f"{SIGNATURE}",
        )
    ]
    if was_pending and approver:
        messages.append(
            (
                approver.email,
                f"PTO Request Cancelled by {employee.name}",
                f"Hello {approver.name},\n\n"
                f"{employee.name} has withdrawn a PTO request that was waiting for your approval.\n\n"
                f"Cancelled Request Details:\n{_details(request)}\n\n"
                "No action is required on your part.\n\n"
                f"{SIGNATURE}",
            )
        )
    return messages


class _MessageNotifier:
    """Builds the messages for each transition and hands them to `_deliver`."""

    def _deliver(self, messages: List[Message]) -> None:
        raise NotImplementedError

    def request_submitted(self, request, employee, approver, *, short_notice=False) -> None:
        self._deliver(submission_messages(request, employee, approver, short_notice=short_notice))

    def request_approved(self, request, employee, approver) -> None:
        self._deliver(approval_messages(request, employee, approver))

    def request_denied(self, request, employee, approver) -> None:
        self._deliver(denial_messages(request, employee, approver))

    def request_cancelled(self, request, employee, approver, *, was_pending=False) -> None:
        self._deliver(cancellation_messages(request, employee, approver, was_pending=was_pending))


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False
    mail_from: str = "no-reply@localhost"
    timeout: float = OUTBOUND_TIMEOUT_SECONDS


class EmailNotifier(_MessageNotifier):
    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def _send(self, to_email: str, subject: str, body: str) -> None:
        s = self._settings
        msg = EmailMessage()
        msg["From"] = s.mail_from
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        if s.use_ssl:
            with smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout) as server:
                if s.username and s.password:
                    server.login(s.username, s.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as server:
                if s.use_tls:
                    server.starttls()
                if s.username and s.password:
                    server.login(s.username, s.password)
                server.send_message(msg)

    def _deliver(self, messages: List[Message]) -> None:
        for to_email, subject, body in messages:
            if not to_email:
                continue
            self._send(to_email, subject, body)
            log.info("email_sent", to=to_email, subject=subject)


class LoggingNotifier(_MessageNotifier):
    """Used when SMTP is not configured: logs what would have been sent."""

    def __init__(self):
        self.sent: List[Message] = []

    def _deliver(self, messages: List[Message]) -> None:
        for to_email, subject, body in messages:
            self.sent.append((to_email, subject, body))
            log.info("email_skipped", to=to_email, subject=subject)

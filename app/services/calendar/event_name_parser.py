# app/services/calendar/event_name_parser.py
"""
Calendar event titles follow the "Name - Service - Phone" convention.

This module is the only place that reads or writes that convention.
"""
from typing import Optional

from app.schemas.calendar_events import ParsedEventName

DELIMITER = " - "


def parse_event_name(title: Optional[str]) -> ParsedEventName:
    """
    Split an event title into client name, service and phone.

    - two or more delimiters: name, service, phone (phone keeps the rest verbatim)
    - exactly one delimiter: name, service
    - no delimiter: the whole title is the service

    Never raises; absent fields are None.
    """
    title = title or ""
    delimiters = title.count(DELIMITER)

    if delimiters >= 2:
        name, service, phone = title.split(DELIMITER, 2)
        return ParsedEventName(
            shape="name_service_phone",
            client_name=name.strip() or None,
            service=service.strip(),
            phone=phone.strip() or None,
        )

    if delimiters == 1:
        name, service = title.split(DELIMITER, 1)
        return ParsedEventName(
            shape="name_service",
            client_name=name.strip() or None,
            service=service.strip(),
        )

    return ParsedEventName(shape="service_only", service=title.strip())


def format_event_name(client_name: Optional[str], service: str, phone: Optional[str]) -> str:
    """Build a title that parse_event_name reads back into the same fields"""
    name = (client_name or "").strip()
    service = (service or "").strip()
    phone = (phone or "").strip()

    if phone:
        return DELIMITER.join([name, service, phone])
    if name:
        return DELIMITER.join([name, service])
    return service

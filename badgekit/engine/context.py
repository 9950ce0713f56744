"""
Data context: the read-only record of facts a template resolves against.

Upstream records (an event row, an optional attendee row, and whatever product,
security and legal facts the caller has) are mapped onto the variable names
templates use, e.g. ``fullName``, ``venue.name`` or ``validation.validUntil``.
Each concern is also kept under its own group key (``event``, ``attendee``,
``product``, ``security``, ``legal``).
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .. import config


GROUPS = ("event", "attendee", "product", "security", "legal")


def freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def _get(record: Mapping, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return default


def _drop_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _drop_empty(value)
            if not value:
                continue
        if value is None:
            continue
        out[key] = value
    return out


def event_facts(event: Mapping) -> Dict[str, Any]:
    organizer = event.get("organizer") if isinstance(event.get("organizer"), Mapping) else {}
    venue = event.get("venue") if isinstance(event.get("venue"), Mapping) else {}
    schedule = event.get("schedule") if isinstance(event.get("schedule"), Mapping) else {}
    return _drop_empty(
        {
            "eventName": _get(event, "name", "event_name", "eventName"),
            "eventId": _get(event, "id", "event_id", "eventId"),
            "eventType": _get(event, "type", "event_type", "eventType"),
            "organizerName": _get(organizer, "name") or _get(event, "organizer_name", "organizerName"),
            "organizerContact": {
                "email": _get(organizer, "email"),
                "phone": _get(organizer, "phone"),
                "website": _get(organizer, "website"),
            },
            "venue": {
                "name": _get(venue, "name") or _get(event, "location", "venue_name"),
                "address": _get(venue, "address"),
                "city": _get(venue, "city"),
                "postalCode": _get(venue, "postal_code", "postalCode"),
                "country": _get(venue, "country"),
                "capacity": _get(venue, "capacity"),
            },
            "schedule": {
                "startDate": _get(schedule, "start_date", "startDate") or _get(event, "date", "start_date"),
                "endDate": _get(schedule, "end_date", "endDate") or _get(event, "end_date"),
                "doorsOpen": _get(schedule, "doors_open", "doorsOpen"),
                "startTime": _get(schedule, "start_time", "startTime"),
                "endTime": _get(schedule, "end_time", "endTime"),
                "timezone": _get(schedule, "timezone"),
            },
            "description": _get(event, "description"),
            "termsUrl": _get(event, "terms_url", "termsUrl"),
            "websiteUrl": _get(event, "website_url", "websiteUrl"),
            "logoUrl": _get(event, "logo_url", "logoUrl"),
        }
    )


def attendee_facts(attendee: Mapping) -> Dict[str, Any]:
    first = _get(attendee, "first_name", "firstName", "firstname", default="")
    last = _get(attendee, "last_name", "lastName", "lastname", default="")
    full = _get(attendee, "full_name", "fullName", "name") or " ".join(part for part in (first, last) if part)
    address = attendee.get("address") if isinstance(attendee.get("address"), Mapping) else {}
    return _drop_empty(
        {
            "firstName": first or None,
            "lastName": last or None,
            "fullName": full or None,
            "email": _get(attendee, "email"),
            "phone": _get(attendee, "phone"),
            "address": {
                "street": _get(address, "street"),
                "city": _get(address, "city"),
                "postalCode": _get(address, "postal_code", "postalCode"),
                "country": _get(address, "country"),
            },
            "company": _get(attendee, "company"),
            "profession": _get(attendee, "profession"),
            "role": _get(attendee, "role"),
            "department": _get(attendee, "department"),
            "badgeId": _get(attendee, "badge_id", "badgeId", "ticket_id", "ticketId"),
            "registrationDate": _get(attendee, "registration_date", "registrationDate"),
            "registrationSource": _get(attendee, "registration_source", "registrationSource"),
            "photoUrl": _get(attendee, "photo_url", "photoUrl"),
        }
    )


def product_facts(product: Mapping) -> Dict[str, Any]:
    seating = product.get("seating") if isinstance(product.get("seating"), Mapping) else {}
    return _drop_empty(
        {
            "badgeType": _get(product, "badge_type", "badgeType", "ticket_type", "ticketType"),
            "badgeCategory": _get(product, "category", "badge_category", "badgeCategory"),
            "accessLevel": _get(product, "access_level", "accessLevel"),
            "seating": {
                "section": _get(seating, "section"),
                "row": _get(seating, "row"),
                "seat": _get(seating, "seat", "chair"),
                "table": _get(seating, "table"),
                "entrance": _get(seating, "entrance"),
            },
            "benefits": list(product.get("benefits") or []) or None,
            "restrictions": list(product.get("restrictions") or []) or None,
        }
    )


def security_facts(security: Mapping, fallback_number: Optional[str] = None) -> Dict[str, Any]:
    validation = security.get("validation") if isinstance(security.get("validation"), Mapping) else {}
    number = _get(security, "badge_number", "badgeNumber", "ticket_number", "ticketNumber") or fallback_number
    verify_url = f"{config.VERIFY_BASE_URL}/{number}" if number else None
    return _drop_empty(
        {
            "badgeNumber": number,
            "serialNumber": _get(security, "serial_number", "serialNumber"),
            "qrCode": _get(security, "qr_code", "qrCode") or verify_url,
            "qrUrl": _get(security, "qr_url", "qrUrl") or verify_url,
            "barcode": _get(security, "barcode") or number,
            "barcodeFormat": _get(security, "barcode_format", "barcodeFormat", default="code128"),
            "validation": {
                "validFrom": _get(validation, "valid_from", "validFrom"),
                "validUntil": _get(validation, "valid_until", "validUntil"),
                "maxEntries": _get(validation, "max_entries", "maxEntries"),
                "usedEntries": _get(validation, "used_entries", "usedEntries"),
            },
        }
    )


def legal_facts(legal: Mapping) -> Dict[str, Any]:
    return _drop_empty(
        {
            "termsAndConditions": _get(legal, "terms_and_conditions", "termsAndConditions", "terms"),
            "privacyPolicy": _get(legal, "privacy_policy", "privacyPolicy"),
            "liabilityWaiver": _get(legal, "liability_waiver", "liabilityWaiver"),
            "ageRestriction": _get(legal, "age_restriction", "ageRestriction"),
            "photoConsent": _get(legal, "photo_consent", "photoConsent"),
            "dataProtection": _get(legal, "data_protection", "dataProtection"),
        }
    )


def build_context(
    event: Mapping,
    attendee: Optional[Mapping] = None,
    product: Optional[Mapping] = None,
    security: Optional[Mapping] = None,
    legal: Optional[Mapping] = None,
) -> Mapping[str, Any]:
    attendee_part = attendee_facts(attendee or {})
    parts = {
        "event": event_facts(event or {}),
        "attendee": attendee_part,
        "product": product_facts(product or {}),
        "security": security_facts(security or {}, fallback_number=attendee_part.get("badgeId")),
        "legal": legal_facts(legal or {}),
    }
    merged: Dict[str, Any] = {}
    for group in GROUPS:
        for key, value in parts[group].items():
            merged.setdefault(key, value)
    for group in GROUPS:
        merged.setdefault(group, parts[group])
    return freeze(merged)


def context_from_dict(data: Optional[Mapping]) -> Mapping[str, Any]:
    """Build a context from stored JSON.

    Grouped records (``{"event": {...}, "attendee": {...}}``) go through
    ``build_context``; non-empty top-level keys are kept and win over the
    built facts. Anything else is taken as an already flat context.
    """
    data = data or {}
    if isinstance(data.get("event"), Mapping) and not data.get("eventName"):
        merged = dict(build_context(**{group: data.get(group) for group in GROUPS}))
        for key, value in data.items():
            if key not in GROUPS and value not in (None, ""):
                merged[str(key)] = value
        return freeze(merged)
    return freeze(data)


SAMPLE_RECORDS: Dict[str, Any] = {
    "event": {
        "id": "evt-2025-summit",
        "name": "Tech Summit 2025",
        "type": "conference",
        "organizer": {"name": "Summit Events", "email": "contact@summit.example", "website": "summit.example"},
        "venue": {"name": "Palais des Congrès", "city": "Paris", "country": "France", "capacity": 2500},
        "schedule": {"start_date": "2025-06-12", "end_date": "2025-06-13", "doors_open": "08:30"},
    },
    "attendee": {
        "first_name": "Jean",
        "last_name": "Dupont",
        "full_name": "JEAN DUPONT",
        "email": "jean.dupont@example.com",
        "company": "Acme SAS",
        "profession": "Engineer",
        "role": "Speaker",
        "badge_id": "B-000123",
    },
    "product": {"badge_type": "VIP", "access_level": "All areas", "seating": {"section": "A", "row": "3", "seat": "12"}},
    "security": {"validation": {"valid_from": "2025-06-12", "valid_until": "2025-06-13", "max_entries": 2}},
    "legal": {"terms": "Badge is personal and non-transferable."},
}


def sample_context() -> Mapping[str, Any]:
    return context_from_dict(SAMPLE_RECORDS)

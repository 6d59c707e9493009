import logging
import re
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .models import WhatsAppNumber


logger = logging.getLogger(__name__)

NIGERIAN_NUMBER_RE = re.compile(r"^\+234[789][01]\d{8}$")

INVALID_NUMBER_MESSAGE = "Please enter a valid Nigerian WhatsApp number (e.g., 08012345678 or +2348012345678)"
DUPLICATE_MESSAGE = "This WhatsApp number was already submitted recently."
CHECK_FAILED_MESSAGE = "Failed to validate submission. Please try again."
SAVE_FAILED_MESSAGE = "Failed to save your WhatsApp number. Please try again."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."

CSV_HEADERS = [
    "WhatsApp Number",
    "Country Code",
    "Source Page",
    "Device Type",
    "Is Mobile",
    "UTM Source",
    "UTM Medium",
    "UTM Campaign",
    "Referrer",
    "Created At",
]
EXPORT_LIMIT = 10000
DEFAULT_PAGE_SIZE = 50


@dataclass
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None
    formatted_number: Optional[str] = None


@dataclass
class SubmissionResult:
    success: bool
    error: Optional[str] = None


@dataclass
class WhatsAppSubmission:
    whatsapp_number: str
    country_code: Optional[str] = None


@dataclass
class NumbersFilters:
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    source_page: Optional[str] = None
    device_type: Optional[str] = None
    search: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "NumbersFilters":
        """Parse dashboard query parameters; blank or malformed values are ignored.

        A bare date in ``date_to`` covers the whole day.
        """

        def _when(value, end_of_day=False):
            if not value:
                return None
            day = parse_date(value)
            if day is not None:
                parsed = datetime.combine(day, time.max if end_of_day else time.min)
            else:
                parsed = parse_datetime(value)
                if parsed is None:
                    return None
            if timezone.is_naive(parsed):
                parsed = timezone.make_aware(parsed)
            return parsed

        def _int(value):
            try:
                return int(value) if value not in (None, "") else None
            except (TypeError, ValueError):
                return None

        try:
            date_from = _when(params.get("date_from"))
            date_to = _when(params.get("date_to"), end_of_day=True)
        except ValueError:
            date_from = date_to = None
        return cls(
            date_from=date_from,
            date_to=date_to,
            source_page=params.get("source_page") or None,
            device_type=params.get("device_type") or None,
            search=(params.get("search") or "").strip() or None,
            limit=_int(params.get("limit")),
            offset=_int(params.get("offset")),
        )


@dataclass
class NumbersPage:
    data: List[WhatsAppNumber]
    total: int
    error: Optional[str] = None


@dataclass
class NumbersStats:
    total_numbers: int = 0
    today_numbers: int = 0
    week_numbers: int = 0
    month_numbers: int = 0
    mobile_percentage: int = 0
    top_sources: List[Dict[str, Any]] = field(default_factory=list)
    recent_submissions: List[WhatsAppNumber] = field(default_factory=list)


class WhatsAppNumbersService:
    """Validation, de-duplication and storage of popup phone numbers."""

    def __init__(
        self,
        entries=None,
        now: Callable[[], datetime] = timezone.now,
        default_country_code: Optional[str] = None,
        duplicate_window_hours: Optional[int] = None,
    ):
        self.entries = entries if entries is not None else WhatsAppNumber.objects
        self.now = now
        self.default_country_code = default_country_code or getattr(settings, "DEFAULT_COUNTRY_CODE", "+234")
        if duplicate_window_hours is None:
            duplicate_window_hours = getattr(settings, "WHATSAPP_DUPLICATE_WINDOW_HOURS", 24)
        self.duplicate_window = timedelta(hours=duplicate_window_hours)

    def validate_whatsapp_number(self, number: str, country_code: Optional[str] = None) -> ValidationResult:
        country_code = country_code or self.default_country_code
        clean = re.sub(r"[^\d+]", "", number or "")
        formatted = clean
        if not clean.startswith("+"):
            if clean.startswith("0"):
                formatted = country_code + clean[1:]
            elif clean.startswith("234"):
                formatted = "+" + clean
            else:
                formatted = country_code + clean
        if not NIGERIAN_NUMBER_RE.match(formatted):
            return ValidationResult(False, error=INVALID_NUMBER_MESSAGE)
        return ValidationResult(True, formatted_number=formatted)

    def submit_whatsapp_number(self, data: WhatsAppSubmission, tracker) -> SubmissionResult:
        """Store one popup submission and mark the visitor as converted.

        Never raises: store problems and unexpected errors come back as a
        failed :class:`SubmissionResult` with a user-facing message.
        """
        try:
            country_code = data.country_code or self.default_country_code
            validation = self.validate_whatsapp_number(data.whatsapp_number, country_code)
            if not validation.is_valid:
                return SubmissionResult(False, validation.error)

            # reads the visitor record, so visit_count moves here and again on mark_whatsapp_submitted
            stats = tracker.get_visitor_stats()
            device = stats["device_info"]
            page = stats["page_info"]
            utm = stats["utm_params"]
            entry = {
                "whatsapp_number": validation.formatted_number,
                "country_code": country_code,
                "source_page": page["pathname"],
                "source_url": page["url"],
                "user_agent": device.user_agent,
                "ip_address": tracker.client.ip_address,
                "browser_fingerprint": stats["visitor_info"].browser_fingerprint,
                "referrer": page["referrer"],
                "utm_source": utm["utm_source"],
                "utm_medium": utm["utm_medium"],
                "utm_campaign": utm["utm_campaign"],
                "device_type": device.device_type,
                "is_mobile": device.is_mobile,
            }

            since = self.now() - self.duplicate_window
            try:
                duplicate = self.entries.filter(
                    whatsapp_number=validation.formatted_number, created_at__gte=since
                ).exists()
            except DatabaseError:
                logger.exception("Error checking existing WhatsApp entries")
                return SubmissionResult(False, CHECK_FAILED_MESSAGE)
            if duplicate:
                return SubmissionResult(False, DUPLICATE_MESSAGE)

            try:
                self.entries.create(**entry)
            except DatabaseError:
                logger.exception("Error inserting WhatsApp number")
                return SubmissionResult(False, SAVE_FAILED_MESSAGE)

            tracker.mark_whatsapp_submitted()
            logger.info("WhatsApp number captured from %s (%s)", entry["source_page"], entry["device_type"])
            return SubmissionResult(True)
        except Exception:
            logger.exception("Error submitting WhatsApp number")
            return SubmissionResult(False, UNEXPECTED_MESSAGE)

    def _filtered(self, filters: NumbersFilters):
        qs = self.entries.all()
        if filters.date_from:
            qs = qs.filter(created_at__gte=filters.date_from)
        if filters.date_to:
            qs = qs.filter(created_at__lte=filters.date_to)
        if filters.source_page:
            qs = qs.filter(source_page=filters.source_page)
        if filters.device_type:
            qs = qs.filter(device_type=filters.device_type)
        if filters.search:
            qs = qs.filter(Q(whatsapp_number__icontains=filters.search) | Q(source_page__icontains=filters.search))
        return qs

    def get_whatsapp_numbers(self, filters: Optional[NumbersFilters] = None) -> NumbersPage:
        filters = filters or NumbersFilters()
        try:
            qs = self._filtered(filters)
            total = qs.count()
            qs = qs.order_by("-created_at")
            if filters.offset:
                qs = qs[filters.offset:filters.offset + (filters.limit or DEFAULT_PAGE_SIZE)]
            elif filters.limit:
                qs = qs[:filters.limit]
            return NumbersPage(data=list(qs), total=total)
        except DatabaseError:
            logger.exception("Error fetching WhatsApp numbers")
            return NumbersPage(data=[], total=0, error="Failed to fetch WhatsApp numbers")

    def get_whatsapp_numbers_stats(self) -> NumbersStats:
        now = self.now()
        today = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            total = self.entries.count()
            mobile = self.entries.filter(is_mobile=True).count()
            sources = Counter(
                self.entries.order_by("-created_at").values_list("source_page", flat=True)[:1000]
            )
            return NumbersStats(
                total_numbers=total,
                today_numbers=self.entries.filter(created_at__gte=today).count(),
                week_numbers=self.entries.filter(created_at__gte=now - timedelta(days=7)).count(),
                month_numbers=self.entries.filter(created_at__gte=now - timedelta(days=30)).count(),
                mobile_percentage=int(mobile * 100 / total + 0.5) if total else 0,
                top_sources=[{"source": source, "count": count} for source, count in sources.most_common(5)],
                recent_submissions=list(self.entries.order_by("-created_at")[:10]),
            )
        except DatabaseError:
            logger.exception("Error getting WhatsApp numbers stats")
            return NumbersStats()

    def export_whatsapp_numbers(self, filters: Optional[NumbersFilters] = None) -> str:
        """CSV export. Fields are wrapped in double quotes as-is; embedded
        quotes are not escaped."""
        filters = replace(filters or NumbersFilters(), limit=EXPORT_LIMIT)
        page = self.get_whatsapp_numbers(filters)
        lines = [",".join(CSV_HEADERS)]
        for entry in page.data:
            fields = [
                entry.whatsapp_number,
                entry.country_code,
                entry.source_page,
                entry.device_type,
                "Yes" if entry.is_mobile else "No",
                entry.utm_source or "",
                entry.utm_medium or "",
                entry.utm_campaign or "",
                entry.referrer,
                timezone.localtime(entry.created_at).strftime("%d/%m/%Y, %H:%M:%S"),
            ]
            lines.append(",".join(f'"{value}"' for value in fields))
        return "\n".join(lines)

    def delete_whatsapp_number(self, entry_id: str) -> SubmissionResult:
        try:
            self.entries.filter(pk=entry_id).delete()
        except (DatabaseError, ValidationError):
            logger.exception("Error deleting WhatsApp number %s", entry_id)
            return SubmissionResult(False, "Failed to delete entry")
        logger.info("Deleted WhatsApp number entry %s", entry_id)
        return SubmissionResult(True)


def get_whatsapp_numbers_service() -> WhatsAppNumbersService:
    from django.apps import apps

    return apps.get_app_config("visitors").whatsapp_numbers_service

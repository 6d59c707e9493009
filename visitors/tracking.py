"""Per-browser visitor record and the lead-capture popup policy.

The record lives in a :class:`VisitorStateStore`. In the site that is the
Django session (one per browser cookie); tests use :class:`InMemoryVisitorStore`.
Reads are read-modify-write without locking, so two tabs sharing a session can
lose a visit-count increment.
"""
from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime


logger = logging.getLogger(__name__)

STORAGE_KEY = "muahib_visitor_info"
UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

_MOBILE_RE = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)
_TABLET_RE = re.compile(r"iPad|Android(?!.*Mobile)", re.IGNORECASE)
_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_browser_fingerprint(
    user_agent: str,
    language: str,
    screen_width: int,
    screen_height: int,
    timezone_offset: int,
    canvas_data: str = "",
) -> str:
    """Non-cryptographic 32-bit hash of client traits, base-36 encoded.

    Hashes UTF-16 code units with ``h = h * 31 + c`` wrapped to a signed
    32-bit integer, so the value matches what the browser computes.
    """
    raw = "|".join(
        [user_agent or "", language or "", f"{screen_width}x{screen_height}", str(timezone_offset), canvas_data or ""]
    )
    encoded = raw.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i:i + 2], "little")
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def classify_device(user_agent: str) -> Tuple[str, bool]:
    """Return ``(device_type, is_mobile)``; tablets are checked before phones."""
    ua = user_agent or ""
    is_mobile = bool(_MOBILE_RE.search(ua))
    if _TABLET_RE.search(ua):
        return "tablet", is_mobile
    if is_mobile:
        return "mobile", is_mobile
    return "desktop", is_mobile


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _dt(value) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class VisitorInfo:
    is_first_time: bool
    visit_count: int
    first_visit_date: datetime
    last_visit_date: datetime
    has_seen_popup: bool
    whatsapp_submitted: bool
    browser_fingerprint: str
    popup_shown_date: Optional[datetime] = None
    whatsapp_submitted_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_first_time": self.is_first_time,
            "visit_count": self.visit_count,
            "first_visit_date": _iso(self.first_visit_date),
            "last_visit_date": _iso(self.last_visit_date),
            "has_seen_popup": self.has_seen_popup,
            "popup_shown_date": _iso(self.popup_shown_date),
            "whatsapp_submitted": self.whatsapp_submitted,
            "whatsapp_submitted_date": _iso(self.whatsapp_submitted_date),
            "browser_fingerprint": self.browser_fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VisitorInfo":
        return cls(
            is_first_time=bool(data["is_first_time"]),
            visit_count=int(data["visit_count"]),
            first_visit_date=_dt(data["first_visit_date"]),
            last_visit_date=_dt(data["last_visit_date"]),
            has_seen_popup=bool(data["has_seen_popup"]),
            popup_shown_date=_dt(data.get("popup_shown_date")),
            whatsapp_submitted=bool(data["whatsapp_submitted"]),
            whatsapp_submitted_date=_dt(data.get("whatsapp_submitted_date")),
            browser_fingerprint=str(data.get("browser_fingerprint") or ""),
        )


class VisitorStateStore:
    """Holds at most one serialized :class:`VisitorInfo`."""

    def load(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class SessionVisitorStore(VisitorStateStore):
    def __init__(self, session, key: str = STORAGE_KEY):
        self.session = session
        self.key = key

    def load(self):
        return self.session.get(self.key)

    def save(self, data):
        self.session[self.key] = data
        self.session.modified = True

    def clear(self):
        self.session.pop(self.key, None)
        self.session.modified = True


class InMemoryVisitorStore(VisitorStateStore):
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data

    def load(self):
        return self.data

    def save(self, data):
        self.data = dict(data)

    def clear(self):
        self.data = None


@dataclass
class DeviceInfo:
    user_agent: str
    is_mobile: bool
    device_type: str
    screen_width: int
    screen_height: int
    timezone: str


@dataclass
class ClientInfo:
    """What the server knows about the browser making the request."""

    user_agent: str = ""
    language: str = ""
    url: str = ""
    path: str = "/"
    referrer: str = "direct"
    title: str = ""
    query: Dict[str, str] = field(default_factory=dict)
    screen_width: int = 0
    screen_height: int = 0
    timezone_offset: int = 0
    timezone: str = ""
    canvas_data: str = ""
    ip_address: Optional[str] = None

    @classmethod
    def from_request(cls, request, data: Optional[Mapping[str, Any]] = None) -> "ClientInfo":
        """Build from request headers plus the page details the popup script sends.

        ``data`` defaults to the POST body for POST requests and the query
        string otherwise. ``page_url`` is the URL of the page that showed the
        popup; its query string carries the UTM parameters.
        """
        if data is None:
            data = request.POST if request.method == "POST" else request.GET
        page_url = data.get("page_url") or request.build_absolute_uri()
        parsed = urlparse(page_url)
        query = {key: values[0] for key, values in parse_qs(parsed.query).items() if values}
        accept_language = request.META.get("HTTP_ACCEPT_LANGUAGE", "")
        language = data.get("language") or accept_language.split(",")[0].split(";")[0].strip()
        return cls(
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            language=language,
            url=page_url,
            path=parsed.path or "/",
            referrer=data.get("referrer") or "direct",
            title=data.get("title") or "",
            query=query,
            screen_width=_as_int(data.get("screen_width")),
            screen_height=_as_int(data.get("screen_height")),
            timezone_offset=_as_int(data.get("timezone_offset")),
            timezone=data.get("timezone") or "",
            canvas_data=data.get("canvas_data") or "",
            ip_address=request.META.get("REMOTE_ADDR") or None,
        )

    def fingerprint(self) -> str:
        return generate_browser_fingerprint(
            self.user_agent,
            self.language,
            self.screen_width,
            self.screen_height,
            self.timezone_offset,
            self.canvas_data,
        )


class VisitorTracker:
    """Popup gating over one browser's :class:`VisitorInfo`.

    ``get_visitor_info`` counts as a visit: it creates the record on first use
    and otherwise bumps ``visit_count`` and ``last_visit_date``. A WhatsApp
    submission suppresses the popup for good; a plain showing suppresses it for
    ``POPUP_COOLDOWN_DAYS``.
    """

    def __init__(
        self,
        store: VisitorStateStore,
        client: Optional[ClientInfo] = None,
        now: Callable[[], datetime] = timezone.now,
        cooldown_days: Optional[int] = None,
    ):
        self.store = store
        self.client = client or ClientInfo()
        self.now = now
        if cooldown_days is None:
            cooldown_days = getattr(settings, "POPUP_COOLDOWN_DAYS", 30)
        self.cooldown = timedelta(days=cooldown_days)

    @classmethod
    def for_request(cls, request, data: Optional[Mapping[str, Any]] = None) -> "VisitorTracker":
        return cls(SessionVisitorStore(request.session), ClientInfo.from_request(request, data))

    def _save(self, info: VisitorInfo) -> None:
        self.store.save(info.to_dict())

    def get_visitor_info(self) -> VisitorInfo:
        now = self.now()
        stored = self.store.load()
        if stored:
            try:
                info = VisitorInfo.from_dict(stored)
            except (KeyError, TypeError, ValueError):
                logger.warning("Discarding unreadable visitor record", exc_info=True)
            else:
                info.last_visit_date = now
                info.visit_count += 1
                self._save(info)
                return info

        info = VisitorInfo(
            is_first_time=True,
            visit_count=1,
            first_visit_date=now,
            last_visit_date=now,
            has_seen_popup=False,
            whatsapp_submitted=False,
            browser_fingerprint=self.client.fingerprint(),
        )
        self._save(info)
        return info

    def should_show_popup(self) -> bool:
        info = self.get_visitor_info()
        if info.whatsapp_submitted:
            return False
        if info.has_seen_popup and info.popup_shown_date:
            if self.now() - info.popup_shown_date < self.cooldown:
                return False
        return True

    def mark_popup_shown(self) -> VisitorInfo:
        info = self.get_visitor_info()
        info.has_seen_popup = True
        info.popup_shown_date = self.now()
        info.is_first_time = False
        self._save(info)
        return info

    def mark_whatsapp_submitted(self) -> VisitorInfo:
        info = self.get_visitor_info()
        info.whatsapp_submitted = True
        info.whatsapp_submitted_date = self.now()
        info.is_first_time = False
        self._save(info)
        return info

    def reset_visitor_tracking(self) -> None:
        self.store.clear()

    def get_device_info(self) -> DeviceInfo:
        device_type, is_mobile = classify_device(self.client.user_agent)
        return DeviceInfo(
            user_agent=self.client.user_agent,
            is_mobile=is_mobile,
            device_type=device_type,
            screen_width=self.client.screen_width,
            screen_height=self.client.screen_height,
            timezone=self.client.timezone,
        )

    def get_page_info(self) -> Dict[str, str]:
        return {
            "url": self.client.url,
            "pathname": self.client.path,
            "referrer": self.client.referrer or "direct",
            "title": self.client.title,
        }

    def get_utm_parameters(self) -> Dict[str, Optional[str]]:
        return {name: self.client.query.get(name) for name in UTM_PARAMS}

    def get_visitor_stats(self) -> Dict[str, Any]:
        return {
            "visitor_info": self.get_visitor_info(),
            "device_info": self.get_device_info(),
            "page_info": self.get_page_info(),
            "utm_params": self.get_utm_parameters(),
        }

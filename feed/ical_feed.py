"""iCalendar feed client for NurseGrid schedules."""
import logging
import re
import time
from datetime import date, datetime, timedelta
from typing import List, Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo

import requests
from icalendar import Calendar

from layout.models import Event

logger = logging.getLogger(__name__)

FEED_PATH_PATTERN = re.compile(r'^/calendars/[a-zA-Z0-9]+/[a-fA-F0-9\-]+$')


class InvalidFeedUrlError(ValueError):
    """Feed URL is not an accepted calendar URL."""


class FeedParseError(ValueError):
    """Feed body could not be parsed as iCalendar."""


class ICalFeedClient:
    """Client that downloads an iCalendar feed and turns it into events."""

    DEFAULT_HOST = "app.nursegrid.com"

    def __init__(
        self,
        timeout: int = 5,
        tz_name: str = "UTC",
        allowed_host: str = DEFAULT_HOST
    ):
        """
        Initialize the feed client.

        Args:
            timeout: HTTP request timeout in seconds (default: 5)
            tz_name: IANA zone that event instants are normalized to
            allowed_host: Only feeds served from this host are fetched
        """
        self.timeout = timeout
        self.tzinfo = ZoneInfo(tz_name)
        self.allowed_host = allowed_host

    def is_valid_feed_url(self, url: Optional[str]) -> bool:
        """
        Check that url points at a calendar on the allowed host.

        Accepted shape: https://<allowed_host>/calendars/{ID}/{UUID}
        """
        if not url:
            return False
        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        if parsed.scheme != 'https':
            return False
        if parsed.hostname != self.allowed_host:
            return False
        return bool(FEED_PATH_PATTERN.match(parsed.path))

    def fetch_events(self, url: str) -> List[Event]:
        """
        Fetch and parse the feed at url.

        Args:
            url: Calendar feed URL

        Returns:
            Events sorted by start instant

        Raises:
            InvalidFeedUrlError: If url is not an accepted feed URL
            requests.RequestException: If all retry attempts fail
            FeedParseError: If the body is not valid iCalendar
        """
        if not self.is_valid_feed_url(url):
            raise InvalidFeedUrlError(
                f"Only {self.allowed_host} calendar URLs are accepted"
            )

        ical_text = self._fetch_feed_text(url)
        events = self.parse_events(ical_text)

        logger.info(f"Successfully fetched {len(events)} events")
        return events

    def _fetch_feed_text(self, url: str) -> str:
        """
        Download the raw feed with retry logic.

        Args:
            url: Validated feed URL

        Returns:
            Feed body as text

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        max_retries = 3
        base_delay = 1  # seconds

        for attempt in range(max_retries):
            try:
                logger.info(f"Fetching feed (attempt {attempt + 1}/{max_retries})")
                response = requests.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text

            except requests.RequestException as e:
                if attempt < max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise

    def parse_events(self, ical_text: str) -> List[Event]:
        """
        Parse VEVENT components into events.

        Args:
            ical_text: iCalendar document

        Returns:
            Events sorted by start, events without a start first

        Raises:
            FeedParseError: If the document cannot be parsed
        """
        try:
            calendar = Calendar.from_ical(ical_text)
        except ValueError as e:
            raise FeedParseError(f"Invalid iCalendar data: {e}") from e

        events = []
        for component in calendar.walk('VEVENT'):
            try:
                events.append(self._parse_component(component))
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to parse event component: {e}")
                continue

        events.sort(key=lambda event: event.start or datetime.min)
        return events

    def _parse_component(self, component) -> Event:
        """
        Convert a single VEVENT component.

        Args:
            component: icalendar VEVENT component

        Returns:
            Event object, with start/end left as None when absent
        """
        dtstart = component.get('DTSTART')
        dtend = component.get('DTEND')
        duration = component.get('DURATION')
        location = component.get('LOCATION')

        start = None
        end = None
        if dtstart is not None:
            start = self._normalize_instant(dtstart.dt)
            end = self._derive_end(dtstart.dt, dtend, duration)
        elif dtend is not None:
            end = self._normalize_instant(dtend.dt, is_end=True)

        # DTEND equal to a DATE DTSTART would otherwise end before it starts
        if start is not None and end is not None and end < start:
            end = start

        return Event(
            uid=str(component.get('UID', '')),
            summary=str(component.get('SUMMARY', '')),
            description=str(component.get('DESCRIPTION', '')),
            location=str(location) if location is not None else None,
            start=start,
            end=end
        )

    def _derive_end(self, raw_start, dtend, duration) -> datetime:
        """
        Resolve the end instant of a VEVENT.

        DTEND wins when present, then DTSTART + DURATION. Without
        either, a DATE start lasts one day and a datetime start ends
        where it starts (RFC 5545, 3.6.1).

        Args:
            raw_start: DTSTART value as a date or datetime
            dtend: DTEND property or None
            duration: DURATION property or None

        Returns:
            Normalized end instant
        """
        if dtend is not None:
            return self._normalize_instant(dtend.dt, is_end=True)

        if duration is not None:
            return self._normalize_instant(raw_start + duration.dt, is_end=True)

        if not isinstance(raw_start, datetime):
            return self._normalize_instant(
                raw_start + timedelta(days=1), is_end=True
            )
        return self._normalize_instant(raw_start)

    def _normalize_instant(self, value, is_end: bool = False) -> datetime:
        """
        Normalize an iCalendar date or datetime to a naive local instant.

        Aware datetimes are converted to the configured zone, floating
        datetimes are kept as they are. A DATE value maps to midnight;
        as an end bound it is exclusive, so it maps to the last instant
        of the previous day instead.
        """
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tzinfo).replace(tzinfo=None)
            return value

        if isinstance(value, date):
            midnight = datetime.combine(value, datetime.min.time())
            if is_end:
                return midnight - timedelta(milliseconds=1)
            return midnight

        raise TypeError(f"Unsupported date value: {value!r}")

"""AWS Lambda handler for the shift calendar export service."""
import base64
import json
import logging
import os
import time
from datetime import date, datetime
from typing import Any, Dict, Optional

import requests

from feed.ical_feed import ICalFeedClient, InvalidFeedUrlError
from layout.calendar_math import start_of_month
from layout.cursor import MonthCursor
from layout.models import DayCell, Event, MonthGrid, ScheduleWindow
from layout.month_grid import build_month
from layout.range_walker import build_months, months_in_range
from rasterizer.png_renderer import MonthGridRenderer

ROUTES = ('/fetch', '/calendar', '/export')

# Grids for these months stay inside date.min..date.max, including
# leading/trailing days and the previous/next links.
FIRST_MONTH = date(1, 2, 1)
LAST_MONTH = date(9999, 11, 1)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': '*'
        },
        'body': json.dumps(body)
    }


def month_key(value: date) -> str:
    """Zero-padded YYYY-MM for any year."""
    return f"{value.year:04d}-{value.month:02d}"


def _check_month_bounds(value: date, name: str) -> date:
    if not FIRST_MONTH <= start_of_month(value) <= LAST_MONTH:
        raise ValueError(
            f"{name.capitalize()} '{month_key(value)}' is outside the supported range "
            f"{month_key(FIRST_MONTH)} to {month_key(LAST_MONTH)}"
        )
    return value


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f"Invalid {name} date '{value}', expected YYYY-MM-DD") from None
    return _check_month_bounds(parsed, name)


def parse_schedule_window(
    start_value: Optional[str],
    end_value: Optional[str]
) -> Optional[ScheduleWindow]:
    """
    Build the schedule window from query parameters.

    Args:
        start_value: First scheduled day (YYYY-MM-DD) or None
        end_value: Last scheduled day (YYYY-MM-DD) or None

    Returns:
        ScheduleWindow, or None when neither bound is given

    Raises:
        ValueError: If a bound is malformed or end precedes start
    """
    start_date = _parse_date(start_value, 'start')
    end_date = _parse_date(end_value, 'end')

    if start_date is None and end_date is None:
        return None
    if start_date and end_date and end_date < start_date:
        raise ValueError("Schedule end precedes schedule start")

    return ScheduleWindow.from_dates(start_date, end_date)


def parse_month(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM month parameter into its first day."""
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, '%Y-%m').date()
    except ValueError:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM") from None
    return _check_month_bounds(parsed, 'month')


def event_to_dict(event: Event) -> Dict[str, Any]:
    return {
        'id': event.uid,
        'summary': event.summary,
        'description': event.description,
        'location': event.location,
        'start': event.start.isoformat() if event.start else None,
        'end': event.end.isoformat() if event.end else None
    }


def cell_to_dict(cell: DayCell) -> Dict[str, Any]:
    return {
        'date': cell.date.isoformat(),
        'in_month': cell.in_month,
        'past_schedule_end': cell.past_schedule_end,
        'has_event': cell.has_event,
        'label': cell.label,
        'style_tag': cell.style_tag.value if cell.style_tag else None
    }


def grid_to_dict(grid: MonthGrid) -> Dict[str, Any]:
    return {
        'month': month_key(grid.month_start),
        'title': grid.title,
        'cells': [cell_to_dict(cell) for cell in grid.cells]
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the shift calendar service.

    Routes:
        /fetch     events parsed from the feed
        /calendar  one month grid, or every month of a bounded window
        /export    PNG of every month in the schedule window

    Args:
        event: API Gateway proxy event (REST or HTTP API payload)
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    # Read configuration from environment variables
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '5'))
    feed_timezone = os.environ.get('FEED_TIMEZONE', 'UTC')
    allowed_host = os.environ.get('ALLOWED_FEED_HOST', ICalFeedClient.DEFAULT_HOST)
    export_scale = int(os.environ.get('EXPORT_SCALE', '2'))
    max_months = int(os.environ.get('MAX_EXPORT_MONTHS', '24'))

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    path = (event.get('rawPath') or event.get('path') or '/').rstrip('/') or '/'
    params = event.get('queryStringParameters') or {}
    logger.info(
        "Lambda execution started",
        extra={'path': path, 'feed_timezone': feed_timezone}
    )

    if path not in ROUTES:
        return _response(404, {'error': 'Not found'})

    try:
        schedule_window = parse_schedule_window(params.get('start'), params.get('end'))
        requested_month = parse_month(params.get('month'))
    except ValueError as e:
        logger.warning(f"Rejected request parameters: {e}")
        return _response(400, {'error': str(e)})

    if requested_month:
        current_month = requested_month
    elif schedule_window and schedule_window.start:
        current_month = schedule_window.start.date()
    else:
        current_month = date.today()

    # Whole-window output unless a single month was asked for
    bulk = path == '/export' or (
        path == '/calendar'
        and requested_month is None
        and schedule_window is not None
        and schedule_window.is_bounded
    )
    if bulk:
        month_count = sum(1 for _ in months_in_range(schedule_window, current_month))
        if month_count > max_months:
            logger.warning(
                f"Rejected window of {month_count} months",
                extra={'max_months': max_months}
            )
            return _response(400, {
                'error': (
                    f"Schedule window spans {month_count} months, "
                    f"at most {max_months} are allowed"
                )
            })

    client = ICalFeedClient(
        timeout=timeout_seconds,
        tz_name=feed_timezone,
        allowed_host=allowed_host
    )

    try:
        logger.info("Fetching events from feed")
        events = client.fetch_events(params.get('url'))
        logger.info(f"Fetched {len(events)} events from feed")
    except InvalidFeedUrlError:
        logger.warning("Rejected feed URL")
        return _response(400, {
            'error': f"Invalid URL. Only {allowed_host} calendar URLs are accepted."
        })
    except requests.RequestException as e:
        logger.error(
            f"Failed to fetch feed after retries: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _response(502, {'error': 'Failed to fetch upstream URL'})
    except Exception as e:
        logger.error(
            f"Failed to load feed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _response(500, {'error': 'Internal server error'})

    try:
        if path == '/fetch':
            result = _response(200, {
                'events': [event_to_dict(item) for item in events]
            })
        elif path == '/calendar' and bulk:
            grids = build_months(events, schedule_window, current_month)
            result = _response(200, {
                'months': [grid_to_dict(grid) for grid in grids],
                'event_count': len(events)
            })
        elif path == '/calendar':
            cursor = MonthCursor.for_date(current_month)
            grid = build_month(cursor.month, events, schedule_window)
            result = _response(200, {
                'month': grid_to_dict(grid),
                'previous': month_key(cursor.retreat().month),
                'next': month_key(cursor.advance().month),
                'event_count': len(events)
            })
        else:
            logger.info("Rendering schedule export")
            grids = build_months(events, schedule_window, current_month)
            renderer = MonthGridRenderer(scale=export_scale)
            png_bytes = renderer.render_png(grids)
            result = {
                'statusCode': 200,
                'headers': {
                    'Content-Type': 'image/png',
                    'Content-Disposition': (
                        f'attachment; filename="{renderer.export_filename()}"'
                    ),
                    'Access-Control-Allow-Origin': '*'
                },
                'body': base64.b64encode(png_bytes).decode('ascii'),
                'isBase64Encoded': True
            }
    except Exception as e:
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _response(500, {'error': 'Internal server error'})

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed successfully",
        extra={'path': path, 'duration_seconds': round(duration, 2)}
    )
    return result

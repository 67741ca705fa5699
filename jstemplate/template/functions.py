"""
Helper functions available to every template expression.

The helpers are installed in the engine's global variable table, so
templates can call them by bare name: {len($this.items)}, currency(total),
format_date($this.due, 'MMM dd, yyyy').
"""

from collections.abc import Mapping, Sized
from datetime import datetime
from typing import Any, Callable, Dict

from dateutil import parser as date_parser


# Function to get current datetime - can be overridden in tests
_get_current_datetime: Callable[[], datetime] = lambda: datetime.now()


def java_to_strftime(java_pattern: str) -> str:
    """
    Convert a Java SimpleDateFormat pattern to a strftime format.

    Templates written for the browser engine carry Java-style patterns
    ('yyyy-MM-dd', 'MMM dd, yyyy'); strftime codes pass through untouched.

    Examples:
        >>> java_to_strftime('yyyy-MM-dd')
        '%Y-%m-%d'
        >>> java_to_strftime('EEEE, MMMM dd')
        '%A, %B %d'
    """
    if '%' in java_pattern:
        return java_pattern

    mappings = {
        'yyyy': '%Y',
        'yy': '%y',
        'MMMM': '%B',
        'MMM': '%b',
        'MM': '%m',
        'dd': '%d',
        'EEEE': '%A',
        'EEE': '%a',
        'HH': '%H',
        'hh': '%I',
        'mm': '%M',    # minutes; MM is months
        'ss': '%S',
        'a': '%p',
    }

    # Longest tokens first so MMMM is not eaten by MMM
    tokens = sorted(mappings, key=len, reverse=True)
    result = []
    i = 0
    while i < len(java_pattern):
        for token in tokens:
            if java_pattern.startswith(token, i):
                result.append(mappings[token])
                i += len(token)
                break
        else:
            result.append(java_pattern[i])
            i += 1
    return ''.join(result)


def stringify(value: Any) -> str:
    """Render a value the way it is written into attributes and content."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _midnight(dt: datetime) -> tuple:
    if dt.tzinfo is not None:
        today = _get_current_datetime().replace(tzinfo=dt.tzinfo)
    else:
        today = _get_current_datetime()
    today = today.replace(hour=0, minute=0, second=0, microsecond=0)
    return today, dt.replace(hour=0, minute=0, second=0, microsecond=0)


class ComputeFunctions:
    """Implements the compute helpers exposed to template expressions."""

    @staticmethod
    def len(items: Any) -> int:
        """Return the length of a list, string or mapping; 0 otherwise."""
        if isinstance(items, Sized):
            return len(items)
        return 0

    @staticmethod
    def sum(items: Any) -> float:
        """Sum numeric values, handling currency strings."""
        if isinstance(items, (str, Mapping)) or not isinstance(items, (list, tuple)):
            return 0.0

        total = 0.0
        for item in items:
            if isinstance(item, bool):
                continue
            if isinstance(item, (int, float)):
                total += item
            elif isinstance(item, str):
                cleaned = item.replace("$", "").replace(",", "").strip()
                try:
                    total += float(cleaned)
                except ValueError:
                    continue
        return total

    @staticmethod
    def format_date(date_str: Any, format_str: str) -> str:
        """
        Format a date according to a Java SimpleDateFormat pattern.

        Unparseable input is returned unchanged.

        Examples:
            >>> ComputeFunctions.format_date('2025-12-01', 'MMM dd, yyyy')
            'Dec 01, 2025'
        """
        try:
            dt = date_str if isinstance(date_str, datetime) else date_parser.parse(str(date_str))
            return dt.strftime(java_to_strftime(format_str))
        except (ValueError, OverflowError, TypeError):
            return stringify(date_str)

    @staticmethod
    def days_from_now(date_str: Any) -> str:
        """Describe a date relative to today ("tomorrow", "3 days ago")."""
        try:
            today, dt = _midnight(date_parser.parse(str(date_str)))
        except (ValueError, OverflowError):
            return stringify(date_str)

        delta = (dt - today).days
        if delta == 0:
            return "today"
        elif delta == 1:
            return "tomorrow"
        elif delta == -1:
            return "yesterday"
        elif delta > 0:
            return f"{delta} days from now"
        else:
            return f"{abs(delta)} days ago"

    @staticmethod
    def days_after(date_str: Any) -> int:
        """
        Return number of days after a given date.

        Positive if the date is in the past, negative if it is in the
        future, zero for today.
        """
        try:
            today, dt = _midnight(date_parser.parse(str(date_str)))
        except (ValueError, OverflowError):
            return 0
        return (today - dt).days

    @staticmethod
    def currency(amount: Any) -> str:
        """
        Format a numeric value as dollars with thousands separators.

        Examples:
            1089.99 -> "$1,089.99"
            23 -> "$23.00"
        """
        try:
            if isinstance(amount, str):
                numeric_value = float(amount.replace("$", "").replace(",", "").strip())
            elif isinstance(amount, (int, float)) and not isinstance(amount, bool):
                numeric_value = float(amount)
            else:
                return "$0.00"
            return f"${numeric_value:,.2f}"
        except (ValueError, TypeError):
            return "$0.00"

    @staticmethod
    def join(items: Any, separator: str = ", ") -> str:
        """Join the stringified items of a list."""
        if isinstance(items, (list, tuple)):
            return separator.join(stringify(item) for item in items)
        return stringify(items)


def default_globals(default_value: Any = None) -> Dict[str, Any]:
    """Build the global variable table every root context inherits."""
    compute = ComputeFunctions()
    return {
        "$default": default_value,
        "len": compute.len,
        "sum": compute.sum,
        "format_date": compute.format_date,
        "days_from_now": compute.days_from_now,
        "days_after": compute.days_after,
        "currency": compute.currency,
        "join": compute.join,
        "str": stringify,
        "int": int,
        "float": float,
        "round": round,
        "upper": lambda value: stringify(value).upper(),
        "lower": lambda value: stringify(value).lower(),
    }

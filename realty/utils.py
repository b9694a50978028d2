"""
Utility functions for Realty Manager

Field validators raise ValidationError with a message suitable for showing
to the user; the ask_* helpers wrap them in a prompt that keeps asking until
the input is valid.
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from rich.console import Console
from rich.prompt import Prompt

from realty.errors import ValidationError

console = Console()

EMAIL_RE = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$')
PHONE_CHARS_RE = re.compile(r'^\+?[\d\s().-]+$')
STATE_RE = re.compile(r'^[A-Za-z]{2}$')
ZIP_RE = re.compile(r'^\d{5}(-\d{4})?$')

CANCEL_WORDS = ('q', 'quit', 'exit')
CLEAR_WORD = '-'


class FormCancelled(Exception):
    """Raised when the user types 'q' at a field prompt"""


# ============================================================================
# VALIDATORS
# ============================================================================

def parse_date(text):
    """Parse YYYY-MM-DD into a date"""
    text = text.strip()
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', text):
        raise ValidationError(f"'{text}' is not a date in YYYY-MM-DD format")
    try:
        return datetime.strptime(text, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"'{text}' is not a valid calendar date")


def parse_email(text):
    text = text.strip()
    if not EMAIL_RE.match(text):
        raise ValidationError(f"'{text}' is not a valid email address")
    return text.lower()


def parse_phone(text):
    """
    Accept 7 to 15 digits with an optional leading '+' and the usual
    separators (spaces, dashes, dots, parentheses).
    """
    text = text.strip()
    digits = re.sub(r'\D', '', text)
    if not PHONE_CHARS_RE.match(text) or not 7 <= len(digits) <= 15:
        raise ValidationError(f"'{text}' is not a valid phone number")
    return text


def parse_state(text):
    text = text.strip()
    if not STATE_RE.match(text):
        raise ValidationError("State must be a 2-letter code")
    return text.upper()


def parse_zip(text):
    text = text.strip()
    if not ZIP_RE.match(text):
        raise ValidationError("ZIP code must be 12345 or 12345-6789")
    return text


def parse_int(text, minimum=None, maximum=None):
    try:
        value = int(str(text).strip())
    except ValueError:
        raise ValidationError(f"'{text}' is not a whole number")
    _check_range(value, minimum, maximum)
    return value


def parse_decimal(text, minimum=None, maximum=None, exclusive_minimum=False,
                  places=None, max_digits=None):
    """
    Parse a money/number value, tolerating '$' and thousands separators.

    places and max_digits mirror a NUMERIC(max_digits, places) column: more
    decimal places, or more integer digits than the column holds, is rejected
    rather than left for the database to round or overflow.
    """
    cleaned = str(text).strip().replace('$', '').replace(',', '')
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError(f"'{text}' is not a number")
    if not value.is_finite():
        raise ValidationError(f"'{text}' is not a number")
    _check_digits(value, places, max_digits)
    if exclusive_minimum and minimum is not None and value <= minimum:
        raise ValidationError(f"Value must be greater than {minimum}")
    _check_range(value, None if exclusive_minimum else minimum, maximum)
    return value


def parse_percentage(text):
    """Ownership share: greater than 0, at most 100"""
    return parse_decimal(str(text).rstrip('%'), minimum=Decimal('0'), maximum=Decimal('100'),
                         exclusive_minimum=True, places=2, max_digits=5)


def parse_choice(text, choices):
    value = text.strip().lower()
    if value not in choices:
        raise ValidationError(f"Choose one of: {', '.join(choices)}")
    return value


def _check_digits(value, places, max_digits):
    if places is not None and value.normalize().as_tuple().exponent < -places:
        raise ValidationError(f"Use at most {places} decimal place(s)")
    if max_digits is not None:
        limit = Decimal(10) ** (max_digits - (places or 0))
        if abs(value) >= limit:
            raise ValidationError(f"Value must be less than {limit:,}")


def _check_range(value, minimum, maximum):
    if minimum is not None and value < minimum:
        raise ValidationError(f"Value must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(f"Value must be at most {maximum}")


# ============================================================================
# PROMPTS
# ============================================================================

def ask(label, parser=None, default=None, required=True):
    """
    Prompt until the answer parses.

    Blank input returns the default, or None for optional fields. On an
    optional field '-' clears the value even when a default is shown. Typing
    'q' raises FormCancelled so the caller can abandon the whole form.
    """
    while True:
        if default is not None and default != '':
            raw = Prompt.ask(label, default=str(default), console=console)
        else:
            raw = Prompt.ask(label, default='', show_default=False, console=console)
        raw = (raw or '').strip()

        if raw.lower() in CANCEL_WORDS:
            raise FormCancelled()
        if raw == CLEAR_WORD and not required:
            return None
        if not raw:
            if not required:
                return None
            console.print("[yellow]This field is required (q to cancel)[/yellow]")
            continue
        if parser is None:
            return raw
        try:
            return parser(raw)
        except ValidationError as e:
            console.print(f"[yellow]{e}[/yellow]")


def ask_date(label, default=None, required=True):
    if isinstance(default, date):
        default = default.strftime('%Y-%m-%d')
    return ask(f"{label} (YYYY-MM-DD)", parse_date, default, required)


def ask_int(label, default=None, required=True, minimum=None, maximum=None):
    return ask(label, lambda t: parse_int(t, minimum, maximum), default, required)


def ask_decimal(label, default=None, required=True, minimum=None, maximum=None,
                exclusive_minimum=False, places=2, max_digits=None):
    return ask(label, lambda t: parse_decimal(t, minimum, maximum, exclusive_minimum,
                                              places, max_digits),
               default, required)


def ask_choice(label, choices, default=None, required=True):
    return ask(f"{label} ({'/'.join(choices)})", lambda t: parse_choice(t, choices),
               default, required)


def ask_id(label):
    """Prompt for a record ID; blank or 'q' returns None"""
    try:
        return ask(label, lambda t: parse_int(t, minimum=1), required=False)
    except FormCancelled:
        return None


# ============================================================================
# FORMATTING
# ============================================================================

def fmt_money(value):
    return f"${value:,.2f}" if value is not None else 'N/A'


def fmt_date(value):
    return value.strftime('%Y-%m-%d') if value else ''


def fmt_pct(value):
    return f"{value:,.2f}%" if value is not None else 'N/A'


def fmt_name(row):
    return f"{row['first_name']} {row['last_name']}"

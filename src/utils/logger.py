"""Terminal-safe output with an ASCII fallback for non-UTF-8 consoles.

Lint output uses a few Unicode symbols (check marks, arrows, box drawing from
rich tables). Terminals that can't encode them get ASCII replacements instead
of a UnicodeEncodeError halfway through a report.
"""
import sys
import locale
from typing import Callable


# Unicode to ASCII icon mapping
ICON_MAP = {
    # Status
    '✓': '[OK]',      # check mark
    '✔': '[OK]',
    '✗': '[FAIL]',    # ballot x
    '✘': '[FAIL]',
    '⚠': '[WARN]',    # warning sign
    '⚡': '[!]',       # high voltage (cache hits)

    # Arrows
    '→': '->',
    '←': '<-',
    '⇒': '=>',

    # Box drawing used by rich tables
    '│': '|',
    '─': '-',
    '┌': '+',
    '┐': '+',
    '└': '+',
    '┘': '+',
    '├': '+',
    '┤': '+',
    '┬': '+',
    '┴': '+',
    '┼': '+',
    '━': '-',
    '┃': '|',

    # Punctuation
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    encoding = getattr(sys.stdout, 'encoding', None)
    if encoding:
        return encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can print UTF-8."""
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal lacks UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)

    return sanitized


def create_safe_print() -> Callable:
    """Create a print function that sanitizes its string arguments."""
    def safe_print(*args, **kwargs):
        sanitized_args = [
            sanitize_for_terminal(arg) if isinstance(arg, str) else arg
            for arg in args
        ]
        print(*sanitized_args, **kwargs)

    return safe_print


safe_print = create_safe_print()

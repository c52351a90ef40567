"""Recognizer registry and imports."""

from .base_recognizer import BaseRecognizer, CourseHeader, CourseLayout
from .pre_format import PreFormatRecognizer
from .table_format import TableFormatRecognizer

# Registry of available recognizers, in the order they are tried
RECOGNIZERS = {
    'pre_format': PreFormatRecognizer,
    'table_format': TableFormatRecognizer,
}


def get_recognizer(name: str) -> BaseRecognizer:
    """Create a recognizer by name."""
    if name not in RECOGNIZERS:
        raise ValueError(f"Unknown recognizer: {name}. Available: {list(RECOGNIZERS.keys())}")
    return RECOGNIZERS[name]()


__all__ = [
    'BaseRecognizer',
    'CourseHeader',
    'CourseLayout',
    'PreFormatRecognizer',
    'TableFormatRecognizer',
    'get_recognizer',
    'RECOGNIZERS',
]

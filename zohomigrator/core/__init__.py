from .models import (
    CardType,
    Note,
    ConvertedNote,
    ConversionSettings,
    ConversionProgress,
    ConversionResult,
)
from .exceptions import (
    ConversionError,
    ConversionCancelled,
    FileAccessError,
    ExportNotFoundError,
    UnsafeArchiveError,
)
from .renderer import convert_note
from .converter import ZohoToObsidian

__all__ = [
    'CardType',
    'Note',
    'ConvertedNote',
    'ConversionSettings',
    'ConversionProgress',
    'ConversionResult',
    'ConversionError',
    'ConversionCancelled',
    'FileAccessError',
    'ExportNotFoundError',
    'UnsafeArchiveError',
    'convert_note',
    'ZohoToObsidian',
]

from .app import ZohoToObsidianApp
from .components import (
    FilePickerFrame,
    OptionsFrame,
    ProgressFrame,
    LogFrame,
    ActionButtonsFrame,
)
from .styles import (
    WINDOW_TITLE,
    WINDOW_GEOMETRY,
    WINDOW_MIN_SIZE,
)

__all__ = [
    'ZohoToObsidianApp',
    'FilePickerFrame',
    'OptionsFrame',
    'ProgressFrame',
    'LogFrame',
    'ActionButtonsFrame',
    'WINDOW_TITLE',
    'WINDOW_GEOMETRY',
    'WINDOW_MIN_SIZE',
]

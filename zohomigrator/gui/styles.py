"""Theme and styling constants for the application."""

# Window settings
WINDOW_TITLE = "Zoho Notebook to Obsidian Converter"
WINDOW_GEOMETRY = "820x700"
WINDOW_MIN_SIZE = (700, 640)

# Padding and spacing
PAD_X = 20
PAD_Y = 10

# Font settings
FONT_HEADER = ("", 14, "bold")

# Widget sizes
ENTRY_WIDTH = 420
BUTTON_WIDTH = 100
BUTTON_WIDTH_LARGE = 150
PROGRESS_BAR_WIDTH = 550
LOG_HEIGHT = 180

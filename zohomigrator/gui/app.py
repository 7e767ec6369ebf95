"""Main application window."""

import customtkinter as ctk
import logging
import threading
from pathlib import Path
from tkinter import messagebox
from typing import Callable, List, Optional

from zohomigrator.core.converter import ZohoToObsidian
from zohomigrator.core.models import ConversionSettings, ConversionProgress, ConversionResult

from .styles import (
    WINDOW_TITLE,
    WINDOW_GEOMETRY,
    WINDOW_MIN_SIZE,
    PAD_X,
    PAD_Y,
    LOG_HEIGHT,
)
from .components import (
    FilePickerFrame,
    OptionsFrame,
    ProgressFrame,
    LogFrame,
    ActionButtonsFrame,
)

MAX_LOGGED_WARNINGS = 50
CORE_LOGGER = "zohomigrator.core"


class LogPanelHandler(logging.Handler):
    """Forward INFO records from the conversion thread to the log panel.

    Records are posted through ``app.after`` so the panel is only touched
    from the Tk main loop. Warnings are left out: they are listed from the
    result once the run finishes.
    """

    def __init__(self, app, post: Callable[[str], None]):
        super().__init__(level=logging.INFO)
        self.app = app
        self.post = post
        self.addFilter(lambda record: record.levelno < logging.WARNING)

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.app.after(0, self.post, message)


class ZohoToObsidianApp(ctk.CTk):
    """Main application window for Zoho Notebook to Obsidian converter."""

    def __init__(self):
        super().__init__()

        # Window configuration
        self.title(WINDOW_TITLE)
        self.geometry(WINDOW_GEOMETRY)
        self.minsize(*WINDOW_MIN_SIZE)

        # State
        self.input_path: Optional[Path] = None
        self.output_dir: Optional[Path] = None
        self.conversion_thread: Optional[threading.Thread] = None
        self.cancel_event = threading.Event()
        self._last_phase: Optional[str] = None
        self._log_handler: Optional[LogPanelHandler] = None
        self._saved_log_level = logging.NOTSET

        # Build UI
        self._create_widgets()
        self._setup_layout()

        # Handle window close
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def _create_widgets(self):
        """Create all UI widgets."""
        # File selection section
        self.file_frame = ctk.CTkFrame(self)

        self.input_picker = FilePickerFrame(
            self.file_frame,
            label_text="Zoho Export:",
            is_directory=False,
            allow_folder=True,
            filetypes=[("Zip archives", "*.zip"), ("All files", "*.*")],
            on_change=self._on_input_selected
        )

        self.output_picker = FilePickerFrame(
            self.file_frame,
            label_text="Output Directory:",
            is_directory=True,
            on_change=self._on_output_selected
        )

        self.options_frame = OptionsFrame(self)
        self.progress_frame = ProgressFrame(self)
        self.log_frame = LogFrame(self, height=LOG_HEIGHT)

        self.action_frame = ActionButtonsFrame(
            self,
            on_convert=self._start_conversion,
            on_cancel=self._cancel_conversion
        )

    def _setup_layout(self):
        """Arrange widgets in the window."""
        self.file_frame.pack(fill="x", padx=PAD_X, pady=(PAD_Y + 5, PAD_Y))
        self.input_picker.pack(fill="x", pady=2)
        self.output_picker.pack(fill="x", pady=2)

        self.options_frame.pack(fill="x", padx=PAD_X, pady=PAD_Y)
        self.progress_frame.pack(fill="x", padx=PAD_X, pady=PAD_Y)

        # Action buttons (pack before log so they're always visible)
        self.action_frame.pack(side="bottom", fill="x", padx=PAD_X, pady=(PAD_Y, PAD_Y + 5))

        # Log (expands to fill remaining space)
        self.log_frame.pack(fill="both", expand=True, padx=PAD_X, pady=PAD_Y)

    def _on_input_selected(self, path: Path):
        """Handle export zip/folder selection."""
        self.input_path = path
        self._log(f"Selected export: {path}")

        # Auto-suggest output directory if not set
        if not self.output_dir:
            suggested_output = path.parent / "ObsidianVault"
            self.output_picker.set_path(suggested_output)
            self.output_dir = suggested_output
            self._log(f"Suggested output: {suggested_output}")

    def _on_output_selected(self, path: Path):
        """Handle output directory selection."""
        self.output_dir = path
        self._log(f"Selected output: {path}")

    def _validate_paths(self) -> Optional[str]:
        """Return an error message for the selected paths, or None when usable."""
        if not self.input_path:
            return "Please select a Zoho Notebook export (.zip or folder)."
        if not self.output_dir:
            return "Please select an output directory."
        if not self.input_path.exists():
            return f"Export not found:\n{self.input_path}"
        if self.input_path.is_file() and self.input_path.suffix.lower() != ".zip":
            return "Select a .zip archive or an extracted export folder."
        if self.output_dir.exists() and not self.output_dir.is_dir():
            return f"Output path is a file, not a directory:\n{self.output_dir}"
        return None

    def _start_conversion(self):
        """Start the conversion process."""
        self.input_path = self.input_picker.get_path()
        self.output_dir = self.output_picker.get_path()

        error = self._validate_paths()
        if error:
            messagebox.showerror("Error", error)
            return

        options = self.options_frame.get_options()
        settings = ConversionSettings(
            input_path=self.input_path,
            output_dir=self.output_dir,
            skip_empty=options["skip_empty"],
            verbose=options["verbose"],
            attachments_folder=options["attachments_folder"],
        )

        # Update UI state
        self.action_frame.set_converting(True)
        self.cancel_event.clear()
        self.log_frame.clear()
        self.progress_frame.reset()
        self._last_phase = None

        self._log(f"Reading export: {self.input_path}")
        self._log(f"Writing vault: {self.output_dir}")
        if settings.verbose:
            self._attach_log_handler()

        # Start conversion in background thread
        self.conversion_thread = threading.Thread(
            target=self._run_conversion,
            args=(settings,),
            daemon=True
        )
        self.conversion_thread.start()

    def _run_conversion(self, settings: ConversionSettings):
        """Run conversion in background thread."""
        result = ZohoToObsidian(
            settings=settings,
            progress_callback=self._on_progress,
            cancel_event=self.cancel_event
        ).run()

        # Update UI on main thread
        self.after(0, lambda: self._on_complete(result))

    def _on_progress(self, progress: ConversionProgress):
        """Handle progress update from converter (called from background thread)."""
        def update():
            self.progress_frame.set_status(
                f"{progress.phase}: {progress.message}" if progress.message else progress.phase
            )
            if progress.total > 0:
                self.progress_frame.set_progress(progress.current / progress.total)

            # Per-batch counters only reach the log when a phase starts or ends
            if progress.phase != self._last_phase or progress.current == progress.total:
                self._log(f"[{progress.phase}] {progress.message}")
            self._last_phase = progress.phase

        self.after(0, update)

    def _attach_log_handler(self):
        """Show the per-file lines the writer logs in verbose mode."""
        core_logger = logging.getLogger(CORE_LOGGER)
        self._saved_log_level = core_logger.level
        core_logger.setLevel(logging.INFO)
        self._log_handler = LogPanelHandler(self, self._log)
        self._log_handler.setFormatter(logging.Formatter("  %(message)s"))
        core_logger.addHandler(self._log_handler)

    def _detach_log_handler(self):
        if self._log_handler is None:
            return
        core_logger = logging.getLogger(CORE_LOGGER)
        core_logger.removeHandler(self._log_handler)
        core_logger.setLevel(self._saved_log_level)
        self._log_handler = None

    def _on_complete(self, result: ConversionResult):
        """Handle conversion complete."""
        self._detach_log_handler()
        self.action_frame.set_converting(False)
        if result.success:
            self._show_success(result)
        else:
            self._show_failure(result)

    def _show_success(self, result: ConversionResult):
        self.progress_frame.set_progress(1.0)
        self.progress_frame.set_status("Conversion complete!")

        self._log_banner("CONVERSION COMPLETE")
        self._log(result.summary())
        if result.notes_written != result.notes_total:
            self._log(f"Notes written: {result.notes_written} of {result.notes_total}")
        self._log_warnings(result.warnings)
        self._log(f"Vault: {self.output_dir}")

        messagebox.showinfo(
            "Success",
            f"{result.summary()}\n\n"
            f"Warnings: {len(result.warnings)}\n"
            f"Vault: {self.output_dir}"
        )

    def _show_failure(self, result: ConversionResult):
        self.progress_frame.set_progress(0)
        self.progress_frame.set_status("Conversion failed")

        self._log_banner("CONVERSION FAILED")
        self._log(f"Error: {result.error_message}")
        self._log_warnings(result.warnings)

        messagebox.showerror("Error", f"Conversion failed:\n\n{result.error_message}")

    def _log_warnings(self, warnings: List[str]):
        """List warnings, capped so a huge export cannot flood the log."""
        if not warnings:
            return
        self._log(f"Warnings: {len(warnings)}")
        for warning in warnings[:MAX_LOGGED_WARNINGS]:
            self._log(f"  - {warning}")
        if len(warnings) > MAX_LOGGED_WARNINGS:
            self._log(f"  ... and {len(warnings) - MAX_LOGGED_WARNINGS} more")

    def _log_banner(self, title: str):
        self._log("")
        self._log("=" * 40)
        self._log(title)
        self._log("=" * 40)

    def _cancel_conversion(self):
        """Cancel the running conversion."""
        self.cancel_event.set()
        self._log("Cancellation requested...")
        self.progress_frame.set_status("Cancelling...")

    def _log(self, message: str):
        """Add a message to the log."""
        self.log_frame.log(message)

    def _on_close(self):
        """Handle window close."""
        if self.conversion_thread and self.conversion_thread.is_alive():
            if not messagebox.askyesno(
                "Confirm Exit",
                "A conversion is in progress. Cancel it and exit?"
            ):
                return
            self.cancel_event.set()
        self._detach_log_handler()
        self.destroy()

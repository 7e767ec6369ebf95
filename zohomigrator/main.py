#!/usr/bin/env python3
"""Application entry point for Zoho Notebook to Obsidian Converter."""

import customtkinter as ctk
from zohomigrator.gui.app import ZohoToObsidianApp


def main():
    """Initialize and run the application."""
    ctk.set_appearance_mode("system")  # "light", "dark", or "system"
    ctk.set_default_color_theme("blue")

    app = ZohoToObsidianApp()
    app.mainloop()


if __name__ == "__main__":
    main()

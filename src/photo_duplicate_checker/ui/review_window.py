"""Duplicate review window for examining one duplicate group."""

import logging
import tkinter as tk
from tkinter import ttk

from PIL import ImageTk

from ..core import ApplicationConfig, Asset, DuplicateGroup
from .formatting import DateFormatter, format_variants
from .thumbnails import ThumbnailProvider

logger = logging.getLogger(__name__)

CARDS_PER_ROW = 4


class DuplicateReviewWindow:
    """Window showing a representative photo next to the photos that duplicate it."""

    def __init__(
        self, parent: tk.Tk, group: DuplicateGroup, config: ApplicationConfig | None = None
    ):
        """
        Initialize the duplicate review window.

        Args:
            parent: Parent window
            group: Duplicate group to display
            config: Application configuration
        """
        self.parent = parent
        self.group = group
        self.config = config or ApplicationConfig()
        self.thumbnails = ThumbnailProvider(self.config)
        self.date_formatter = DateFormatter(self.config)

        # PhotoImage objects must outlive the labels that show them
        self._photo_refs: list[ImageTk.PhotoImage] = []

        self.window = tk.Toplevel(parent)
        self.window.title(f"Review: {group.representative.display_name}")
        self.window.geometry("900x500")
        self.window.transient(parent)
        self.window.bind("<Escape>", lambda e: self._close())

        self._setup_gui()

    def _setup_gui(self) -> None:
        """Set up the GUI components."""
        self.window.grid_rowconfigure(1, weight=1)
        self.window.grid_columnconfigure(0, weight=1)

        header = ttk.Frame(self.window, padding="10")
        header.grid(row=0, column=0, sticky="ew")
        ttk.Label(
            header,
            text=(
                f"{self.group.member_count} duplicates of "
                f"{self.group.representative.display_name}"
            ),
            font=("Arial", 14, "bold"),
        ).grid(row=0, column=0, sticky="w")

        cards_frame = ttk.Frame(self.window, padding="10")
        cards_frame.grid(row=1, column=0, sticky="nsew")

        for index, asset in enumerate(self.group.assets):
            card = self._create_asset_card(cards_frame, asset, is_representative=index == 0)
            card.grid(
                row=index // CARDS_PER_ROW, column=index % CARDS_PER_ROW, padx=5, pady=5, sticky="n"
            )

        footer = ttk.Frame(self.window, padding="10")
        footer.grid(row=2, column=0, sticky="e")
        ttk.Button(footer, text="Close", command=self._close).grid(row=0, column=0)

    def _create_asset_card(
        self, parent: ttk.Frame, asset: Asset, is_representative: bool
    ) -> ttk.Frame:
        """Thumbnail plus capture details for one asset."""
        title = "Representative" if is_representative else "Duplicate"
        card = ttk.LabelFrame(parent, text=title, padding="5")

        try:
            photo = ImageTk.PhotoImage(self.thumbnails.get_thumbnail(asset))
            self._photo_refs.append(photo)
            tk.Label(card, image=photo, relief="solid", borderwidth=2, bg="white").grid(
                row=0, column=0
            )
        except (OSError, tk.TclError) as e:
            logger.warning(f"Could not show thumbnail for {asset.display_name}: {e}")

        details = [
            asset.display_name,
            self.date_formatter.format(asset),
            asset.dimensions,
        ]
        variants = format_variants(asset)
        if variants:
            details.append(variants)

        for row, text in enumerate(details, start=1):
            ttk.Label(card, text=text, wraplength=self.config.thumbnail_size).grid(
                row=row, column=0, sticky="w"
            )

        return card

    def show(self) -> None:
        """Bring the window to the front."""
        self.window.deiconify()
        self.window.lift()
        self.window.focus_set()

    def _close(self) -> None:
        """Close the window and release thumbnails."""
        self._photo_refs.clear()
        self.window.destroy()

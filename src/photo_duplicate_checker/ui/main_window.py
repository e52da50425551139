"""Main application window using tkinter."""

import logging
import queue
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from ..core import (
    ApplicationConfig,
    DirectoryAssetSource,
    ScanInProgressError,
    ScanState,
    ScanWorker,
)
from .formatting import DateFormatter, format_progress
from .review_window import DuplicateReviewWindow

logger = logging.getLogger(__name__)


class MainWindow:
    """Main application window for photo duplicate checker."""

    def __init__(self, config: ApplicationConfig | None = None):
        """Initialize the main window."""
        self.root = tk.Tk()
        self.root.title("Photo Duplicate Checker")
        self.root.geometry("800x600")
        self.root.minsize(600, 400)

        # Application components
        self.config = config or ApplicationConfig()
        self.worker = ScanWorker()
        self.date_formatter = DateFormatter(self.config)

        # Events from the scan thread, drained on the tkinter thread
        self._events: queue.Queue[tuple] = queue.Queue()

        # State
        self.current_scan_result: ScanState | None = None

        self._setup_gui()
        self._setup_bindings()

    def _setup_gui(self) -> None:
        """Set up the GUI components."""
        self.root.grid_rowconfigure(1, weight=1)
        self.root.grid_columnconfigure(0, weight=1)

        self._create_header()
        self._create_main_content()
        self._create_status_bar()

    def _create_header(self) -> None:
        """Create the header section with title and controls."""
        header_frame = ttk.Frame(self.root, padding="10")
        header_frame.grid(row=0, column=0, sticky="ew")
        header_frame.grid_columnconfigure(0, weight=1)

        title_label = ttk.Label(
            header_frame, text="Photo Duplicate Checker", font=("Arial", 16, "bold")
        )
        title_label.grid(row=0, column=0, columnspan=2, pady=(0, 10))

        ttk.Label(header_frame, text="Select Directory:").grid(row=1, column=0, sticky="w")

        dir_frame = ttk.Frame(header_frame)
        dir_frame.grid(row=2, column=0, columnspan=2, sticky="ew", pady=(5, 0))
        dir_frame.grid_columnconfigure(0, weight=1)

        self.directory_var = tk.StringVar()
        self.directory_entry = ttk.Entry(
            dir_frame, textvariable=self.directory_var, state="readonly"
        )
        self.directory_entry.grid(row=0, column=0, sticky="ew", padx=(0, 5))

        self.browse_button = ttk.Button(dir_frame, text="Browse...", command=self._browse_directory)
        self.browse_button.grid(row=0, column=1)

        button_frame = ttk.Frame(header_frame)
        button_frame.grid(row=3, column=0, columnspan=2, pady=(15, 0))

        self.scan_button = ttk.Button(
            button_frame, text="Look for Duplicates", command=self._start_scan
        )
        self.scan_button.grid(row=0, column=0, padx=(0, 10))

        self.stop_button = ttk.Button(
            button_frame, text="Stop Scan", command=self._stop_scan, state="disabled"
        )
        self.stop_button.grid(row=0, column=1, padx=(0, 10))

        self.review_button = ttk.Button(
            button_frame, text="Review Group", command=self._review_selected, state="disabled"
        )
        self.review_button.grid(row=0, column=2)

    def _create_main_content(self) -> None:
        """Create the main content area."""
        content_frame = ttk.Frame(self.root, padding="10")
        content_frame.grid(row=1, column=0, sticky="nsew")
        content_frame.grid_rowconfigure(2, weight=1)
        content_frame.grid_columnconfigure(0, weight=1)

        self.info_label = ttk.Label(
            content_frame,
            text="Select a directory and click 'Look for Duplicates' to get started.",
            font=("Arial", 11),
        )
        self.info_label.grid(row=0, column=0, pady=(0, 10))

        # Progress frame (hidden until a scan starts)
        self.progress_frame = ttk.Frame(content_frame)
        self.progress_frame.grid(row=1, column=0, sticky="ew")
        self.progress_frame.grid_columnconfigure(0, weight=1)

        self.progress_label = ttk.Label(self.progress_frame, text="")
        self.progress_label.grid(row=0, column=0, sticky="w", pady=(0, 5))

        self.progress_bar = ttk.Progressbar(self.progress_frame, mode="determinate", maximum=1)
        self.progress_bar.grid(row=1, column=0, sticky="ew")
        self.progress_frame.grid_remove()

        # Groups found, one row per representative
        results_frame = ttk.LabelFrame(content_frame, text="Duplicate Groups", padding="10")
        results_frame.grid(row=2, column=0, sticky="nsew", pady=(10, 0))
        results_frame.grid_rowconfigure(0, weight=1)
        results_frame.grid_columnconfigure(0, weight=1)

        columns = ("date", "dimensions", "duplicates")
        self.groups_tree = ttk.Treeview(results_frame, columns=columns, show="tree headings")
        self.groups_tree.heading("#0", text="Representative")
        self.groups_tree.heading("date", text="Captured")
        self.groups_tree.heading("dimensions", text="Dimensions")
        self.groups_tree.heading("duplicates", text="Duplicates")
        self.groups_tree.column("duplicates", width=90, anchor="center")
        self.groups_tree.grid(row=0, column=0, sticky="nsew")

        scrollbar = ttk.Scrollbar(
            results_frame, orient="vertical", command=self.groups_tree.yview
        )
        scrollbar.grid(row=0, column=1, sticky="ns")
        self.groups_tree.configure(yscrollcommand=scrollbar.set)

    def _create_status_bar(self) -> None:
        """Create the status bar."""
        self.status_bar = ttk.Frame(self.root, relief="sunken", padding="5")
        self.status_bar.grid(row=2, column=0, sticky="ew")

        self.status_label = ttk.Label(self.status_bar, text="Ready")
        self.status_label.grid(row=0, column=0, sticky="w")

    def _setup_bindings(self) -> None:
        """Set up event bindings."""
        self.directory_entry.bind("<Return>", lambda e: self._start_scan())
        self.groups_tree.bind("<Double-1>", lambda e: self._review_selected())
        self.groups_tree.bind("<<TreeviewSelect>>", lambda e: self._update_scan_buttons())
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _browse_directory(self) -> None:
        """Open directory selection dialog."""
        directory = filedialog.askdirectory(title="Select Directory to Scan for Duplicates")

        if directory:
            self.directory_var.set(directory)
            self._update_status(f"Selected directory: {directory}")

    def _start_scan(self) -> None:
        """Start scanning for duplicates."""
        directory_path = self.directory_var.get().strip()

        if not directory_path:
            messagebox.showwarning("No Directory", "Please select a directory to scan.")
            return

        scan_path = Path(directory_path)
        if not scan_path.is_dir():
            messagebox.showerror("Invalid Directory", "The selected path is not a directory.")
            return

        source = DirectoryAssetSource(
            scan_path, recursive=True, config=self.config, progress_callback=self._on_load_progress
        )

        try:
            self.worker.start(
                source, progress_callback=self._on_scan_progress, done_callback=self._on_scan_done
            )
        except ScanInProgressError as e:
            messagebox.showinfo("Scan Running", str(e))
            return

        self.current_scan_result = None
        self.groups_tree.delete(*self.groups_tree.get_children())
        self._show_progress("Reading photos...")
        self._update_status(f"Scanning {scan_path}...")
        self._update_scan_buttons()
        self.root.after(self.config.progress_poll_interval_ms, self._drain_events)

    def _stop_scan(self) -> None:
        """Ask the running scan to stop after its current comparison."""
        self.worker.cancel()
        self.stop_button.config(state="disabled")
        self._update_status("Stopping scan...")

    # Callbacks below run on the scan thread; they only enqueue.

    def _on_load_progress(self, current: int, total: int | None = None, message: str = "") -> None:
        self._events.put(("load", current, total, message))

    def _on_scan_progress(self, processed: int, total: int, group_count: int) -> None:
        self._events.put(("progress", processed, total, group_count))

    def _on_scan_done(self, state: ScanState | None, error: BaseException | None) -> None:
        self._events.put(("done", state, error))

    def _drain_events(self) -> None:
        """Apply queued scan events on the tkinter thread."""
        finished = False
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break

            kind = event[0]
            if kind == "load":
                _, current, total, message = event
                self.progress_label.config(text=message or f"Reading photo {current}")
            elif kind == "progress":
                _, processed, total, group_count = event
                self.progress_bar.config(maximum=max(total, 1), value=processed)
                self.progress_label.config(text=format_progress(processed, total, group_count))
            elif kind == "done":
                _, state, error = event
                self._finish_scan(state, error)
                finished = True

        if not finished:
            self.root.after(self.config.progress_poll_interval_ms, self._drain_events)

    def _finish_scan(self, state: ScanState | None, error: BaseException | None) -> None:
        """Show the final result of a scan."""
        self._hide_progress()

        if error is not None:
            logger.error(f"Error during scan: {error}")
            messagebox.showerror("Scan Error", f"An error occurred during scanning:\n{error}")
            self._update_status("Scan failed")
        elif state is not None:
            self.current_scan_result = state
            self._show_scan_results()
            prefix = "Scan stopped" if state.cancelled else "Scan complete"
            self._update_status(
                f"{prefix}: {state.processed_count} of {state.total_count} photos checked, "
                f"{state.group_count} duplicate groups"
            )

        self._update_scan_buttons()

    def _show_progress(self, message: str) -> None:
        """Show progress indicators."""
        self.info_label.grid_remove()
        self.progress_frame.grid()
        self.progress_label.config(text=message)
        self.progress_bar.config(value=0)

    def _hide_progress(self) -> None:
        """Hide progress indicators."""
        self.progress_frame.grid_remove()

    def _show_scan_results(self) -> None:
        """Fill the groups tree from the current result."""
        if not self.current_scan_result:
            return

        result = self.current_scan_result
        self.groups_tree.delete(*self.groups_tree.get_children())

        for index, group in enumerate(result.groups):
            representative = group.representative
            self.groups_tree.insert(
                "",
                "end",
                iid=str(index),
                text=representative.display_name,
                values=(
                    self.date_formatter.format(representative),
                    representative.dimensions,
                    group.member_count,
                ),
            )

        if result.groups:
            self.info_label.config(
                text=f"Found {result.group_count} groups with {result.duplicate_count} "
                "duplicates. Double-click a group to review it."
            )
        elif result.cancelled:
            self.info_label.config(text="Scan stopped before any duplicates were found.")
        else:
            self.info_label.config(text="No duplicates found in the selected directory.")

        self.info_label.grid()

    def _review_selected(self) -> None:
        """Open the review window for the selected group."""
        if not self.current_scan_result:
            return

        selection = self.groups_tree.selection()
        if not selection:
            messagebox.showinfo("No Group Selected", "Select a duplicate group to review.")
            return

        group = self.current_scan_result.groups[int(selection[0])]
        try:
            review_window = DuplicateReviewWindow(self.root, group, self.config)
            review_window.show()
        except Exception as e:
            logger.error(f"Error opening review window: {e}")
            messagebox.showerror("Error", f"Could not open review window:\n{e}")

    def _update_scan_buttons(self) -> None:
        """Update the state of scan-related buttons."""
        if self.worker.is_running:
            self.scan_button.config(state="disabled")
            self.browse_button.config(state="disabled")
            self.stop_button.config(state="normal")
            self.review_button.config(state="disabled")
        else:
            self.scan_button.config(state="normal")
            self.browse_button.config(state="normal")
            self.stop_button.config(state="disabled")

            if self.current_scan_result and self.groups_tree.selection():
                self.review_button.config(state="normal")
            else:
                self.review_button.config(state="disabled")

    def _update_status(self, message: str) -> None:
        """Update the status bar message."""
        self.status_label.config(text=message)

    def _on_close(self) -> None:
        """Stop any running scan before closing."""
        if self.worker.is_running:
            if not messagebox.askyesno("Cancel Scan", "A scan is in progress. Stop it and close?"):
                return
            self.worker.cancel()
        self.destroy()

    def run(self) -> None:
        """Start the GUI event loop."""
        self.root.mainloop()

    def destroy(self) -> None:
        """Clean up and destroy the window."""
        self.root.destroy()

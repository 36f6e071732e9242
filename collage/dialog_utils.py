import tkinter as tk
from tkinter import filedialog
from typing import Iterable, List, Optional

from collage.file_utils import SUPPORTED_IMAGE_EXTENSIONS


def select_image_files(extensions: Iterable[str] = SUPPORTED_IMAGE_EXTENSIONS) -> List[str]:
    """Open file dialog to select one or more images."""
    patterns = ' '.join(f'*{ext}' for ext in extensions)
    try:
        root = tk.Tk()
        root.withdraw()

        paths = filedialog.askopenfilenames(
            title="Upload Images",
            filetypes=[("Image files", patterns), ("All files", "*.*")]
        )
        root.destroy()

        return list(paths)

    except tk.TclError:
        print("Tkinter not available. Cannot open file dialog.")
        return []


def select_document_files() -> List[str]:
    """Open file dialog to select collage documents to import."""
    try:
        root = tk.Tk()
        root.withdraw()

        paths = filedialog.askopenfilenames(
            title="Import Collage",
            filetypes=[("Collage documents", "*.json"), ("All files", "*.*")]
        )
        root.destroy()

        return list(paths)

    except tk.TclError:
        print("Tkinter not available. Cannot open file dialog.")
        return []


def select_export_path(default_name: str = "collage.json") -> Optional[str]:
    """Open save dialog for the exported collage document."""
    try:
        root = tk.Tk()
        root.withdraw()

        path = filedialog.asksaveasfilename(
            title="Export Collage",
            initialfile=default_name,
            defaultextension=".json",
            filetypes=[("Collage documents", "*.json")]
        )
        root.destroy()

        return path if path else None

    except tk.TclError:
        print("Tkinter not available. Cannot open file dialog.")
        return None


def select_image_save_path(default_name: str = "collage.png") -> Optional[str]:
    """Open save dialog for a rendered image of the canvas."""
    try:
        root = tk.Tk()
        root.withdraw()

        path = filedialog.asksaveasfilename(
            title="Save Canvas Image",
            initialfile=default_name,
            defaultextension=".png",
            filetypes=[("PNG image", "*.png")]
        )
        root.destroy()

        return path if path else None

    except tk.TclError:
        print("Tkinter not available. Cannot open file dialog.")
        return None

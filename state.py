from dataclasses import dataclass, field
from typing import Optional

from collage.canvas_utils import CanvasSettings


@dataclass
class AppState:
    """UI-only state of the editor window.

    Nothing here affects the collage itself; that lives in the session's
    action log.
    """

    canvas: CanvasSettings = field(default_factory=CanvasSettings)

    # Selection
    selected_sprite_id: Optional[int] = None

    # Status bar
    is_processing_file: bool = False
    status_message: str = ""

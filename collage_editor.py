import html
import os

import pygame
import pygame_gui
from pygame_gui.elements import UIButton, UILabel, UIPanel, UISelectionList, UITextEntryLine
from pygame_gui.windows import UIMessageWindow
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from collage.actions import LayerDirection
from collage.canvas_utils import CanvasSettings
from collage.config_manager import get_config, reload_config
from collage.dialog_utils import select_document_files, select_export_path, select_image_files, select_image_save_path
from collage.drawing_utils import draw_checkerboard, draw_selection_outline, render_sprites
from collage.errors import CollageError, DocumentImportError
from collage.file_utils import get_images_from_directory, is_document_file_name, read_upload
from collage.log_utils import AppLogger
from collage.save_utils import read_documents, save_canvas_image, write_document
from collage.session import CollageSession
from state import AppState

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
CANVAS_MARGIN = 20

REORDER_KEYS = {
    pygame.K_PAGEUP: LayerDirection.MOVE_UP,
    pygame.K_PAGEDOWN: LayerDirection.MOVE_DOWN,
    pygame.K_HOME: LayerDirection.MOVE_TO_TOP,
    pygame.K_END: LayerDirection.MOVE_TO_BOTTOM,
}


class CollageEditor:
    def __init__(self, screen, session: CollageSession, config, logger: AppLogger):
        self.screen = screen
        self.w, self.h = screen.get_size()
        self.session = session
        self.config = config
        self.logger = logger
        self.clock = pygame.time.Clock()
        self.running = True

        self.SIDEBAR_WIDTH = config.display.sidebar_width
        self.ui_manager = pygame_gui.UIManager((self.w, self.h))

        self.state = AppState(canvas=CanvasSettings(
            width_input=config.canvas.width,
            height_input=config.canvas.height,
            scale_input=config.canvas.scale,
            background_color_input=config.canvas.background_color,
        ))

        self.status_font = pygame.font.Font(None, 20)
        self.setup_ui()
        self.load_default_images()

    # --- Layout -----------------------------------------------------------------

    def setup_ui(self):
        """Build the sidebar: canvas settings, image library, history and sprite tools."""
        self.sidebar = UIPanel(
            pygame.Rect(self.w - self.SIDEBAR_WIDTH, 0, self.SIDEBAR_WIDTH, self.h),
            manager=self.ui_manager,
            object_id='#sidebar'
        )
        inner_w = self.SIDEBAR_WIDTH - 20
        half_w = (inner_w - 10) // 2
        quarter_w = (inner_w - 30) // 4
        row_h = 30
        y = 10

        def label(text):
            nonlocal y
            UILabel(pygame.Rect(10, y, inner_w, 24), text, self.ui_manager, self.sidebar)
            y += 26

        def entry_row(caption, value):
            nonlocal y
            UILabel(pygame.Rect(10, y, 110, row_h), caption, self.ui_manager, self.sidebar)
            entry = UITextEntryLine(pygame.Rect(125, y, inner_w - 115, row_h), self.ui_manager, self.sidebar)
            entry.set_text(value)
            y += row_h + 4
            return entry

        canvas = self.state.canvas
        label("Canvas size")
        self.width_entry = entry_row("Width:", canvas.width_input)
        self.height_entry = entry_row("Height:", canvas.height_input)
        label("Canvas view")
        self.scale_entry = entry_row("Scale:", canvas.scale_input)
        self.background_entry = entry_row("Background:", canvas.background_color_input)

        label("Images")
        self.image_list = UISelectionList(pygame.Rect(10, y, inner_w, 150), [], self.ui_manager, container=self.sidebar)
        y += 155
        self.add_button = UIButton(pygame.Rect(10, y, half_w, row_h), 'Add', self.ui_manager, self.sidebar)
        self.upload_button = UIButton(pygame.Rect(20 + half_w, y, half_w, row_h), 'Upload new', self.ui_manager, self.sidebar)
        y += row_h + 10

        label("Collage")
        self.import_button = UIButton(pygame.Rect(10, y, half_w, row_h), 'Import', self.ui_manager, self.sidebar)
        self.export_button = UIButton(pygame.Rect(20 + half_w, y, half_w, row_h), 'Export', self.ui_manager, self.sidebar)
        y += row_h + 4
        self.save_image_button = UIButton(pygame.Rect(10, y, inner_w, row_h), 'Save PNG', self.ui_manager, self.sidebar)
        y += row_h + 4
        self.undo_button = UIButton(pygame.Rect(10, y, half_w, row_h), 'Undo', self.ui_manager, self.sidebar)
        self.redo_button = UIButton(pygame.Rect(20 + half_w, y, half_w, row_h), 'Redo', self.ui_manager, self.sidebar)
        y += row_h + 10

        label("Selected sprite")
        self.rename_entry = UITextEntryLine(pygame.Rect(10, y, inner_w - 90, row_h), self.ui_manager, self.sidebar)
        self.rename_button = UIButton(pygame.Rect(inner_w - 70, y, 80, row_h), 'Rename', self.ui_manager, self.sidebar)
        y += row_h + 4
        self.copy_width_button = UIButton(pygame.Rect(10, y, half_w, row_h), 'Copy width', self.ui_manager, self.sidebar)
        self.copy_height_button = UIButton(pygame.Rect(20 + half_w, y, half_w, row_h), 'Copy height', self.ui_manager, self.sidebar)
        y += row_h + 4
        self.paste_button = UIButton(pygame.Rect(10, y, half_w, row_h), 'Paste size', self.ui_manager, self.sidebar)
        self.duplicate_button = UIButton(pygame.Rect(20 + half_w, y, half_w, row_h), 'Duplicate', self.ui_manager, self.sidebar)
        y += row_h + 4

        self.reorder_buttons = {}
        for i, (text, direction) in enumerate([("Up", LayerDirection.MOVE_UP), ("Down", LayerDirection.MOVE_DOWN),
                                               ("Top", LayerDirection.MOVE_TO_TOP), ("Bottom", LayerDirection.MOVE_TO_BOTTOM)]):
            button = UIButton(pygame.Rect(10 + i * (quarter_w + 10), y, quarter_w, row_h), text, self.ui_manager, self.sidebar)
            self.reorder_buttons[button] = direction
        y += row_h + 4
        self.delete_button = UIButton(pygame.Rect(10, y, inner_w, row_h), 'Delete', self.ui_manager, self.sidebar, object_id='#delete_button')

        self.text_entries = [self.width_entry, self.height_entry, self.scale_entry, self.background_entry, self.rename_entry]
        self.refresh_image_list()

    def refresh_image_list(self):
        self.image_list.set_item_list([f"{i + 1}. {name}" for i, name in enumerate(self.session.library.names())])

    def selected_library_image(self):
        selection = self.image_list.get_single_selection()
        if not selection:
            return None
        index = int(selection.split('.', 1)[0]) - 1
        if 0 <= index < len(self.session.library):
            return self.session.library[index]
        return None

    def canvas_rect(self):
        width, height = self.state.canvas.size
        scale = self.state.canvas.scale
        return pygame.Rect(CANVAS_MARGIN, CANVAS_MARGIN, round(width * scale), round(height * scale))

    def to_canvas_coordinates(self, screen_pos):
        scale = self.state.canvas.scale
        if scale == 0:
            return None
        return (screen_pos[0] - CANVAS_MARGIN) / scale, (screen_pos[1] - CANVAS_MARGIN) / scale

    def set_status(self, message):
        self.state.status_message = message

    def show_message(self, title, message):
        UIMessageWindow(rect=pygame.Rect(self.w / 2 - 200, self.h / 2 - 100, 400, 200),
                        html_message=message, manager=self.ui_manager, window_title=title)

    # --- Main loop --------------------------------------------------------------

    def run(self):
        """Main loop for the editor."""
        while self.running:
            time_delta = self.clock.tick(self.config.display.fps) / 1000.0

            self.handle_events()

            self.ui_manager.update(time_delta)
            self.draw()

            pygame.display.flip()

    def handle_events(self):
        """Process all pygame and pygame-gui events."""
        for event in pygame.event.get():
            handled_by_gui = self.ui_manager.process_events(event)

            if event.type == pygame.QUIT:
                self.running = False

            if event.type == pygame_gui.UI_BUTTON_PRESSED:
                self.handle_button_press(event.ui_element)

            if event.type == pygame_gui.UI_TEXT_ENTRY_CHANGED:
                self.handle_text_entry_changed(event.ui_element)

            if event.type == pygame_gui.UI_TEXT_ENTRY_FINISHED and event.ui_element == self.rename_entry:
                self.rename_selected()

            if event.type == pygame.DROPFILE:
                self.handle_dropped_file(event.file)

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self.canvas_rect().collidepoint(event.pos) and not handled_by_gui:
                    self.handle_mouse_down(event.pos)
                    continue

            # Always finish a drag, even if the pointer ends up over the sidebar
            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.handle_mouse_up()
            elif event.type == pygame.MOUSEMOTION:
                self.handle_mouse_motion(event.pos)

            if not any(entry.is_focused for entry in self.text_entries):
                self.handle_keyboard_events(event)

    def handle_keyboard_events(self, event):
        if event.type != pygame.KEYDOWN:
            return

        ctrl = event.mod & pygame.KMOD_CTRL
        shift = event.mod & pygame.KMOD_SHIFT
        selected = self.state.selected_sprite_id

        if ctrl and event.key == pygame.K_z and shift:
            self.session.redo()
        elif ctrl and event.key == pygame.K_z:
            self.session.undo()
        elif ctrl and event.key == pygame.K_y:
            self.session.redo()
        elif ctrl and event.key == pygame.K_d and selected is not None:
            self.session.duplicate_sprite(selected)
        elif ctrl and event.key == pygame.K_v and selected is not None:
            self.session.paste(selected)
        elif event.key in (pygame.K_DELETE, pygame.K_BACKSPACE) and selected is not None:
            self.session.delete_sprite(selected)
            self.state.selected_sprite_id = None
        elif event.key in REORDER_KEYS and selected is not None:
            self.session.reorder_sprite(selected, REORDER_KEYS[event.key])
        elif event.key == pygame.K_r and shift:
            reload_config()
            self.config = get_config()
            self.logger.success("Configuration reloaded")
        elif event.key == pygame.K_ESCAPE:
            if self.session.pending_transformation is not None:
                self.session.cancel_transformation()
            else:
                self.running = False

    def handle_mouse_down(self, mouse_pos):
        """Select the sprite under the pointer and start dragging it (shift: scale)."""
        pointer = self.to_canvas_coordinates(mouse_pos)
        if pointer is None:
            return

        sprite = self.session.pick(pointer[0], pointer[1], self.state.canvas.size)
        if sprite is None:
            self.state.selected_sprite_id = None
            self.rename_entry.set_text("")
            return

        self.state.selected_sprite_id = sprite.id
        self.rename_entry.set_text(sprite.name)
        if pygame.key.get_mods() & pygame.KMOD_SHIFT:
            self.session.begin_scale(sprite.id, *pointer)
        else:
            self.session.begin_translate(sprite.id, *pointer)

    def handle_mouse_motion(self, mouse_pos):
        if self.session.pending_transformation is None:
            return
        pointer = self.to_canvas_coordinates(mouse_pos)
        if pointer is not None:
            self.session.update_pointer(*pointer)

    def handle_mouse_up(self):
        self.session.finish_transformation()

    def handle_text_entry_changed(self, entry):
        canvas = self.state.canvas
        if entry == self.width_entry:
            canvas.width_input = entry.get_text()
        elif entry == self.height_entry:
            canvas.height_input = entry.get_text()
        elif entry == self.scale_entry:
            canvas.scale_input = entry.get_text()
        elif entry == self.background_entry:
            canvas.background_color_input = entry.get_text()

    def handle_button_press(self, button):
        """Dispatcher for all sidebar button presses."""
        selected = self.state.selected_sprite_id

        if button == self.add_button:
            image = self.selected_library_image()
            if image is not None:
                self.session.create_sprite(image)
        elif button == self.upload_button:
            self.upload_files(select_image_files(self.config.supported_extensions.images))
        elif button == self.import_button:
            self.import_files(select_document_files())
        elif button == self.export_button:
            self.export_collage()
        elif button == self.save_image_button:
            self.save_canvas_image()
        elif button == self.undo_button:
            self.session.undo()
        elif button == self.redo_button:
            self.session.redo()
        elif button == self.rename_button:
            self.rename_selected()
        elif selected is None:
            return
        elif button == self.copy_width_button:
            self.session.copy_width(selected)
        elif button == self.copy_height_button:
            self.session.copy_height(selected)
        elif button == self.paste_button:
            self.session.paste(selected)
        elif button == self.duplicate_button:
            self.session.duplicate_sprite(selected)
        elif button == self.delete_button:
            self.session.delete_sprite(selected)
            self.state.selected_sprite_id = None
        elif button in self.reorder_buttons:
            self.session.reorder_sprite(selected, self.reorder_buttons[button])

    # --- Commands ---------------------------------------------------------------

    def rename_selected(self):
        selected = self.state.selected_sprite_id
        new_name = self.rename_entry.get_text()
        if selected is None or not new_name:
            return
        self.session.rename_sprite(selected, new_name)
        sprite = self.session.find_sprite(selected)
        if sprite is not None:
            self.rename_entry.set_text(sprite.name)

    def upload_files(self, paths):
        if not paths:
            return
        self.state.is_processing_file = True
        self.set_status("Processing file...")
        try:
            failures = self.session.upload([read_upload(path) for path in paths],
                                           self.config.performance.decode_max_workers)
        except OSError as e:
            self.logger.error(f"Could not read upload: {e}")
            failures = [e]
        finally:
            self.state.is_processing_file = False

        self.refresh_image_list()
        if failures:
            self.show_message("Upload failed", "<br>".join(html.escape(str(f)) for f in failures))
            self.set_status(f"{len(failures)} file(s) could not be loaded")
        else:
            self.set_status(f"{len(self.session.library)} image(s) in library")

    def import_files(self, paths):
        if not paths:
            return
        try:
            self.session.import_documents(read_documents(paths))
        except DocumentImportError as e:
            self.show_message("Import failed", html.escape(str(e)))
            self.set_status("Import failed")
            return
        except OSError as e:
            self.logger.error(f"Could not read document: {e}")
            self.set_status("Import failed")
            return
        self.set_status(f"Imported {len(paths)} document(s)")

    def export_collage(self):
        path = select_export_path(self.config.paths.export_file_name)
        if not path:
            return
        try:
            write_document(path, self.session.export_document())
        except OSError as e:
            self.logger.error(f"Could not write '{path}': {e}")
            self.set_status("Export failed")
            return
        self.logger.success(f"Exported collage to '{path}'")
        self.set_status(f"Exported to {os.path.basename(path)}")

    def save_canvas_image(self):
        width, height = self.state.canvas.size
        if not width or not height:
            self.set_status("Canvas has no area")
            return
        path = select_image_save_path()
        if not path:
            return
        try:
            save_canvas_image(path, (width, height), self.session.committed_sprites(), self.state.canvas.background)
        except (OSError, ValueError) as e:
            self.logger.error(f"Could not save image '{path}': {e}")
            self.set_status("Save failed")
            return
        self.logger.success(f"Saved canvas image to '{path}'")
        self.set_status(f"Saved {os.path.basename(path)}")

    def load_default_images(self):
        """Upload every image found in the configured default directory."""
        directory = os.path.join(SCRIPT_DIR, self.config.paths.default_image_dir)
        paths = get_images_from_directory(directory, self.config.supported_extensions.images)
        if paths:
            self.logger.info(f"Loading {len(paths)} image(s) from '{directory}'")
            self.upload_files(paths)

    def handle_dropped_file(self, path):
        if is_document_file_name(path):
            self.import_files([path])
        else:
            self.upload_files([path])

    # --- Drawing ----------------------------------------------------------------

    def draw(self):
        self.screen.fill(self.config.display.default_background_color)

        rect = self.canvas_rect()
        background = self.state.canvas.background
        if background is not None:
            pygame.draw.rect(self.screen, background, rect)
        else:
            draw_checkerboard(self.screen, rect, self.config.canvas.checkerboard_tile_size)

        scale = self.state.canvas.scale
        offset = (CANVAS_MARGIN, CANVAS_MARGIN)
        sprites = self.session.sprites()

        self.screen.set_clip(rect)
        render_sprites(self.screen, sprites, scale, offset)
        selected = next((s for s in sprites if s.id == self.state.selected_sprite_id), None)
        if selected is not None:
            draw_selection_outline(self.screen, selected, scale, offset)
        self.screen.set_clip(None)

        self.draw_status_bar()
        self.ui_manager.draw_ui(self.screen)

    def draw_status_bar(self):
        sprites = self.session.sprites()
        parts = [f"Sprites: {len(sprites)}"]
        if not self.session.paste_buffer.is_empty:
            buffer = self.session.paste_buffer
            parts.append(f"Copied {'width' if buffer.width is not None else 'height'}: "
                         f"{buffer.width if buffer.width is not None else buffer.height:.1f}")
        if self.state.status_message:
            parts.append(self.state.status_message)

        status_surf = self.status_font.render(" | ".join(parts), True, (200, 200, 200))
        self.screen.blit(status_surf, (CANVAS_MARGIN, self.h - status_surf.get_height() - 6))


def print_controls(logger):
    controls_text = Text()
    controls_text.append("--- Canvas ---\n", style="bold yellow")
    controls_text.append("Left drag: move sprite | Shift + left drag: scale sprite | ESC: cancel drag\n")
    controls_text.append("--- Editing ---\n", style="bold yellow")
    controls_text.append("Ctrl+Z: undo | Ctrl+Y / Ctrl+Shift+Z: redo | Ctrl+D: duplicate | Ctrl+V: paste size\n")
    controls_text.append("Delete: delete sprite | PageUp/PageDown/Home/End: reorder layers\n")
    controls_text.append("--- General ---\n", style="bold yellow")
    controls_text.append("Drop image or .json files on the window to upload or import\n")
    controls_text.append("Shift+R: reload configuration | ESC: quit")
    logger.info(Panel(controls_text, title="[bold magenta]Collage Editor[/bold magenta]", expand=False, border_style="cyan"))


def main():
    config = get_config()
    logger = AppLogger(config)

    pygame.init()
    screen = pygame.display.set_mode((config.display.window_width, config.display.window_height))
    pygame.display.set_caption("Collage Editor")

    print_controls(logger)
    session = CollageSession(logger=logger)
    try:
        CollageEditor(screen, session, config, logger).run()
    except CollageError as e:
        logger.error(escape(str(e)))
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()

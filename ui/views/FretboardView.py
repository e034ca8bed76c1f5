"""
Fretboard view.
Grid of note cells: hover previews a note, click plays it, shift+click
plays a longer monophonic "performance" note.
"""
import time
from typing import Any, Dict, Optional, Tuple

import dearpygui.dearpygui as dpg

from audio.voice_manager import VoiceManager
from core.fretboard import Fretboard
from ui.theme import FretboardColors, create_note_theme, create_selected_theme

Cell = Tuple[int, int]  # (string_index, fret)


class FretboardView:
    """
    Fretboard window.

    Shows:
    - Fret numbers
    - One row of note cells per string, labelled with the open note
    - Inlay markers under the grid
    """

    OPEN_CELL_WIDTH = 60
    CELL_WIDTH = 80
    HIGHLIGHT_TIME = 0.5  # seconds a played cell stays highlighted

    def __init__(self, fretboard: Fretboard, voice_manager: VoiceManager,
                 playback: Optional[Dict[str, Any]] = None):
        """
        Args:
            fretboard: Fretboard grid to render
            voice_manager: Voice manager that plays notes
            playback: "playback" settings category (durations)
        """
        self.fretboard = fretboard
        self.voice_manager = voice_manager

        playback = playback or {}
        self.hover_duration = playback.get("hover_duration", 0.5)
        self.click_duration = playback.get("click_duration", 0.8)
        self.performance_duration = playback.get("performance_duration", 1.5)

        self._window_tag = "fretboard_window"
        self._hovered_cell: Optional[Cell] = None
        self._highlighted: Dict[Cell, float] = {}  # cell -> highlight expiry
        self._note_theme = None
        self._selected_theme = None

    @staticmethod
    def _cell_tag(cell: Cell) -> str:
        return f"fret_cell_{cell[0]}_{cell[1]}"

    def _cell_width(self, fret: int) -> int:
        return self.OPEN_CELL_WIDTH if fret == 0 else self.CELL_WIDTH

    def create(self) -> str:
        """
        Create the fretboard window.

        Returns:
            Window tag
        """
        self._note_theme = create_note_theme()
        self._selected_theme = create_selected_theme()

        with dpg.window(tag=self._window_tag, label="Guitar Fretboard",
                        no_title_bar=True, no_move=True, no_resize=True):
            dpg.add_text("Guitar Fretboard")
            dpg.add_text("Hover to preview - click to play - shift+click for a sustained note",
                         color=FretboardColors.TEXT_SECONDARY)
            dpg.add_spacer(height=10)

            with dpg.child_window(autosize_x=True, autosize_y=True, border=False):
                self._create_fret_numbers()
                for string_index in range(self.fretboard.string_count):
                    self._create_string_row(string_index)
                self._create_markers()

        return self._window_tag

    def _create_fret_numbers(self):
        with dpg.group(horizontal=True):
            dpg.add_spacer(width=40)
            for fret in self.fretboard.frets:
                dpg.add_button(label=str(fret), width=self._cell_width(fret), enabled=False)

    def _create_string_row(self, string_index: int):
        open_note = self.fretboard.tuning[string_index]
        thickness = self.fretboard.string_thickness(string_index + 1)

        with dpg.group(horizontal=True):
            dpg.add_text(str(open_note).ljust(4), color=FretboardColors.STRING)
            for fret, note in zip(self.fretboard.frets, self.fretboard.string_notes(string_index)):
                cell = (string_index, fret)
                tag = self._cell_tag(cell)
                dpg.add_button(tag=tag, label=str(note), width=self._cell_width(fret),
                               height=20 + thickness * 2,
                               callback=self._on_cell_clicked, user_data=cell)
                dpg.bind_item_theme(tag, self._note_theme)

                with dpg.item_handler_registry() as handler:
                    dpg.add_item_hover_handler(callback=self._on_cell_hovered, user_data=cell)
                dpg.bind_item_handler_registry(tag, handler)

    def _create_markers(self):
        with dpg.group(horizontal=True):
            dpg.add_spacer(width=40)
            for fret in self.fretboard.frets:
                dots = self.fretboard.fret_marker(fret)
                dpg.add_button(label=" ".join(["o"] * dots), width=self._cell_width(fret),
                               enabled=False)

    def _on_cell_hovered(self, sender, app_data, user_data):
        """Play a short polyphonic preview when the pointer enters a cell."""
        cell = user_data
        if cell == self._hovered_cell:
            return
        self._hovered_cell = cell
        note = self.fretboard.note_at(*cell)
        self.voice_manager.play(note, self.hover_duration, stop_previous=False)

    def _on_cell_clicked(self, sender, app_data, user_data):
        """Play the clicked note; shift makes it a monophonic performance note."""
        cell = user_data
        note = self.fretboard.note_at(*cell)
        if self._shift_down():
            self.voice_manager.play(note, self.performance_duration, stop_previous=True)
        else:
            self.voice_manager.play(note, self.click_duration, stop_previous=False)
        self._highlight(cell)

    @staticmethod
    def _shift_down() -> bool:
        return dpg.is_key_down(dpg.mvKey_LShift) or dpg.is_key_down(dpg.mvKey_RShift)

    def _highlight(self, cell: Cell):
        self._highlighted[cell] = time.monotonic() + self.HIGHLIGHT_TIME
        dpg.bind_item_theme(self._cell_tag(cell), self._selected_theme)

    def update(self):
        """Per-frame housekeeping: hover exit and highlight expiry."""
        if self._hovered_cell is not None and not dpg.is_item_hovered(self._cell_tag(self._hovered_cell)):
            self._hovered_cell = None

        now = time.monotonic()
        expired = [cell for cell, until in self._highlighted.items() if now >= until]
        for cell in expired:
            del self._highlighted[cell]
            dpg.bind_item_theme(self._cell_tag(cell), self._note_theme)

    def show(self):
        """Show fretboard window."""
        dpg.show_item(self._window_tag)

    def hide(self):
        """Hide fretboard window."""
        dpg.hide_item(self._window_tag)

"""
Fretboard theme.
Provides the wood/string color palette and DearPyGui theme configuration.
"""
import dearpygui.dearpygui as dpg


class FretboardColors:
    """Fretboard color constants."""

    # Background colors
    BG_WINDOW = (24, 20, 18, 255)          # #181412 - Page background
    BG_WOOD = (92, 58, 33, 255)            # #5C3A21 - Rosewood fretboard

    # Hardware
    STRING = (200, 200, 190, 255)          # #C8C8BE - Nickel strings
    FRET_WIRE = (170, 170, 160, 255)       # #AAAAA0 - Fret wire
    NUT = (235, 230, 215, 255)             # #EBE6D7 - Bone nut
    DOT = (230, 220, 200, 110)             # Inlay dots (translucent)

    # Note labels
    NOTE_BG = (60, 40, 25, 255)            # #3C2819 - Idle note label
    NOTE_BG_HOVER = (120, 80, 45, 255)     # #78502D - Hovered note label
    NOTE_TEXT = (190, 175, 160, 255)       # #BEAFA0 - Idle note text
    SELECTED = (230, 140, 40, 255)         # #E68C28 - Played note
    SELECTED_TEXT = (255, 255, 255, 255)

    # Text colors
    TEXT_PRIMARY = (230, 225, 215, 255)
    TEXT_SECONDARY = (150, 140, 130, 255)

    # Spacing
    FRAME_PADDING = (6, 4)
    ITEM_SPACING = (2, 4)
    WINDOW_PADDING = (16, 16)


def apply_fretboard_theme() -> None:
    """
    Apply the fretboard theme to DearPyGui.
    Call this once during application initialization.
    """
    with dpg.theme() as global_theme:
        with dpg.theme_component(dpg.mvAll):
            dpg.add_theme_color(dpg.mvThemeCol_WindowBg, FretboardColors.BG_WINDOW)
            dpg.add_theme_color(dpg.mvThemeCol_ChildBg, FretboardColors.BG_WOOD)
            dpg.add_theme_color(dpg.mvThemeCol_Text, FretboardColors.TEXT_PRIMARY)

            dpg.add_theme_style(dpg.mvStyleVar_FramePadding, FretboardColors.FRAME_PADDING[0], FretboardColors.FRAME_PADDING[1])
            dpg.add_theme_style(dpg.mvStyleVar_ItemSpacing, FretboardColors.ITEM_SPACING[0], FretboardColors.ITEM_SPACING[1])
            dpg.add_theme_style(dpg.mvStyleVar_WindowPadding, FretboardColors.WINDOW_PADDING[0], FretboardColors.WINDOW_PADDING[1])
            dpg.add_theme_style(dpg.mvStyleVar_FrameRounding, 4)

    dpg.bind_theme(global_theme)


def apply_ui_scale(scale: float) -> None:
    """Scale all fonts (0.5x - 2.0x)."""
    dpg.set_global_font_scale(max(0.5, min(scale, 2.0)))


def create_note_theme() -> int:
    """
    Create theme for idle note cells.

    Returns:
        Theme tag that can be bound to buttons
    """
    with dpg.theme() as note_theme:
        with dpg.theme_component(dpg.mvButton):
            dpg.add_theme_color(dpg.mvThemeCol_Button, FretboardColors.NOTE_BG)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, FretboardColors.NOTE_BG_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, FretboardColors.SELECTED)
            dpg.add_theme_color(dpg.mvThemeCol_Text, FretboardColors.NOTE_TEXT)

    return note_theme


def create_selected_theme() -> int:
    """
    Create theme for a note cell that was just played.

    Returns:
        Theme tag that can be bound to buttons
    """
    with dpg.theme() as selected_theme:
        with dpg.theme_component(dpg.mvButton):
            dpg.add_theme_color(dpg.mvThemeCol_Button, FretboardColors.SELECTED)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, FretboardColors.SELECTED)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, FretboardColors.SELECTED)
            dpg.add_theme_color(dpg.mvThemeCol_Text, FretboardColors.SELECTED_TEXT)

    return selected_theme

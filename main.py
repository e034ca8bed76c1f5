"""
Fretboard Synth - interactive guitar fretboard
Main entry point
"""
import argparse
import logging

import dearpygui.dearpygui as dpg

from audio.voice_manager import VoiceManager
from core.fretboard import Fretboard
from core.models import STANDARD_TUNING
from core.settings import load_settings
from ui.theme import apply_fretboard_theme, apply_ui_scale
from ui.views.FretboardView import FretboardView


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive guitar fretboard")
    parser.add_argument("--settings", default=None,
                        help="Settings file (default ~/.fretboard/settings.json)")
    parser.add_argument("--log-level", default="INFO",
                        help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def main(argv=None):
    """Launch the fretboard."""
    args = parse_args(argv)
    configure_logging(args.log_level)
    logging.info("=== Fretboard Synth ===")

    settings = load_settings(args.settings)
    fretboard = Fretboard(STANDARD_TUNING, settings["fretboard"]["total_frets"])
    voice_manager = VoiceManager.from_settings(settings)

    dpg.create_context()
    apply_ui_scale(settings["video"].get("ui_scale", 1.0))

    view = FretboardView(fretboard, voice_manager, settings["playback"])
    window_tag = view.create()
    apply_fretboard_theme()

    dpg.create_viewport(title="Fretboard Synth", width=1480, height=420)
    dpg.setup_dearpygui()
    dpg.show_viewport()
    dpg.set_primary_window(window_tag, True)

    logging.info("Ready!")

    try:
        while dpg.is_dearpygui_running():
            view.update()
            dpg.render_dearpygui_frame()
    finally:
        voice_manager.close()
        dpg.destroy_context()
        logging.info("Fretboard Synth closed.")


if __name__ == "__main__":
    main()

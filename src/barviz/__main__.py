#!/usr/bin/env python3
"""
Bar Visualizer CLI Tool
=======================

Renders the decaying bar-graph level visualizer for an audio file into a
video. Loudness is measured with Librosa, fed to the visualizer as decibel
readings and the bars are drawn with OpenCV and encoded with MoviePy.

Usage:
    python -m barviz input.wav --output result.mp4
    python -m barviz -h (for help)
"""

import argparse
import logging
import os
import sys

import cv2
from moviepy import AudioFileClip, VideoClip

from barviz.audio_analyser import AudioAnalyser
from barviz.constants import (
    BAR_COLOR,
    BAR_CORNER_RADIUS,
    BAR_SPACING,
    BAR_WIDTH,
    DECAY_AMOUNT,
    DECAY_SPEED,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
)
from barviz.controller import VisualizerController
from barviz.scheduler import ManualScheduler
from barviz.visualiser_renderer import BarRenderer

logger = logging.getLogger(__name__)


def parse_color(text):
    """Parse a "B,G,R" string into a color tuple."""
    try:
        color = tuple(int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid color {text!r}, expected B,G,R")
    if len(color) != 3 or not all(0 <= c <= 255 for c in color):
        raise argparse.ArgumentTypeError(f"invalid color {text!r}, expected three values 0-255")
    return color


def build_parser():
    parser = argparse.ArgumentParser(
        prog="barviz",
        description="Render a decaying bar-graph level visualization for an audio file.",
    )
    parser.add_argument("input", help="Path to input audio file (WAV/MP3)")
    parser.add_argument("--output", "-o", default="output.mp4", help="Path to output video file")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, help="Limit duration in seconds (optional)")
    parser.add_argument("--bar-width", type=float, default=BAR_WIDTH, help="Bar width in pixels")
    parser.add_argument("--bar-spacing", type=float, default=BAR_SPACING, help="Gap between bars in pixels")
    parser.add_argument(
        "--corner-radius",
        type=float,
        default=BAR_CORNER_RADIUS,
        help="Bar corner radius; negative derives it from the bar width",
    )
    parser.add_argument(
        "--bar-color",
        type=parse_color,
        default=BAR_COLOR,
        help="Bar color as B,G,R (default: %(default)s)",
    )
    parser.add_argument("--decay-speed", type=float, default=DECAY_SPEED, help="Seconds between decay ticks")
    parser.add_argument("--decay-amount", type=float, default=DECAY_AMOUNT, help="Per-tick decay factor in [0, 1)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def make_frame_source(analyser, controller, renderer):
    """
    Build the MoviePy frame callback.

    Each frame feeds the current loudness to the controller, advances its
    clock to `t` so every due tick runs, and draws the resulting bars.
    """
    scheduler = controller.scheduler

    def make_frame(t):
        controller.add_value(analyser.get_level_at_time(t))
        scheduler.advance_to(t)
        frame = renderer.draw(controller.frame())
        # MoviePy expects RGB, OpenCV draws BGR
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    return make_frame


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")

    # 2. Analyze Audio
    analyser = AudioAnalyser(args.input)

    # 3. Setup Video Generation
    duration = analyser.duration
    if args.duration and args.duration < duration:
        duration = args.duration
        logger.info(f"[i] Truncating duration to {duration} seconds.")

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    try:
        controller = VisualizerController(
            width=args.width,
            height=args.height,
            bar_width=args.bar_width,
            bar_spacing=args.bar_spacing,
            bar_corner_radius=args.corner_radius,
            bar_color=args.bar_color,
            decay_speed=args.decay_speed,
            decay_amount=args.decay_amount,
            scheduler=ManualScheduler(),
        )
    except ValueError as e:
        sys.exit(f"[!] {e}")

    logger.info(f"[+] {controller.bar_count} bars")
    renderer = BarRenderer(args.width, args.height)

    # 4. Create MoviePy Clip
    video_clip = VideoClip(make_frame_source(analyser, controller, renderer), duration=duration)

    # Attach original audio
    audio_clip = AudioFileClip(args.input)
    audio_clip = audio_clip.subclipped(0, duration)
    video_clip = video_clip.with_audio(audio_clip)

    # 5. Export
    logger.info("[+] Rendering video... (This may take a while)")
    try:
        video_clip.write_videofile(
            args.output,
            fps=args.fps,
            codec="libx264",
            audio_codec="aac",
            threads=4,
            preset="medium",
            logger="bar",
        )
    finally:
        controller.close()

    logger.info(f"[+] Done! Saved to {args.output}")


if __name__ == "__main__":
    main()

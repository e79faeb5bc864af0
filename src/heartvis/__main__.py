#!/usr/bin/env python3
"""
Audio-Reactive Heart CLI
========================

Draws a pulsing, colour-cycling heart (or your own PNG) that reacts to sound.

Modes:
- live:   microphone input, OpenCV window, keyboard controls.
- render: offline MP4 of an audio file, with the original audio attached.

Usage:
    python -m heartvis live --profile balance
    python -m heartvis render input.wav --output result.mp4
    python -m heartvis -h (for help)
"""

import argparse
import logging
import os
import sys
from concurrent.futures import wait

import cv2
from moviepy import AudioFileClip, VideoClip

from heartvis.audio_analyser import SILENCE, AudioAnalyser, MicrophoneInput
from heartvis.canvas import OpenCVCanvas
from heartvis.constants import DEFAULT_FPS, DEFAULT_RESOLUTION, WINDOW_NAME
from heartvis.frame_orchestrator import Command, FrameOrchestrator
from heartvis.profiles import DEFAULT_PROFILE, PROFILES, get_profile

logger = logging.getLogger(__name__)


def build_orchestrator(args):
    canvas = OpenCVCanvas(args.width, args.height)
    orchestrator = FrameOrchestrator(canvas, get_profile(args.profile))
    if args.rotate:
        orchestrator.apply_command(Command.TOGGLE_ROTATION)
    if args.bounce:
        orchestrator.apply_command(Command.TOGGLE_BOUNCE)
    if args.image:
        future = orchestrator.request_image(args.image)
        if future is not None:
            # Swapped in by the first tick
            wait([future])
    return orchestrator


def choose_image():
    """Ask for a PNG with a file dialog; None if cancelled or no display toolkit."""
    try:
        import tkinter as tk
        from tkinter import filedialog
    except ImportError:
        logger.warning("[!] tkinter is not available; use --image to pick a PNG")
        return None

    root = tk.Tk()
    root.withdraw()
    path = filedialog.askopenfilename(
        title="Select a PNG image", filetypes=[("PNG image", "*.png"), ("All files", "*.*")]
    )
    root.update()
    root.destroy()
    return path or None


def toggle_fullscreen():
    fullscreen = cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_FULLSCREEN) == cv2.WINDOW_FULLSCREEN
    cv2.setWindowProperty(
        WINDOW_NAME,
        cv2.WND_PROP_FULLSCREEN,
        cv2.WINDOW_NORMAL if fullscreen else cv2.WINDOW_FULLSCREEN,
    )


def run_live(args):
    orchestrator = build_orchestrator(args)
    canvas = orchestrator.canvas

    mic = MicrophoneInput(device=args.device)
    try:
        mic.start()
    except Exception as e:
        logger.warning(f"[!] Microphone unavailable ({e}); running without sound")
        mic = None

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(WINDOW_NAME, args.width, args.height)
    if args.fullscreen:
        toggle_fullscreen()

    frame_delay = max(1, int(1000 / args.fps))
    logger.info(f"[+] Running live: {args.width}x{args.height} @ {args.fps}fps, profile '{args.profile}'")

    try:
        while True:
            # Track the window size so the canvas always fills it
            _, _, win_w, win_h = cv2.getWindowImageRect(WINDOW_NAME)
            if win_w > 0 and win_h > 0:
                canvas.resize(win_w, win_h)

            orchestrator.tick(mic.read() if mic is not None else SILENCE)
            cv2.imshow(WINDOW_NAME, canvas.frame)

            command = orchestrator.handle_key(cv2.waitKey(frame_delay))
            if command is Command.QUIT:
                break
            elif command is Command.TOGGLE_FULLSCREEN:
                toggle_fullscreen()
            elif command is Command.UPLOAD_IMAGE:
                if orchestrator.show_instructions:
                    path = choose_image()
                    if path:
                        orchestrator.request_image(path)
                else:
                    logger.debug("[i] Upload is hidden with the instructions; press E first")

            if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                break
    finally:
        if mic is not None:
            mic.stop()
        orchestrator.close()
        cv2.destroyAllWindows()

    logger.info("[+] Bye!")


def frame_function(orchestrator, analyser):
    """
    Wrap the orchestrator as a MoviePy frame function.

    The orchestrator advances once per distinct time. VideoClip reads t=0
    to learn the frame size before writing starts, and that read must not
    count as an extra frame.
    """
    rendered = {}

    def make_frame(t):
        if rendered.get("t") != t:
            orchestrator.tick(analyser.get_frame_at_time(t))
            # OpenCV draws BGR, MoviePy expects RGB
            rendered["frame"] = cv2.cvtColor(orchestrator.canvas.frame, cv2.COLOR_BGR2RGB)
            rendered["t"] = t
        return rendered["frame"]

    return make_frame


def run_render(args):
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

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps, profile '{args.profile}'")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    orchestrator = build_orchestrator(args)
    orchestrator.show_instructions = False

    # 4. Create MoviePy Clip
    video_clip = VideoClip(frame_function(orchestrator, analyser), duration=duration)

    # Attach original audio
    audio_clip = AudioFileClip(args.input)
    # Ensure audio is cut if we truncated duration
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
        orchestrator.close()

    logger.info(f"[+] Done! Saved to {args.output}")


def add_common_arguments(parser):
    parser.add_argument(
        "--profile", "-p", default=DEFAULT_PROFILE, choices=sorted(PROFILES), help="Visual profile"
    )
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Canvas width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Canvas height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--image", help="PNG image to show instead of the heart")
    parser.add_argument("--rotate", action="store_true", help="Start with rotation on")
    parser.add_argument("--bounce", action="store_true", help="Start with bouncing on")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Audio-reactive pulsing heart visualiser.")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    live = subparsers.add_parser("live", help="Visualise the microphone in a window")
    add_common_arguments(live)
    live.add_argument("--device", default=None, help="Input device index or name (sounddevice)")
    live.add_argument("--fullscreen", action="store_true", help="Start fullscreen")
    live.set_defaults(func=run_live)

    render = subparsers.add_parser("render", help="Render an audio file to an MP4 video")
    render.add_argument("input", help="Path to input audio file (WAV/MP3)")
    render.add_argument("--output", "-o", default="output.mp4", help="Path to output video file")
    render.add_argument("--duration", type=int, help="Limit duration in seconds (optional)")
    add_common_arguments(render)
    render.set_defaults(func=run_render)

    args = parser.parse_args(argv)
    if getattr(args, "device", None) is not None and args.device.isdigit():
        args.device = int(args.device)
    return args


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    args.func(args)


if __name__ == "__main__":
    main()

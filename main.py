"""
main.py
--------
obsx command-line entrypoint

Commands:
1️⃣ add-images  place every image in a directory as a scene layer
2️⃣ add-webcam  add a configured webcam input to the current scene
3️⃣ yolo        translate a free-form request into OBS calls and run them

Environment:
  OBSX_URL        OBS websocket URL (default: ws://localhost:4455)
  OBSX_PASSWORD   OBS websocket password (optional)
  OPENAI_API_KEY  required for `yolo`
"""

import os
import sys
import argparse
from typing import List, Optional

# --- Common utilities ---
from common.config import get_log_level_name, get_obs_connection_options
from common.errors import ObsxError
from common.io_utils import level_from_name, log, normalize_file_path, setup_logging
from common.obs_client import obs_session

# --- Command modules ---
from scene import list_images_in_dir, reconcile_images
from webcam import CaptureDeviceChoice, DEFAULT_BASE_NAME, WebcamConfig, provision
from assistant import ExecutionStatus, OpenAITranslator, format_failure, translate_and_execute


# -----------------------------------------------------
# Argument parsing
# -----------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="obsx", description="obsx - A CLI for OBS")
    parser.add_argument("--log-file", help="Also write logs to this file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    images = subparsers.add_parser("add-images", help="Add image sources for images in a directory (default: cwd)")
    images.add_argument("--dir", help="Directory to scan for images")
    images.add_argument("--scene", help="Target scene (default: current program scene)")

    cam = subparsers.add_parser("add-webcam", help="Add a webcam input to the current scene")
    cam.add_argument("-i", "--interactive", action="store_true", help="Prompt for name and device")
    cam.add_argument("--base-name", help=f"Input name (default: {DEFAULT_BASE_NAME})")
    cam.add_argument("--input-kind", help="Capture input kind to use")
    cam.add_argument("--device", dest="device_selection", help="Device name/id substring to select")
    cam.add_argument("--no-chroma-key", dest="add_chroma_key", action="store_false", help="Skip the chroma key filter")
    cam.add_argument("--no-color-correction", dest="add_color_correction", action="store_false",
                     help="Skip the color correction filter")
    cam.add_argument("--saturation", type=float, default=-1.0, help="Color correction saturation (default: -1.0)")
    cam.add_argument("--contrast", type=float, default=0.7, help="Color correction contrast (default: 0.7)")

    yolo = subparsers.add_parser("yolo", help="Run a natural-language request against OBS")
    yolo.add_argument("prompt", nargs="*", help="What you want OBS to do")

    return parser


def webcam_config_from_args(args: argparse.Namespace) -> WebcamConfig:
    return WebcamConfig(
        base_name=args.base_name or DEFAULT_BASE_NAME,
        input_kind=args.input_kind,
        device_selection=args.device_selection,
        add_chroma_key=args.add_chroma_key,
        add_color_correction=args.add_color_correction,
        saturation=args.saturation,
        contrast=args.contrast,
        interactive=args.interactive,
    )


# -----------------------------------------------------
# Interactive prompts
# -----------------------------------------------------

def _prompt_base_name(default: str) -> str:
    answer = input(f"Input name [{default}]: ").strip()
    return answer or default


def _prompt_device(choices: List[CaptureDeviceChoice], default_index: int) -> int:
    print("\nCapture devices:")
    for idx, choice in enumerate(choices):
        marker = "*" if idx == default_index else " "
        print(f" {marker} {idx + 1}. {choice.label}")
    while True:
        answer = input(f"Select device [{default_index + 1}]: ").strip()
        if not answer:
            return default_index
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return int(answer) - 1
        print(f"Enter a number between 1 and {len(choices)}.")


# -----------------------------------------------------
# Commands
# -----------------------------------------------------

def cmd_add_images(args: argparse.Namespace) -> int:
    directory = normalize_file_path(args.dir or os.getcwd())
    images = list_images_in_dir(directory)
    if not images:
        print(f"No images found in: {directory}")
        return 0

    with obs_session(get_obs_connection_options()) as client:
        result = reconcile_images(client, images, args.scene)

    print(f"Scene: {result.scene}")
    print(f"Dir: {directory}")
    print(f"Created: {result.created}")
    print(f"Skipped: {result.skipped}")
    if not result.ok:
        log(f"❌ Stopped early: {result.error}", "ERROR")
        return 1
    return 0


def cmd_add_webcam(args: argparse.Namespace) -> int:
    config = webcam_config_from_args(args)
    chooser = None
    if config.interactive:
        if not args.base_name:
            config.base_name = _prompt_base_name(config.base_name)
        chooser = _prompt_device

    with obs_session(get_obs_connection_options()) as client:
        result = provision(client, config, chooser=chooser)

    print(f"Created input: {result.object_name}")
    print(f"Scene: {result.scene}")
    print(f"Device: {result.device_chosen.device_value}")
    return 0


def cmd_yolo(args: argparse.Namespace) -> int:
    prompt = " ".join(args.prompt).strip()
    if not prompt:
        print("Usage: obsx yolo <prompt>", file=sys.stderr)
        print('Example: obsx yolo "switch to the Gaming scene"', file=sys.stderr)
        return 1

    translator = OpenAITranslator()
    with obs_session(get_obs_connection_options()) as client:
        report = translate_and_execute(client, translator, prompt)

    if report.status is ExecutionStatus.EXHAUSTED:
        print(f"Failed after {len(report.attempts)} attempts. Remaining errors:")
        for outcome in report.failures:
            print(format_failure(outcome.call.request_type, outcome.call.request_data, outcome.error))
    return 0 if report.ok else 1


COMMANDS = {
    "add-images": cmd_add_images,
    "add-webcam": cmd_add_webcam,
    "yolo": cmd_yolo,
}


# -----------------------------------------------------
# CLI mode
# -----------------------------------------------------

def cli(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 0 if args.command is None else 1

    setup_logging(level=level_from_name(get_log_level_name()), log_file=args.log_file)
    try:
        return COMMANDS[args.command](args)
    except ObsxError as e:
        log(f"❌ {e}", "ERROR")
        return 1


if __name__ == "__main__":
    sys.exit(cli())

"""
Unified entry point for the sign-to-speech pipeline.

Usage examples:
    python sign_to_speech.py --mode live                       # webcam + MediaPipe, default
    python sign_to_speech.py --mode live --transport zmq --headless
    python sign_to_speech.py --mode replay --input session.jsonl
    python sign_to_speech.py --mode text "hello, stop"         # spoken text -> gesture labels
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PY_DIR = ROOT / "python"
if str(PY_DIR) not in sys.path:
    sys.path.insert(0, str(PY_DIR))


def run_live_mode(args: argparse.Namespace) -> int:
    """Delegate to the threaded capture + recognition pipeline (python/main_loop)."""
    from main_loop import main as run_main_loop

    return run_main_loop(
        config_path=args.config,
        transport=args.transport,
        headless=args.headless,
        record_path=args.record,
    )


def run_replay_mode(args: argparse.Namespace) -> int:
    """Run a recorded landmark stream through a session and print the transcript."""
    from Replay import read_recording, replay
    from SessionController import SessionController
    from helpers import load_config

    if not args.input:
        print("Error: --mode replay needs --input <recording.jsonl>")
        return 2

    controller = SessionController(load_config(args.config))
    for translation in replay(controller, read_recording(args.input), settle=args.settle):
        print(f"{translation.translated}  [{translation.original}]")
    print(f"Transcript: {controller.transcript}")
    return 0


def run_text_mode(args: argparse.Namespace) -> int:
    """Reverse direction: look up the gestures for a spoken sentence."""
    from TextToSign import SignLookup
    from helpers import load_config

    lookup = SignLookup(load_config(args.config))
    result = lookup.translate(" ".join(args.text))
    print(result.translated)
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sign-to-speech gesture translator")
    parser.add_argument(
        "--mode",
        choices=("live", "replay", "text"),
        default="live",
        help="'live' runs the webcam pipeline, 'replay' a recording, 'text' the reverse lookup.",
    )
    parser.add_argument("--config", default=str(ROOT / "config.json"), help="Path to config.json")
    parser.add_argument("--transport", choices=("tcp", "zmq"), help="Override network.transport")
    parser.add_argument("--headless", action="store_true", help="No debug window")
    parser.add_argument("--record", help="Live mode: write the landmark stream to this JSONL file")
    parser.add_argument("--input", help="Replay mode: recording to play back")
    parser.add_argument(
        "--settle",
        type=float,
        default=5.0,
        help="Replay mode: seconds of silence appended so pending sentences finalize",
    )
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("text", nargs="*", help="Text mode: the sentence to translate")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    from helpers import setup_logging

    setup_logging(args.log_level)
    if args.mode == "replay":
        return run_replay_mode(args)
    if args.mode == "text":
        return run_text_mode(args)
    return run_live_mode(args)


if __name__ == "__main__":
    sys.exit(main())

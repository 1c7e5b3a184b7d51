#!/usr/bin/env python3
# =============================================================================
# cli.py — swge-synth command-line front end
# =============================================================================
#
# Renders one WAV file from the command line.
#
# Usage:
#   swge-synth -f 440 -l 2 -o a440.wav
#   swge-synth -f 110 -l 3 -o pluck.wav --karplus-strong --stereo
#   swge-synth -f 220 -l 5 -o drone.wav -k --repeat -0.2 --seed 7
#   python -m SWGE.cli --help
#
# Exit status:
#   0  file written
#   1  synthesis / encoding / I/O failure (message prefixed with [!!])
#   2  usage error (full help + message on stderr; no file is created)
# =============================================================================

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import NoReturn

from SWGE.errors import WaveSynthError
from SWGE.render import render_wave, write_wav
from SWGE.SMM.constants import DEFAULT_REPEAT_THRESHOLD, SAMPLE_RATE
from SWGE.SMM.params import SynthParams


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {text!r}")
    return value


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {text!r}")
    return value


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {text!r}")
    return value


def _finite_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be finite, got {text!r}")
    return value


class _SynthArgumentParser(argparse.ArgumentParser):
    """Shows the full option list, not just the usage line, on a usage error."""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        self.exit(2, f"\n{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _SynthArgumentParser(
        prog="swge-synth",
        description="Generate a sine tone or Karplus-Strong pluck as a 32-bit float WAV file.",
    )
    parser.add_argument(
        "-f", "--frequency", type=_positive_float, required=True, metavar="FREQ",
        help="Frequency of generated tone in Hz",
    )
    parser.add_argument(
        "-l", "--length", type=_positive_float, required=True, metavar="SECS",
        help="Run length of generated wav in seconds",
    )
    parser.add_argument(
        "-o", "--out-file", required=True, metavar="FILE",
        help="File name to write the wav file to",
    )
    kind = parser.add_mutually_exclusive_group()
    kind.add_argument(
        "-t", "--tone", dest="generator", action="store_const", const="tone",
        help="Generate sine tone (default)",
    )
    kind.add_argument(
        "-k", "--karplus-strong", dest="generator", action="store_const",
        const="karplus-strong",
        help="Generate a Karplus-Strong sample from a single pluck",
    )
    parser.add_argument(
        "-s", "--stereo", action="store_true",
        help="Make a stereo .wav file",
    )
    parser.add_argument(
        "-r", "--repeat", type=_finite_float, nargs="?",
        const=DEFAULT_REPEAT_THRESHOLD, default=None, metavar="THRESHOLD",
        help="Re-pluck the Karplus-Strong string whenever a sample falls below "
             f"THRESHOLD (default {DEFAULT_REPEAT_THRESHOLD}); implies -k",
    )
    parser.add_argument(
        "--sample-rate", type=_positive_int, default=SAMPLE_RATE, metavar="SR",
        help=f"Output sample rate in Hz, default {SAMPLE_RATE}",
    )
    parser.add_argument(
        "--seed", type=_non_negative_int, default=None,
        help="Seed for the pluck noise (repeatable output)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug details to stderr",
    )
    return parser


def params_from_args(args: argparse.Namespace) -> SynthParams:
    generator = args.generator or "tone"
    if args.repeat is not None:
        generator = "karplus-strong"
    return SynthParams(
        frequency=args.frequency,
        run_length=args.length,
        sample_rate=args.sample_rate,
        channels=2 if args.stereo else 1,
        generator=generator,
        repeat_threshold=args.repeat,
        seed=args.seed,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.generator == "tone" and args.repeat is not None:
        parser.error("--repeat applies to --karplus-strong, not --tone")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Everything that can fail on bad parameters runs before the file is opened
    try:
        params = params_from_args(args)
        wave = render_wave(params)
    except WaveSynthError as exc:
        print(f"[!!] {exc}")
        return 1

    try:
        written = write_wav(args.out_file, wave, remove_partial=True)
    except OSError as exc:
        print(f"[!!] could not write {args.out_file}: {exc}")
        return 1

    mode = params.generator
    if params.repeat_threshold is not None:
        mode += f" (repeat < {params.repeat_threshold:g})"
    print(
        f"[OK] {args.out_file}: {mode}, {params.frequency:g} Hz, "
        f"{params.channels} ch @ {params.sample_rate} Hz, "
        f"{params.sample_count:,} frames, {written:,} bytes"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

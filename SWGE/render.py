# =============================================================================
# render.py — SynthParams → WaveFile → disk
# =============================================================================
#
# Glue between the generators (SGM) and the container encoder (SWM):
#
#   render_channels(params)  — one float32 array per output channel
#   render_wave(params)      — the same, packaged as a WaveFile
#   write_wav(path, wave)    — stream a WaveFile to disk and fsync it
#
# STEREO:
#   Tone: both channels carry the same sine.
#   Karplus-Strong: each channel is its own string, plucked from the same
#   noise source in turn, so left and right share pitch but not phase.
# =============================================================================

from __future__ import annotations

import contextlib
import logging
import os

import numpy as np
from numpy.typing import NDArray

from SWGE.SGM.ks_string import (
    UniformSource, generate_pluck, generate_pluck_with_threshold,
)
from SWGE.SGM.tone import generate_tone
from SWGE.SMM.constants import COPY_BUFSIZE
from SWGE.SMM.params import SynthParams
from SWGE.SWM.wavefile import WaveFile, create_wav

_LOGGER = logging.getLogger(__name__)


def render_channels(
    params: SynthParams,
    rng: UniformSource | None = None,
) -> list[NDArray[np.float32]]:
    """
    Run the selected generator once per channel.

    Args:
        params: Validated parameters.
        rng:    Pluck noise source; defaults to default_rng(params.seed).
    """
    if params.generator == "tone":
        tone = generate_tone(params.run_length, params.frequency, params.sample_rate)
        return [tone] * params.channels

    if rng is None:
        rng = np.random.default_rng(params.seed)

    channels = []
    for _ in range(params.channels):
        if params.repeat_threshold is None:
            ch = generate_pluck(
                params.run_length, params.frequency, params.sample_rate, rng,
            )
        else:
            ch = generate_pluck_with_threshold(
                params.run_length, params.frequency, params.sample_rate,
                params.repeat_threshold, rng,
            )
        channels.append(ch)
    return channels


def render_wave(params: SynthParams, rng: UniformSource | None = None) -> WaveFile:
    _LOGGER.debug("render: %s", params)
    return create_wav(render_channels(params, rng), params.sample_rate)


def write_wav(
    path: str | os.PathLike[str],
    wave: WaveFile,
    buffer_size: int = COPY_BUFSIZE,
    remove_partial: bool = False,
) -> int:
    """
    Write `wave` to `path` and sync it to disk.

    Args:
        remove_partial: Delete the file if writing fails after it was opened.
                        Off by default; the partial file is then left for the
                        caller to deal with.

    Returns:
        Bytes written.

    Raises:
        OSError: from open / write / fsync, re-raised unchanged.
    """
    f = open(path, "wb")
    try:
        with f:
            written = wave.write_to(f, buffer_size)
            f.flush()
            os.fsync(f.fileno())
    except OSError:
        if remove_partial:
            with contextlib.suppress(FileNotFoundError):
                os.remove(path)
        raise
    _LOGGER.debug("render: synced %d bytes to %s", written, path)
    return written

# =============================================================================
# Sound Wave Generation Engine (SWGE)
# =============================================================================
#
# Generates mono or stereo 32-bit float audio and serializes it into a
# RIFF/WAVE container.
#
# ── WHAT LIVES HERE ──────────────────────────────────────────────────────────
#
# RESPONSIBLE for:
#   - Sine tone synthesis
#       One period is precomputed, then tiled to the requested duration.
#   - Plucked-string (Karplus-Strong) synthesis
#       A float32 ring buffer seeded with noise and fed back through a
#       two-point average damped by 0.994 per tick.
#   - Streaming WAV construction
#       Header, fmt and data records each expose fill(buffer) -> int.
#       Callers pull bytes with buffers of any size above the record minimum;
#       a multi-byte field is never split between two calls.
#
# NOT responsible for:
#   - Playback of any kind
#   - Bit depths other than 32-bit float, or more than two channels
#
# ── DATA FLOW ────────────────────────────────────────────────────────────────
#   SynthParams → SGM (tone | ks_string) → 1 or 2 sample arrays
#               → SWM.wavefile.create_wav (interleave + records)
#               → WaveFile.write_to(fileobj) → disk
#
# ── Module layout ────────────────────────────────────────────────────────────
#   errors.py    — exception hierarchy (WaveSynthError and friends)
#   SMM/         — constants and run-time parameter validation
#   SGM/         — signal generators (tone.py, ks_string.py)
#   SWM/         — WAV container encoder (byte_codec, chunks, wavefile)
#   SVM/         — verification (wav_reader, validate)
#   render.py    — params → WaveFile → file on disk
#   cli.py       — command-line front end
# =============================================================================

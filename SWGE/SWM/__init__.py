# =============================================================================
# SWM — WAV Module
# Subfolder of SWGE (Sound Wave Generation Engine)
# =============================================================================
#
# Turns channel sample arrays into a RIFF/WAVE byte stream.
#
# Modules:
#   byte_codec.py — little-endian u16 / u32 / f32 encode + decode
#   chunks.py     — WavHeader, FormatChunk, DataChunk: resumable fill(buffer)
#   wavefile.py   — build_* helpers, interleave(), create_wav(), WaveFile
#
# Record layout is documented in SWGE/SMM/constants.py
# =============================================================================

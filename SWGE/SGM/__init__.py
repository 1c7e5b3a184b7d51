# =============================================================================
# SGM — Signal Generation Module
# Subfolder of SWGE (Sound Wave Generation Engine)
# =============================================================================
#
# Produces float32 sample arrays for one channel at a time.
#
# Modules:
#   tone.py      — sine period table, tiled to the requested duration
#   ks_string.py — Karplus-Strong plucked string (stateful ring buffer)
#
# Constants live in SWGE/SMM/constants.py
# Container encoding lives in SWGE/SWM/

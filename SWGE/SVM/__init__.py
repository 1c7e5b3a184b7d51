# =============================================================================
# SWGE/SVM/__init__.py — Signal Verification Module
# =============================================================================
#
# Tools for checking that written files follow the container layout and that
# the generators behave as designed.
#
# Sub-modules:
#   wav_reader.py — decodes RIFF/WAVE bytes back into fields and samples
#   validate.py   — printed self-validation suite for the SWGE stack
# =============================================================================

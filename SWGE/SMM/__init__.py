# =============================================================================
# SWGE/SMM/__init__.py — Synthesis & Media Metadata (constants and parameters)
# =============================================================================
#
# The SMM is the single source of truth for every container magic, record
# size and synthesis constant, plus validation of run-time parameters.
#
# All other SWGE sub-modules import exclusively from here.
# Never define container or synthesis constants outside this module.
#
# Sub-modules:
#   constants.py  — magics, record sizes, u16/u32 limits, synthesis constants
#   params.py     — SynthParams: validated CLI / library parameters
# =============================================================================

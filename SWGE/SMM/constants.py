# =============================================================================
# constants.py — SMM Container Layout and Synthesis Constants
# =============================================================================
#
# Byte layout of the three RIFF/WAVE records this package writes, and the
# fixed numbers of the two generators.  Every multi-byte field is
# little-endian.
#
#   offset  size  field
#   ── File Header (12 bytes) ─────────────────────────────────────────────
#     0      4    "RIFF"
#     4      4    u32  total size  = data length + 24 + 8
#     8      4    "WAVE"
#   ── Format Descriptor (24 bytes) ───────────────────────────────────────
#    12      4    "fmt "
#    16      4    u32  descriptor size = 16
#    20      2    u16  format tag      = 1 (linear PCM)
#    22      2    u16  channels
#    24      4    u32  sample rate
#    28      4    u32  byte rate       = channels * rate * bytes/sample
#    32      2    u16  block align     = channels * bytes/sample
#    34      2    u16  bits per sample = 32
#   ── Data Block (8 + N bytes) ───────────────────────────────────────────
#    36      4    "data"
#    40      4    u32  payload length  = samples * channels * 4
#    44      N    interleaved float32 samples
# =============================================================================

# -----------------------------------------------------------------------------
# RECORD MAGICS
# -----------------------------------------------------------------------------

RIFF_MAGIC   = b"RIFF"
WAVE_MAGIC   = b"WAVE"
FMT_MAGIC    = b"fmt "
DATA_MAGIC   = b"data"

# -----------------------------------------------------------------------------
# RECORD SIZES (bytes)
# -----------------------------------------------------------------------------

HEADER_SIZE        = 12
FORMAT_CHUNK_SIZE  = 24     # whole fmt record, magic and size field included
FORMAT_BODY_SIZE   = 16     # value written in the fmt size field
DATA_HEADER_SIZE   = 8      # "data" + u32 length
WAV_PREAMBLE_SIZE  = HEADER_SIZE + FORMAT_CHUNK_SIZE + DATA_HEADER_SIZE   # = 44

# Minimum fill() buffers.  Header and fmt are single-shot records; the data
# block needs room for its own header plus at least one sample.
HEADER_MIN_FILL  = HEADER_SIZE
FORMAT_MIN_FILL  = FORMAT_CHUNK_SIZE
DATA_MIN_FILL    = DATA_HEADER_SIZE + 4

# -----------------------------------------------------------------------------
# FORMAT FIELDS
# -----------------------------------------------------------------------------

FORMAT_TAG_PCM      = 1
BITS_PER_SAMPLE     = 32            # only float32 samples are written
BYTES_PER_SAMPLE    = BITS_PER_SAMPLE // 8
SUPPORTED_BITS      = (32,)
SUPPORTED_CHANNELS  = (1, 2)

U16_MAX = 0xFFFF
U32_MAX = 0xFFFF_FFFF

# -----------------------------------------------------------------------------
# SYNTHESIS
# -----------------------------------------------------------------------------

SAMPLE_RATE = 44_100                # Hz — default output rate

# Karplus-Strong feedback: new = (cur + next) * AVERAGE * DAMPING
KS_AVERAGE   = 0.5
KS_DAMPING   = 0.994
KS_MIN_RING  = 2                    # a two-point average needs two cells

# Longest sine table or ring, in samples (64 MiB of float32, a period of
# about 6 minutes at 44.1 kHz).  Lower frequencies are rejected.
MAX_PERIOD_SAMPLES = 1 << 24

# Longest channel, in samples: one channel alone must fit the u32 data length
MAX_CHANNEL_SAMPLES = U32_MAX // BYTES_PER_SAMPLE

# Pluck noise is uniform in [PLUCK_LOW, PLUCK_HIGH)
PLUCK_LOW    = -0.5
PLUCK_HIGH   = 0.5

# Threshold used when --repeat is given without a value
DEFAULT_REPEAT_THRESHOLD = 0.0

# fill() buffer used by WaveFile.write_to() when the caller gives none
COPY_BUFSIZE = 64 * 1024

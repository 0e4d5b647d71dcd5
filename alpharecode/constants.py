"""Residue codes and lookup tables for site recoding and digestion.

This module provides the fixed residue alphabets used throughout AlphaPeptRecode:
the phosphorylatable residues, the sentinel codes they are recoded to, and the
padding character used when cleavage rules look past the ends of a sequence.

Constants are provided in both dictionary and ord()-indexed array formats
for compatibility with both standard Python and Numba JIT-compiled code.

Key Features
------------
- S/T/Y → B/U/Z recode mapping (and its inverse)
- ord()-indexed RECODE_TABLE / IS_RECODED for Numba kernels
- Candidate site scan order (S before T before Y)
- Window padding character that never matches a residue

Notes
-----
B, U and Z are ambiguity / non-standard codes in IUPAC (Asx, selenocysteine,
Glx). They are re-purposed here as "phosphorylated S/T/Y" so that a search
engine can treat a recoded site as a fixed alternative residue. Protein
sequences that already contain B, U or Z are therefore ambiguous and are
skipped by the recoder.
"""

import numpy as np

# =============================================================================
# Phosphorylation Site Residues
# =============================================================================

# Order matters: candidate sites are scanned S first, then T, then Y.
# Site labels (and therefore output accessions) follow this order.
PHOSPHO_RESIDUES = ("S", "T", "Y")

# Residue → sentinel code
RECODE_MAP = {
    'S': 'B',  # Phospho-serine
    'T': 'U',  # Phospho-threonine
    'Y': 'Z',  # Phospho-tyrosine
}

# Sentinel code → residue
REVERSE_RECODE_MAP = {code: aa for aa, code in RECODE_MAP.items()}

# Set of characters that mark a recoded site
RECODED_RESIDUES = frozenset(REVERSE_RECODE_MAP)

# =============================================================================
# Sequence Handling
# =============================================================================

# Initiator methionine, removed post-translationally from many proteins
N_TERM_METHIONINE = 'M'

# Padding for cleavage rule windows that extend past either end of the
# sequence. Must never appear in a protein sequence.
WINDOW_PAD_CHAR = '#'

# Default Expasy-style digestion parameters
DEFAULT_PROTEASE = "Trypsin"
DEFAULT_MISSED_CLEAVAGES = 2
DEFAULT_MIN_PEPTIDE_LENGTH = 7
DEFAULT_MAX_PEPTIDE_LENGTH = 35
DEFAULT_MAX_MODIFICATIONS = 3

# =============================================================================
# ord()-Indexed Arrays for Numba
# =============================================================================

# Array size 128 covers 7-bit ASCII (protein sequences are uppercase letters)
# Access via: RECODE_TABLE[ord('S')] → ord('B')
# 0 marks "this residue cannot be recoded"
RECODE_TABLE = np.zeros(128, dtype=np.uint8)
for aa, code in RECODE_MAP.items():
    RECODE_TABLE[ord(aa)] = ord(code)

# 1 where the character is a sentinel code
IS_RECODED = np.zeros(128, dtype=np.uint8)
for code in RECODED_RESIDUES:
    IS_RECODED[ord(code)] = 1


def validate_constants():
    """Validate that the recode tables are consistent.

    Raises AssertionError if any mapping is not a bijection or collides with
    the window padding character.
    """
    assert len(REVERSE_RECODE_MAP) == len(RECODE_MAP), "Recode map is not one-to-one"
    assert WINDOW_PAD_CHAR not in RECODE_MAP, "Pad character is a recodable residue"
    assert WINDOW_PAD_CHAR not in RECODED_RESIDUES, "Pad character is a recode code"
    assert not set(RECODE_MAP) & RECODED_RESIDUES, "Residue recodes to itself"

    for aa, code in RECODE_MAP.items():
        assert chr(RECODE_TABLE[ord(aa)]) == code
        assert IS_RECODED[ord(code)] == 1
        assert IS_RECODED[ord(aa)] == 0

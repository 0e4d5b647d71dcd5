"""AlphaPeptRecode - Protein digestion and combinatorial phospho-site recoding.

This library digests protein databases with configurable proteases and writes
every combination of known phosphorylation sites of each peptide as its own
recoded sequence (S/T/Y → B/U/Z), so that phospho-isoforms can be identified
by search engines without variable-modification support.

Digestion follows Expasy PeptideCutter rules (strict) or simplified
single-residue rules (relaxed), with missed cleavages and initiator
methionine removal. Hot loops over encoded sequences are Numba-compiled.
"""

__version__ = "0.1.0"

# Import main submodules for convenient access
from alpharecode import constants
from alpharecode import config
from alpharecode import database
from alpharecode import combinatorics
from alpharecode import modsites
from alpharecode import recoding

from alpharecode.config import ConfigurationError, RecodeConfig

__all__ = [
    "constants",
    "config",
    "database",
    "combinatorics",
    "modsites",
    "recoding",
    "ConfigurationError",
    "RecodeConfig",
]

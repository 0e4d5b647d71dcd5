"""Configuration for digestion and site recoding runs.

RecodeConfig collects every parameter that controls a recoding run: how the
protein is digested (protease, rule set, missed cleavages), which peptides are
kept (length bounds) and how many known sites are recoded at once.

Configurations can be saved to and loaded from a simple ``KEY=value`` text
file so that a run can be reproduced later.

Examples
--------
>>> config = RecodeConfig(protease="Trypsin", missed_cleavages=1)
>>> config.validate()
>>> config.save("run.cfg")
>>> RecodeConfig.load("run.cfg") == config
True
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from .constants import (
    DEFAULT_PROTEASE,
    DEFAULT_MISSED_CLEAVAGES,
    DEFAULT_MIN_PEPTIDE_LENGTH,
    DEFAULT_MAX_PEPTIDE_LENGTH,
    DEFAULT_MAX_MODIFICATIONS,
)

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a run cannot be configured as requested.

    Covers unknown protease names, malformed cleavage rule patterns, residues
    that cannot be recoded and out-of-range parameters. These are fatal: the
    run for the affected input is aborted.
    """


# Keys written to / read from config files, in file order.
# Integer-valued parameters are written before string-valued ones.
_INT_KEYS = {
    "MISSEDCLEAVAGES": "missed_cleavages",
    "MAXMODIFICATIONS": "max_modifications",
    "MINPEPTIDELENGTH": "min_peptide_length",
    "MAXPEPTIDELENGTH": "max_peptide_length",
    "STRICTDIGEST": "strict_digest",
    "DIGESTONLY": "digest_only",
}

_STR_KEYS = {
    "PROTEASE": "protease",
    "DATABASE": "database",
    "MODSITEDATABASE": "mod_site_database",
    "OUTPUTNAME": "output_name",
}

_BOOL_FIELDS = {"strict_digest", "digest_only"}


@dataclass
class RecodeConfig:
    """Parameters for digesting proteins and recoding known sites.

    Attributes
    ----------
    protease : str
        Protease name (see ``alpharecode.database.list_proteases()``)
    strict_digest : bool
        Use Expasy matcher/exception rules (True) or simplified
        single-residue rules (False)
    missed_cleavages : int
        Maximum number of missed cleavages
    min_peptide_length, max_peptide_length : int
        Inclusive peptide length bounds
    max_modifications : int
        Maximum number of known sites recoded simultaneously
    digest_only : bool
        Emit unmodified peptides instead of recoded variants
    database : str, optional
        Protein FASTA file
    mod_site_database : str, optional
        Tab-delimited table of known modification sites. None means digest
        every peptide regardless of site overlap.
    output_name : str, optional
        Output FASTA file
    """

    protease: str = DEFAULT_PROTEASE
    strict_digest: bool = False
    missed_cleavages: int = DEFAULT_MISSED_CLEAVAGES
    min_peptide_length: int = DEFAULT_MIN_PEPTIDE_LENGTH
    max_peptide_length: int = DEFAULT_MAX_PEPTIDE_LENGTH
    max_modifications: int = DEFAULT_MAX_MODIFICATIONS
    digest_only: bool = False
    database: Optional[str] = None
    mod_site_database: Optional[str] = None
    output_name: Optional[str] = None

    def validate(self) -> None:
        """Check parameter ranges and that the protease exists.

        Raises
        ------
        ConfigurationError
            If any parameter is out of range or the protease is unknown
        """
        from .database.cleavage import ProteaseId

        ProteaseId.from_name(self.protease)

        if self.missed_cleavages < 0:
            raise ConfigurationError(
                f"missed_cleavages must be >= 0, got {self.missed_cleavages}"
            )
        if self.min_peptide_length < 1:
            raise ConfigurationError(
                f"min_peptide_length must be >= 1, got {self.min_peptide_length}"
            )
        if self.max_peptide_length < self.min_peptide_length:
            raise ConfigurationError(
                f"max_peptide_length ({self.max_peptide_length}) is smaller than "
                f"min_peptide_length ({self.min_peptide_length})"
            )
        if self.max_modifications < 0:
            raise ConfigurationError(
                f"max_modifications must be >= 0, got {self.max_modifications}"
            )

    def save(self, path: Union[str, Path]) -> None:
        """Write configuration as ``KEY=value`` lines.

        Booleans are stored as 0/1. Unset (None) string parameters are
        omitted.
        """
        lines = []
        for key, name in _INT_KEYS.items():
            lines.append(f"{key}={int(getattr(self, name))}")
        for key, name in _STR_KEYS.items():
            value = getattr(self, name)
            if value is not None:
                lines.append(f"{key}={value}")

        Path(path).write_text("\n".join(lines) + "\n")
        logger.info(f"Saved configuration to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'RecodeConfig':
        """Read a configuration written by :meth:`save`.

        Parameters missing from the file keep their defaults.

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        ConfigurationError
            On unknown keys or malformed lines
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        values = {}
        with open(path) as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' not in line:
                    raise ConfigurationError(
                        f"{path.name}:{line_number}: expected KEY=value, got {line!r}"
                    )
                key, value = line.split('=', 1)
                key = key.strip().upper()
                value = value.strip()

                if key in _INT_KEYS:
                    name = _INT_KEYS[key]
                    try:
                        number = int(value)
                    except ValueError:
                        raise ConfigurationError(
                            f"{path.name}:{line_number}: {key} must be an integer, got {value!r}"
                        ) from None
                    values[name] = bool(number) if name in _BOOL_FIELDS else number
                elif key in _STR_KEYS:
                    values[_STR_KEYS[key]] = value
                else:
                    raise ConfigurationError(f"{path.name}:{line_number}: unknown key {key}")

        config = cls(**values)
        logger.info(f"Loaded configuration from {path.name}")
        return config

    def as_dict(self) -> dict:
        """Return parameters as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

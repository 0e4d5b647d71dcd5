"""Reverse recoding of identified peptides.

Peptides identified against a recoded database contain B/U/Z at the
phosphorylated sites. Reverse recoding restores S/T/Y, marks them in
lowercase (``PEPsIDE``) and reports their absolute protein positions, which
are recovered from the peptide start encoded in the recoded accession.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from ..constants import REVERSE_RECODE_MAP

_SITE_LABEL = re.compile(r"[A-Z][0-9]+")


@dataclass(frozen=True)
class Residue:
    """A residue at an absolute position."""

    position: int
    amino_acid: str

    @property
    def id(self) -> str:
        return f"{self.amino_acid}{self.position}"

    def __str__(self) -> str:
        return self.id


@dataclass
class ReverseRecodeResult:
    """Decoded sequence with phosphorylated residues in lowercase."""

    sequence: str = ''
    residues: List[Residue] = field(default_factory=list)

    @property
    def residues_string(self) -> str:
        """Residue ids joined by ';' (e.g. ``S120;T124``)."""
        return ';'.join(residue.id for residue in self.residues)

    @property
    def standard_sequence(self) -> str:
        """Sequence with all residues in uppercase."""
        return self.sequence.upper()

    @property
    def n_sites(self) -> int:
        return len(self.residues)


def reverse_recode(sequence: str, offset: int = 0) -> ReverseRecodeResult:
    """Convert B/U/Z back to lowercase s/t/y.

    Parameters
    ----------
    sequence : str
        Recoded peptide sequence
    offset : int
        Added to each 0-based peptide index to give the reported position.
        Pass ``peptide_start + 1`` to obtain the 1-based protein positions
        used in site labels.

    Returns
    -------
    result : ReverseRecodeResult

    Examples
    --------
    >>> result = reverse_recode("HUL", offset=1)
    >>> result.sequence, result.residues_string
    ('HtL', 'T2')
    """
    chars = []
    residues = []

    for i, c in enumerate(sequence):
        amino_acid = REVERSE_RECODE_MAP.get(c)
        if amino_acid is None:
            chars.append(c)
        else:
            residues.append(Residue(i + offset, amino_acid))
            chars.append(amino_acid.lower())

    return ReverseRecodeResult(''.join(chars), residues)


def parse_recoded_accession(accession: str) -> Tuple[str, int, int, List[str]]:
    """Split a recoded accession into its parts.

    The parent accession may itself contain underscores; the peptide bounds
    are the last two integer fields before the site labels.

    Returns
    -------
    parent_accession : str
    start, end : int
        Peptide bounds (0-based, inclusive)
    labels : List[str]
        Recoded site labels in accession order

    Raises
    ------
    ValueError
        If the accession does not carry peptide bounds

    Examples
    --------
    >>> parse_recoded_accession("P12345_10_24_S12_T20")
    ('P12345', 10, 24, ['S12', 'T20'])
    """
    parts = accession.split('_')

    n_labels = 0
    while n_labels < len(parts) - 3 and _SITE_LABEL.fullmatch(parts[-1 - n_labels]):
        n_labels += 1

    head = parts[:len(parts) - n_labels]
    if len(head) < 3:
        raise ValueError(f"Not a recoded accession: {accession!r}")

    try:
        start, end = int(head[-2]), int(head[-1])
    except ValueError:
        raise ValueError(f"Not a recoded accession: {accession!r}") from None

    labels = parts[len(head):]
    return '_'.join(head[:-2]), start, end, labels


def peptide_start_from_accession(accession: str) -> int:
    """Peptide start encoded in a recoded accession, or 0 if there is none."""
    try:
        return parse_recoded_accession(accession)[1]
    except ValueError:
        return 0

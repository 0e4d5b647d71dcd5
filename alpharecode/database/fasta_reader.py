"""FASTA file reading and writing.

Lightweight FASTA parser for recoding workflows. Supports:
- UniProt and generic FASTA formats
- Multi-FASTA files with blank lines between entries
- Optional enforcement of UniProt accession syntax
- Writing recoded peptide entries back out as FASTA

Design principles:
1. Pure Python (no dependencies except pathlib)
2. Streaming line-by-line parsing
3. Accession extraction compatible with UniProt headers
"""

import logging
import re
from pathlib import Path
from typing import IO, Iterable, List, Tuple, Union

logger = logging.getLogger(__name__)

# UniProt accession syntax (https://www.uniprot.org/help/accession_numbers)
UNIPROT_ACCESSION = re.compile(
    r"[OPQ][0-9][A-Z0-9]{3}[0-9]|[A-NR-Z][0-9]([A-Z][A-Z0-9]{2}[0-9]){1,2}"
)


def is_uniprot_accession(accession: str) -> bool:
    """True if the whole string is a valid UniProt accession.

    Examples
    --------
    >>> is_uniprot_accession("P12345")
    True
    >>> is_uniprot_accession("A0A023GPI8")
    True
    >>> is_uniprot_accession("PROT123")
    False
    """
    return UNIPROT_ACCESSION.fullmatch(accession) is not None


def parse_protein_id(header: str) -> Tuple[str, str]:
    """Extract protein accession and description from FASTA header.

    Supports multiple formats:
    - UniProt: >sp|P12345|NAME_HUMAN Description...
    - UniProt: >tr|A0A123|NAME_HUMAN Description...
    - Generic: >PROTEIN_ID Description...

    Parameters
    ----------
    header : str
        FASTA header line (without leading '>')

    Returns
    -------
    protein_id : str
        Extracted protein accession
    description : str
        Full header line

    Examples
    --------
    >>> parse_protein_id("sp|P12345|NAME_HUMAN Some protein")
    ('P12345', 'sp|P12345|NAME_HUMAN Some protein')

    >>> parse_protein_id("PROT123 Description here")
    ('PROT123', 'PROT123 Description here')
    """
    description = header.strip()

    if '|' in description:
        # Second field is accession (P12345, A0A123, etc.)
        protein_id = description.split('|')[1].strip()
    elif description:
        # Generic format: first whitespace-separated token
        protein_id = description.split()[0]
    else:
        protein_id = ''

    return protein_id, description


def read_fasta(
    fasta_path: Union[str, Path],
    enforce_uniprot: bool = False,
) -> List[Tuple[str, str, str]]:
    """Read FASTA file and return list of (protein_id, sequence, description).

    Sequences are converted to uppercase. Blank lines are ignored.

    Parameters
    ----------
    fasta_path : str or Path
        Path to FASTA file
    enforce_uniprot : bool
        Reject files containing accessions that are not UniProt accessions
        (default: False)

    Returns
    -------
    proteins : List[Tuple[str, str, str]]
        List of (protein_id, sequence, description) tuples in file order

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the file contains no protein entries, a sequence contains
        characters outside 7-bit ASCII, or a non-UniProt accession is found
        while ``enforce_uniprot`` is set

    Examples
    --------
    >>> proteins = read_fasta("human.fasta", enforce_uniprot=True)
    >>> protein_id, sequence, description = proteins[0]
    >>> print(f"ID: {protein_id}, Length: {len(sequence)}")
    """
    fasta_path = Path(fasta_path)

    if not fasta_path.exists():
        raise FileNotFoundError(f"FASTA file not found: {fasta_path}")

    logger.info(f"Reading FASTA file: {fasta_path.name}")

    proteins = []
    current_id = None
    current_description = None
    current_seq = []

    def finish_protein():
        if enforce_uniprot and not is_uniprot_accession(current_id):
            raise ValueError(
                f"Encountered non-UniProt accession {current_id!r} parsing {fasta_path.name}"
            )
        sequence = ''.join(current_seq)
        if not sequence.isascii():
            raise ValueError(
                f"Protein {current_id!r} in {fasta_path.name} contains non-ASCII residues"
            )
        proteins.append((current_id, sequence, current_description))

    with open(fasta_path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue

            if line.startswith('>'):
                # Process previous protein if exists
                if current_id is not None:
                    finish_protein()

                current_id, current_description = parse_protein_id(line[1:])
                current_seq = []
            else:
                current_seq.append(line.upper())

        # Don't forget last protein
        if current_id is not None:
            finish_protein()

    if not proteins:
        raise ValueError(f"The database {fasta_path.name} contained no protein sequences")

    logger.info(f"✓ Read {len(proteins):,} proteins from {fasta_path.name}")

    return proteins


def write_fasta(records: Iterable, out: IO[str]) -> int:
    """Write recoded peptide records as FASTA entries.

    Parameters
    ----------
    records : Iterable[RecodedPeptide]
        Records providing ``to_fasta()``
    out : text stream
        Destination (open file, ``io.StringIO``, ...)

    Returns
    -------
    n_written : int
        Number of entries written
    """
    n_written = 0
    for record in records:
        out.write(record.to_fasta())
        n_written += 1
    return n_written

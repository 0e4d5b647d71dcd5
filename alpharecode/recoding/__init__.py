"""Combinatorial recoding of known phosphorylation sites.

Key Features
------------
- Known S/T/Y sites recoded to B/U/Z, up to N sites per peptide
- Reproducible accessions ``ACCESSION_START_END_SITE...``
- Initiator methionine variants of protein N-terminal peptides
- Digest-only mode (no site database)
- Reverse recoding of identified peptides back to site positions

Examples
--------
>>> from alpharecode.recoding import PhosphorylationSiteRecoder
>>> from alpharecode.modsites import SiteSetAnnotator
>>>
>>> recoder = PhosphorylationSiteRecoder(config, SiteSetAnnotator.from_table("sites.tsv"))
>>> with open("recoded.fasta", "w") as out:
...     stats = recoder.recode_proteins(read_fasta("human.fasta"), out)
>>>
>>> # Map an identified peptide back to protein positions
>>> from alpharecode.recoding import reverse_recode, peptide_start_from_accession
>>> start = peptide_start_from_accession("P12345_10_24_S12")
>>> reverse_recode("PEBTIDEK", offset=start + 1).residues_string
'S13'
"""

from .recoder import (
    recode_amino_acid,
    recode_sequence,
    make_accession,
    RecodedPeptide,
    RecodeStatistics,
    PhosphorylationSiteRecoder,
    recode_fasta,
)

from .reverse import (
    Residue,
    ReverseRecodeResult,
    reverse_recode,
    parse_recoded_accession,
    peptide_start_from_accession,
)

__all__ = [
    # Forward recoding
    "recode_amino_acid",
    "recode_sequence",
    "make_accession",
    "RecodedPeptide",
    "RecodeStatistics",
    "PhosphorylationSiteRecoder",
    "recode_fasta",
    # Reverse recoding
    "Residue",
    "ReverseRecodeResult",
    "reverse_recode",
    "parse_recoded_accession",
    "peptide_start_from_accession",
]

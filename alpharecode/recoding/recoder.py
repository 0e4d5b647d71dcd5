"""Combinatorial recoding of known phosphorylation sites.

A search engine without variable-modification support can still identify
phosphopeptides if every phospho-isoform is present in the database as its
own sequence. The recoder writes, for each digested peptide, one variant per
subset of its known sites (up to ``max_modifications`` sites at a time) in
which the selected S/T/Y residues are replaced by the sentinel codes B/U/Z.

Each variant carries an accession that identifies the parent protein, the
peptide bounds and the recoded sites::

    >P12345_10_24_S12_T20
    PEPBIDEKPEPUIDE

Algorithm (per peptide)
-----------------------
1. Skip if the length is outside [min_peptide_length, max_peptide_length]
2. Skip (with a warning) if the peptide already contains B, U or Z
3. Find candidate S/T/Y sites and let the annotator mark the known ones
4. Skip if no site is known and a site database is in use
5. Digest-only: emit the peptide unchanged
6. Otherwise for k = 1..min(max_modifications, n_known) emit one variant
   per k-combination of known sites, in lexicographic order
7. If the peptide is the protein N-terminus and starts with M, repeat from
   step 1 for the peptide without the initiator methionine
"""

import logging
from dataclasses import asdict, dataclass
from typing import IO, Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from ..combinatorics import Combinations
from ..config import ConfigurationError, RecodeConfig
from ..constants import RECODE_MAP, RECODE_TABLE
from ..database.digestion import (
    Peptide,
    PeptideFactory,
    cleave_n_term,
    has_n_term_methionine,
)
from ..encoding import decode_ord_to_peptide, encode_peptide_to_ord
from ..modsites import (
    ModificationSiteAnnotator,
    ModificationSites,
    NullSiteAnnotator,
    SiteSetAnnotator,
    contains_recoded_residue,
    parse_phosphorylation_sites,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Residue Recoding
# =============================================================================

def recode_amino_acid(residue: str) -> str:
    """Sentinel code for a phosphorylatable residue (S→B, T→U, Y→Z).

    Raises
    ------
    ConfigurationError
        If the residue is not S, T or Y
    """
    try:
        return RECODE_MAP[residue]
    except KeyError:
        raise ConfigurationError(f"Invalid amino acid {residue!r} cannot be recoded") from None


@njit(cache=True)
def _recode_positions(peptide_ord, positions, recode_table):
    """Recode residues at positions in a copy of peptide_ord.

    Returns the recoded copy and the first position that could not be
    recoded, or -1 on success.
    """
    recoded = peptide_ord.copy()
    for i in range(len(positions)):
        p = positions[i]
        c = recoded[p]
        code = recode_table[c] if c < 128 else 0
        if code == 0:
            return recoded, p
        recoded[p] = code
    return recoded, -1


def _recode_encoded(peptide_ord: np.ndarray, positions: Sequence[int]) -> str:
    positions = np.asarray(positions, dtype=np.int64)
    if len(positions) and (positions.min() < 0 or positions.max() >= len(peptide_ord)):
        raise IndexError(
            f"Recode positions {positions.tolist()} out of range for peptide of "
            f"length {len(peptide_ord)}"
        )

    recoded, failed = _recode_positions(peptide_ord, positions, RECODE_TABLE)
    if failed >= 0:
        residue = chr(peptide_ord[failed])
        raise ConfigurationError(
            f"Invalid amino acid {residue!r} at position {failed} cannot be recoded"
        )
    return decode_ord_to_peptide(recoded)


def recode_sequence(sequence: str, positions: Sequence[int]) -> str:
    """Replace the residues at the given 0-based positions by their codes.

    Parameters
    ----------
    sequence : str
        Peptide sequence
    positions : sequence of int
        Peptide-relative positions of S/T/Y residues

    Returns
    -------
    recoded : str

    Raises
    ------
    ConfigurationError
        If a position does not hold S, T or Y (including a position listed
        twice)
    IndexError
        If a position is outside the sequence

    Examples
    --------
    >>> recode_sequence("HTL", [1])
    'HUL'
    """
    return _recode_encoded(encode_peptide_to_ord(sequence), positions)


def make_accession(accession: str, start: int, end: int, labels: Iterable[str] = ()) -> str:
    """Accession of a recoded peptide.

    Examples
    --------
    >>> make_accession("P12345", 10, 24, ["S12", "T20"])
    'P12345_10_24_S12_T20'
    """
    return f"{accession}_{start}_{end}" + ''.join(f"_{label}" for label in labels)


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class RecodedPeptide:
    """One output record: a peptide variant with its recoded sites."""

    parent_accession: str
    peptide_start: int
    peptide_end: int
    recoded_labels: Tuple[str, ...]
    recoded_sequence: str

    @property
    def accession(self) -> str:
        return make_accession(
            self.parent_accession, self.peptide_start, self.peptide_end, self.recoded_labels
        )

    def to_fasta(self) -> str:
        return f">{self.accession}\n{self.recoded_sequence}\n"


@dataclass
class RecodeStatistics:
    """Counters collected during a recoding run."""

    proteins_seen: int = 0
    peptides_seen: int = 0
    skipped_length: int = 0
    skipped_conflicting: int = 0
    skipped_no_known_sites: int = 0
    records_written: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_length + self.skipped_conflicting + self.skipped_no_known_sites

    def as_dict(self) -> dict:
        return asdict(self)


# =============================================================================
# Recoder
# =============================================================================

class PhosphorylationSiteRecoder:
    """Digest proteins and emit recoded variants of their peptides.

    Parameters
    ----------
    config : RecodeConfig, optional
        Run parameters (default: RecodeConfig())
    annotator : ModificationSiteAnnotator, optional
        Known-site annotator (default: NullSiteAnnotator, i.e. no site
        database)

    Raises
    ------
    ConfigurationError
        If the configuration is invalid

    Examples
    --------
    >>> config = RecodeConfig(min_peptide_length=1, max_modifications=1)
    >>> recoder = PhosphorylationSiteRecoder(config, SiteSetAnnotator({"P1": {"T2"}}))
    >>> [r.to_fasta() for r in recoder.recode_peptide("P1", Peptide("HTL", 0))]
    ['>P1_0_2_T2\\nHUL\\n']
    """

    def __init__(
        self,
        config: Optional[RecodeConfig] = None,
        annotator: Optional[ModificationSiteAnnotator] = None,
    ):
        self.config = config if config is not None else RecodeConfig()
        self.config.validate()
        self.annotator = annotator if annotator is not None else NullSiteAnnotator()
        self.statistics = RecodeStatistics()

    def __repr__(self) -> str:
        return (
            f"PhosphorylationSiteRecoder(protease={self.config.protease!r}, "
            f"annotator={type(self.annotator).__name__})"
        )

    def recode_peptide(self, accession: str, peptide: Peptide) -> Iterator[RecodedPeptide]:
        """Emit all recoded variants of one peptide.

        Parameters
        ----------
        accession : str
            Parent protein accession
        peptide : Peptide
            Digested peptide with protein start offset

        Yields
        ------
        RecodedPeptide
            Variants in combination order, followed by the variants of the
            methionine-trimmed peptide if applicable
        """
        config = self.config
        stats = self.statistics

        while peptide is not None:
            stats.peptides_seen += 1

            if not config.min_peptide_length <= len(peptide) <= config.max_peptide_length:
                logger.debug(
                    f"Skipping peptide {peptide.sequence} with length {len(peptide)} "
                    f"outside [{config.min_peptide_length}, {config.max_peptide_length}]"
                )
                stats.skipped_length += 1
                return

            if contains_recoded_residue(peptide.sequence):
                logger.warning(
                    f"Skipping peptide {peptide.sequence} of {accession} that contains "
                    f"conflicting non-standard amino acids (B/U/Z)"
                )
                stats.skipped_conflicting += 1
                return

            candidates = parse_phosphorylation_sites(peptide)
            known = self.annotator.annotate(accession, candidates).known

            if len(known) == 0 and not self.annotator.is_empty:
                logger.debug(f"No annotated sites on peptide {peptide.sequence}")
                stats.skipped_no_known_sites += 1
                return

            if config.digest_only:
                yield RecodedPeptide(accession, peptide.start, peptide.end, (), peptide.sequence)
                return

            yield from self._recode_known_sites(accession, peptide, known)

            if has_n_term_methionine(peptide):
                logger.debug(f"Cleaving N-term methionine of {peptide.sequence}")
                peptide = cleave_n_term(peptide)
            else:
                peptide = None

    def _recode_known_sites(
        self,
        accession: str,
        peptide: Peptide,
        known: ModificationSites,
    ) -> Iterator[RecodedPeptide]:
        n_known = len(known)
        max_k = min(self.config.max_modifications, n_known)
        peptide_ord = encode_peptide_to_ord(peptide.sequence)

        for k in range(1, max_k + 1):
            for combination in Combinations(n_known, k):
                positions = [known.indices[i] for i in combination]
                labels = tuple(known.sites[i].label for i in combination)
                yield RecodedPeptide(
                    accession,
                    peptide.start,
                    peptide.end,
                    labels,
                    _recode_encoded(peptide_ord, positions),
                )

    def recode_peptides(self, accession: str, peptides: Iterable[Peptide]) -> Iterator[RecodedPeptide]:
        """Emit the recoded variants of several peptides of one protein."""
        for peptide in peptides:
            yield from self.recode_peptide(accession, peptide)

    def recode_protein(self, accession: str, sequence: str) -> Iterator[RecodedPeptide]:
        """Digest a protein and emit the recoded variants of its peptides.

        Peptides are recoded batch by batch as the digestion proceeds.
        """
        config = self.config
        factory = PeptideFactory(
            sequence,
            config.protease,
            missed_cleavages=config.missed_cleavages,
            strict=config.strict_digest,
        )
        self.statistics.proteins_seen += 1

        factory.start()
        batch = factory.next_batch()
        while batch is not None:
            yield from self.recode_peptides(accession, batch)
            batch = factory.next_batch()

    def recode_proteins(self, proteins: Iterable[Tuple], out: IO[str]) -> RecodeStatistics:
        """Recode proteins and write the variants to a FASTA stream.

        Parameters
        ----------
        proteins : iterable of tuples
            (accession, sequence) or (accession, sequence, description),
            e.g. the output of ``read_fasta()``
        out : text stream
            FASTA destination

        Returns
        -------
        statistics : RecodeStatistics
            Cumulative statistics of this recoder
        """
        stats = self.statistics

        for idx, (accession, sequence, *_rest) in enumerate(proteins):
            for record in self.recode_protein(accession, sequence):
                out.write(record.to_fasta())
                stats.records_written += 1

            if (idx + 1) % 5000 == 0:
                logger.info(f"  Processed {idx + 1:,} proteins: {stats.records_written:,} records")

        return stats


def recode_fasta(config: RecodeConfig, enforce_uniprot: bool = False) -> RecodeStatistics:
    """Run a complete recoding job described by a configuration.

    Reads ``config.database``, loads known sites from
    ``config.mod_site_database`` (digest only when unset) and writes the
    recoded FASTA to ``config.output_name``.

    Parameters
    ----------
    config : RecodeConfig
        Run parameters including the I/O paths
    enforce_uniprot : bool
        Reject protein databases with non-UniProt accessions

    Returns
    -------
    statistics : RecodeStatistics

    Raises
    ------
    ConfigurationError
        If the configuration is invalid or an I/O path is missing
    FileNotFoundError
        If an input file does not exist
    """
    from ..database.fasta_reader import read_fasta

    config.validate()
    if config.database is None:
        raise ConfigurationError("No protein database (FASTA) configured")
    if config.output_name is None:
        raise ConfigurationError("No output file configured")

    proteins = read_fasta(config.database, enforce_uniprot=enforce_uniprot)

    if config.mod_site_database is not None:
        annotator = SiteSetAnnotator.from_table(config.mod_site_database)
    else:
        annotator = NullSiteAnnotator()
        logger.info("No modification site table: digesting proteins only")

    recoder = PhosphorylationSiteRecoder(config, annotator)
    logger.info(
        f"Recoding {len(proteins):,} proteins with {config.protease} "
        f"({'strict' if config.strict_digest else 'relaxed'} rules, "
        f"{config.missed_cleavages} missed cleavages, "
        f"up to {config.max_modifications} sites per peptide)"
    )

    with annotator, open(config.output_name, 'w') as out:
        stats = recoder.recode_proteins(proteins, out)

    logger.info(
        f"✓ Wrote {stats.records_written:,} records to {config.output_name} "
        f"({stats.peptides_seen:,} peptides, {stats.skipped:,} skipped)"
    )

    return stats

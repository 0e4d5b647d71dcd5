"""Protein digestion with missed cleavages.

In silico digestion of protein sequences with support for:
- Any built-in or custom protease (anchor pattern + matcher/exclusion rules)
- Strict (Expasy) and relaxed rule sets
- Missed cleavages via sliding windows over the raw fragment stream
- Streaming: peptides are produced batch by batch, one cleavage event at a
  time, so arbitrarily large outputs never have to be held in memory

Algorithm
---------
The factory scans the sequence for the next anchor match, resolves the cut
offsets at that site (see ``Protease.resolve``) and cuts the sequence from
the previous cut position up to every offset. This yields 0..N raw fragments
per cleavage event.

For N missed cleavages the factory keeps N+1 FIFO queues. Every raw fragment
is pushed onto all queues; queue ``i`` is *full* when it holds ``i+1``
fragments, at which point its concatenation is a peptide with exactly ``i``
missed cleavages. A full queue is reported and then drops its oldest
fragment, so the queues behave like N+1 sliding windows advancing in
lock-step.

Example
-------
Protease: Trypsin (relaxed, cleaves after R and K)
Sequence: AKTRL
Missed cleavages: 2

::

    batch 1: fragments ["AK"]
             queues [["AK"], ["AK"], ["AK"]]        -> "AK"
    batch 2: fragments ["TR"]
             queues [["TR"], ["AK","TR"], ["AK","TR"]]  -> "TR", "AKTR"
    batch 3: fragments ["L"]
             queues [["L"], ["TR","L"], ["AK","TR","L"]] -> "L", "TRL", "AKTRL"
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, Iterator, List, Optional, Tuple, Union

from ..config import ConfigurationError
from ..constants import DEFAULT_PROTEASE, N_TERM_METHIONINE
from .cleavage import Protease, ProteaseId, get_protease

logger = logging.getLogger(__name__)


# =============================================================================
# Peptide
# =============================================================================

@dataclass(frozen=True)
class Peptide:
    """Peptide sequence with its position in the parent protein.

    Attributes
    ----------
    sequence : str
        Amino acid sequence
    start : int
        0-based offset of the first residue in the full protein
    """

    sequence: str
    start: int

    @property
    def end(self) -> int:
        """0-based offset of the last residue in the full protein."""
        return self.start + len(self.sequence) - 1

    @property
    def length(self) -> int:
        return len(self.sequence)

    def __len__(self) -> int:
        return len(self.sequence)


def cleave_n_term(peptide: Peptide) -> Peptide:
    """Remove the N-terminal residue of a peptide.

    Intended for initiator methionine removal, but no residue check is made.

    Examples
    --------
    >>> cleave_n_term(Peptide("MAGK", 0))
    Peptide(sequence='AGK', start=1)
    """
    return Peptide(peptide.sequence[1:], peptide.start + 1)


def has_n_term_methionine(peptide: Peptide) -> bool:
    """True if the peptide is the protein N-terminus and starts with M."""
    return peptide.start == 0 and peptide.sequence[:1] == N_TERM_METHIONINE


# =============================================================================
# Peptide Factory
# =============================================================================

class FactoryState(Enum):
    """Lifecycle of a PeptideFactory."""
    READY = "ready"          # Configured, start() not yet called
    SCANNING = "scanning"    # Producing batches
    EXHAUSTED = "exhausted"  # End of sequence reached


class PeptideFactory:
    """Streaming protein digestion.

    Peptides are produced by repeated calls to :meth:`next_batch` until it
    returns None. Each batch holds the peptides completed by one cleavage
    event (including those with missed cleavages).

    A factory is single-owner mutable state for one sequence. Digest proteins
    in parallel by giving each its own factory.

    Parameters
    ----------
    sequence : str
        Protein sequence (converted to uppercase)
    protease : str, ProteaseId or Protease
        Protease selection (default: Trypsin)
    missed_cleavages : int
        Maximum number of missed cleavages (default: 0)
    strict : bool
        Use Expasy rules (True) or relaxed single-residue rules (False)

    Raises
    ------
    ConfigurationError
        If the protease is unknown or missed_cleavages is negative

    Examples
    --------
    >>> factory = PeptideFactory("AKTRL", "Trypsin", missed_cleavages=2, strict=False)
    >>> factory.start()
    >>> [p.sequence for p in factory.next_batch()]
    ['AK']
    >>> [p.sequence for p in factory.next_batch()]
    ['TR', 'AKTR']
    >>> [p.sequence for p in factory.next_batch()]
    ['L', 'TRL', 'AKTRL']
    >>> factory.next_batch() is None
    True
    """

    def __init__(
        self,
        sequence: str,
        protease: Union[str, ProteaseId, Protease] = DEFAULT_PROTEASE,
        missed_cleavages: int = 0,
        strict: bool = True,
    ):
        if missed_cleavages < 0:
            raise ConfigurationError(f"missed_cleavages must be >= 0, got {missed_cleavages}")

        self.sequence = sequence.upper()
        self.protease = get_protease(protease, strict=strict)
        self.missed_cleavages = missed_cleavages

        self.state = FactoryState.READY
        self.search_position = 0
        self.fragment_start = 0
        self.fragment_count = 0
        self.peptide_count = 0
        self._queues: List[Deque[Peptide]] = []

    def __repr__(self) -> str:
        return (
            f"PeptideFactory(protease={self.protease.name!r}, "
            f"missed_cleavages={self.missed_cleavages}, length={len(self.sequence)}, "
            f"state={self.state.value})"
        )

    def start(self) -> None:
        """Reset the cursor and queues so digestion starts from the N-terminus."""
        self._queues = [deque(maxlen=i + 1) for i in range(self.missed_cleavages + 1)]
        self.search_position = 0
        self.fragment_start = 0
        self.fragment_count = 0
        self.peptide_count = 0
        self.state = FactoryState.SCANNING

    def next_batch(self, only_missed_cleavages: int = -1) -> Optional[List[Peptide]]:
        """Produce the peptides completed by the next cleavage event.

        Parameters
        ----------
        only_missed_cleavages : int
            Only return peptides with exactly this many missed cleavages.
            -1 returns all (default).

        Returns
        -------
        peptides : List[Peptide] or None
            Peptides in order of increasing missed cleavages per fragment.
            May be empty. None once the sequence is exhausted.
        """
        if self.state is FactoryState.READY:
            self.start()
        if self.state is FactoryState.EXHAUSTED:
            return None

        fragments = self._next_fragments()
        return self._assemble(fragments, only_missed_cleavages)

    def _next_fragments(self) -> List[Peptide]:
        """Advance to the next site that produces fragments, or to the end."""
        sequence = self.sequence

        while True:
            site = None
            if self.search_position <= len(sequence):
                site = self.protease.find_anchor(sequence, self.search_position)

            if site is None:
                self.state = FactoryState.EXHAUSTED
                if self.fragment_start < len(sequence):
                    fragment = Peptide(sequence[self.fragment_start:], self.fragment_start)
                    self.fragment_start = len(sequence)
                    self.fragment_count += 1
                    return [fragment]
                return []

            offsets = self.protease.resolve(sequence, site)
            self.search_position = site + 1

            # Vetoed by an exclusion, or no matcher satisfied
            if not offsets:
                continue

            fragments = self._cut(site, offsets)
            if not fragments:
                logger.warning(
                    f"No-cleave with {len(offsets)} cut site(s) at position {site} "
                    f"of {sequence[:30]}{'...' if len(sequence) > 30 else ''}. "
                    f"Not necessarily an error, but verify that the C-terminal "
                    f"peptides of this protein are cleaved as expected"
                )
                continue

            self.fragment_count += len(fragments)
            return fragments

    def _cut(self, site: int, offsets: List[int]) -> List[Peptide]:
        """Cut from the current fragment start at every ``site + offset``.

        Cuts that would produce an empty fragment (several offsets resolving
        to the same position) are skipped. The fragment start never moves
        backwards.
        """
        fragments = []
        for offset in offsets:
            position = min(max(site + offset, 0), len(self.sequence))
            if position > self.fragment_start:
                fragments.append(
                    Peptide(self.sequence[self.fragment_start:position], self.fragment_start)
                )
                self.fragment_start = position
        return fragments

    def _assemble(self, fragments: List[Peptide], only_missed_cleavages: int) -> List[Peptide]:
        """Push raw fragments through the missed-cleavage windows."""
        peptides = []
        for fragment in fragments:
            for queue in self._queues:
                queue.append(fragment)

            for missed, queue in enumerate(self._queues):
                if len(queue) != missed + 1:
                    # Queues fill in index order, so no later queue is full
                    break
                if only_missed_cleavages == -1 or only_missed_cleavages == missed:
                    peptides.append(
                        Peptide(''.join(p.sequence for p in queue), queue[0].start)
                    )
                    self.peptide_count += 1
                queue.popleft()

        return peptides

    def peptides(self, only_missed_cleavages: int = -1) -> Iterator[Peptide]:
        """Restart digestion and yield every peptide in emission order."""
        self.start()
        batch = self.next_batch(only_missed_cleavages)
        while batch is not None:
            yield from batch
            batch = self.next_batch(only_missed_cleavages)

    def __iter__(self) -> Iterator[Peptide]:
        return self.peptides()

    def how_many(self, only_missed_cleavages: int = -1) -> int:
        """Count the peptides a full digestion produces (restarts the factory)."""
        return sum(1 for _ in self.peptides(only_missed_cleavages))


# =============================================================================
# Convenience Functions
# =============================================================================

def digest_protein(
    sequence: str,
    protease: Union[str, ProteaseId, Protease] = DEFAULT_PROTEASE,
    missed_cleavages: int = 0,
    strict: bool = True,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> List[Peptide]:
    """Digest a single protein.

    Parameters
    ----------
    sequence : str
        Protein sequence
    protease : str, ProteaseId or Protease
        Protease selection (default: Trypsin)
    missed_cleavages : int
        Number of missed cleavages allowed (default: 0)
    strict : bool
        Expasy rules (True) or relaxed rules (False)
    min_length, max_length : int, optional
        Inclusive peptide length filter (default: no filter)

    Returns
    -------
    peptides : List[Peptide]
        Peptides in emission order (not deduplicated)

    Examples
    --------
    >>> [p.sequence for p in digest_protein("PEPTIDEKPROTEINRAAK", strict=True)]
    ['PEPTIDEKPROTEINR', 'AAK']
    """
    factory = PeptideFactory(sequence, protease, missed_cleavages, strict=strict)

    peptides = []
    for peptide in factory:
        if min_length is not None and len(peptide) < min_length:
            continue
        if max_length is not None and len(peptide) > max_length:
            continue
        peptides.append(peptide)

    return peptides


def digest_protein_list(
    proteins: List[Tuple[str, str, str]],
    protease: Union[str, ProteaseId, Protease] = DEFAULT_PROTEASE,
    missed_cleavages: int = 0,
    strict: bool = True,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Dict[str, List[Peptide]]:
    """Digest a list of proteins.

    Parameters
    ----------
    proteins : List[Tuple[str, str, str]]
        List of (protein_id, sequence, description) tuples
        (typically from read_fasta())
    protease, missed_cleavages, strict, min_length, max_length
        See :func:`digest_protein`

    Returns
    -------
    peptides_by_protein : Dict[str, List[Peptide]]
        protein_id → peptides
    """
    logger.info(f"Digesting {len(proteins):,} proteins...")

    # Resolve once so an unknown protease fails before any work is done
    protease = get_protease(protease, strict=strict)

    peptides_by_protein = {}
    total_peptides = 0

    for idx, (protein_id, sequence, _description) in enumerate(proteins):
        peptides = digest_protein(
            sequence,
            protease,
            missed_cleavages,
            strict=strict,
            min_length=min_length,
            max_length=max_length,
        )
        peptides_by_protein[protein_id] = peptides
        total_peptides += len(peptides)

        if (idx + 1) % 5000 == 0:
            logger.info(f"  Processed {idx + 1:,} proteins: {total_peptides:,} peptides")

    logger.info(
        f"✓ Digestion complete: {len(peptides_by_protein):,} proteins, "
        f"{total_peptides:,} peptides ({protease.name})"
    )

    return peptides_by_protein


def digest_fasta(
    fasta_path: str,
    protease: Union[str, ProteaseId, Protease] = DEFAULT_PROTEASE,
    missed_cleavages: int = 0,
    strict: bool = True,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Dict[str, List[Peptide]]:
    """Convenience function: Read FASTA and digest in one step.

    Examples
    --------
    >>> peptides = digest_fasta("human.fasta", missed_cleavages=1)
    >>> print(f"Digested {len(peptides)} proteins")
    """
    from .fasta_reader import read_fasta

    proteins = read_fasta(fasta_path)

    return digest_protein_list(
        proteins,
        protease,
        missed_cleavages,
        strict=strict,
        min_length=min_length,
        max_length=max_length,
    )

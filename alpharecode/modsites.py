"""Candidate phosphorylation sites and their known/unknown annotation.

Every S, T and Y residue of a peptide is a candidate site. An annotator
splits the candidates of a peptide into *known* sites (reported in a site
database for the parent protein) and *unknown* sites. Only known sites are
recoded.

Site labels use 1-based protein positions, e.g. ``S120`` is the serine at
protein position 120. Site indices are 0-based offsets within the peptide.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Set, Tuple, Union

from numba import njit

from .constants import IS_RECODED, PHOSPHO_RESIDUES
from .database.digestion import Peptide
from .encoding import encode_peptide_to_ord

logger = logging.getLogger(__name__)


# =============================================================================
# Site Containers
# =============================================================================

@dataclass(frozen=True)
class ModificationSite:
    """A residue at a 1-based protein position."""

    residue: str
    position: int

    @property
    def label(self) -> str:
        return f"{self.residue}{self.position}"

    def __str__(self) -> str:
        return self.label


@dataclass
class ModificationSites:
    """Sites of one peptide with their peptide-relative indices.

    ``sites[i]`` is located at ``peptide.sequence[indices[i]]``.
    """

    sites: List[ModificationSite] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)

    def add(self, site: ModificationSite, index: int) -> None:
        self.sites.append(site)
        self.indices.append(index)

    @property
    def labels(self) -> List[str]:
        return [site.label for site in self.sites]

    def __len__(self) -> int:
        return len(self.indices)

    def __iter__(self) -> Iterator[Tuple[ModificationSite, int]]:
        return iter(zip(self.sites, self.indices))


@dataclass
class AnnotatedSites:
    """Partition of candidate sites into known and unknown."""

    known: ModificationSites = field(default_factory=ModificationSites)
    unknown: ModificationSites = field(default_factory=ModificationSites)


# =============================================================================
# Site Parsing
# =============================================================================

def parse_phosphorylation_sites(peptide: Peptide) -> ModificationSites:
    """Find all candidate S/T/Y sites on a peptide.

    Sites are listed by residue (all S, then all T, then all Y) and left to
    right within each residue. Recoded accessions inherit this order.

    Parameters
    ----------
    peptide : Peptide
        Peptide with its protein start offset

    Returns
    -------
    sites : ModificationSites
        Candidate sites labelled with 1-based protein positions

    Examples
    --------
    >>> sites = parse_phosphorylation_sites(Peptide("TASY", 10))
    >>> sites.labels, sites.indices
    (['S13', 'T11', 'Y14'], [2, 0, 3])
    """
    sites = ModificationSites()
    sequence = peptide.sequence

    for residue in PHOSPHO_RESIDUES:
        index = sequence.find(residue)
        while index != -1:
            sites.add(ModificationSite(residue, index + peptide.start + 1), index)
            index = sequence.find(residue, index + 1)

    return sites


@njit(cache=True)
def _count_recoded(peptide_ord, is_recoded):
    n = 0
    for i in range(len(peptide_ord)):
        c = peptide_ord[i]
        if c < 128 and is_recoded[c]:
            n += 1
    return n


def count_recoded_residues(sequence: str) -> int:
    """Number of B/U/Z (recoded site) residues in a sequence.

    Examples
    --------
    >>> count_recoded_residues("PEPBIDUK")
    2
    """
    if not sequence:
        return 0
    return int(_count_recoded(encode_peptide_to_ord(sequence), IS_RECODED))


def contains_recoded_residue(sequence: str) -> bool:
    """True if the sequence already contains a recoded site residue."""
    return count_recoded_residues(sequence) > 0


# =============================================================================
# Annotators
# =============================================================================

class ModificationSiteAnnotator(ABC):
    """Splits candidate sites into known and unknown.

    Annotators may hold resources (files, connections); release them with
    :meth:`close` or use the annotator as a context manager.
    """

    @abstractmethod
    def annotate(self, accession: str, sites: ModificationSites) -> AnnotatedSites:
        """Partition candidate sites of a peptide from protein ``accession``."""

    @property
    @abstractmethod
    def is_empty(self) -> bool:
        """True if no site database is behind this annotator.

        An empty annotator means "digest only": peptides are kept even
        when none of their sites are known.
        """

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False


class NullSiteAnnotator(ModificationSiteAnnotator):
    """Annotator without a site database. Every site is unknown."""

    def annotate(self, accession: str, sites: ModificationSites) -> AnnotatedSites:
        return AnnotatedSites(known=ModificationSites(),
                              unknown=ModificationSites(list(sites.sites), list(sites.indices)))

    @property
    def is_empty(self) -> bool:
        return True


class SiteSetAnnotator(ModificationSiteAnnotator):
    """In-memory annotator backed by ``{accession: {site labels}}``.

    Parameters
    ----------
    records : dict or iterable of (accession, label) pairs
        Known sites, e.g. ``{"P12345": {"S120", "T7"}}``

    Notes
    -----
    The annotator is never empty, even without records: a site database was
    supplied, so peptides without known sites are filtered out.

    Examples
    --------
    >>> annotator = SiteSetAnnotator({"P1": {"T2"}})
    >>> annotated = annotator.annotate("P1", parse_phosphorylation_sites(Peptide("HTL", 0)))
    >>> annotated.known.labels
    ['T2']
    """

    def __init__(self, records: Union[Dict[str, Iterable[str]], Iterable[Tuple[str, str]]] = ()):
        self._sites: Dict[str, Set[str]] = {}

        if isinstance(records, dict):
            for accession, labels in records.items():
                self._sites.setdefault(accession, set()).update(labels)
        else:
            for accession, label in records:
                self.add(accession, label)

    def add(self, accession: str, label: str) -> bool:
        """Add a known site. Returns False if it was already present."""
        labels = self._sites.setdefault(accession, set())
        if label in labels:
            return False
        labels.add(label)
        return True

    def contains(self, accession: str, label: str) -> bool:
        return label in self._sites.get(accession, ())

    @property
    def n_proteins(self) -> int:
        return len(self._sites)

    @property
    def n_sites(self) -> int:
        return sum(len(labels) for labels in self._sites.values())

    def __len__(self) -> int:
        return self.n_sites

    def annotate(self, accession: str, sites: ModificationSites) -> AnnotatedSites:
        known_labels = self._sites.get(accession, set())
        annotated = AnnotatedSites()
        for site, index in sites:
            if site.label in known_labels:
                annotated.known.add(site, index)
            else:
                annotated.unknown.add(site, index)
        return annotated

    @property
    def is_empty(self) -> bool:
        return False

    @classmethod
    def from_table(cls, path: Union[str, Path]) -> 'SiteSetAnnotator':
        """Load known sites from a tab-delimited table.

        The first line is a header and is skipped. Each following line holds
        at least ``accession<TAB>site`` (e.g. ``P12345\\tS120``); further
        columns are ignored, as are lines with fewer than two columns.
        Duplicate entries are dropped.

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Site table not found: {path}")

        annotator = cls()
        n_duplicates = 0

        with open(path) as f:
            next(f, None)
            for line in f:
                tokens = line.rstrip('\r\n').split('\t')
                if len(tokens) < 2:
                    continue
                accession, label = tokens[0].strip(), tokens[1].strip()
                if not annotator.add(accession, label):
                    logger.debug(f"Dropping duplicate entry {accession},{label}")
                    n_duplicates += 1

        logger.info(
            f"✓ Loaded {annotator.n_sites:,} known sites on {annotator.n_proteins:,} "
            f"proteins from {path.name} ({n_duplicates:,} duplicates dropped)"
        )
        return annotator

"""Protease cleavage rules.

A protease is described by a coarse *anchor* pattern that finds candidate
cleavage sites (e.g. any K or R for trypsin), a default cut offset, and two
optional lists of windowed rules that refine each candidate:

- **Matchers** confirm that a candidate cleaves and say where (offset 0 cuts
  before the anchor residue, offset 1 after it). Several matchers may fire on
  the same anchor, producing more than one cut (pepsin cuts on both sides).
- **Exclusions** veto a candidate site entirely (Expasy exceptions such as
  trypsin not cleaving CKD).

Rules are evaluated on a fixed window of ``left + right + 1`` characters
around the candidate. Window positions outside the sequence are padded with
a character that never matches a residue, so rules near the termini never
raise.

Two rule sets are provided for every built-in protease:

- strict: Expasy PeptideCutter rules, including matchers and exceptions
- relaxed: predictable single-residue cleavage, which is what most bench
  scientists expect (pepsins cut before and after the anchor residue)

Examples
--------
>>> trypsin = get_protease("Trypsin", strict=True)
>>> trypsin.resolve("TTTRTTT", 3)
[1]
>>> trypsin.resolve("TTTRPTT", 3)   # proline blocks cleavage
[]
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from ..config import ConfigurationError
from ..constants import WINDOW_PAD_CHAR

logger = logging.getLogger(__name__)


def _compile(pattern: str) -> Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid cleavage pattern {pattern!r}: {e}") from e


# =============================================================================
# Cleavage Rules
# =============================================================================

@dataclass(frozen=True)
class CleavageRule:
    """Windowed pattern test around a candidate cleavage site.

    Parameters
    ----------
    pattern : str
        Regular expression searched (unanchored) within the window
    window_left : int
        Residues to include left of the candidate site
    window_right : int
        Residues to include right of the candidate site
    cut_offset : int, optional
        Offset from the site at which to cut when the rule matches.
        None for exclusion rules.

    Examples
    --------
    >>> rule = CleavageRule("(WKP)|(MRP)|[KR][^P]", 1, 1, cut_offset=1)
    >>> rule.offset_at("TMRPT", 2)
    1
    >>> rule.offset_at("TYRPT", 2) is None
    True
    """

    pattern: str
    window_left: int
    window_right: int
    cut_offset: Optional[int] = None
    regex: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.window_left < 0 or self.window_right < 0:
            raise ConfigurationError(
                f"Rule window must be non-negative, got ({self.window_left}, {self.window_right})"
            )
        object.__setattr__(self, 'regex', _compile(self.pattern))

    @property
    def is_exclusion(self) -> bool:
        return self.cut_offset is None

    def window(self, sequence: str, site: int) -> str:
        """Extract the padded window centered on ``site``.

        Always returns exactly ``window_left + window_right + 1`` characters.
        """
        first = site - self.window_left
        last = site + self.window_right + 1
        pad_left = max(0, -first)
        pad_right = max(0, last - len(sequence))

        return (
            WINDOW_PAD_CHAR * pad_left
            + sequence[max(0, first):min(last, len(sequence))]
            + WINDOW_PAD_CHAR * pad_right
        )

    def matches(self, sequence: str, site: int) -> bool:
        """Test whether the pattern occurs anywhere in the site window."""
        return self.regex.search(self.window(sequence, site)) is not None

    def offset_at(self, sequence: str, site: int) -> Optional[int]:
        """Return the cut offset if the rule matches at ``site``, else None."""
        if self.matches(sequence, site):
            return self.cut_offset
        return None


# =============================================================================
# Protease Definition
# =============================================================================

@dataclass(frozen=True)
class Protease:
    """Named cleavage policy.

    Parameters
    ----------
    name : str
        Display name
    anchor : str
        Regular expression locating candidate sites
    default_offset : int
        Cut offset used when no matchers are configured
    matchers : tuple of CleavageRule
        Rules confirming cleavage and supplying offsets
    exclusions : tuple of CleavageRule
        Rules vetoing a candidate site

    Notes
    -----
    A protease without matchers is "predictable": every anchor match cleaves
    exactly once at ``default_offset``.
    """

    name: str
    anchor: str
    default_offset: int
    matchers: Tuple[CleavageRule, ...] = ()
    exclusions: Tuple[CleavageRule, ...] = ()
    anchor_regex: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'anchor_regex', _compile(self.anchor))
        for rule in self.matchers:
            if rule.is_exclusion:
                raise ConfigurationError(f"Matcher {rule.pattern!r} of {self.name} has no cut offset")
        for rule in self.exclusions:
            if not rule.is_exclusion:
                raise ConfigurationError(f"Exclusion {rule.pattern!r} of {self.name} has a cut offset")

    @property
    def matcher_count(self) -> int:
        return len(self.matchers)

    @property
    def exclusion_count(self) -> int:
        return len(self.exclusions)

    def find_anchor(self, sequence: str, position: int) -> Optional[int]:
        """Return the start of the next anchor match at or after ``position``."""
        match = self.anchor_regex.search(sequence, position)
        if match is None:
            return None
        return match.start()

    def is_excluded(self, sequence: str, site: int) -> bool:
        return any(rule.matches(sequence, site) for rule in self.exclusions)

    def resolve(self, sequence: str, site: int) -> List[int]:
        """Resolve the cut offsets produced at a candidate site.

        Parameters
        ----------
        sequence : str
            Full protein sequence
        site : int
            Candidate site (anchor match start)

        Returns
        -------
        offsets : List[int]
            Cut offsets relative to ``site``, in matcher order. Empty when the
            site is vetoed by an exclusion or no matcher is satisfied.
            Duplicates are kept.
        """
        if self.is_excluded(sequence, site):
            return []

        if not self.matchers:
            return [self.default_offset]

        offsets = []
        for rule in self.matchers:
            offset = rule.offset_at(sequence, site)
            if offset is not None:
                offsets.append(offset)
        return offsets

    def with_matcher(self, pattern: str, left: int, right: int, offset: int) -> 'Protease':
        """Return a copy of this protease with an additional matcher."""
        rule = CleavageRule(pattern, left, right, cut_offset=offset)
        return Protease(self.name, self.anchor, self.default_offset,
                        self.matchers + (rule,), self.exclusions)

    def with_exclusion(self, pattern: str, left: int, right: int) -> 'Protease':
        """Return a copy of this protease with an additional exclusion."""
        rule = CleavageRule(pattern, left, right)
        return Protease(self.name, self.anchor, self.default_offset,
                        self.matchers, self.exclusions + (rule,))


def make_protease(
    name: str,
    anchor: str,
    offset: int,
    matchers: Sequence[Tuple[str, int, int, int]] = (),
    exclusions: Sequence[Tuple[str, int, int]] = (),
) -> Protease:
    """Build a custom protease.

    Parameters
    ----------
    name : str
        Display name
    anchor : str
        Candidate site pattern
    offset : int
        Default cut offset (0 = before anchor, 1 = after)
    matchers : sequence of (pattern, left, right, offset)
        Matcher rule definitions
    exclusions : sequence of (pattern, left, right)
        Exclusion rule definitions

    Raises
    ------
    ConfigurationError
        If any pattern does not compile

    Examples
    --------
    >>> argc = make_protease("ArgC", "R", 1, exclusions=[("RP", 0, 1)])
    >>> argc.resolve("ARPA", 1)
    []
    """
    return Protease(
        name,
        anchor,
        offset,
        tuple(CleavageRule(p, left, right, cut_offset=o) for p, left, right, o in matchers),
        tuple(CleavageRule(p, left, right) for p, left, right in exclusions),
    )


# =============================================================================
# Built-in Proteases
# =============================================================================

class ProteaseId(Enum):
    """Built-in proteases. Values are the display names."""
    ASPN = "AspN"
    ASPN_GLU = "AspN/N->D"
    CHYMOTRYPSIN = "Chymotrypsin"
    GLUC = "GluC"
    LYSC = "LysC"
    PEPSIN_PH13 = "Pepsin, pH=1.3"
    PEPSIN_PH20 = "Pepsin, pH=2.0"
    TRYPSIN = "Trypsin"
    NON_SPECIFIC = "Non-specific"

    @classmethod
    def from_name(cls, name: Union[str, 'ProteaseId']) -> 'ProteaseId':
        """Look up a protease by display name or member name (case-insensitive).

        Raises
        ------
        ConfigurationError
            If the name does not identify a built-in protease
        """
        if isinstance(name, cls):
            return name

        key = str(name).strip().lower()
        for member in cls:
            if key in (member.value.lower(), member.name.lower()):
                return member

        raise ConfigurationError(
            f"Unknown protease: {name}. "
            f"Must be one of {', '.join(repr(m.value) for m in cls)}"
        )


# Anchor pattern and default offset shared by both rule sets
_ANCHORS: Dict[ProteaseId, Tuple[str, int]] = {
    ProteaseId.ASPN: ("D", 0),
    ProteaseId.ASPN_GLU: ("[DE]", 0),
    ProteaseId.CHYMOTRYPSIN: ("[FYW]", 1),
    ProteaseId.GLUC: ("[E]", 1),
    ProteaseId.LYSC: ("K", 1),
    ProteaseId.PEPSIN_PH13: ("[FL]", 0),
    ProteaseId.PEPSIN_PH20: ("[FLWY]", 0),
    ProteaseId.TRYPSIN: ("[RK]", 1),
    ProteaseId.NON_SPECIFIC: (".", 1),
}

# Expasy PeptideCutter rules: (pattern, left, right, offset)
# GluC is left without matchers: Expasy documents proline/aspartate
# inhibition around E, but PeptideCutter cleaves on every E.
_STRICT_MATCHERS = {
    ProteaseId.CHYMOTRYPSIN: [
        ("([FY][^P])|(W[^MP])", 0, 1, 1),
    ],
    ProteaseId.PEPSIN_PH13: [
        ("[^HKR][^P][^R][FL][^P]", 3, 1, 0),
        ("[^HKR][^P][FL].[^P]", 2, 2, 1),
    ],
    ProteaseId.PEPSIN_PH20: [
        ("[^HKR][^P][^R][FLWY][^P]", 3, 1, 0),
        ("[^HKR][^P][FLWY].[^P]", 2, 2, 1),
    ],
    ProteaseId.TRYPSIN: [
        ("(WKP)|(MRP)|[KR][^P]", 1, 1, 1),
    ],
}

_STRICT_EXCLUSIONS = {
    ProteaseId.TRYPSIN: [
        ("([CD]KD)|(CK[HY])|(CRK)|(RR[HR])", 1, 1),
    ],
}

# Relaxed pepsins cut on both sides of the anchor residue
_RELAXED_MATCHERS = {
    ProteaseId.PEPSIN_PH13: [
        ("[FL]", 0, 0, 0),
        ("[FL]", 0, 0, 1),
    ],
    ProteaseId.PEPSIN_PH20: [
        ("[FLWY]", 0, 0, 0),
        ("[FLWY]", 0, 0, 1),
    ],
}


def _build_table(matchers, exclusions) -> Dict[ProteaseId, Protease]:
    table = {}
    for protease_id, (anchor, offset) in _ANCHORS.items():
        table[protease_id] = make_protease(
            protease_id.value,
            anchor,
            offset,
            matchers.get(protease_id, ()),
            exclusions.get(protease_id, ()),
        )
    return table


STRICT_PROTEASES: Dict[ProteaseId, Protease] = _build_table(_STRICT_MATCHERS, _STRICT_EXCLUSIONS)
RELAXED_PROTEASES: Dict[ProteaseId, Protease] = _build_table(_RELAXED_MATCHERS, {})


def get_protease(
    protease: Union[str, ProteaseId, Protease],
    strict: bool = True,
) -> Protease:
    """Resolve a protease selection to its definition.

    Parameters
    ----------
    protease : str, ProteaseId or Protease
        Display name, enum member, or a (custom) Protease which is returned
        unchanged
    strict : bool
        Select the Expasy rule set (True) or the relaxed rule set (False)

    Returns
    -------
    Protease

    Raises
    ------
    ConfigurationError
        If the name is not a built-in protease
    """
    if isinstance(protease, Protease):
        return protease

    protease_id = ProteaseId.from_name(protease)
    table = STRICT_PROTEASES if strict else RELAXED_PROTEASES
    return table[protease_id]


def list_proteases() -> List[str]:
    """Display names of all built-in proteases."""
    return [member.value for member in ProteaseId]

"""Protein sequence handling: FASTA I/O, protease rules and digestion.

Provides streaming in silico digestion with missed cleavages for the
built-in proteases (strict Expasy rules or relaxed single-residue rules)
and for custom proteases built from regular-expression cleavage rules.

Validated against Expasy PeptideCutter cleavage rules for:
- Trypsin, LysC, GluC, AspN (with and without N->D)
- Chymotrypsin (high specificity)
- Pepsin at pH 1.3 and pH >2
"""

from .fasta_reader import (
    read_fasta,
    write_fasta,
    parse_protein_id,
    is_uniprot_accession,
)

from .cleavage import (
    CleavageRule,
    Protease,
    ProteaseId,
    STRICT_PROTEASES,
    RELAXED_PROTEASES,
    get_protease,
    make_protease,
    list_proteases,
)

from .digestion import (
    Peptide,
    PeptideFactory,
    FactoryState,
    cleave_n_term,
    has_n_term_methionine,
    digest_protein,
    digest_protein_list,
    digest_fasta,
)

__all__ = [
    # FASTA reading
    'read_fasta',
    'write_fasta',
    'parse_protein_id',
    'is_uniprot_accession',

    # Protease rules
    'CleavageRule',
    'Protease',
    'ProteaseId',
    'STRICT_PROTEASES',
    'RELAXED_PROTEASES',
    'get_protease',
    'make_protease',
    'list_proteases',

    # Protein digestion
    'Peptide',
    'PeptideFactory',
    'FactoryState',
    'cleave_n_term',
    'has_n_term_methionine',
    'digest_protein',
    'digest_protein_list',
    'digest_fasta',
]

"""Pytest configuration for AlphaPeptRecode tests.

This module provides common fixtures and configuration for all tests.
Digestion reference sequences are taken from Expasy PeptideCutter examples
and verified by hand against its cleavage rules.
"""

import pytest


@pytest.fixture
def trypsin_sequence():
    """Sequence exercising every strict trypsin rule and exception."""
    return "TTTRTTTKTTTWKPTTTMRPTTTKPTTTRPTTTCKDTTTDKDTTTCKYTTTCKHTTTCRKTTTRRHTTTRRRTTT"


@pytest.fixture
def pepsin_ph13_sequence():
    """Sequence exercising both strict pepsin (pH 1.3) matchers."""
    return "TTTTFTTTRTFTTTHTFTTTKTFTTTPTFTTTTRFTTTTFPTTTFTPTTT"


@pytest.fixture
def pepsin_ph20_sequence(pepsin_ph13_sequence):
    """Pepsin (pH >2) variant: W is cleaved like F."""
    return pepsin_ph13_sequence.replace("F", "W")


@pytest.fixture
def recode_config():
    """Permissive recoding configuration for short test peptides."""
    from alpharecode.config import RecodeConfig
    return RecodeConfig(
        protease="Trypsin",
        strict_digest=False,
        missed_cleavages=0,
        min_peptide_length=1,
        max_peptide_length=50,
        max_modifications=3,
    )


@pytest.fixture
def fasta_file(tmp_path):
    """Small UniProt-style FASTA file with a blank line and lowercase residues."""
    path = tmp_path / "proteins.fasta"
    path.write_text(
        ">sp|P12345|TEST1_HUMAN Test protein 1\n"
        "MSTKPEPTIDER\n"
        "AGSYK\n"
        "\n"
        ">sp|Q9Y6K9|TEST2_HUMAN Test protein 2\n"
        "acdefghik\n"
    )
    return path


@pytest.fixture
def site_table(tmp_path):
    """Known-site table with a header, a duplicate and a short row."""
    path = tmp_path / "sites.tsv"
    path.write_text(
        "accession\tsite\tsource\n"
        "P12345\tS2\tPhosphoSitePlus\n"
        "P12345\tT3\tPhosphoSitePlus\n"
        "P12345\tS2\tPhosphoSitePlus\n"
        "P12345\n"
        "Q9Y6K9\tY99\tPhosphoSitePlus\n"
    )
    return path

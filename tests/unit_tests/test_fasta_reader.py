"""Unit tests for FASTA reading and writing."""

import io

import pytest

from alpharecode.database.fasta_reader import (
    is_uniprot_accession,
    parse_protein_id,
    read_fasta,
    write_fasta,
)
from alpharecode.recoding import RecodedPeptide


class TestParseProteinId:
    """Test accession extraction from headers."""

    def test_uniprot_header(self):
        """Test that the second '|' field is the accession."""
        assert parse_protein_id("sp|P12345|NAME_HUMAN Some protein") == (
            "P12345", "sp|P12345|NAME_HUMAN Some protein"
        )

    def test_generic_header(self):
        """Test that the first token is the accession."""
        assert parse_protein_id("PROT123 Description here") == ("PROT123", "PROT123 Description here")

    @pytest.mark.parametrize("accession", ["P12345", "Q9Y6K9", "O00001", "A0A023GPI8", "A2BC19"])
    def test_uniprot_accessions(self, accession):
        """Test valid UniProt accessions."""
        assert is_uniprot_accession(accession)

    @pytest.mark.parametrize("accession", ["PROT123", "p12345", "P12345-2", "", "NAME_HUMAN"])
    def test_non_uniprot_accessions(self, accession):
        """Test strings that are not UniProt accessions."""
        assert not is_uniprot_accession(accession)


class TestReadFasta:
    """Test FASTA parsing."""

    def test_read(self, fasta_file):
        """Test multi-line, blank-line and lowercase handling."""
        proteins = read_fasta(fasta_file)

        assert [(p[0], p[1]) for p in proteins] == [
            ("P12345", "MSTKPEPTIDERAGSYK"),
            ("Q9Y6K9", "ACDEFGHIK"),
        ]
        assert proteins[0][2] == "sp|P12345|TEST1_HUMAN Test protein 1"

    def test_enforce_uniprot(self, tmp_path):
        """Test that non-UniProt accessions are rejected on request."""
        path = tmp_path / "generic.fasta"
        path.write_text(">PROT1 generic\nPEPTIDEK\n")

        assert read_fasta(path)[0][0] == "PROT1"
        with pytest.raises(ValueError, match="non-UniProt"):
            read_fasta(path, enforce_uniprot=True)

    def test_non_ascii_residue(self, tmp_path):
        """Test that residues outside 7-bit ASCII are rejected."""
        path = tmp_path / "bad.fasta"
        path.write_text(">sp|P12345|BAD_HUMAN\nPEPTĀDEK\n", encoding="utf-8")
        with pytest.raises(ValueError, match="non-ASCII"):
            read_fasta(path)

    def test_empty_database(self, tmp_path):
        """Test that files without entries are rejected."""
        path = tmp_path / "empty.fasta"
        path.write_text("\n\n")
        with pytest.raises(ValueError, match="no protein sequences"):
            read_fasta(path)

    def test_missing_file(self, tmp_path):
        """Test that missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_fasta(tmp_path / "missing.fasta")


def test_write_fasta():
    """Test writing recoded records."""
    out = io.StringIO()
    records = [
        RecodedPeptide("P1", 0, 2, ("T2",), "HUL"),
        RecodedPeptide("P1", 0, 2, (), "HTL"),
    ]

    assert write_fasta(records, out) == 2
    assert out.getvalue() == ">P1_0_2_T2\nHUL\n>P1_0_2\nHTL\n"

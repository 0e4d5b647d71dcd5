"""Conversion between peptide strings and ord() arrays for Numba kernels."""

import numpy as np


def encode_peptide_to_ord(peptide: str) -> np.ndarray:
    """Encode peptide string to ord() array for Numba processing.

    Parameters
    ----------
    peptide : str
        Peptide sequence (uppercase, 7-bit ASCII)

    Returns
    -------
    peptide_ord : np.ndarray (uint8)
        Array of ord() values for each amino acid

    Raises
    ------
    ValueError
        If the peptide contains characters outside 7-bit ASCII

    Examples
    --------
    >>> peptide_ord = encode_peptide_to_ord("PEPTIDE")
    >>> # Returns array([80, 69, 80, 84, 73, 68, 69], dtype=uint8)
    """
    if not peptide.isascii():
        raise ValueError(f"Peptide {peptide!r} contains non-ASCII characters")
    return np.array([ord(c) for c in peptide], dtype=np.uint8)


def decode_ord_to_peptide(peptide_ord: np.ndarray) -> str:
    """Inverse of :func:`encode_peptide_to_ord`."""
    return ''.join(chr(c) for c in peptide_ord)

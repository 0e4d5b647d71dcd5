#!/usr/bin/env python
"""Digest a protein FASTA and recode known phosphorylation sites.

Writes a FASTA file with one entry per peptide variant, in which the known
S/T/Y sites selected for that variant are replaced by B/U/Z:

    >P12345_10_24_S12_T20
    PEPBIDEKPEPUIDE

Without a site table (--sites) the proteins are only digested and every
peptide within the length bounds is written unchanged.

Examples
--------
python scripts/recode_fasta.py --fasta human.fasta --sites phosphosites.tsv \\
    --output human_recoded.fasta --protease Trypsin --missed-cleavages 2

python scripts/recode_fasta.py --config run.cfg --verbose
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging

from alpharecode.config import ConfigurationError, RecodeConfig
from alpharecode.database import list_proteases
from alpharecode.recoding import recode_fasta


def build_config(args) -> RecodeConfig:
    """Configuration file (if any) overridden by explicit arguments."""
    config = RecodeConfig.load(args.config) if args.config else RecodeConfig()

    overrides = {
        'database': args.fasta,
        'mod_site_database': args.sites,
        'output_name': args.output,
        'protease': args.protease,
        'missed_cleavages': args.missed_cleavages,
        'min_peptide_length': args.min_length,
        'max_peptide_length': args.max_length,
        'max_modifications': args.max_mods,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    if args.strict:
        config.strict_digest = True
    if args.relaxed:
        config.strict_digest = False
    if args.digest_only:
        config.digest_only = True

    return config


def main():
    parser = argparse.ArgumentParser(description='Digest proteins and recode known phosphorylation sites')
    parser.add_argument('--fasta', type=str, default=None,
                       help='Protein FASTA database')
    parser.add_argument('--sites', type=str, default=None,
                       help='Tab-delimited known site table (accession, site); omit to digest only')
    parser.add_argument('--output', type=str, default=None,
                       help='Output FASTA file')
    parser.add_argument('--protease', type=str, default=None,
                       help='Protease name (see --list-proteases)')
    rules = parser.add_mutually_exclusive_group()
    rules.add_argument('--strict', action='store_true',
                       help='Use Expasy cleavage rules')
    rules.add_argument('--relaxed', action='store_true',
                       help='Use simplified single-residue cleavage rules (default)')
    parser.add_argument('--missed-cleavages', type=int, default=None,
                       help='Maximum number of missed cleavages')
    parser.add_argument('--min-length', type=int, default=None,
                       help='Minimum peptide length')
    parser.add_argument('--max-length', type=int, default=None,
                       help='Maximum peptide length')
    parser.add_argument('--max-mods', type=int, default=None,
                       help='Maximum number of sites recoded per peptide')
    parser.add_argument('--digest-only', action='store_true',
                       help='Write unmodified peptides instead of recoded variants')
    parser.add_argument('--enforce-uniprot', action='store_true',
                       help='Reject FASTA entries without a UniProt accession')
    parser.add_argument('--config', type=str, default=None,
                       help='Load parameters from a KEY=value configuration file')
    parser.add_argument('--save-config', type=str, default=None,
                       help='Save the effective parameters to a configuration file')
    parser.add_argument('--list-proteases', action='store_true',
                       help='List available proteases and exit')
    parser.add_argument('--verbose', action='store_true',
                       help='Log per-peptide decisions')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.list_proteases:
        for name in list_proteases():
            print(name)
        return 0

    try:
        config = build_config(args)
        config.validate()
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.save_config:
        config.save(args.save_config)

    print("=" * 80)
    print("AlphaPeptRecode: Phosphorylation Site Recoding")
    print("=" * 80)
    print(f"Database:  {config.database}")
    print(f"Sites:     {config.mod_site_database or '(none, digest only)'}")
    print(f"Output:    {config.output_name}")
    print(f"Protease:  {config.protease} ({'strict' if config.strict_digest else 'relaxed'})")
    print(f"Missed cleavages: {config.missed_cleavages}, "
          f"length [{config.min_peptide_length}, {config.max_peptide_length}], "
          f"max sites {config.max_modifications}")
    print()

    try:
        stats = recode_fasta(config, enforce_uniprot=args.enforce_uniprot)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    print("=" * 80)
    print("SUMMARY")
    print("=" * 80)
    print(f"Proteins:          {stats.proteins_seen:,}")
    print(f"Peptides:          {stats.peptides_seen:,}")
    print(f"  Length filtered: {stats.skipped_length:,}")
    print(f"  Conflicting:     {stats.skipped_conflicting:,}")
    print(f"  No known sites:  {stats.skipped_no_known_sites:,}")
    print(f"Records written:   {stats.records_written:,}")
    print("=" * 80)
    return 0


if __name__ == '__main__':
    sys.exit(main())

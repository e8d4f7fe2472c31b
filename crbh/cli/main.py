# crbh/cli/main.py
import argparse
import json
import sys
import logging
from typing import List, Optional

from crbh import __version__
from crbh.config import ConfigManager
from crbh.core.logging_config import LoggingManager
from crbh.error_handlers import cli_error_handler
from crbh.models.results import CRBHResult
from crbh.pipelines.orchestrator import CRBHOrchestrator
from crbh.utils.blast_utils import write_reciprocals


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Conditional Reciprocal Best BLAST ortholog detection'
    )

    # Global options
    parser.add_argument('--config', type=str, help='Path to configuration file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity (can be used multiple times)')
    parser.add_argument('--log-file', type=str,
                        help='Log to file in addition to stderr')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for log files')
    parser.add_argument('--json', action='store_true',
                        help='Print the summary as JSON')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Full pipeline
    run_parser = subparsers.add_parser('run', help='Build databases, run BLAST and call reciprocals')
    run_parser.add_argument('-q', '--query', required=True,
                            help='Query FASTA file (nucleotide)')
    run_parser.add_argument('-t', '--target', required=True,
                            help='Target FASTA file (nucleotide or protein)')
    run_parser.add_argument('-e', '--evalue', type=float, default=None,
                            help='BLAST e-value cutoff')
    run_parser.add_argument('-n', '--threads', type=int, default=None,
                            help='Threads for BLAST')
    run_parser.add_argument('-w', '--working-dir', type=str, default=None,
                            help='Directory for databases and BLAST output')
    run_parser.add_argument('-o', '--output', type=str, default=None,
                            help='Output file for reciprocal hits')

    # Core only
    match_parser = subparsers.add_parser('match', help='Call reciprocals from existing tabular BLAST output')
    match_parser.add_argument('-f', '--forward', required=True,
                              help='Query searched against target (-outfmt 6)')
    match_parser.add_argument('-r', '--reverse', required=True,
                              help='Target searched against query (-outfmt 6)')
    match_parser.add_argument('-o', '--output', type=str, default=None,
                              help='Output file for reciprocal hits')

    return parser


def _report(result: CRBHResult, output: str, as_json: bool) -> None:
    rows = write_reciprocals(result, output)
    summary = dict(result.summary(), output=output, rows=rows)
    if as_json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Strict reciprocal hits: {summary['strict']}")
        print(f"Rescued secondary hits: {summary['rescued']}")
        print(f"Total reciprocal hits: {summary['total']}")
        print(f"Results written to {output}")


@cli_error_handler
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config_manager = ConfigManager(args.config)

    logger = LoggingManager.configure(
        verbose=args.verbose > 0,
        log_file=args.log_file,
        log_dir=args.log_dir,
        component="crbh",
        config=config_manager.config
    )
    logger.debug(f"Arguments: {vars(args)}")

    orchestrator = CRBHOrchestrator(config_manager=config_manager)
    output = args.output or config_manager.get_path('output_file', 'reciprocal_hits.txt')

    if args.command == 'run':
        result = orchestrator.run(
            args.query, args.target,
            evalue=args.evalue,
            threads=args.threads,
            working_dir=args.working_dir
        )
    elif args.command == 'match':
        result = orchestrator.match_files(args.forward, args.reverse)
    else:
        parser.print_help()
        return 1

    _report(result, output, args.json)
    logging.getLogger("crbh").info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())

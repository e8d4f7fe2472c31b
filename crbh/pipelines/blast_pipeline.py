#!/usr/bin/env python3
"""
BLAST+ search backend for reciprocal hit detection

Builds BLAST databases for the query and target FASTA files and runs the
search in both directions, writing tabular (-outfmt 6) results. Databases
and result files that already exist in the working directory are reused.
"""
import os
import logging
import subprocess
from typing import Dict, List, Optional, Tuple

from crbh.config import ConfigManager
from crbh.core.command_utils import run_command_with_retry, locate_command
from crbh.exceptions import ConfigurationError, SearchError, StateError, ValidationError
from crbh.utils.sequence import iter_sequence_types, fasta_base_name, NUCLEOTIDE, PROTEIN

REQUIRED_TOOLS = ('makeblastdb', 'blastn', 'tblastn', 'blastx')

# File that marks a finished database, per database type
DB_MARKERS = {NUCLEOTIDE: '.nsq', PROTEIN: '.psq'}


class BlastSearchBackend:
    """Run reciprocal BLAST+ searches between a nucleotide query set and a
    nucleotide or protein target set"""

    def __init__(self, query: str, target: str,
                 config_manager: Optional[ConfigManager] = None,
                 working_dir: Optional[str] = None):
        """
        Initialize with input FASTA paths

        Args:
            query: Query FASTA file (nucleotide)
            target: Target FASTA file (nucleotide or protein)
            config_manager: Configuration manager
            working_dir: Directory for databases and search output,
                defaults to the directory of the query file

        Raises:
            ConfigurationError: If a BLAST+ executable cannot be found
        """
        self.logger = logging.getLogger("crbh.blast_pipeline")
        self.config_manager = config_manager or ConfigManager()
        self.query = query
        self.target = target
        self.working_dir = (working_dir
                            or self.config_manager.get_path('working_dir')
                            or os.path.dirname(os.path.abspath(query)))

        self.query_name = fasta_base_name(query)
        self.target_name = fasta_base_name(target)
        self.target_is_prot: Optional[bool] = None
        self.databases = False
        self.forward_output: Optional[str] = None
        self.reverse_output: Optional[str] = None

        self.tool_paths = self._locate_tools()

    def _locate_tools(self) -> Dict[str, str]:
        """Resolve every BLAST+ executable from config, then the PATH"""
        paths = {}
        for tool in REQUIRED_TOOLS:
            configured = self.config_manager.get_tool_path(tool, tool)
            if os.path.isfile(configured) and os.access(configured, os.X_OK):
                paths[tool] = configured
                continue
            located = locate_command(configured)
            if not located:
                raise ConfigurationError(f"{tool} was not in the PATH",
                                         {'tool': tool, 'configured': configured})
            paths[tool] = located
        self.logger.debug(f"Using BLAST+ tools: {paths}")
        return paths

    def _db_path(self, name: str) -> str:
        return os.path.join(self.working_dir, name)

    def detect_types(self) -> bool:
        """Check the query is nucleotide and decide whether the target is protein

        Returns:
            True if the target is protein

        Raises:
            ValidationError: If any query record does not look like nucleotide
        """
        for record_id, seq_type in iter_sequence_types(self.query):
            if seq_type != NUCLEOTIDE:
                raise ValidationError("Query sequence looks like it's not nucleotide",
                                      {'record': record_id, 'file': self.query})

        protein_count = 0
        count = 0
        for _, seq_type in iter_sequence_types(self.target):
            protein_count += seq_type == PROTEIN
            count += 1
        self.target_is_prot = protein_count > count * 0.9
        self.logger.info(f"Target {self.target} detected as "
                         f"{'protein' if self.target_is_prot else 'nucleotide'} "
                         f"({protein_count}/{count} protein records)")
        return self.target_is_prot

    def make_databases(self) -> Tuple[str, str]:
        """Build BLAST databases for query and target unless already present

        Returns:
            Tuple of (query database name, target database name)
        """
        if self.target_is_prot is None:
            self.detect_types()

        os.makedirs(self.working_dir, exist_ok=True)
        target_type = PROTEIN if self.target_is_prot else NUCLEOTIDE
        self._make_database(self.query, self.query_name, NUCLEOTIDE)
        self._make_database(self.target, self.target_name, target_type)

        self.databases = True
        return self.query_name, self.target_name

    def _make_database(self, fasta: str, name: str, db_type: str) -> None:
        db_path = self._db_path(name)
        if os.path.exists(db_path + DB_MARKERS[db_type]):
            self.logger.info(f"Reusing existing {db_type} database {db_path}")
            return

        cmd = [
            self.tool_paths['makeblastdb'], '-in', fasta,
            '-dbtype', db_type, '-title', name, '-out', db_path
        ]
        self.logger.info(f"Building {db_type} database {db_path}")
        self._run(cmd)

    def search_commands(self, evalue: float, threads: int) -> List[List[str]]:
        """Forward and reverse search command lines

        Raises:
            StateError: If run_searches() has not set the output paths yet
        """
        if not self.forward_output or not self.reverse_output:
            raise StateError("Search output paths are not set, call run_searches() first")
        if self.target_is_prot:
            forward_tool, reverse_tool = 'blastx', 'tblastn'
        else:
            forward_tool, reverse_tool = 'blastn', 'blastn'

        max_target_seqs = str(self.config_manager.get('search.max_target_seqs', 50))
        common = ['-evalue', str(evalue), '-outfmt', '6',
                  '-max_target_seqs', max_target_seqs, '-num_threads', str(threads)]
        return [
            [self.tool_paths[forward_tool], '-query', self.query,
             '-db', self._db_path(self.target_name), '-out', self.forward_output] + common,
            [self.tool_paths[reverse_tool], '-query', self.target,
             '-db', self._db_path(self.query_name), '-out', self.reverse_output] + common,
        ]

    def run_searches(self, evalue: Optional[float] = None, threads: Optional[int] = None) -> bool:
        """Search query into target and target into query

        Args:
            evalue: E-value cutoff, defaults to search.evalue
            threads: BLAST threads, defaults to search.threads

        Returns:
            False if the databases have not been built, True otherwise
        """
        if not self.databases:
            self.logger.warning("Databases not built, call make_databases() first")
            return False

        search_config = self.config_manager.get_search_config()
        evalue = search_config.get('evalue', 1e-5) if evalue is None else evalue
        threads = search_config.get('threads', 1) if threads is None else threads

        self.forward_output = os.path.join(
            self.working_dir, f"{self.query_name}_into_{self.target_name}.1.blast")
        self.reverse_output = os.path.join(
            self.working_dir, f"{self.target_name}_into_{self.query_name}.2.blast")

        for cmd, output in zip(self.search_commands(evalue, threads),
                               (self.forward_output, self.reverse_output)):
            if os.path.exists(output):
                self.logger.info(f"Reusing existing search output {output}")
                continue
            self.logger.info(f"Running {os.path.basename(cmd[0])} -> {output}")
            self._run(cmd)
        return True

    def outputs(self) -> Tuple[str, str]:
        """Paths of the forward and reverse tabular outputs"""
        if not self.forward_output or not self.reverse_output:
            raise StateError("Searches have not been run")
        return self.forward_output, self.reverse_output

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        search_config = self.config_manager.get_search_config()
        try:
            return run_command_with_retry(
                cmd,
                max_retries=search_config.get('max_retries') or 0,
                timeout=search_config.get('timeout'),
            )
        except subprocess.CalledProcessError as e:
            raise SearchError(f"Command failed with exit code {e.returncode}: {' '.join(cmd)}",
                              {'stderr': e.stderr}) from e
        except subprocess.TimeoutExpired as e:
            raise SearchError(f"Command timed out after {e.timeout}s: {' '.join(cmd)}") from e
        except OSError as e:
            raise SearchError(f"Could not execute {cmd[0]}: {str(e)}") from e

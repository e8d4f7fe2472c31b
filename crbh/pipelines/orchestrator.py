# crbh/pipelines/orchestrator.py
import os
from typing import Callable, Iterable, Optional, Tuple

from crbh.config import ConfigManager
from crbh.core.logging_config import LoggingManager
from crbh.exceptions import StateError
from crbh.matching import (
    DirectionalHitIndex, ReciprocalMatcher, SignificanceCurveBuilder, SecondaryRescuer
)
from crbh.models.hit import HitRecord
from crbh.models.results import CRBHResult, MatchResult
from .blast_pipeline import BlastSearchBackend


class CRBHOrchestrator:
    """Drives search, parsing, strict matching, curve building and rescue

    Stages run in strict order. Each stage method can also be called on its
    own and returns its count; calling one before its inputs exist raises
    StateError.
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 config_manager: Optional[ConfigManager] = None,
                 backend_factory: Callable[..., BlastSearchBackend] = BlastSearchBackend):
        """Initialize orchestrator with configuration

        Args:
            config_path: Path to configuration file
            config_manager: Ready configuration manager, overrides config_path
            backend_factory: Callable building the search backend from
                (query, target, config_manager=..., working_dir=...)
        """
        self.config_manager = config_manager or ConfigManager(config_path)
        self.logger = LoggingManager.get_logger("crbh.orchestrator")
        self.backend_factory = backend_factory
        self.backend: Optional[BlastSearchBackend] = None

        curve_config = self.config_manager.get_curve_config()
        self.matcher = ReciprocalMatcher()
        self.curve_builder = SignificanceCurveBuilder(
            min_length=curve_config.get('min_length', 10),
            window_fraction=curve_config.get('window_fraction', 0.1),
            min_half_width=curve_config.get('min_half_width', 5),
        )
        self.rescuer = SecondaryRescuer()

        self.query_results: Optional[DirectionalHitIndex] = None
        self.target_results: Optional[DirectionalHitIndex] = None
        self.match: Optional[MatchResult] = None
        self.result: Optional[CRBHResult] = None

    def run(self, query: str, target: str,
            evalue: Optional[float] = None,
            threads: Optional[int] = None,
            working_dir: Optional[str] = None) -> CRBHResult:
        """Run the complete pipeline on two FASTA files

        Args:
            query: Nucleotide query FASTA
            target: Nucleotide or protein target FASTA
            evalue: Search e-value cutoff
            threads: Search threads
            working_dir: Directory for databases and search output

        Returns:
            Final CRBHResult
        """
        self.logger.info(f"Starting reciprocal search: {query} vs {target}")
        self.backend = self.backend_factory(
            query, target, config_manager=self.config_manager, working_dir=working_dir
        )
        self.backend.make_databases()
        if not self.backend.run_searches(evalue, threads):
            raise StateError("Search databases were not built")

        forward_path, reverse_path = self.backend.outputs()
        for path in (forward_path, reverse_path):
            if not os.path.exists(path):
                raise StateError(f"Search output missing, run the searches first: {path}",
                                 {'path': path, 'query': query, 'target': target})
        return self.match_files(forward_path, reverse_path)

    def match_files(self, forward_path: str, reverse_path: str) -> CRBHResult:
        """Run the core stages on existing tabular search outputs"""
        self.load_outputs(forward_path, reverse_path)
        return self._run_core()

    def match_hits(self, forward: Iterable[HitRecord], reverse: Iterable[HitRecord]) -> CRBHResult:
        """Run the core stages on in-memory hit records"""
        self.load_hits(forward, reverse)
        return self._run_core()

    def _run_core(self) -> CRBHResult:
        self.find_reciprocals()
        self.find_secondaries()
        self.logger.info(f"Reciprocal search finished: {self.result.summary()}")
        return self.result

    def load_outputs(self, forward_path: str, reverse_path: str) -> Tuple[int, int]:
        """Index the forward and reverse tabular files

        Returns:
            Tuple of (forward hit count, reverse hit count)
        """
        forward = DirectionalHitIndex.from_file(forward_path)
        reverse = DirectionalHitIndex.from_file(reverse_path)
        return self._set_indexes(forward, reverse)

    def load_hits(self, forward: Iterable[HitRecord], reverse: Iterable[HitRecord]) -> Tuple[int, int]:
        return self._set_indexes(DirectionalHitIndex.build(forward),
                                 DirectionalHitIndex.build(reverse))

    def _set_indexes(self, forward: DirectionalHitIndex,
                     reverse: DirectionalHitIndex) -> Tuple[int, int]:
        for name, index in (('forward', forward), ('reverse', reverse)):
            violations = index.validate_rank_order()
            if violations:
                self.logger.warning(f"{len(violations)} {name} sources are not ordered best hit "
                                    f"first, rank 0 is still treated as best "
                                    f"(e.g. {violations[0]})")

        self.query_results = forward
        self.target_results = reverse
        self.match = None
        self.result = None
        self.logger.info(f"Loaded {forward.hit_count} forward and {reverse.hit_count} reverse hits")
        return forward.hit_count, reverse.hit_count

    def find_reciprocals(self) -> int:
        """Run the strict pass and return the number of strict hits"""
        if self.query_results is None or self.target_results is None:
            raise StateError("Need to load search results first")

        self.match = self.matcher.find_reciprocals(self.query_results, self.target_results)
        self.result = self._strict_result()
        return self.match.strict_count

    def _strict_result(self) -> CRBHResult:
        # Copy the lists so rescue never touches the strict pass output
        return CRBHResult(
            reciprocals={key: list(hits) for key, hits in self.match.reciprocals.items()},
            missed=self.match.missed,
            strict_count=self.match.strict_count,
        )

    def find_secondaries(self) -> int:
        """Build the significance curve and rescue candidates

        Starts again from the strict result, so repeated calls give the
        same count.

        Returns:
            Number of rescued hits
        """
        if self.match is None:
            raise StateError("Need to find strict reciprocals first")

        result = self._strict_result()
        result.curve = self.curve_builder.build(self.match.significance_points, self.match.longest)
        result.rescued_count = self.rescuer.rescue(result.missed, result.curve, result.reciprocals)
        self.result = result
        return result.rescued_count

    @property
    def reciprocals(self):
        if self.result is None:
            raise StateError("No reciprocal results available yet")
        return self.result.reciprocals

    @property
    def missed(self):
        if self.result is None:
            raise StateError("No reciprocal results available yet")
        return self.result.missed

    def has_reciprocal(self, source_id: str) -> bool:
        """True if the source sequence has a reciprocal hit"""
        if self.result is None:
            raise StateError("No reciprocal results available yet")
        return self.result.has_reciprocal(source_id)

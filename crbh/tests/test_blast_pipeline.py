#!/usr/bin/env python3
"""
Tests for the BLAST+ search backend with subprocess calls mocked out
"""

import os
import subprocess
import pytest
from unittest.mock import patch

from crbh.config import ConfigManager
from crbh.exceptions import ConfigurationError, SearchError, StateError, ValidationError
from crbh.pipelines.blast_pipeline import BlastSearchBackend
from crbh.utils.sequence import guess_sequence_type, fasta_base_name, NUCLEOTIDE, PROTEIN

NUCL_FASTA = ">contig1\nATGCGTACGTTAGCATGCAAGT\n>contig2\nTTGACCAGTNNACGTAGCTAGG\n"
PROT_FASTA = ">AT1G01010.1\nMKTAYIAKQRQISFVKSHFSRQ\n>AT1G01020.1\nMEEPLLKRSWLDHHVEQ\n"


def fake_locate(command):
    return f"/opt/blast/bin/{command}"


@pytest.fixture
def fasta_files(tmp_path):
    query = tmp_path / "query.fasta"
    query.write_text(NUCL_FASTA)
    nucl_target = tmp_path / "target.fa"
    nucl_target.write_text(NUCL_FASTA.replace("contig", "scaffold"))
    prot_target = tmp_path / "proteins.fa"
    prot_target.write_text(PROT_FASTA)
    return {'query': str(query), 'nucl': str(nucl_target), 'prot': str(prot_target),
            'dir': str(tmp_path)}


@pytest.fixture
def mock_run():
    with patch('crbh.pipelines.blast_pipeline.locate_command', side_effect=fake_locate), \
         patch('crbh.pipelines.blast_pipeline.run_command_with_retry') as run:
        run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        yield run


def commands(mock_run):
    return [call.args[0] for call in mock_run.call_args_list]


class TestSequenceTypes:

    def test_guess_sequence_type(self):
        assert guess_sequence_type("ATGCGTACGT") == NUCLEOTIDE
        assert guess_sequence_type("acgunnnacg") == NUCLEOTIDE
        assert guess_sequence_type("MKTAYIAKQR") == PROTEIN
        assert guess_sequence_type("") == PROTEIN

    def test_unknown_bases_left_out_of_count(self):
        assert guess_sequence_type("N" * 200) == PROTEIN
        assert guess_sequence_type("nnnn") == PROTEIN
        # 42 of the 50 known residues are bases
        assert guess_sequence_type("N" * 50 + "R" * 8 + "A" * 42) == PROTEIN
        assert guess_sequence_type("N" * 90 + "ACGT" * 3) == NUCLEOTIDE

    def test_only_first_window_examined(self):
        assert guess_sequence_type("A" * 1000 + "M" * 5000) == NUCLEOTIDE

    def test_fasta_base_name(self):
        assert fasta_base_name("/data/query.fasta") == "query"
        assert fasta_base_name("genome.v2.fa") == "genome.v2"
        assert fasta_base_name("plain") == "plain"


class TestToolLookup:

    def test_missing_tool_raises(self, fasta_files):
        def locate(command):
            return None if command == 'tblastn' else fake_locate(command)

        with patch('crbh.pipelines.blast_pipeline.locate_command', side_effect=locate):
            with pytest.raises(ConfigurationError) as excinfo:
                BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        assert "tblastn" in excinfo.value.message

    def test_configured_tool_path_used(self, fasta_files, mock_run, monkeypatch):
        monkeypatch.setenv("CRBH_TOOLS__BLASTN_PATH", "blastn-2.14")
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'],
                                     config_manager=ConfigManager())
        assert backend.tool_paths['blastn'] == "/opt/blast/bin/blastn-2.14"


class TestDatabases:

    def test_nucleotide_target(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])

        assert backend.make_databases() == ("query", "target")
        assert backend.target_is_prot is False

        query_cmd, target_cmd = commands(mock_run)
        assert query_cmd[0] == "/opt/blast/bin/makeblastdb"
        assert query_cmd[query_cmd.index('-dbtype') + 1] == "nucl"
        assert query_cmd[query_cmd.index('-out') + 1] == os.path.join(fasta_files['dir'], "query")
        assert target_cmd[target_cmd.index('-dbtype') + 1] == "nucl"

    def test_protein_target(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['prot'])
        backend.make_databases()

        assert backend.target_is_prot is True
        target_cmd = commands(mock_run)[1]
        assert target_cmd[target_cmd.index('-dbtype') + 1] == "prot"

    def test_protein_query_rejected(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['prot'], fasta_files['nucl'])
        with pytest.raises(ValidationError):
            backend.make_databases()
        mock_run.assert_not_called()

    def test_existing_databases_reused(self, fasta_files, mock_run):
        open(os.path.join(fasta_files['dir'], "query.nsq"), 'w').close()
        open(os.path.join(fasta_files['dir'], "proteins.psq"), 'w').close()

        backend = BlastSearchBackend(fasta_files['query'], fasta_files['prot'])
        backend.make_databases()

        mock_run.assert_not_called()
        assert backend.databases

    def test_command_failure_raises_search_error(self, fasta_files, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, ['makeblastdb'], stderr="bad input")
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        with pytest.raises(SearchError) as excinfo:
            backend.make_databases()
        assert excinfo.value.details['stderr'] == "bad input"


class TestSearches:

    def test_searches_need_databases(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        assert backend.run_searches(1e-5, 1) is False
        with pytest.raises(StateError):
            backend.outputs()

    def test_search_commands_need_output_paths(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        backend.make_databases()
        with pytest.raises(StateError):
            backend.search_commands(1e-5, 1)

    def test_nucleotide_searches(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        backend.make_databases()
        mock_run.reset_mock()

        assert backend.run_searches(1e-5, 4) is True

        forward, reverse = commands(mock_run)
        assert forward[0].endswith("blastn") and reverse[0].endswith("blastn")
        assert forward[forward.index('-query') + 1] == fasta_files['query']
        assert reverse[reverse.index('-query') + 1] == fasta_files['nucl']
        assert forward[forward.index('-outfmt') + 1] == "6"
        assert forward[forward.index('-max_target_seqs') + 1] == "50"
        assert forward[forward.index('-num_threads') + 1] == "4"
        assert forward[forward.index('-evalue') + 1] == "1e-05"

        forward_out, reverse_out = backend.outputs()
        assert os.path.basename(forward_out) == "query_into_target.1.blast"
        assert os.path.basename(reverse_out) == "target_into_query.2.blast"

    def test_protein_searches(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['prot'])
        backend.make_databases()
        mock_run.reset_mock()

        backend.run_searches()

        forward, reverse = commands(mock_run)
        assert forward[0].endswith("blastx")
        assert reverse[0].endswith("tblastn")
        assert forward[forward.index('-evalue') + 1] == "1e-05"

    def test_existing_outputs_reused(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        backend.make_databases()
        open(os.path.join(fasta_files['dir'], "query_into_target.1.blast"), 'w').close()
        mock_run.reset_mock()

        backend.run_searches(1e-5, 1)

        (only,) = commands(mock_run)
        assert only[only.index('-out') + 1].endswith("target_into_query.2.blast")

    def test_timeout_raises_search_error(self, fasta_files, mock_run):
        backend = BlastSearchBackend(fasta_files['query'], fasta_files['nucl'])
        backend.make_databases()
        mock_run.side_effect = subprocess.TimeoutExpired(['blastn'], 10)
        with pytest.raises(SearchError):
            backend.run_searches(1e-5, 1)

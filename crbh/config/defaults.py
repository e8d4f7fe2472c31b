#!/usr/bin/env python3
"""
Default configuration values for the CRBH pipeline
"""

DEFAULT_CONFIG = {
    'paths': {
        'working_dir': None,
        'output_file': 'reciprocal_hits.txt',
    },
    'tools': {
        'makeblastdb_path': 'makeblastdb',
        'blastn_path': 'blastn',
        'blastx_path': 'blastx',
        'tblastn_path': 'tblastn',
    },
    'search': {
        'evalue': 1e-5,
        'threads': 1,
        'max_target_seqs': 50,
        'timeout': None,
        'max_retries': 0,
    },
    'curve': {
        'min_length': 10,
        'window_fraction': 0.1,
        'min_half_width': 5,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}

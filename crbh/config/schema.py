#!/usr/bin/env python3
"""
Configuration schema definition for validation
"""
from typing import Dict, Any, List


class ConfigSchema:
    """Configuration schema for validation"""

    SCHEMA = {
        'paths': {
            'working_dir': {'type': str, 'required': False},
            'output_file': {'type': str, 'required': True},
        },
        'tools': {
            'makeblastdb_path': {'type': str, 'required': True},
            'blastn_path': {'type': str, 'required': True},
            'blastx_path': {'type': str, 'required': True},
            'tblastn_path': {'type': str, 'required': True},
        },
        'search': {
            'evalue': {'type': (int, float), 'required': True},
            'threads': {'type': int, 'required': True},
            'max_target_seqs': {'type': int, 'required': False},
            'timeout': {'type': (int, float), 'required': False},
            'max_retries': {'type': int, 'required': False},
        },
        'curve': {
            'min_length': {'type': int, 'required': False},
            'window_fraction': {'type': (int, float), 'required': False},
            'min_half_width': {'type': int, 'required': False},
        },
        'logging': {
            'level': {'type': str, 'required': False},
            'format': {'type': str, 'required': False},
            'log_dir': {'type': str, 'required': False},
        },
    }

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        """Validate configuration against schema

        Args:
            config: Configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Check required fields
        for section, fields in cls.SCHEMA.items():
            if any(props.get('required', False) for _, props in fields.items()):
                if section not in config:
                    errors.append(f"Missing required configuration section: {section}")
                    continue

            if section not in config:
                continue

            section_config = config[section]
            for field, props in fields.items():
                if props.get('required', False) and field not in section_config:
                    errors.append(f"Missing required configuration field: {section}.{field}")

        # Validate field types, None means "unset"
        for section, fields in cls.SCHEMA.items():
            if section not in config:
                continue

            section_config = config[section]
            for field, props in fields.items():
                value = section_config.get(field)
                if value is None or 'type' not in props:
                    continue
                expected_type = props['type']
                # bool is an int subclass but never a valid number here
                if isinstance(value, bool) or not isinstance(value, expected_type):
                    expected_name = (
                        ' or '.join(t.__name__ for t in expected_type)
                        if isinstance(expected_type, tuple) else expected_type.__name__
                    )
                    errors.append(
                        f"Invalid type for {section}.{field}: expected {expected_name}, "
                        f"got {type(value).__name__}"
                    )

        return errors

"""Tests for configuration management."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from barcode_tool.config import (
    Config, APIConfig, SearchConfig, OutputConfig,
    get_default_config_path, create_example_config
)
from barcode_tool.exceptions import ConfigurationError


class TestConfig:
    """Test cases for configuration management."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_default_config(self):
        """Test default configuration creation."""
        config = Config.default()

        assert config.api.email == "user@example.com"
        assert config.api.database == "nucleotide"
        assert config.api.retry_attempts == 3
        assert config.api.min_interval_seconds == 0.34
        assert config.api.max_results == 20

        assert config.search.length_range is None
        assert config.search.rank == 1

        assert config.labels.accession is True
        assert config.labels.family is True
        assert config.labels.combination is True
        assert config.labels.outside is False

        assert config.output.results_dir == "results"
        assert config.output.write_fasta is True
        assert config.table.combination_column == "combination"

    def test_config_to_file(self, temp_dir):
        """Test saving configuration to file."""
        config = Config.default()
        config_file = temp_dir / "nested" / "config.json"

        config.to_file(config_file)

        assert config_file.exists()

        with open(config_file) as f:
            data = json.load(f)

        assert data['api']['email'] == "user@example.com"
        assert data['labels']['combination'] is True
        assert data['output']['results_dir'] == "results"

    def test_config_from_file(self, temp_dir):
        """Test loading configuration from file."""
        config_data = {
            'api': {'email': 'test@example.com', 'retry_attempts': 5},
            'search': {'length_range': '500:5000'},
            'labels': {'accession': False, 'genus': True, 'combination': False},
            'output': {'results_dir': 'runs'}
        }

        config_file = temp_dir / "config.json"
        with open(config_file, 'w') as f:
            json.dump(config_data, f)

        config = Config.from_file(config_file)

        assert config.api.email == 'test@example.com'
        assert config.api.retry_attempts == 5
        assert config.search.length_range == '500:5000'
        assert config.labels.accession is False
        assert config.labels.genus is True
        assert config.output.results_dir == 'runs'
        # Sections absent from the file keep their defaults
        assert config.table.genus_column == 'genus'

    def test_config_from_file_unknown_key(self, temp_dir):
        """Test unknown keys are reported as configuration errors."""
        config_file = temp_dir / "config.json"
        config_file.write_text(json.dumps({'api': {'rate_limit': 3}}))

        with pytest.raises(ConfigurationError):
            Config.from_file(config_file)

    @pytest.mark.parametrize("content", ["{not json", "", "[1, 2]"])
    def test_config_from_malformed_file(self, temp_dir, content):
        """Test unreadable JSON is reported as a configuration error."""
        config_file = temp_dir / "config.json"
        config_file.write_text(content)

        with pytest.raises(ConfigurationError):
            Config.from_file(config_file)

    def test_config_from_nonexistent_file(self):
        """Test loading from nonexistent file returns defaults."""
        config = Config.from_file(Path('nonexistent.json'))
        default = Config.default()

        assert config.api.email == default.api.email
        assert config.output.results_dir == default.output.results_dir

    def test_merge_env_vars(self, monkeypatch):
        """Test merging environment variables."""
        config = Config.default()

        monkeypatch.setenv('NCBI_API_KEY', 'test_key_123')
        monkeypatch.setenv('EMAIL', 'env@example.com')
        monkeypatch.setenv('BARCODE_RESULTS_DIR', '/tmp/results')
        monkeypatch.setenv('NCBI_MIN_INTERVAL', '0.5')

        config.merge_env_vars()

        assert config.api.ncbi_api_key == 'test_key_123'
        assert config.api.email == 'env@example.com'
        assert config.output.results_dir == '/tmp/results'
        assert config.api.min_interval_seconds == 0.5

    def test_merge_env_vars_bad_interval(self, monkeypatch):
        config = Config.default()
        monkeypatch.setenv('NCBI_MIN_INTERVAL', 'fast')

        with pytest.raises(ConfigurationError):
            config.merge_env_vars()

    def test_merge_env_vars_unset(self):
        """Test unset variables leave the configuration untouched."""
        saved = {k: os.environ.pop(k, None) for k in ['NCBI_API_KEY', 'EMAIL']}
        try:
            config = Config.default()
            config.merge_env_vars()
            assert config.api.ncbi_api_key is None
            assert config.api.email == "user@example.com"
        finally:
            for key, value in saved.items():
                if value is not None:
                    os.environ[key] = value

    def test_merge_cli_args(self):
        """Test merging CLI arguments."""
        config = Config.default()

        config.merge_cli_args(
            api_key='cli_key',
            email='cli@example.com',
            max_results=50,
            length_range='300:1500',
            results_dir='out',
            no_fasta=True
        )

        assert config.api.ncbi_api_key == 'cli_key'
        assert config.api.email == 'cli@example.com'
        assert config.api.max_results == 50
        assert config.search.length_range == '300:1500'
        assert config.output.results_dir == 'out'
        assert config.output.write_fasta is False

    def test_merge_cli_args_none_values(self):
        """Test options that were not given keep existing values."""
        config = Config.default()
        config.merge_cli_args(api_key=None, email=None, results_dir=None)

        assert config.api.ncbi_api_key is None
        assert config.output.results_dir == "results"

    def test_validate_defaults(self):
        Config.default().validate()

    @pytest.mark.parametrize("section,key,value", [
        ('api', 'min_interval_seconds', 0.1),
        ('api', 'max_results', 0),
        ('search', 'rank', 0),
        ('search', 'length_range', '5000:500'),
        ('search', 'length_range', 'long'),
    ])
    def test_validate_rejects(self, section, key, value):
        config = Config.default()
        setattr(getattr(config, section), key, value)

        with pytest.raises(ConfigurationError):
            config.validate()

    def test_validate_labels(self):
        """Test a configuration without any label field is rejected."""
        config = Config.default()
        config.labels.accession = False
        config.labels.family = False
        config.labels.combination = False

        with pytest.raises(ConfigurationError):
            config.validate()

    def test_sections_are_independent(self):
        """Test default sections are fresh instances."""
        first = Config.default()
        second = Config.default()
        first.api.email = 'changed@example.com'

        assert second.api.email == "user@example.com"
        assert isinstance(first.search, SearchConfig)
        assert isinstance(first.output, OutputConfig)
        assert isinstance(first.api, APIConfig)

    def test_create_example_config(self, temp_dir):
        """Test creating example configuration."""
        config_file = temp_dir / "example.json"
        result_path = create_example_config(config_file)

        assert result_path == config_file
        assert config_file.exists()

        with open(config_file) as f:
            data = json.load(f)

        assert data['api']['ncbi_api_key'] == "your_api_key_here"
        assert data['api']['email'] == "your_email@example.com"
        assert data['search']['length_range'] == "500:5000"

        # The example round-trips through the loader
        assert Config.from_file(config_file).search.length_range == "500:5000"

    def test_get_default_config_path(self, monkeypatch):
        """Test getting default config path."""
        # Mock Path.exists to return False for all paths
        monkeypatch.setattr(Path, 'exists', lambda self: False)

        path = get_default_config_path()
        expected = Path.home() / '.barcode_tool' / 'config.json'

        assert path == expected

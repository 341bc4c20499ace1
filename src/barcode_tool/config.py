"""Configuration management for the barcode tool."""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .fasta_writer import LabelConfig
from .rate_limiter import NCBI_MIN_INTERVAL
from .term_builder import parse_length_range


@dataclass
class APIConfig:
    """Entrez API configuration settings."""
    ncbi_api_key: Optional[str] = None
    email: str = "user@example.com"
    database: str = "nucleotide"
    retry_attempts: int = 3
    min_interval_seconds: float = NCBI_MIN_INTERVAL
    max_results: int = 20


@dataclass
class SearchConfig:
    """Search term settings."""
    length_range: Optional[str] = None
    rank: int = 1


@dataclass
class OutputConfig:
    """Output configuration settings."""
    results_dir: str = "results"
    write_fasta: bool = True


@dataclass
class TableConfig:
    """Master taxon table column names."""
    combination_column: str = "combination"
    family_column: str = "family"
    genus_column: str = "genus"


@dataclass
class Config:
    """Main configuration container."""
    api: APIConfig
    search: SearchConfig
    labels: LabelConfig
    output: OutputConfig
    table: TableConfig

    @classmethod
    def default(cls) -> 'Config':
        """Create default configuration."""
        return cls(
            api=APIConfig(),
            search=SearchConfig(),
            labels=LabelConfig(),
            output=OutputConfig(),
            table=TableConfig()
        )

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from JSON file."""
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must hold a JSON object")

        try:
            return cls(
                api=APIConfig(**data.get('api', {})),
                search=SearchConfig(**data.get('search', {})),
                labels=LabelConfig(**data.get('labels', {})),
                output=OutputConfig(**data.get('output', {})),
                table=TableConfig(**data.get('table', {}))
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

    def to_file(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'api': asdict(self.api),
            'search': asdict(self.search),
            'labels': asdict(self.labels),
            'output': asdict(self.output),
            'table': asdict(self.table)
        }

        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    def merge_env_vars(self) -> None:
        """Merge environment variables into configuration."""
        if os.getenv('NCBI_API_KEY'):
            self.api.ncbi_api_key = os.getenv('NCBI_API_KEY')
        if os.getenv('EMAIL'):
            self.api.email = os.getenv('EMAIL')

        if os.getenv('BARCODE_RESULTS_DIR'):
            self.output.results_dir = os.getenv('BARCODE_RESULTS_DIR')

        if os.getenv('NCBI_MIN_INTERVAL'):
            try:
                self.api.min_interval_seconds = float(os.getenv('NCBI_MIN_INTERVAL'))
            except ValueError:
                raise ConfigurationError(
                    f"NCBI_MIN_INTERVAL must be a number, got {os.getenv('NCBI_MIN_INTERVAL')!r}"
                )

    def merge_cli_args(self, **kwargs) -> None:
        """Merge CLI arguments into configuration."""
        if kwargs.get('api_key'):
            self.api.ncbi_api_key = kwargs['api_key']
        if kwargs.get('email'):
            self.api.email = kwargs['email']
        if kwargs.get('max_results'):
            self.api.max_results = kwargs['max_results']

        if kwargs.get('length_range'):
            self.search.length_range = kwargs['length_range']

        if kwargs.get('results_dir'):
            self.output.results_dir = kwargs['results_dir']
        if kwargs.get('no_fasta'):
            self.output.write_fasta = False

    def validate(self) -> None:
        """Check settings that would otherwise fail mid-round.

        Raises:
            ConfigurationError: On the first invalid setting
        """
        if self.api.min_interval_seconds < NCBI_MIN_INTERVAL:
            raise ConfigurationError(
                f"min_interval_seconds must be at least {NCBI_MIN_INTERVAL} "
                f"(got {self.api.min_interval_seconds})"
            )
        if self.api.max_results < 1:
            raise ConfigurationError("max_results must be positive")
        if self.search.rank < 1:
            raise ConfigurationError("rank must be at least 1")
        parse_length_range(self.search.length_range)
        self.labels.validate()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    locations = [
        Path.home() / '.barcode_tool' / 'config.json',
        Path.home() / '.config' / 'barcode_tool' / 'config.json',
        Path('.barcode_tool.json'),
        Path('barcode_tool.config.json')
    ]

    for path in locations:
        if path.exists():
            return path

    return Path.home() / '.barcode_tool' / 'config.json'


def create_example_config(path: Optional[Path] = None) -> Path:
    """Create an example configuration file."""
    if path is None:
        path = Path('barcode_tool.config.example.json')

    config = Config.default()

    config.api.ncbi_api_key = "your_api_key_here"
    config.api.email = "your_email@example.com"
    config.search.length_range = "500:5000"

    config.to_file(path)
    return path

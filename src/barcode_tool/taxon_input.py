"""Input parsing for taxon lists."""

import csv
from pathlib import Path
from typing import List, Optional, Union

from .models import normalize_name


class TaxonListParser:
    """Parser for plain-text and delimited taxon lists."""

    # Common encodings to try
    ENCODINGS = ['utf-8', 'utf-8-sig', 'latin-1', 'cp1252']

    # Common delimiters
    DELIMITERS = [',', '\t', ';', '|']

    # Header cells that name the taxon column, in order of preference
    HEADER_KEYWORDS = ['combination', 'taxon', 'species', 'genus', 'name']

    def __init__(self):
        """Initialize the parser."""
        self.last_format = None
        self.last_encoding = None
        self.last_delimiter = None

    def parse_file(self, file_path: Union[str, Path],
                   encoding: Optional[str] = None,
                   delimiter: Optional[str] = None) -> List[str]:
        """
        Parse a file and extract taxon names.

        Args:
            file_path: Path to input file
            encoding: File encoding (auto-detected if None)
            delimiter: Delimiter for CSV files (auto-detected if None)

        Returns:
            Taxon names with whitespace replaced by underscores, in file
            order and without duplicates

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {file_path}")

        if path.suffix.lower() in ['.csv', '.tsv']:
            names = self._parse_csv_file(path, encoding, delimiter)
        else:
            names = self._parse_text_file(path, encoding)

        return self._unique(normalize_name(n) for n in names if n.strip())

    def _parse_text_file(self, path: Path, encoding: Optional[str] = None) -> List[str]:
        """Parse plain text file with one taxon per line."""
        encoding = encoding or self._detect_encoding(path)
        names = []

        with open(path, 'r', encoding=encoding) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):  # Skip comments
                    names.append(line)

        self.last_format = 'text'
        self.last_encoding = encoding
        return names

    def _parse_csv_file(self, path: Path,
                        encoding: Optional[str] = None,
                        delimiter: Optional[str] = None) -> List[str]:
        """Parse CSV/TSV file, picking the taxon column from the header."""
        encoding = encoding or self._detect_encoding(path)
        delimiter = delimiter or self._detect_delimiter(path, encoding)

        with open(path, 'r', encoding=encoding, newline='') as f:
            rows = [row for row in csv.reader(f, delimiter=delimiter) if row]

        self.last_format = 'csv'
        self.last_encoding = encoding
        self.last_delimiter = delimiter

        if not rows:
            return []

        header = [cell.strip().lower() for cell in rows[0]]
        column = None
        for keyword in self.HEADER_KEYWORDS:
            if keyword in header:
                column = header.index(keyword)
                break

        if column is None:
            # No header, taxa in the first column
            return [row[0] for row in rows]
        return [row[column] for row in rows[1:] if len(row) > column]

    def _detect_encoding(self, path: Path) -> str:
        for encoding in self.ENCODINGS:
            try:
                with open(path, 'r', encoding=encoding) as f:
                    f.read()
                return encoding
            except UnicodeDecodeError:
                continue
        return 'utf-8'

    def _detect_delimiter(self, path: Path, encoding: str) -> str:
        if path.suffix.lower() == '.tsv':
            return '\t'
        with open(path, 'r', encoding=encoding) as f:
            sample = f.read(4096)
        try:
            return csv.Sniffer().sniff(sample, delimiters=''.join(self.DELIMITERS)).delimiter
        except csv.Error:
            return ','

    @staticmethod
    def _unique(names) -> List[str]:
        seen = set()
        result = []
        for name in names:
            if name not in seen:
                seen.add(name)
                result.append(name)
        return result

    def get_format_info(self) -> dict:
        """Get information about the last parsed file format."""
        return {
            'format': self.last_format,
            'encoding': self.last_encoding,
            'delimiter': self.last_delimiter
        }

"""Tests for sought-taxon session tracking."""

import json

import pytest

from barcode_tool.layout import ResultsLayout
from barcode_tool.exceptions import ConfigurationError
from barcode_tool.models import SequenceRecord
from barcode_tool.session import AcquisitionSession
from barcode_tool.taxon_patterns import TaxonMode


def record(organism):
    return SequenceRecord("X1", organism, "Nymphaeaceae", "ACGT", 4)


class TestAcquisitionSession:
    """Test cases for AcquisitionSession."""

    def test_in_area_round(self):
        session = AcquisitionSession("atpB")
        session.record_round([record("Nymphaea_alba"), record("Carex_sp."), record("Nymphaea_alba")])

        assert session.sought == {"Nymphaea_alba", "Carex"}
        assert session.rounds == 1

    def test_outside_round(self):
        session = AcquisitionSession("atpB", TaxonMode.OUTSIDE)
        session.record_round([record("Ottelia_alismoides"), record("Blyxa_japonica")])

        assert session.sought == {"Ottelia", "Blyxa"}

    def test_overwrite(self):
        """Test a normal round replaces the sought set."""
        session = AcquisitionSession("atpB", sought={"Old_taxon"})
        session.record_round([record("New_taxon")])
        assert session.sought == {"New_taxon"}

    def test_preserve(self):
        """Test a replacement round keeps the sought set and moves rank."""
        session = AcquisitionSession("atpB", sought={"Nymphaea_alba", "Hydrocleys_martii"})
        session.record_round([record("Hydrocleys_martii")], preserve=True, rank=2)

        assert session.sought == {"Nymphaea_alba", "Hydrocleys_martii"}
        assert session.rank == 2

    def test_mode_from_string(self):
        assert AcquisitionSession("atpB", "outside").mode is TaxonMode.OUTSIDE

    def test_file_round_trip(self, tmp_path):
        session = AcquisitionSession("rbcL", TaxonMode.OUTSIDE, sought={"Blyxa", "Ottelia"}, rank=3, rounds=2)
        path = tmp_path / "sessions" / "rbcL.json"

        session.to_file(path)
        data = json.loads(path.read_text())
        assert data['sought'] == ["Blyxa", "Ottelia"]
        assert data['mode'] == "outside"

        loaded = AcquisitionSession.from_file(path)
        assert loaded.gene == "rbcL"
        assert loaded.mode is TaxonMode.OUTSIDE
        assert loaded.sought == {"Blyxa", "Ottelia"}
        assert loaded.rank == 3
        assert loaded.rounds == 2


class TestResultsLayout:
    """Test cases for the results directory convention."""

    def test_stage_paths(self, tmp_path):
        layout = ResultsLayout(tmp_path)
        assert layout.sequences("atpB") == tmp_path / "sequences" / "atpB" / "atpB_sequences.fasta"
        assert layout.curated("atpB") == tmp_path / "curated" / "atpB" / "atpB_curated.fasta"
        assert layout.final("atpB") == tmp_path / "final" / "atpB" / "atpB_final.fasta"
        assert layout.stage_path("trees", "atpB").name == "atpB_trees.tre"

    def test_session_paths_per_mode(self, tmp_path):
        layout = ResultsLayout(tmp_path)
        assert layout.session("atpB").name == "atpB_in_area_session.json"
        assert layout.session("atpB", TaxonMode.OUTSIDE).name == "atpB_outside_session.json"

    def test_invalid(self, tmp_path):
        layout = ResultsLayout(tmp_path)
        with pytest.raises(ConfigurationError):
            layout.sequences("")
        with pytest.raises(ConfigurationError):
            layout.stage_path("plots", "atpB")

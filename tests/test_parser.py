"""Tests for the streaming VCF parser."""

import io
import unittest
from decimal import Decimal
from pathlib import Path

import pytest

from vcfparser.config import ParserConfig
from vcfparser.core.genotype import VcfGenotype
from vcfparser.exceptions import SECTION_COLUMNS, RecordSinkError, VcfFormatError, VcfStateError
from vcfparser.io.parser import ParserState, VcfParser
from vcfparser.models.metadata import MetadataKind

HEADER = (
    "##fileformat=VCFv4.2\n"
    '##INFO=<ID=NS,Number=1,Type=Integer,Description="Number of samples with data">\n'
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
)


def _parser(text: str, **kwargs) -> VcfParser:
    return VcfParser(io.StringIO(text), **kwargs)


def _error(text: str) -> VcfFormatError:
    parser = _parser(text)
    with pytest.raises(VcfFormatError) as excinfo:
        parser.parse()
    return excinfo.value


class TestMinimalFile:
    def test_parse(self, minimal_vcf: Path):
        records = []
        with VcfParser.from_file(minimal_vcf, lambda md, pos, samples: records.append((pos, samples))) as parser:
            assert parser.parse() == 1

        metadata = parser.metadata
        assert metadata.file_format == "VCFv4.2"
        assert list(metadata.info) == ["NS"]
        assert metadata.info["NS"].description == "Number of samples with data"

        position, samples = records[0]
        assert position.chromosome == "chr1"
        assert position.position == 1
        assert position.ids == ["rsa"]
        assert position.ref == "A"
        assert position.alt == ["T"]
        assert position.quality == Decimal("0")
        assert position.filters == []
        assert position.info == {"NS": ["0"]}
        assert position.format == []
        assert samples == []

    def test_state_transitions(self, minimal_vcf: Path):
        parser = VcfParser.from_file(minimal_vcf)
        assert parser.state is ParserState.AWAITING_HEADER
        parser.parse_metadata()
        assert parser.state is ParserState.READING_DATA
        assert parser.line_number == 3
        assert parser.parse_next() is not None
        assert parser.parse_next() is None
        assert parser.state is ParserState.FINISHED

    def test_exhausted_parser(self, minimal_vcf: Path):
        parser = VcfParser.from_file(minimal_vcf)
        parser.parse()
        with pytest.raises(VcfStateError, match="exhausted"):
            parser.parse_next()

    def test_metadata_parsed_twice(self, minimal_vcf: Path):
        parser = VcfParser.from_file(minimal_vcf)
        parser.parse_metadata()
        with pytest.raises(VcfStateError):
            parser.parse_metadata()

    def test_source_closed_at_end(self, minimal_vcf: Path):
        parser = VcfParser.from_file(minimal_vcf)
        parser.parse()
        assert parser._source.closed

    def test_caller_stream_is_left_open(self, minimal_vcf: Path):
        stream = io.StringIO(minimal_vcf.read_text())
        VcfParser(stream).parse()
        assert not stream.closed


class TestExampleFile:
    def test_metadata(self, sample_vcf: Path):
        parser = VcfParser.from_file(sample_vcf)
        metadata = parser.parse_metadata()
        parser.close()

        assert list(metadata.info) == ["NS", "DP", "AF", "AA", "DB", "H2"]
        assert list(metadata.filters) == ["q10", "s50"]
        assert list(metadata.formats) == ["GT", "GQ", "DP", "HQ"]
        assert metadata.contigs["20"].length == 62435964
        assert metadata.contigs["20"].get("species") == '"Homo sapiens"'
        assert metadata.get_raw_values("phasing") == ["partial"]
        assert [name for name, _ in metadata.raw_properties] == ["fileDate", "source", "reference", "phasing"]
        assert metadata.sample_names == ["NA00001", "NA00002", "NA00003"]
        assert metadata.get(MetadataKind.INFO, "DB").type.value == "Flag"

    def test_records(self, sample_vcf: Path):
        with VcfParser.from_file(sample_vcf) as parser:
            records = list(parser)

        assert len(records) == 5
        first, samples = records[0]
        assert first.info == {"NS": ["3"], "DP": ["14"], "AF": ["0.5"], "DB": [""], "H2": [""]}
        assert first.format == ["GT", "GQ", "DP", "HQ"]
        assert samples[1] == {"GT": "1|0", "GQ": "48", "DP": "8", "HQ": "51,51"}

        second, _ = records[1]
        assert second.ids == []
        assert second.filters == ["q10"]
        assert not second.is_passing_all_filters()

        third, samples = records[2]
        assert third.alt == ["G", "T"]
        assert third.info["AF"] == ["0.333", "0.667"]
        assert VcfGenotype.from_sample(third, samples[0]).phased_token == "G|T"

        fourth, _ = records[3]
        assert fourth.alt == []

        fifth, samples = records[4]
        assert fifth.format == ["GT", "GQ", "DP"]
        assert list(samples[2]) == ["GT", "GQ", "DP"]

    def test_object_sink(self, sample_vcf: Path):
        class Collector:
            def __init__(self):
                self.positions = []

            def accept(self, metadata, position, samples):
                assert metadata.num_samples == len(samples)
                self.positions.append(position.position)

        collector = Collector()
        VcfParser.from_file(sample_vcf, collector).parse()
        assert collector.positions == [14370, 17330, 1110696, 1230237, 1234567]

    def test_rsids_only(self, sample_vcf: Path):
        with VcfParser.from_file(sample_vcf, rsids_only=True) as parser:
            records = list(parser)
        assert [p.ids for p, _ in records] == [["rs6054257"], ["rs6040355"]]
        assert parser.lines_skipped == 3


class TestStructuralVariants:
    def test_symbolic_and_breakend_alleles(self, sv_vcf: Path):
        with VcfParser.from_file(sv_vcf) as parser:
            records = [position for position, _ in parser]

        assert parser.metadata.get_alt("<DEL:ME:ALU>").description == "Deletion of ALU element"
        assert records[1].alt == ["<DEL>"]
        assert records[1].info["CIPOS"] == ["-56", "20"]
        assert records[1].info["IMPRECISE"] == [""]
        assert records[4].alt == ["G]17:198982]"]
        assert records[6].alt == ["C[2:321682["]
        assert records[0].quality is None


class TestSitesOnly:
    def test_no_samples(self, sites_vcf: Path):
        with VcfParser.from_file(sites_vcf) as parser:
            records = list(parser)
        metadata = parser.metadata
        assert metadata.num_samples == 0
        assert metadata.assemblies == ["ftp://ftp.example.org/assembly.fa"]
        assert metadata.pedigree_databases == ["<http://pedigree.example.org>"]

        assert all(samples == [] for _, samples in records)
        assert records[1][0].quality is None
        assert records[1][0].info == {"DP": ["8"], "SOMATIC": [""]}
        last = records[2][0]
        assert last.quality == Decimal("5.2E-10")
        assert last.filters == ["."]
        assert last.info == {}


class TestErrors:
    def test_data_error_carries_line_number(self):
        error = _error(HEADER + "chr1\t1\t.\tA\tT\t0\tPASS\tNS=0\nchr1\tabc\t.\tA\tT\t0\tPASS\tNS=0\n")
        assert error.line_number == 5
        assert error.section == "data"
        assert str(error) == "[Line #5] Error parsing data: Position abc is not numerical"

    def test_metadata_error_carries_line_number(self):
        error = _error("##fileformat=VCFv4.2\n##INFO=<ID=NS,Number=1,Type=Long,Description=\"x\">\n")
        assert str(error).startswith("[Line #2] Error parsing metadata")
        assert "Unknown Type" in str(error)

    def test_column_error(self):
        error = _error("##fileformat=VCFv4.2\n#CHROM\tPOS\tID\n")
        assert error.section == "column (# header)"
        assert error.line_number == 2

    def test_format_column_required_before_samples(self):
        error = _error("##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tNA1\n")
        assert "FORMAT" in str(error)

    def test_missing_file_format(self):
        error = _error("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")
        assert "fileformat" in str(error)

    def test_missing_column_line(self):
        error = _error("##fileformat=VCFv4.2\n")
        assert "#CHROM" in str(error)
        assert error.line_number == 2
        assert error.section == SECTION_COLUMNS

    def test_data_before_column_line(self):
        error = _error("##fileformat=VCFv4.2\nchr1\t1\t.\tA\tT\t0\tPASS\tNS=0\n")
        assert error.line_number == 2

    def test_duplicate_metadata(self):
        error = _error(HEADER.replace("#CHROM", HEADER.splitlines()[1] + "\n#CHROM"))
        assert "Duplicate ID NS for INFO" in str(error)

    @pytest.mark.parametrize(
        "line,message",
        [
            ("chr1\t1\t.\tA\tT\t0\tPASS", "Expected 8 columns but found 7"),
            ("chr1\t1\t.\tX\tT\t0\tPASS\tNS=0", "reference base"),
            ("chr1\t1\t.\tA\tT\tabc\tPASS\tNS=0", "Quality abc"),
            ("chr1\t1\t.\tA\tT\tinf\tPASS\tNS=0", "not a number"),
            ("chr1\t1_000\t.\tA\tT\t0\tPASS\tNS=0", "Position 1_000 is not numerical"),
            ("chr1\t1\t.\tA\tT\t1_0\tPASS\tNS=0", "Quality 1_0 is not a number"),
            ("chr1\t1\t.\tA\tT\t0\tPASS;q10\tNS=0", "PASS along with"),
            ("chr1\t1\t.\tA\tT\t0\tPASS\tNS=0;;DB", "Empty entry in INFO"),
            ("", "Empty line"),
        ],
    )
    def test_bad_data_lines(self, line, message):
        error = _error(HEADER + line + "\n")
        assert message in str(error)
        assert error.line_number == 4

    def test_sample_value_count_mismatch(self, sample_vcf: Path, temp_dir: Path):
        text = sample_vcf.read_text().replace("0/1:35:4", "0/1:35")
        path = temp_dir / "bad.vcf"
        path.write_text(text)
        with pytest.raises(VcfFormatError, match="does not match"):
            VcfParser.from_file(path).parse()

    def test_error_closes_owned_source(self, temp_dir: Path):
        path = temp_dir / "bad.vcf"
        path.write_text(HEADER + "chr1\tx\t.\tA\tT\t0\tPASS\tNS=0\n")
        parser = VcfParser.from_file(path)
        with pytest.raises(VcfFormatError):
            parser.parse()
        assert parser._source.closed
        assert parser.state is ParserState.FINISHED

    def test_sink_failure(self, minimal_vcf: Path):
        def sink(metadata, position, samples):
            raise RuntimeError("disk full")

        with pytest.raises(RecordSinkError, match=r"\[Line #4\].*disk full") as excinfo:
            VcfParser.from_file(minimal_vcf, sink).parse()
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_bad_sink(self):
        with pytest.raises(VcfStateError):
            _parser(HEADER, sink=42)


class TestFileOpening(unittest.TestCase):
    """File name checks when opening by path."""

    def test_suffix_required(self):
        with self.assertRaises(VcfFormatError) as ctx:
            VcfParser.from_file("calls.txt")
        self.assertIn("Not a VCF file", str(ctx.exception))

    def test_suffix_check_can_be_disabled(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "calls.txt"
            path.write_text(HEADER)
            parser = VcfParser.from_file(path, config=ParserConfig(require_vcf_suffix=False))
            self.assertEqual(parser.parse(), 0)
            self.assertEqual(parser.metadata.num_samples, 0)

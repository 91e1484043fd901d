"""Tests for read-transform-write pipelines."""

import io
from pathlib import Path

import pytest

from vcfparser.core.conversion import FieldType
from vcfparser.exceptions import VcfStateError
from vcfparser.io.parser import VcfParser
from vcfparser.io.writer import VcfWriter
from vcfparser.models.metadata import MetadataEntry
from vcfparser.pipeline import TransformingSink, VcfTransformation, transform_file


class TagSomatic(VcfTransformation):
    """Declares SOMATIC and flags every record with it."""

    def transform_metadata(self, metadata):
        metadata.add(MetadataEntry.info("SOMATIC", "Somatic mutation", "0", FieldType.FLAG))

    def transform_record(self, metadata, position, samples):
        position.add_info("SOMATIC")
        samples[0]["GT"] = "1|1"
        return True


class PassingOnly(VcfTransformation):
    def transform_record(self, metadata, position, samples):
        return position.is_passing_all_filters()


def test_pass_through(sample_vcf: Path, temp_dir: Path):
    out = temp_dir / "out.vcf"
    assert transform_file(sample_vcf, out) == 5
    original = [line for line in sample_vcf.read_text().splitlines() if not line.startswith("#")]
    written = [line for line in out.read_text().splitlines() if not line.startswith("#")]
    assert written == original


def test_dropping_records(sample_vcf: Path, temp_dir: Path):
    out = temp_dir / "out.vcf"
    assert transform_file(sample_vcf, out, PassingOnly()) == 4
    assert "\tq10\t" not in out.read_text()


def test_branches_do_not_share_state(sample_vcf: Path):
    tagged, plain = io.StringIO(), io.StringIO()
    sink = TransformingSink().add(TagSomatic(), VcfWriter(tagged)).add(VcfTransformation(), VcfWriter(plain))

    seen = []
    with VcfParser.from_file(sample_vcf, sink) as parser:
        for position, samples in parser:
            seen.append((position, samples))
    sink.close()

    # the parser's own records are untouched
    assert not any(p.has_info("SOMATIC") for p, _ in seen)
    assert seen[0][1][0]["GT"] == "0|0"
    assert "SOMATIC" not in parser.metadata.info

    assert "##INFO=<ID=SOMATIC" in tagged.getvalue()
    assert "##INFO=<ID=SOMATIC" not in plain.getvalue()
    tagged_first = [line for line in tagged.getvalue().splitlines() if not line.startswith("#")][0]
    plain_first = [line for line in plain.getvalue().splitlines() if not line.startswith("#")][0]
    assert tagged_first.split("\t")[7].endswith(";SOMATIC")
    assert tagged_first.split("\t")[9].startswith("1|1")
    assert plain_first.split("\t")[9].startswith("0|0")


def test_header_written_without_data_lines(temp_dir: Path):
    source = temp_dir / "empty.vcf"
    source.write_text("##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")
    out = temp_dir / "out.vcf"
    assert transform_file(source, out, TagSomatic()) == 0
    assert out.read_text() == (
        "##fileformat=VCFv4.2\n"
        '##INFO=<ID=SOMATIC,Number=0,Type=Flag,Description="Somatic mutation">\n'
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
    )


def test_sink_needs_a_branch(sample_vcf: Path):
    with pytest.raises(VcfStateError):
        TransformingSink().start(VcfParser.from_file(sample_vcf).parse_metadata())


def test_no_branches_after_start(sample_vcf: Path):
    sink = TransformingSink().add(VcfTransformation(), VcfWriter(io.StringIO()))
    parser = VcfParser.from_file(sample_vcf)
    sink.start(parser.parse_metadata())
    parser.close()
    with pytest.raises(VcfStateError):
        sink.add(VcfTransformation(), VcfWriter(io.StringIO()))

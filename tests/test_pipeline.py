from pathlib import Path

import pytest

from esker_csv.errors import PipelineError
from esker_csv.models import Site
from esker_csv.pipeline import DirectorySink, FilePipeline, output_name
from esker_csv.transform import LineTransformer

HEADER = "plant,order,shipped,delivered,a,b,c,d,e,f,invoiced,g,due"
ROW = 'PC1,1,"25/12/2023 09:00:00",26/12/2023,x,y,z,h,i,j,27/12/2023,k,28/12/2023'
ROW_OUT = 'PC1,1,"2023-12-25",2023-12-26,x,y,z,h,i,j,2023-12-27,k,2023-12-28'


def make_pipeline(out_dir: Path, out_date="2024-01-01", **kwargs) -> FilePipeline:
    return FilePipeline(
        transformer=LineTransformer([3, 4], [11, 13]),
        sink=DirectorySink(out_dir),
        default_site=Site.P11,
        out_date=out_date,
        **kwargs,
    )


def write_source(path: Path, *lines: str) -> Path:
    path.write_text("".join(l + "\r\n" for l in lines), encoding="utf-8")
    return path


def test_output_name():
    assert output_name(Site.P11, "2024-03-09") == "synthomer_P11_ESKER_2024-03-09.csv"


def test_process_writes_converted_file(tmp_path):
    src = write_source(tmp_path / "export.csv", HEADER, ROW, "PC1,2,N/A,,,,,,,,,,")
    out_dir = tmp_path / "out"

    outcome = make_pipeline(out_dir).process(src)

    assert outcome.success
    assert outcome.site is Site.PC1
    assert outcome.output_path == out_dir / "synthomer_PC1_ESKER_2024-01-01.csv"
    assert (outcome.total_lines, outcome.changed_lines, outcome.unchanged_lines) == (3, 1, 2)
    assert outcome.output_path.read_text(encoding="utf-8") == (
        HEADER + "\n" + ROW_OUT + "\n" + "PC1,2,N/A,,,,,,,,,,\n"
    )
    # source untouched, no temp files left behind
    assert src.exists()
    assert [p.name for p in out_dir.iterdir()] == [outcome.output_path.name]


def test_header_with_dates_is_left_alone(tmp_path):
    header = "h1,h2,25/12/2023,26/12/2023"
    src = write_source(tmp_path / "export-pc1.csv", header)
    outcome = make_pipeline(tmp_path / "out").process(src)
    assert outcome.output_path.read_text(encoding="utf-8") == header + "\n"
    assert (outcome.changed_lines, outcome.unchanged_lines) == (0, 1)


def test_name_collision_appends_sequence(tmp_path):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "synthomer_PC1_ESKER_2024-01-01.csv").write_text("existing", encoding="utf-8")

    pipeline = make_pipeline(out_dir)
    first = pipeline.process(write_source(tmp_path / "a-PC1.csv", HEADER, ROW))
    second = pipeline.process(write_source(tmp_path / "b-PC1.csv", HEADER, ROW))

    assert first.output_path.name == "synthomer_PC1_ESKER_2024-01-01(1).csv"
    assert second.output_path.name == "synthomer_PC1_ESKER_2024-01-01(2).csv"
    assert (out_dir / "synthomer_PC1_ESKER_2024-01-01.csv").read_text(encoding="utf-8") == "existing"


def test_crlf_terminator(tmp_path):
    src = write_source(tmp_path / "x-P11.csv", HEADER, ROW)
    outcome = make_pipeline(tmp_path / "out", line_terminator="\r\n").process(src)
    assert outcome.output_path.read_bytes() == (HEADER + "\r\n" + ROW_OUT + "\r\n").encode("utf-8")


def test_utf8_bom_is_not_carried_into_header(tmp_path):
    src = tmp_path / "bom-PC1.csv"
    src.write_bytes(b"\xef\xbb\xbf" + (HEADER + "\n" + ROW + "\n").encode("utf-8"))
    outcome = make_pipeline(tmp_path / "out").process(src)
    assert outcome.output_path.read_text(encoding="utf-8").startswith(HEADER)


def test_missing_source_raises(tmp_path):
    with pytest.raises(PipelineError):
        make_pipeline(tmp_path / "out").process(tmp_path / "nope.csv")


class FailingSink(DirectorySink):
    def promote(self, temp, name):
        raise OSError("destination locked")


def test_failed_promotion_discards_temp(tmp_path):
    out_dir = tmp_path / "out"
    pipeline = FilePipeline(
        transformer=LineTransformer([3, 4], [11, 13]),
        sink=FailingSink(out_dir),
        default_site=Site.PC1,
        out_date="2024-01-01",
    )
    with pytest.raises(PipelineError, match="destination locked"):
        pipeline.process(write_source(tmp_path / "a.csv", HEADER, ROW))
    assert list(out_dir.iterdir()) == []


def test_rejects_bad_out_date(tmp_path):
    with pytest.raises(ValueError):
        make_pipeline(tmp_path, out_date="01/01/2024")


def test_utf8_text_past_detection_sample_is_kept(tmp_path, straddling_utf8_csv):
    src = straddling_utf8_csv("long-P11.csv")
    outcome = make_pipeline(tmp_path / "out").process(src)
    out = outcome.output_path.read_text(encoding="utf-8")
    assert "z,Montréal,2023-12-26\n" in out
    assert "é,2024-01-01\n" in out

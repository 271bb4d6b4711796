import pytest

from esker_csv.rules import ENCODING_SAMPLE_BYTES


@pytest.fixture
def straddling_utf8_csv(tmp_path):
    """UTF-8 CSV whose 'é' starts on the last byte of the encoding sample."""
    def make(name="x.csv"):
        prefix = "plant,name,date\n" + "P11,filler,01/01/2024\n" * 2900
        pad = ENCODING_SAMPLE_BYTES - 1 - len(prefix.encode("utf-8")) - len("y,")
        text = prefix + "y," + "a" * pad + "é,01/01/2024\n" + "z,Montréal,26/12/2023\n"
        raw = text.encode("utf-8")
        assert raw[ENCODING_SAMPLE_BYTES - 1] == 0xC3
        path = tmp_path / name
        path.write_bytes(raw)
        return path
    return make

import io

from crchost import output


def test_out_joins_with_spaces(capsys):
    output.out("Started", "cluster", 4)
    assert capsys.readouterr().out == "Started cluster 4\n"


def test_out_without_args_prints_newline(capsys):
    output.out()
    assert capsys.readouterr().out == "\n"


def test_out_f_formats_without_newline(capsys):
    output.out_f("%s has %d nodes", "crc", 1)
    assert capsys.readouterr().out == "crc has 1 nodes"


def test_out_f_plain_string_keeps_percent(capsys):
    output.out_f("100%")
    assert capsys.readouterr().out == "100%"


def test_out_w_writes_line_and_returns_length():
    stream = io.StringIO()
    count = output.out_w(stream, "oc", "ready")
    assert stream.getvalue() == "oc ready\n"
    assert count == len(stream.getvalue())
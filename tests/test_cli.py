import hashlib

import pytest

from metabencode import bencode, config
from metabencode.__main__ import Command, main


def test_decode(capsys):
	assert main([Command.DECODE.value, "l4:spami42ee"]) == 0
	assert capsys.readouterr().out == '["spam", 42]\n'


def test_decode_dict(capsys):
	assert main(["decode", "d3:cow3:moo4:spam4:eggse"]) == 0
	assert capsys.readouterr().out == '{"cow": "moo", "spam": "eggs"}\n'


def test_decode_error_goes_to_stderr(capsys):
	assert main(["decode", "i03e"]) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert "MalformedInteger" in captured.err


def test_strict_flag(capsys):
	assert main(["decode", "d1:bi1e1:ai2ee"]) == 0
	assert main(["--strict", "decode", "d1:bi1e1:ai2ee"]) == 1
	assert "UnsortedKeys" in capsys.readouterr().err


def test_max_depth_flag(capsys):
	assert main(["--max-depth", "1", "decode", "llee"]) == 1
	assert "RecursionLimitExceeded" in capsys.readouterr().err


def test_info(capsys, torrent_file, torrent_value):
	assert main(["info", str(torrent_file)]) == 0
	lines = capsys.readouterr().out.splitlines()
	info_hash = hashlib.sha1(bencode.serialise(torrent_value[b"info"])).hexdigest()
	assert lines[0] == "Tracker URL: http://tracker.example.org:6969/announce"
	assert lines[1] == "Length: 40"
	assert lines[2] == f"Info Hash: {info_hash}"
	assert lines[3] == "Piece Length: 16"
	assert lines[4] == "Piece Hashes:"
	assert len(lines) == 5 + 3


def test_info_missing_file(capsys, tmp_path):
	assert main(["info", str(tmp_path / "nope.torrent")]) == 1
	assert "IoError" in capsys.readouterr().err


def test_info_schema_error(capsys, tmp_path):
	path = tmp_path / "bad.torrent"
	path.write_bytes(b"d8:announce3:urle")
	assert main(["info", str(path)]) == 1
	assert "SchemaError" in capsys.readouterr().err


def test_verify(capsys, tmp_path, torrent_file, content):
	data = tmp_path / "sample.bin"
	data.write_bytes(content)
	assert main(["verify", str(torrent_file), str(data), "--no-progress"]) == 0
	assert capsys.readouterr().out == "3/3 pieces verified\n"


def test_verify_damaged(capsys, tmp_path, torrent_file, content):
	data = tmp_path / "sample.bin"
	data.write_bytes(content[:20])
	assert main(["verify", str(torrent_file), str(data), "--no-progress"]) == 1
	assert capsys.readouterr().out == "1/3 pieces verified\n"


def test_decode_huge_length_prefix(capsys):
	assert main(["decode", "9" * 5000 + ":x"]) == 1
	assert "TruncatedInput" in capsys.readouterr().err


def test_max_depth_out_of_range(capsys):
	with pytest.raises(SystemExit) as excinfo:
		main(["--max-depth", "100000", "decode", "l" * 3000 + "e" * 3000])
	assert excinfo.value.code == 2
	assert "--max-depth" in capsys.readouterr().err


def test_bad_max_depth_setting(monkeypatch, capsys):
	monkeypatch.setattr(config, "MAX_DEPTH", "lots")
	with pytest.raises(SystemExit) as excinfo:
		main(["decode", "i1e"])
	assert excinfo.value.code == 2
	assert "not an integer" in capsys.readouterr().err


def test_deep_input_is_rejected_not_crashed(capsys):
	assert main(["decode", "l" * 3000 + "e" * 3000]) == 1
	assert "RecursionLimitExceeded" in capsys.readouterr().err


def test_verify_incomplete_piece_list(capsys, tmp_path, torrent_value, content):
	torrent_value[b"info"][b"pieces"] = torrent_value[b"info"][b"pieces"][:20]
	torrent = tmp_path / "short.torrent"
	torrent.write_bytes(bencode.serialise(torrent_value))
	data = tmp_path / "sample.bin"
	data.write_bytes(content)
	assert main(["verify", str(torrent), str(data), "--no-progress"]) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert "SchemaError" in captured.err

import hashlib

import pytest

from metabencode import bencode

PIECE_LENGTH = 16
CONTENT = bytes(range(40))


def piece_hashes(data: bytes, piece_length: int) -> bytes:
	return b"".join(hashlib.sha1(data[i:i+piece_length]).digest() for i in range(0, len(data), piece_length))


@pytest.fixture
def content() -> bytes:
	return CONTENT


@pytest.fixture
def torrent_value() -> dict:
	return {
		b"announce": b"http://tracker.example.org:6969/announce",
		b"comment": b"test torrent",
		b"info": {
			b"length": len(CONTENT),
			b"name": b"sample.bin",
			b"piece length": PIECE_LENGTH,
			b"pieces": piece_hashes(CONTENT, PIECE_LENGTH),
		},
	}


@pytest.fixture
def torrent_file(tmp_path, torrent_value):
	path = tmp_path / "sample.torrent"
	path.write_bytes(bencode.serialise(torrent_value))
	return path

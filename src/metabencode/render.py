"""
Text renderings for the command line.

Byte strings that happen to be UTF-8 come out as plain JSON strings. Anything
else (piece hashes, mostly) is flagged as ``"hex:<digits>"`` so nothing is lost.
Text that already starts with ``hex:`` is flagged too, so the two can't collide.
"""
import json
from typing import List

from .bencode import BencodeTypes
from .metainfo import MetaInfo

HEX_PREFIX = "hex:"


def _text_or_hex(value: bytes) -> str:
	try:
		text = value.decode()
	except UnicodeDecodeError:
		return HEX_PREFIX + value.hex()
	if text.startswith(HEX_PREFIX): # would read back as a flagged string otherwise
		return HEX_PREFIX + value.hex()
	return text


def to_jsonable(value: BencodeTypes):
	match value:
		case bytes():
			return _text_or_hex(value)
		case int():
			return value
		case list():
			return [to_jsonable(item) for item in value]
		case dict():
			return {_text_or_hex(k): to_jsonable(v) for k, v in value.items()}
		case _:
			raise TypeError(f"not a bencode value: {type(value).__name__}")


def render_value(value: BencodeTypes) -> str:
	return json.dumps(to_jsonable(value), ensure_ascii=False)


def render_info(meta: MetaInfo) -> List[str]:
	lines = [
		f"Tracker URL: {meta.announce}",
		f"Length: {meta.info.length}",
		f"Info Hash: {meta.info_hash.hex()}",
		f"Piece Length: {meta.info.piece_length}",
		"Piece Hashes:",
	]
	lines.extend(piece.hex() for piece in meta.info.pieces)
	return lines

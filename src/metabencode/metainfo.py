from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional
import logging

from . import bencode
from .digest import info_digest, segment_pieces
from .errors import SchemaError

logger = logging.getLogger(__name__)


def _require(value: dict, key: bytes, kind: type, path: str):
	if key not in value:
		raise SchemaError(path, "missing")
	item = value[key]
	# no coercion between variants, and bool never stands in for int
	if type(item) is not kind:
		raise SchemaError(path, f"expected {kind.__name__}, got {type(item).__name__}")
	return item


def _optional(value: dict, key: bytes, kind: type, path: str):
	if key not in value:
		return None
	return _require(value, key, kind, path)


def _text(raw: Optional[bytes], path: str) -> Optional[str]:
	if raw is None:
		return None
	try:
		return raw.decode()
	except UnicodeDecodeError:
		raise SchemaError(path, "not valid UTF-8") from None


@dataclass
class Info:
	name: str
	piece_length: int
	pieces: List[bytes]
	length: int
	private: bool = False

	@classmethod
	def from_dict(cls, value: dict):
		name = _text(_require(value, b"name", bytes, "info.name"), "info.name")
		piece_length = _require(value, b"piece length", int, "info.piece length")
		pieces_raw = _require(value, b"pieces", bytes, "info.pieces")
		length = _require(value, b"length", int, "info.length")
		private = _optional(value, b"private", int, "info.private")
		if piece_length <= 0:
			raise SchemaError("info.piece length", f"must be positive, got {piece_length}")
		if length < 0:
			raise SchemaError("info.length", f"must not be negative, got {length}")
		info = cls(
			name=name,
			piece_length=piece_length,
			pieces=segment_pieces(pieces_raw),
			length=length,
			private=bool(private),
		)
		info.check_piece_count()
		return info

	@property
	def expected_piece_count(self) -> int:
		return (self.length + self.piece_length - 1) // self.piece_length # round up

	def check_piece_count(self) -> None:
		if len(self.pieces) != self.expected_piece_count:
			raise SchemaError("info.pieces", f"{len(self.pieces)} piece hashes for {self.expected_piece_count} pieces")


@dataclass
class MetaInfo:
	announce: str
	info: Info
	info_hash: bytes
	announce_list: List[List[str]] = field(default_factory=list)
	comment: Optional[str] = None
	created_by: Optional[str] = None
	creation_date: Optional[int] = None

	@classmethod
	def from_value(cls, value: bencode.BencodeTypes):
		if not isinstance(value, dict):
			raise SchemaError("<root>", f"expected dict, got {type(value).__name__}")
		info_dict = _require(value, b"info", dict, "info")
		info = Info.from_dict(info_dict)

		announce_list = []
		tiers = _optional(value, b"announce-list", list, "announce-list") or []
		for i, tier in enumerate(tiers):
			if type(tier) is not list:
				raise SchemaError(f"announce-list.{i}", f"expected list, got {type(tier).__name__}")
			urls = []
			for j, url in enumerate(tier):
				if type(url) is not bytes:
					raise SchemaError(f"announce-list.{i}.{j}", f"expected bytes, got {type(url).__name__}")
				urls.append(_text(url, f"announce-list.{i}.{j}"))
			announce_list.append(urls)

		meta = cls(
			announce=_text(_require(value, b"announce", bytes, "announce"), "announce"),
			info=info,
			info_hash=info_digest(info_dict),
			announce_list=announce_list,
			comment=_text(_optional(value, b"comment", bytes, "comment"), "comment"),
			created_by=_text(_optional(value, b"created by", bytes, "created by"), "created by"),
			creation_date=_optional(value, b"creation date", int, "creation date"),
		)
		logger.debug("projected %r with %d pieces", meta.info.name, len(meta.info.pieces))
		return meta

	@classmethod
	def from_bencoded(cls, stream: BinaryIO | bytes, **options):
		return cls.from_value(bencode.parse(stream, **options))


def project(value: bencode.BencodeTypes) -> MetaInfo:
	return MetaInfo.from_value(value)

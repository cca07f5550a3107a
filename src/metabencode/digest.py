from typing import BinaryIO, List, TYPE_CHECKING
import hashlib
import logging

from tqdm import tqdm

from . import bencode
from .errors import InvalidLength

if TYPE_CHECKING:
	from .metainfo import Info

logger = logging.getLogger(__name__)

DIGEST_SIZE = hashlib.sha1().digest_size # 20


def info_digest(info: bencode.BencodeTypes) -> bytes:
	"""
	SHA-1 over the canonical encoding of ``info``.

	The value is re-serialised rather than hashed from its original byte span,
	so two inputs that differ only in key order get the same digest.
	"""
	return hashlib.sha1(bencode.serialise(info)).digest()


def segment_pieces(blob: bytes) -> List[bytes]:
	if len(blob) % DIGEST_SIZE:
		raise InvalidLength(len(blob), DIGEST_SIZE)
	return [blob[i:i+DIGEST_SIZE] for i in range(0, len(blob), DIGEST_SIZE)]


def verify_pieces(info: "Info", stream: BinaryIO, progress: bool = True) -> List[bool]:
	info.check_piece_count()
	results = []
	for i, expected in tqdm(enumerate(info.pieces), total=len(info.pieces), desc="Verifying local pieces", disable=not progress):
		piece = stream.read(info.piece_length) # last read will be truncated
		expected_len = min(info.piece_length, info.length - i * info.piece_length)
		ok = len(piece) == expected_len and hashlib.sha1(piece).digest() == expected
		if not ok:
			logger.debug("piece %d mismatch (read %d bytes, wanted %d)", i, len(piece), expected_len)
		results.append(ok)
	return results

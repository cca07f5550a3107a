from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple
import io
import logging
import sys

from .errors import (
	DuplicateKey,
	EncodeError,
	IntegerOverflow,
	InvalidKeyType,
	InvalidTag,
	MalformedInteger,
	MalformedLength,
	RecursionLimitExceeded,
	TrailingData,
	TruncatedInput,
	UnsortedKeys,
)

logger = logging.getLogger(__name__)

DIGITS = b"0123456789"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
INT64_MAX_DIGITS = len(str(INT64_MAX))

# the decoder keeps its own stack, but serialise() and the renderers recurse once per level
MAX_DEPTH_LIMIT = sys.getrecursionlimit() // 4
DEFAULT_MAX_DEPTH = min(200, MAX_DEPTH_LIMIT)

BencodeTypes = bytes | int | list | dict


def _decode_bytes(buf: bytes, offset: int) -> Tuple[bytes, int]:
	colon = buf.find(b":", offset)
	if colon == -1:
		raise MalformedLength("expected ':' after string length", offset)
	digits = buf[offset:colon]
	if not digits.isdigit():
		raise MalformedLength(f"invalid string length {digits[:32]!r}", offset)
	if len(digits) > 1 and digits.startswith(b"0"): # only length that's allowed to start with 0 is 0 itself
		raise MalformedLength("leading zero in string length", offset)
	if len(digits) > len(str(len(buf))): # can't fit, and int() would refuse very long digit strings anyway
		raise TruncatedInput(f"string length of {len(digits)} digits overruns buffer", offset)
	length = int(digits)
	start = colon + 1
	if start + length > len(buf):
		raise TruncatedInput(f"string of length {length} but only {len(buf) - start} bytes left", offset)
	return buf[start:start + length], start + length


def _decode_int(buf: bytes, offset: int) -> Tuple[int, int]:
	end = buf.find(b"e", offset + 1)
	if end == -1:
		raise TruncatedInput("unterminated integer", offset)
	span = buf[offset + 1:end]
	negative = span.startswith(b"-")
	digits = span[1:] if negative else span
	if not digits.isdigit():
		raise MalformedInteger(f"invalid integer {span[:32]!r}", offset)
	if digits.startswith(b"0") and (len(digits) > 1 or negative):
		raise MalformedInteger(f"non-canonical integer {span[:32]!r}", offset) # leading zero, or -0
	if len(digits) > INT64_MAX_DIGITS:
		raise IntegerOverflow("integer does not fit in 64 bits", offset)
	value = int(span)
	if not INT64_MIN <= value <= INT64_MAX:
		raise IntegerOverflow("integer does not fit in 64 bits", offset)
	return value, end + 1


@dataclass
class _Frame:
	value: list | dict
	start: int
	key: Optional[bytes] = None # dict key still waiting for its value
	key_offset: int = 0
	prevk: Optional[bytes] = None


def _add_to_parent(parent: _Frame, value: BencodeTypes, value_offset: int, strict_key_order: bool) -> None:
	if isinstance(parent.value, list):
		parent.value.append(value)
	elif parent.key is None:
		if not isinstance(value, bytes):
			raise InvalidKeyType(f"dict key must be a byte string, not {type(value).__name__}", value_offset)
		if value in parent.value:
			raise DuplicateKey(value, value_offset)
		if strict_key_order and parent.prevk is not None and value < parent.prevk:
			raise UnsortedKeys(f"dict key {value!r} sorts before {parent.prevk!r}", value_offset)
		parent.key = parent.prevk = value
		parent.key_offset = value_offset
	else:
		parent.value[parent.key] = value
		parent.key = None


# lists and dicts are tracked on an explicit stack, so hostile nesting can't exhaust the interpreter's
def _decode(buf: bytes, offset: int, max_depth: int, strict_key_order: bool) -> Tuple[BencodeTypes, int]:
	stack: List[_Frame] = []
	while True:
		top = stack[-1] if stack else None
		if offset >= len(buf):
			if top is None:
				raise InvalidTag("unexpected end of input", offset)
			if top.key is not None: # it would be invalid to end here
				raise TruncatedInput(f"dict key {top.key!r} has no value", top.key_offset)
			raise TruncatedInput(f"unterminated {type(top.value).__name__}", top.start)
		char = buf[offset]
		value_offset = offset

		if top is not None and top.key is None and char == ord("e"): # end of the innermost list/dict
			stack.pop()
			value, value_offset, offset = top.value, top.start, offset + 1

		elif char in b"ld":
			if len(stack) >= max_depth:
				raise RecursionLimitExceeded(f"containers nested deeper than {max_depth}", offset)
			stack.append(_Frame([] if char == ord("l") else {}, offset))
			offset += 1
			continue

		elif char in DIGITS: # "string" type (parsed as bytes)
			value, offset = _decode_bytes(buf, offset)

		elif char == ord("i"):
			value, offset = _decode_int(buf, offset)

		else:
			raise InvalidTag(f"unexpected byte {bytes([char])!r}", offset)

		if not stack:
			return value, offset
		_add_to_parent(stack[-1], value, value_offset, strict_key_order)


def decode(
	buffer: bytes,
	offset: int = 0,
	*,
	max_depth: int = DEFAULT_MAX_DEPTH,
	strict_key_order: bool = False,
) -> Tuple[BencodeTypes, int]:
	"""
	Decode one value starting at byte ``offset``.

	Returns the value and the offset just past it. Anything after that offset
	is left alone, see ``parse`` for the whole-buffer variant.

	Dict keys may arrive in any order unless ``strict_key_order`` is set, in
	which case they must be strictly ascending (as a canonical encoder would
	have written them). Repeated keys are always an error.
	"""
	if not isinstance(buffer, bytes):
		buffer = bytes(buffer)
	if not 0 <= max_depth <= MAX_DEPTH_LIMIT:
		raise ValueError(f"max_depth must be between 0 and {MAX_DEPTH_LIMIT}")
	return _decode(buffer, offset, max_depth, strict_key_order)


# same as decode but we check we parsed all the way until the end of the buffer
def parse(stream: BinaryIO | bytes, **options) -> BencodeTypes:
	if not isinstance(stream, (bytes, bytearray, memoryview)):
		stream = stream.read()
	buffer = bytes(stream)
	res, end = decode(buffer, **options)
	if end != len(buffer):
		raise TrailingData(f"{len(buffer) - end} trailing bytes", end)
	logger.debug("parsed %d bytes", len(buffer))
	return res


def serialise_into_stream(stream: BinaryIO, obj: BencodeTypes) -> None:
	match obj:
		case bytes():
			stream.write(str(len(obj)).encode())
			stream.write(b":")
			stream.write(obj)
		case bool():
			raise EncodeError("refusing to bencode a bool, use an int")
		case int():
			if not INT64_MIN <= obj <= INT64_MAX:
				raise IntegerOverflow(f"{obj} does not fit in 64 bits")
			stream.write(b"i")
			stream.write(str(obj).encode())
			stream.write(b"e")
		case list() | tuple():
			stream.write(b"l")
			for item in obj:
				serialise_into_stream(stream, item)
			stream.write(b"e")
		case dict():
			for k in obj:
				if not isinstance(k, bytes):
					raise InvalidKeyType(f"dict key must be a byte string, not {type(k).__name__}")
			stream.write(b"d")
			for k in sorted(obj):
				serialise_into_stream(stream, k)
				serialise_into_stream(stream, obj[k])
			stream.write(b"e")
		case _:
			raise EncodeError(f"don't know how to bencode {type(obj).__name__}")


def serialise(obj: BencodeTypes) -> bytes:
	res = io.BytesIO()
	serialise_into_stream(res, obj)
	return res.getvalue()

from typing import Optional


class MetabencodeError(ValueError):
	"""Base class for everything the codec, projection and segmentation raise."""


class BencodeError(MetabencodeError):
	def __init__(self, message: str, offset: Optional[int] = None) -> None:
		self.offset = offset
		if offset is not None:
			message = f"{message} (at byte {offset})"
		super().__init__(message)


class InvalidTag(BencodeError):
	pass

class TruncatedInput(BencodeError):
	pass

class MalformedLength(BencodeError):
	pass

class MalformedInteger(BencodeError):
	pass

class IntegerOverflow(BencodeError):
	pass

class InvalidKeyType(BencodeError):
	pass

class DuplicateKey(BencodeError):
	def __init__(self, key: bytes, offset: Optional[int] = None) -> None:
		self.key = key
		super().__init__(f"duplicate dict key {key!r}", offset)

class UnsortedKeys(BencodeError):
	pass

class RecursionLimitExceeded(BencodeError):
	pass

class TrailingData(BencodeError):
	pass

class EncodeError(BencodeError):
	pass


class SchemaError(MetabencodeError):
	def __init__(self, field: str, reason: str = "missing or wrong type") -> None:
		self.field = field
		super().__init__(f"metainfo field {field!r}: {reason}")


class InvalidLength(MetabencodeError):
	def __init__(self, length: int, record_size: int) -> None:
		self.length = length
		self.record_size = record_size
		super().__init__(f"blob of {length} bytes is not a multiple of {record_size}")

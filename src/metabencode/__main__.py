import argparse
import logging
import os
import sys
from enum import Enum
from typing import List, Optional

from . import bencode, config
from .digest import verify_pieces
from .errors import MetabencodeError
from .metainfo import MetaInfo
from .render import render_info, render_value

logger = logging.getLogger("metabencode")


class Command(Enum):
	DECODE = "decode"
	INFO = "info"
	VERIFY = "verify"


def depth(text: str) -> int:
	try:
		value = int(text)
	except ValueError:
		raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
	if not 0 <= value <= bencode.MAX_DEPTH_LIMIT:
		raise argparse.ArgumentTypeError(f"must be between 0 and {bencode.MAX_DEPTH_LIMIT}, got {value}")
	return value


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="metabencode", description="Inspect bencoded data and .torrent files")
	parser.add_argument("--max-depth", type=depth, default=config.MAX_DEPTH, help=f"maximum container nesting, at most {bencode.MAX_DEPTH_LIMIT} (default: {config.MAX_DEPTH})")
	parser.add_argument("--strict", action="store_true", default=config.STRICT_KEY_ORDER, help="reject dicts whose keys are not sorted")
	sub = parser.add_subparsers(dest="command", required=True)

	p = sub.add_parser(Command.DECODE.value, help="decode a bencoded string and print it as JSON")
	p.add_argument("encoded", help="bencoded value, e.g. 'l4:spami42ee'")

	p = sub.add_parser(Command.INFO.value, help="print the contents of a .torrent file")
	p.add_argument("torrent", help="path to a .torrent file")

	p = sub.add_parser(Command.VERIFY.value, help="check a local file against a .torrent's piece hashes")
	p.add_argument("torrent", help="path to a .torrent file")
	p.add_argument("data", help="path to the downloaded file")
	p.add_argument("--no-progress", dest="progress", action="store_false", default=config.SHOW_PROGRESS, help="hide the progress bar")

	return parser


def _load(path: str, options: dict) -> MetaInfo:
	with open(path, "rb") as f:
		return MetaInfo.from_bencoded(f, **options)


def run(command: Command, args: argparse.Namespace) -> int:
	options = {"max_depth": args.max_depth, "strict_key_order": args.strict}

	if command is Command.DECODE:
		# fsencode undoes the surrogateescape, so argv bytes come back exactly
		value = bencode.parse(os.fsencode(args.encoded), **options)
		print(render_value(value))
		return 0

	if command is Command.INFO:
		meta = _load(args.torrent, options)
		for line in render_info(meta):
			print(line)
		return 0

	meta = _load(args.torrent, options)
	with open(args.data, "rb") as f:
		results = verify_pieces(meta.info, f, progress=args.progress)
	ok = sum(results)
	print(f"{ok}/{len(results)} pieces verified")
	if ok != len(results):
		bad = [i for i, good in enumerate(results) if not good]
		logger.warning("%d bad pieces, first is %d", len(bad), bad[0])
		return 1
	return 0


def main(argv: Optional[List[str]] = None) -> int:
	logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT, force=True)
	parser = build_parser()
	args = parser.parse_args(argv)
	command = Command(args.command)

	try:
		return run(command, args)
	except MetabencodeError as e:
		logger.error("%s: %s", type(e).__name__, e)
	except OSError as e:
		logger.error("IoError: %s", e)
	return 1


if __name__ == "__main__":
	sys.exit(main())

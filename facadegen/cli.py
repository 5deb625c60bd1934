# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from facadegen.config import FacadeConfig
from facadegen.delegate.emitter import render_module
from facadegen.delegate.generator import generate_from_manifest
from facadegen.delegate.parser import parse_manifest
from facadegen.errors import ConfigurationError, FacadeError
from facadegen.metadata.chunks import list_chunks
from facadegen.metadata.lookup import MISSING_DOCS, ModuleMetadata, find_doc_record


def _build_parser() -> argparse.ArgumentParser:
	common = argparse.ArgumentParser(add_help=False)
	common.add_argument(
		"-M",
		"--module-path",
		dest="module_paths",
		action="append",
		type=Path,
		help="Module root directory (repeatable); searched before the import system",
	)
	common.add_argument("--build-dir", type=Path, default=None, help="Directory for compiled artifacts (default: $FACADEGEN_BUILD_DIR)")
	common.add_argument(
		"--include-callbacks",
		action="store_true",
		default=None,
		help="Also attach callback (Protocol/abstract method) signatures",
	)
	common.add_argument("--json", action="store_true", help="Emit errors as JSON diagnostics")
	common.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (repeatable)")

	p = argparse.ArgumentParser(prog="facadegen", description="Generate delegating facade modules that keep docs and type signatures")
	sub = p.add_subparsers(dest="cmd", required=True)

	gen = sub.add_parser("generate", parents=[common], help="Generate a facade module from a delegation manifest")
	gen.add_argument("manifest", type=Path, help="Path to the delegation manifest")
	gen.add_argument("-o", "--output", type=Path, default=None, help="Write the facade module here (default: stdout)")
	gen.add_argument("--moduledoc", type=str, default=None, help="Docstring for the generated module")

	comp = sub.add_parser("compile", parents=[common], help="Compile module(s) into artifacts under --build-dir")
	comp.add_argument("modules", nargs="+", help="Dotted module name(s)")

	chunks = sub.add_parser("chunks", parents=[common], help="List the chunks of a module's artifact")
	chunks.add_argument("module", help="Dotted module name")

	doc = sub.add_parser("doc", parents=[common], help="Show the documentation of NAME/ARITY in MODULE")
	doc.add_argument("module", help="Dotted module name")
	doc.add_argument("function", help="Function as NAME/ARITY")

	spec = sub.add_parser("spec", parents=[common], help="Show the signature clauses of NAME/ARITY in MODULE")
	spec.add_argument("module", help="Dotted module name")
	spec.add_argument("function", help="Function as NAME/ARITY")
	return p


def _parse_function_ref(text: str) -> tuple[str, int]:
	name, sep, arity = text.rpartition("/")
	if not sep or not name.isidentifier() or not arity.isdigit():
		raise ConfigurationError(message=f"expected NAME/ARITY, got {text!r}")
	return name, int(arity)


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _report(err: FacadeError, as_json: bool) -> int:
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [err.to_dict()]}, sort_keys=True, separators=(",", ":")))
	else:
		print(f"error: {err.format_human()}", file=sys.stderr)
	return 1


def _run(args: argparse.Namespace) -> int:
	config = FacadeConfig.from_env().with_overrides(
		module_paths=args.module_paths,
		build_dir=args.build_dir,
		include_callbacks=args.include_callbacks,
	)
	loader = config.make_loader()

	if args.cmd == "generate":
		manifest_path: Path = args.manifest
		try:
			text = manifest_path.read_text(encoding="utf-8")
		except OSError as err:
			raise ConfigurationError(message=f"cannot read manifest: {err}", path=str(manifest_path)) from err
		manifest = parse_manifest(text, path=str(manifest_path))
		definitions = generate_from_manifest(manifest, loader=loader, spec_mode=config.spec_mode)
		source = render_module(definitions, source=manifest_path.name, moduledoc=args.moduledoc)
		if args.output is None:
			sys.stdout.write(source)
		else:
			args.output.parent.mkdir(parents=True, exist_ok=True)
			args.output.write_text(source, encoding="utf-8")
		return 0

	if args.cmd == "compile":
		if config.build_dir is None:
			raise ConfigurationError(message="compile requires --build-dir or $FACADEGEN_BUILD_DIR")
		for module_id in args.modules:
			artifact = loader.load(module_id)
			print(f"{module_id}\t{config.build_dir / (module_id + '.fca')}\tsha256:{artifact.sha256}")
		return 0

	if args.cmd == "chunks":
		artifact = loader.load(args.module)
		for chunk_id, size in list_chunks(artifact):
			print(f"{chunk_id}\t{size}")
		return 0

	if args.cmd == "doc":
		name, arity = _parse_function_ref(args.function)
		metadata = ModuleMetadata.from_artifact(loader.load(args.module))
		record = find_doc_record(metadata.docs, name, arity)
		if record is None:
			print(MISSING_DOCS)
			return 0
		print(f"{record.kind} {record.name}({', '.join(record.arg_names)})")
		print()
		print(record.doc if isinstance(record.doc, str) else MISSING_DOCS)
		return 0

	if args.cmd == "spec":
		name, arity = _parse_function_ref(args.function)
		metadata = ModuleMetadata.from_artifact(loader.load(args.module))
		clauses = metadata.specs_for(name, arity, config.spec_mode)
		if not clauses:
			print(f"No specification for {args.module}.{name}/{arity}")
			return 0
		for clause in clauses:
			print(clause.render())
		return 0

	raise AssertionError("unreachable")


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	_configure_logging(args.verbose)
	try:
		return _run(args)
	except FacadeError as err:
		return _report(err, args.json)


if __name__ == "__main__":
	raise SystemExit(main())

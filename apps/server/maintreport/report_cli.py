from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import re
import sys
import tempfile
from pathlib import Path

from .config import load_config
from .domain_models import MaintenanceReport, new_report_id
from .errors import MaintReportError
from .report import GlyphAssetCache, render_reports
from .spreadsheet import build_template_xlsx, export_reports_xlsx, parse_reports_from_xlsx


_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def output_filename(name: str) -> str:
    """Return *name* usable as a single path component; separators become "_"."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name).strip(" .") or "report"


def write_atomic(path: Path, content: bytes) -> None:
    """Write *content* via a sibling temp file so *path* is never left partial."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_reports_json(path: Path) -> list[MaintenanceReport]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of reports")
    return [MaintenanceReport.from_dict(r) for r in raw if isinstance(r, dict)]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintenance report interchange tools")
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    sub = parser.add_subparsers(dest="command", required=True)

    pdf = sub.add_parser("pdf", help="Render reports from a JSON store file to PDF")
    pdf.add_argument("input", type=Path, help="Reports JSON (list of records)")
    pdf.add_argument("--id", dest="ids", action="append", default=[], help="Report id to include")
    pdf.add_argument("--output", type=Path, default=None, help="Output PDF path")

    export = sub.add_parser("export", help="Export reports from a JSON store file to XLSX")
    export.add_argument("input", type=Path, help="Reports JSON (list of records)")
    export.add_argument("--output", type=Path, default=None, help="Output XLSX path")

    template = sub.add_parser("template", help="Write the empty upload template")
    template.add_argument("--output", type=Path, default=None, help="Output XLSX path")

    imp = sub.add_parser("import", help="Convert an uploaded XLSX into reports JSON")
    imp.add_argument("input", type=Path, help="Spreadsheet file")
    imp.add_argument("--output", type=Path, default=None, help="Output JSON path")
    return parser.parse_args(argv)


def _run_pdf(args: argparse.Namespace) -> Path:
    reports = load_reports_json(args.input)
    if args.ids:
        wanted = set(args.ids)
        reports = [r for r in reports if r.id in wanted]
    config = load_config(args.config)
    cache = GlyphAssetCache(config.fonts.sources, timeout_s=config.fonts.timeout_s)
    document = asyncio.run(
        render_reports(reports, font_cache=cache, font_family=config.fonts.family)
    )
    out = args.output or args.input.with_name(output_filename(document.filename))
    write_atomic(out, document.content)
    return out


def _run_export(args: argparse.Namespace) -> Path:
    sheet = export_reports_xlsx(load_reports_json(args.input))
    out = args.output or args.input.with_name(output_filename(sheet.filename))
    write_atomic(out, sheet.content)
    return out


def _run_template(args: argparse.Namespace) -> Path:
    sheet = build_template_xlsx()
    out = args.output or Path(sheet.filename)
    write_atomic(out, sheet.content)
    return out


def _run_import(args: argparse.Namespace) -> Path:
    imported = parse_reports_from_xlsx(args.input.read_bytes())
    reports = [
        MaintenanceReport.from_imported(row, new_report_id(i)) for i, row in enumerate(imported)
    ]
    out = args.output or args.input.with_suffix(".json")
    payload = json.dumps([r.to_dict() for r in reports], ensure_ascii=False, indent=2)
    write_atomic(out, payload.encode("utf-8"))
    return out


_COMMANDS = {
    "pdf": _run_pdf,
    "export": _run_export,
    "template": _run_template,
    "import": _run_import,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = parse_args(argv)
    input_path = getattr(args, "input", None)
    if input_path is not None and not input_path.exists():
        print(f"Error: input file not found: {input_path}", file=sys.stderr)
        return 1
    try:
        out = _COMMANDS[args.command](args)
    except json.JSONDecodeError as exc:
        print(f"Error: input file contains invalid JSON: {exc}", file=sys.stderr)
        return 1
    except (MaintReportError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"wrote {args.command}: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

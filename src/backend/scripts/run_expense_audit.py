from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from adapters.ocr import document_from_ocr_payload  # noqa: E402
from common.expense_audit.evaluator import AuditEvaluator  # noqa: E402
from common.expense_audit.models import Rule  # noqa: E402
from pipelines.audit_run import AuditRunReport, Submission, audit_submissions  # noqa: E402
from pipelines.catalog_store import CatalogInputs, LocalCatalogStore, load_catalogs  # noqa: E402
from pipelines.config import get_engine_config  # noqa: E402


logger = logging.getLogger("run_expense_audit")


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def load_submissions(path: Path) -> list[Submission]:
    """
    Read submissions from a JSON file.

    Expected shape:
      [
        {"reference": "...", "requestType": "Business Travel", "ocr": { ...OCR payload... }}
      ]
    """
    raw = _load_json(path)
    if not isinstance(raw, list):
        raise ValueError("Submissions file must be a JSON array.")
    submissions: list[Submission] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"Submission #{index} must be an object.")
        submissions.append(
            Submission(
                reference=str(entry.get("reference") or f"submission-{index + 1}"),
                request_type=str(entry.get("requestType") or ""),
                document=document_from_ocr_payload(entry.get("ocr") or {}),
            )
        )
    return submissions


def run_expense_audit_from_inputs(
    submissions: list[Submission],
    catalogs: CatalogInputs,
    *,
    evaluator: AuditEvaluator | None = None,
) -> AuditRunReport:
    return audit_submissions(submissions, catalogs, evaluator=evaluator)


def _write_markdown(report: AuditRunReport, rules: tuple[Rule, ...], out_path: Path) -> None:
    names = {rule.id: rule.name or rule.id for rule in rules}
    lines = [
        "# Expense Audit",
        "",
        f"Generated at: {report.generated_at.isoformat()}",
        "",
        "## Totals",
    ]
    for key, count in report.totals.items():
        lines.append(f"- {key}: {count}")
    lines.append("")
    lines.append("## Submissions")
    for audit in report.audits:
        verdict = "PASS" if audit.result.passed else "FLAGGED"
        lines.append("")
        lines.append(f"### {audit.reference}: {verdict} (score {audit.result.score})")
        lines.append(f"- Request type: {audit.request_type or '(none)'}")
        if audit.active_rule_ids is None:
            lines.append("- Active rules: all enabled rules")
        else:
            lines.append(f"- Active rules: {', '.join(audit.active_rule_ids) or '(none)'}")
        for rule_id in audit.result.triggered_rule_ids:
            lines.append(f"  - {rule_id}: {names.get(rule_id, rule_id)}")
    out_path.write_text("\n".join(lines), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    config = get_engine_config()

    parser = argparse.ArgumentParser(description="Audit OCR-extracted expense receipts against the rule catalog.")
    parser.add_argument("submissions", type=Path, help="JSON file of submissions to audit.")
    parser.add_argument("--rules", type=Path, default=Path(config.rules_path))
    parser.add_argument("--request-types", type=Path, default=Path(config.request_types_path))
    parser.add_argument("--out", type=Path, default=None, help="Write the report here instead of stdout.")
    parser.add_argument("--format", choices=("json", "md"), default="json")
    parser.add_argument(
        "--write-migrated",
        action="store_true",
        help="Persist request types back to disk when legacy linkage was migrated.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    store = LocalCatalogStore(rules_path=args.rules, request_types_path=args.request_types)
    catalogs = load_catalogs(store, persist_migration=args.write_migrated)
    if catalogs.migrated:
        logger.info("Request type linkage was migrated from legacy rule tags.")

    submissions = load_submissions(args.submissions)
    report = run_expense_audit_from_inputs(
        submissions,
        catalogs,
        evaluator=AuditEvaluator(weights=config.weights),
    )
    logger.info(
        "Audited %d submission(s): %d passed, %d flagged.",
        len(report.audits),
        report.totals.get("passed", 0),
        report.totals.get("flagged", 0),
    )

    if args.format == "md":
        if args.out is None:
            parser.error("--format md requires --out")
        _write_markdown(report, catalogs.rules, args.out)
        return 0

    payload = report.model_dump_json(indent=2, by_alias=True)
    if args.out is None:
        print(payload)
    else:
        args.out.write_text(payload, encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Run the compare -> monthly activity -> download workflow from CLI.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

from agent_reports.config import get_client_runtime_settings, get_reporting_api_settings
from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.downloads import ReportKind
from agent_reports.domain.report_pipeline import PipelineState
from agent_reports.domain.timeframe import TIMEFRAME_MODES
from agent_reports.logging_utils import configure_logging
from agent_reports.presentation.messages import StatusMessage
from agent_reports.presentation.tables import (
    ACTIVITY_EMPTY_MESSAGE,
    COMPARE_EMPTY_MESSAGE,
    PREVIEW_PRIORITY_COLUMN,
    render_table,
)
from agent_reports.services import ReportPipeline, ReportSaver
from agent_reports.services.report_pipeline_service import default_timeframe_inputs


def _print_status(state: PipelineState, status: StatusMessage) -> None:
    print(f"[{state.stage.value}] {status.text}", file=sys.stderr)


def main() -> int:
    defaults = default_timeframe_inputs(date.today())
    parser = argparse.ArgumentParser(description="Compare agents and build the monthly activity report.")
    parser.add_argument("file_id", help="Identifier of a previously uploaded dataset.")
    parser.add_argument("compare_file", type=Path, help="Compare spreadsheet (.xlsx or .csv).")
    parser.add_argument("--timeframe", choices=TIMEFRAME_MODES, default="month")
    parser.add_argument("--month", default=defaults.month, help="YYYY-MM (month timeframe).")
    parser.add_argument("--start-date", default=defaults.start_date, help="YYYY-MM-DD (custom timeframe).")
    parser.add_argument("--end-date", default=defaults.end_date, help="YYYY-MM-DD (custom timeframe).")
    parser.add_argument("--activity-type", default="all")
    parser.add_argument("--skip-activity", action="store_true", help="Stop after the compare report.")
    parser.add_argument("--output-dir", default=None, help="Where to save reports.")
    args = parser.parse_args()

    runtime = get_client_runtime_settings()
    configure_logging(runtime.log_level)

    client = ReportingAPIClient(settings=get_reporting_api_settings())
    pipeline = ReportPipeline(client=client, file_id=args.file_id, listener=_print_status)
    saver = ReportSaver(args.output_dir or runtime.download_dir)

    content = args.compare_file.read_bytes() if args.compare_file.is_file() else None
    outcome = pipeline.start_compare(args.compare_file.name, content)
    summary: dict = {"file_id": args.file_id, "compare": outcome.status.text, "saved": []}
    if not outcome.ok:
        print(json.dumps(summary, indent=2))
        return 1

    summary["compare_summary"] = pipeline.compare_summary()
    compare_rows = pipeline.state.compare.preview_rows if pipeline.state.compare else ()
    print(render_table(compare_rows, COMPARE_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN).to_text(), file=sys.stderr)

    downloads = [ReportKind.COMPARE]
    if not args.skip_activity and pipeline.state.can_generate_activity:
        activity = pipeline.generate_activity(
            timeframe_mode=args.timeframe,
            month=args.month,
            start_date=args.start_date,
            end_date=args.end_date,
            activity_type=args.activity_type,
        )
        summary["activity"] = activity.status.text
        summary["activity_summary"] = pipeline.activity_summary()
        activity_rows = pipeline.state.activity.preview_rows if pipeline.state.activity else ()
        print(render_table(activity_rows, ACTIVITY_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN).to_text(), file=sys.stderr)
        if activity.ok:
            downloads.append(ReportKind.ACTIVITY)

    exit_code = 0
    for kind in downloads:
        result = pipeline.download(kind)
        if result.download is None:
            exit_code = 1
            continue
        summary["saved"].append(str(saver.save(result.download)))

    print(json.dumps(summary, indent=2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())

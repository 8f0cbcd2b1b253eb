"""
cli.py

Command-line access to the same report / alert / schedule services the API uses.

  python cli.py report filter --last Smith --status ABSENT --date 2024-03-01
  python cli.py report late --date 2024-03-01
  python cli.py report early --last Smith
  python cli.py report summary --period 30days
  python cli.py alerts [--student STU001]
  python cli.py students list [--search ann]
  python cli.py days-off list --start 2024-01-01 --end 2024-06-30

Every command prints JSON on stdout; errors go to stderr with exit code 1.
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()  # before settings are read

from config.settings import settings  # noqa: E402
from database.db import SessionLocal, init_db  # noqa: E402
from pydantic import ValidationError  # noqa: E402
from schemas.reports import ReportFilter  # noqa: E402
from schemas.students import Student as StudentSchema  # noqa: E402
from schemas.schedule import DayOff  # noqa: E402
from services.alert_service import AlertService  # noqa: E402
from services.exceptions import DomainError  # noqa: E402
from services.report_service import ReportService  # noqa: E402
from services.schedule_service import ScheduleService  # noqa: E402
from services.student_service import StudentService  # noqa: E402

logger = logging.getLogger("cli")


def _date(value: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cli.py", description="School attendance command line")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="attendance reports")
    report_sub = report.add_subparsers(dest="action", required=True)

    for name, help_text in (("filter", "filter attendance records"),
                            ("late", "late arrivals"),
                            ("early", "early dismissals")):
        p = report_sub.add_parser(name, help=help_text)
        p.add_argument("--last", help="last name (substring, case-insensitive)")
        p.add_argument("--date", type=_date, help="YYYY-MM-DD")
        if name == "filter":
            p.add_argument("--status", type=str.upper, choices=["PRESENT", "LATE", "ABSENT", "EXCUSED"])

    summary = report_sub.add_parser("summary", help="report summary and insights")
    summary.add_argument("--period", choices=["today", "7days", "30days", "90days"])

    alerts = sub.add_parser("alerts", help="threshold alerts")
    alerts.add_argument("--student", help="student id, e.g. STU001")
    alerts.add_argument("--all", action="store_true", help="include students with no triggered alert")

    students = sub.add_parser("students", help="students")
    students_sub = students.add_subparsers(dest="action", required=True)
    students_list = students_sub.add_parser("list")
    students_list.add_argument("--search")
    students_list.add_argument("--grade")

    days_off = sub.add_parser("days-off", help="scheduled days off")
    days_off_sub = days_off.add_subparsers(dest="action", required=True)
    days_off_list = days_off_sub.add_parser("list")
    days_off_list.add_argument("--start", type=_date)
    days_off_list.add_argument("--end", type=_date)

    return parser


def _records(result):
    return [r.model_dump(mode="json") for r in result.records]


def run(args, db):
    """Executes a parsed command; returns a JSON-serialisable payload."""
    if args.command == "report":
        service = ReportService(db)
        if args.action == "filter":
            if not (args.last or args.status or args.date):
                raise DomainError("At least one filter (--last, --status, --date) must be provided.",
                                  code="MISSING_FILTER")
            filters = ReportFilter(last_name=args.last, status=args.status, date=args.date)
            return _records(service.generate_report(filters, use_cache=False))
        if args.action == "late":
            filters = ReportFilter(last_name=args.last, date=args.date, only_late=True)
            return _records(service.generate_report(filters, use_cache=False))
        if args.action == "early":
            filters = ReportFilter(last_name=args.last, date=args.date, only_early_dismissal=True)
            return _records(service.generate_report(filters, use_cache=False))
        filters = ReportFilter(relative_period=args.period) if args.period else ReportFilter()
        result = service.generate_report(filters, use_cache=False)
        return {
            "summary": result.summary.model_dump(mode="json"),
            "insights": result.insights.model_dump(mode="json"),
        }

    if args.command == "alerts":
        service = AlertService(db)
        if args.student:
            return service.evaluate_student(args.student).model_dump(mode="json")
        return [s.model_dump(mode="json") for s in service.evaluate_all(only_triggered=not args.all)]

    if args.command == "students":
        students = StudentService(db).list(search=args.search, grade=args.grade)
        return [StudentSchema.model_validate(s).model_dump() for s in students]

    if args.command == "days-off":
        days = ScheduleService(db).list_days_off(args.start, args.end)
        return [DayOff.model_validate(d).model_dump(mode="json") for d in days]

    raise DomainError(f"Unknown command: {args.command}")


def main(argv=None, session_factory=None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stderr)
    args = build_parser().parse_args(argv)

    if session_factory is None:
        init_db()
        session_factory = SessionLocal

    db = session_factory()
    try:
        payload = run(args, db)
    except (DomainError, ValidationError) as e:
        print(getattr(e, "message", str(e)), file=sys.stderr)
        return 1
    finally:
        db.close()

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Export of worker earnings to Excel."""

from __future__ import annotations

from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from shared.services.remuneration_aggregator import AttendanceReport, TaskEarningsReport

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _period_label(report) -> str:
    start = report.start_date.strftime("%d.%m.%Y") if report.start_date else "..."
    end = report.end_date.strftime("%d.%m.%Y") if report.end_date else "..."
    return f"{start} - {end}"


def _style_header(worksheet) -> None:
    header_font = Font(bold=True)
    header_fill = PatternFill(start_color="E5E5E5", end_color="E5E5E5", fill_type="solid")
    for cell in worksheet[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def build_earnings_workbook(report: TaskEarningsReport, attendance: Optional[AttendanceReport] = None) -> bytes:
    """Builds an xlsx file with task lines, per-type totals and, optionally, attendance."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Tasks"

    ws.append(["Date", "Task", "Order", "Task amount", "Present workers", "Policy", "Earnings"])
    _style_header(ws)
    for line in report.lines:
        ws.append([
            line.completed_at.strftime("%d.%m.%Y") if line.completed_at else "",
            line.task_type.value,
            line.order_id,
            float(line.task_amount),
            line.present_workers,
            line.policy.value,
            float(line.earnings),
        ])
    ws.append([])
    ws.append([f"TOTAL ({report.worker_name}, {_period_label(report)})", "", "", "", "", "", float(report.total_earnings)])
    _auto_fit_columns(ws)

    ws_types = wb.create_sheet("By task type")
    ws_types.append(["Task", "Count", "Earnings"])
    _style_header(ws_types)
    for task_type, summary in sorted(report.by_task_type.items()):
        ws_types.append([task_type, summary.count, float(summary.earnings)])
    _auto_fit_columns(ws_types)

    if attendance is not None:
        _add_attendance_sheet(wb, attendance)

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _auto_fit_columns(worksheet) -> None:
    for column in worksheet.columns:
        max_length = 0
        column_letter = column[0].column_letter
        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, 60)


def _add_attendance_sheet(workbook: Workbook, attendance: AttendanceReport) -> None:
    ws = workbook.create_sheet("Attendance")
    ws.append(["Date", "Hours", "Order", "Amount"])
    _style_header(ws)
    for line in attendance.lines:
        ws.append([
            line.date.strftime("%d.%m.%Y"),
            float(line.hours_worked) if line.hours_worked is not None else "full day",
            line.order_id or "",
            float(line.amount),
        ])
    ws.append([])
    ws.append(["TOTAL", float(attendance.total_hours), "", float(attendance.total_remuneration)])
    _auto_fit_columns(ws)

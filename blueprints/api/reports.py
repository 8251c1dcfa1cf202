"""Report routes: usage statistics and the reservations Excel export."""

import io

from flask import request, Response
from flask_login import login_required
from openpyxl import Workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from models.reservation import get_reservation_stats, get_reservations, RESERVATION_STATUSES
from utils.api_response import api_success, api_error
from utils.datetime_helpers import utc_now
from utils.decorators import role_required
from utils.messages import MESSAGES

STATUS_LABELS = {
    'pending': 'Pendente',
    'approved': 'Aprovada',
    'rejected': 'Rejeitada',
}

PRIORITY_LABELS = {
    'low': 'Baixa',
    'normal': 'Normal',
    'high': 'Alta',
    'urgent': 'Urgente',
}


def register_routes(bp):
    """Register report routes on the blueprint."""

    @bp.route('/reports/usage')
    @login_required
    @role_required('admin', 'faculty')
    def usage_report():
        """
        Usage statistics.

        Query params:
            date_from, date_to: creation window (optional)
            months: length of the monthly trend (default 6)
        """
        months = request.args.get('months', 6, type=int)
        if months < 1 or months > 24:
            return api_error(MESSAGES['invalid_value'], status=400, field='months')

        try:
            stats = get_reservation_stats(
                date_from=request.args.get('date_from'),
                date_to=request.args.get('date_to'),
                months=months
            )
        except ValueError:
            return api_error(MESSAGES['invalid_value'], status=400)

        return api_success(data=stats)

    @bp.route('/reports/reservations.xlsx')
    @login_required
    @role_required('admin')
    def export_reservations():
        """Export reservations to Excel. Query param: status."""
        status = request.args.get('status')
        if status and status not in RESERVATION_STATUSES:
            return api_error(MESSAGES['invalid_status'].format(status=status), status=400)

        return export_reservations_handler(status)


def export_reservations_handler(status: str = None) -> Response:
    """
    Generate and return the reservations Excel export.

    Args:
        status: Only reservations in this status (optional)

    Returns:
        Response: Excel file download response
    """
    reservations = get_reservations(status=status)

    wb = Workbook()
    ws = wb.active
    ws.title = "Reservas"

    # Styles
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(
        start_color="1E3A8A", end_color="1E3A8A", fill_type="solid"
    )
    header_alignment = Alignment(
        horizontal="center", vertical="center", wrap_text=True
    )
    thin_border = Border(
        left=Side(style='thin', color="D4D4D4"),
        right=Side(style='thin', color="D4D4D4"),
        top=Side(style='thin', color="D4D4D4"),
        bottom=Side(style='thin', color="D4D4D4")
    )
    data_alignment = Alignment(vertical="center")
    center_alignment = Alignment(horizontal="center", vertical="center")
    alt_fill = PatternFill(
        start_color="F5F5F5", end_color="F5F5F5", fill_type="solid"
    )

    headers = [
        "ID", "Recurso", "Solicitante", "Início (UTC)", "Término (UTC)",
        "Finalidade", "Status", "Prioridade", "Pacote"
    ]
    last_col = chr(ord('A') + len(headers) - 1)

    # Title row
    ws.merge_cells(f'A1:{last_col}1')
    title_cell = ws.cell(row=1, column=1, value="Relatório de Reservas - ResourceHub")
    title_cell.font = Font(bold=True, size=14, color="1E3A8A")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Subtitle with filter info
    subtitle_parts = []
    if status:
        subtitle_parts.append(f"Status: {STATUS_LABELS.get(status, status)}")
    subtitle_parts.append(f"Total: {len(reservations)} reservas")
    ws.merge_cells(f'A2:{last_col}2')
    subtitle_cell = ws.cell(row=2, column=1, value=" | ".join(subtitle_parts))
    subtitle_cell.font = Font(size=10, color="666666")
    subtitle_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Headers (row 4)
    header_row = 4
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border

    ws.freeze_panes = f'A{header_row + 1}'

    # Data rows
    for row_idx, res in enumerate(reservations, header_row + 1):
        values = [
            res['id'],
            res.get('resource_name', ''),
            res.get('user_name', ''),
            res['start_date'].replace('T', ' '),
            res['end_date'].replace('T', ' '),
            res.get('purpose', ''),
            STATUS_LABELS.get(res['status'], res['status']),
            PRIORITY_LABELS.get(res['priority'], res['priority']),
            res.get('package_name') or '-',
        ]
        is_alt = (row_idx - header_row) % 2 == 0
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = thin_border
            cell.alignment = data_alignment
            if is_alt:
                cell.fill = alt_fill

        for col in (1, 7, 8):
            ws.cell(row=row_idx, column=col).alignment = center_alignment

    # Auto-adjust column widths
    for col_cells in ws.columns:
        anchor_cell = next((c for c in col_cells if not isinstance(c, MergedCell)), None)
        if anchor_cell is None:
            continue

        max_length = 10
        for cell in col_cells:
            if isinstance(cell, MergedCell) or cell.row < header_row:
                continue
            max_length = max(max_length, len(str(cell.value or '')))
        ws.column_dimensions[anchor_cell.column_letter].width = min(max_length + 3, 50)

    # Save to buffer
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)

    filename = f"reservas_{utc_now().strftime('%Y-%m-%d')}.xlsx"

    return Response(
        output.getvalue(),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )

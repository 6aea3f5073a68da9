"""
Unit Economics: Workbook Import & Export
Reads raw inputs from a two-column Field/Value sheet and writes a calculation
out as a styled workbook.
"""
import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

HEADER_FONT = Font(bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='2E2E38', end_color='2E2E38', fill_type='solid')
THIN_BORDER = Border(left=Side(style='thin'), right=Side(style='thin'),
                     top=Side(style='thin'), bottom=Side(style='thin'))

FIELD_HEADERS = ('field', 'parameter', 'id')
VALUE_HEADERS = ('value',)


def read_xlsx_sheet(source, sheet_name=None):
    wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.active
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    if len(rows) < 2:
        return []
    headers = [str(h).strip() if h else f'col_{i}' for i, h in enumerate(rows[0])]
    return [dict(zip(headers, row)) for row in rows[1:]]


def read_raw_inputs(source, sheet_name=None):
    """Field/Value sheet -> RawInputs. Rows without a field id are skipped."""
    rows = read_xlsx_sheet(source, sheet_name)
    if not rows:
        return {}
    headers = {h.lower(): h for h in rows[0]}
    key_col = next((headers[h] for h in FIELD_HEADERS if h in headers), None)
    val_col = next((headers[h] for h in VALUE_HEADERS if h in headers), None)
    if key_col is None or val_col is None:
        raise ValueError("Input sheet needs 'Field' and 'Value' columns")
    raw = {}
    for row in rows:
        key = row.get(key_col)
        if key is None or not str(key).strip():
            continue
        raw[str(key).strip()] = row.get(val_col)
    return raw


def _ws_write(ws, headers, rows):
    for c, h in enumerate(headers, 1):
        cell = ws.cell(row=1, column=c, value=h)
        cell.font = HEADER_FONT; cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center'); cell.border = THIN_BORDER
    for r, row in enumerate(rows, 2):
        for c, val in enumerate(row, 1):
            cell = ws.cell(row=r, column=c, value=val); cell.border = THIN_BORDER
    for col in ws.columns:
        ml = max(len(str(cell.value or '')) for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(ml + 2, 60)


def build_workbook(template_id, raw, result):
    wb = openpyxl.Workbook()
    metrics = result['metrics']; verdict = result['verdict']

    ws = wb.active; ws.title = 'Summary'
    _ws_write(ws, ['Item', 'Value'], [
        ['Template', template_id],
        ['Verdict', verdict['status']],
        ['Message', verdict['message']],
        ['Flags', len(result['flags'])],
    ])

    rows = []
    cm = metrics['contributionMargin']
    rows.append(['Contribution margin', cm['value'], cm['formatted'], ''])
    if 'ltv' in metrics:
        rows.append(['LTV', metrics['ltv']['value'], metrics['ltv']['formatted'], metrics['ltv']['formula']])
    if 'ltvCacRatio' in metrics:
        r = metrics['ltvCacRatio']
        rows.append(['LTV/CAC', r['value'], r['formatted'], r['benchmark']])
    pb = metrics['payback']
    rows.append(['Payback', pb['value'], pb['unit'], pb['benchmark']])
    if 'breakEven' in metrics:
        be = metrics['breakEven']
        rows.append(['Break-even units', be['unitsNeeded'], be['status'], ''])
    _ws_write(wb.create_sheet('Metrics'), ['Metric', 'Value', 'Formatted', 'Benchmark / Detail'], rows)

    _ws_write(wb.create_sheet('Flags'), ['Severity', 'Message', 'Recommendation'], [
        [f['severity'], f['message'], f['recommendation']] for f in result['flags']
    ])

    _ws_write(wb.create_sheet('Inputs'), ['Field', 'Value'], [
        [k, v] for k, v in (raw or {}).items()
    ])
    return wb


def export_calculation(template_id, raw, result, dest):
    """Write the workbook to a path or binary file object."""
    wb = build_workbook(template_id, raw, result)
    wb.save(dest)
    return dest

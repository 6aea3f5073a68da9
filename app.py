"""
Unit Economics Calculator: Flask API Server
Template catalog, validation, normalization and calculation over JSON.
The engines are pure; the only mutable state here is the last calculation,
kept for workbook export.
"""
import logging
import os
import traceback
from flask import Flask, jsonify, request, send_file
from economics.engine import calculate
from economics.scenarios import run_scenarios
from economics.templates import TEMPLATES, get_template, describe_template
from economics.types import is_error
from economics.workbook import read_raw_inputs, export_calculation

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
EXPORT_DIR = os.environ.get('EXPORT_DIR', os.path.join(os.path.dirname(__file__), 'data'))

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

app = Flask(__name__)

STATE = {'templateId': None, 'inputs': None, 'normalized': None, 'result': None}


def _prepare(template_id, raw):
    """validate -> normalize. Returns (normalized, None) or (None, (body, status))."""
    template = get_template(template_id)
    if template is None:
        return None, ({'status': 'error', 'message': f"Unknown template '{template_id}'",
                       'templates': list(TEMPLATES)}, 400)
    if not isinstance(raw, dict):
        return None, ({'status': 'error', 'message': 'inputs must be an object'}, 400)

    validation = template['validate'](raw)
    if not validation['success']:
        return None, ({'status': 'invalid', 'errors': validation['errors']}, 422)

    normalized = template['normalize'](raw)
    if is_error(normalized):
        return None, ({'status': 'error', 'error': normalized}, 422)
    return normalized, None


def _calculate_and_store(template_id, raw):
    normalized, failure = _prepare(template_id, raw)
    if failure:
        body, status = failure
        return jsonify(body), status

    result = calculate(normalized)
    if is_error(result):
        return jsonify({'status': 'error', 'error': result}), 422

    STATE.update({'templateId': template_id, 'inputs': dict(raw),
                  'normalized': normalized, 'result': result})
    return jsonify({'status': 'ok', 'templateId': template_id,
                    'inputs': normalized.to_dict(), 'result': result})


# ══════════════════════════════════════════════════════════════
#  ROUTES
# ══════════════════════════════════════════════════════════════

@app.route('/api/templates')
def api_templates():
    return jsonify({'templates': [describe_template(t) for t in TEMPLATES.values()]})


@app.route('/api/templates/<template_id>')
def api_template(template_id):
    template = get_template(template_id)
    if template is None:
        return jsonify({'error': f"Unknown template '{template_id}'"}), 404
    return jsonify(describe_template(template))


@app.route('/api/calculate', methods=['POST'])
def api_calculate():
    body = request.get_json(silent=True) or {}
    return _calculate_and_store(body.get('templateId'), body.get('inputs', {}))


@app.route('/api/scenarios', methods=['POST'])
def api_scenarios():
    """Run the base inputs plus each scenario's overrides, side by side."""
    body = request.get_json(silent=True) or {}
    normalized, failure = _prepare(body.get('templateId'), body.get('inputs', {}))
    if failure:
        b, status = failure
        return jsonify(b), status

    scenarios = [{'id': 'base', 'name': 'Base', 'overrides': []}] + list(body.get('scenarios', []))
    try:
        results = run_scenarios(normalized, scenarios)
    except (ValueError, TypeError, AttributeError) as e:
        return jsonify({'status': 'error', 'message': str(e)}), 400
    return jsonify({'status': 'ok', 'templateId': body.get('templateId'), 'scenarios': results})


@app.route('/api/import', methods=['POST'])
def api_import():
    """Calculate from an uploaded Field/Value workbook."""
    upload = request.files.get('file')
    template_id = request.form.get('templateId')
    if upload is None:
        return jsonify({'error': 'file required'}), 400
    try:
        raw = read_raw_inputs(upload.stream, request.form.get('sheet') or None)
    except ValueError as e:
        return jsonify({'status': 'error', 'message': str(e)}), 400
    except Exception as e:
        traceback.print_exc()
        return jsonify({'status': 'error', 'message': f"Could not read workbook: {e}"}), 400
    return _calculate_and_store(template_id, raw)


@app.route('/api/export')
def api_export():
    """Export the last successful calculation to Excel."""
    if STATE['result'] is None:
        return jsonify({'error': 'Nothing calculated yet'}), 404
    try:
        export_path = os.path.join(EXPORT_DIR, 'unit_economics.xlsx')
        os.makedirs(EXPORT_DIR, exist_ok=True)
        export_calculation(STATE['templateId'], STATE['inputs'], STATE['result'], export_path)
        return send_file(export_path, as_attachment=True, download_name='UnitEconomics_Export.xlsx')
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))

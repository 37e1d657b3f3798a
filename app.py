"""
Flask web application for the Invoicing ROI Simulator.

JSON API over the calculation engine and the scenario table, plus a
single-page form served at ``/``.  Routes live on the ``api`` blueprint;
``create_app`` builds a Flask app around it and binds the scenario store,
so tests can point each app at its own database.  Run via
``python main.py`` which starts the server on localhost:5000.
"""

from __future__ import annotations

import io
import logging
import math
from typing import Any, Dict, Mapping, Optional

from flask import Blueprint, Flask, jsonify, render_template_string, request, send_file
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

import config as cfg
import report
import store
from simulation import InvalidInputError, ROIInputs, ROIResults, run_simulation

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)

# Errors matplotlib or the calculation may raise while rendering a PDF
RENDER_ERRORS = (RuntimeError, ValueError, OverflowError)


# ═══════════════════════════════════════════════════════════════════
# Envelope helpers
# ═══════════════════════════════════════════════════════════════════

def ok(status: int = 200, **payload: Any):
    return jsonify({"success": True, **payload}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def _results_from_mapping(data: Mapping[str, Any]) -> ROIResults:
    """Parse precomputed results sent back by the client for a report."""
    values = {}
    for key in ("monthly_savings", "cumulative_savings", "net_savings",
                "payback_months", "roi_percentage"):
        raw = data.get(key)
        if raw is None and key in ("payback_months", "roi_percentage"):
            values[key] = None
            continue
        if raw is None or isinstance(raw, bool):
            raise InvalidInputError(f"results.{key} is required")
        try:
            values[key] = float(raw)
        except (TypeError, ValueError, OverflowError):
            raise InvalidInputError(f"results.{key} must be a number") from None
        if not math.isfinite(values[key]):
            raise InvalidInputError(f"results.{key} must be a finite number")
    return ROIResults(**values)


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Invoicing ROI Simulator</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.75);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.18);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --indigo:#818cf8;
    --emerald:#34d399;
    --red:#f87171;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:system-ui,-apple-system,sans-serif;line-height:1.5;
  }
  .container{max-width:980px;margin:0 auto;padding:2rem 1.5rem}
  h1{font-size:1.8rem;margin-bottom:.25rem}
  .sub{color:var(--text-secondary);margin-bottom:1.5rem}
  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-md);padding:1.25rem;margin-bottom:1.25rem;
  }
  .grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(260px,1fr));gap:.9rem}
  label{display:block;font-size:.85rem;color:var(--text-secondary)}
  input{
    width:100%;margin-top:.25rem;padding:.55rem .7rem;border-radius:8px;
    border:1px solid var(--border-subtle);background:var(--bg-input);
    color:var(--text-primary);font-size:.95rem;
  }
  .actions{margin-top:1rem;display:flex;gap:.6rem;flex-wrap:wrap}
  button{
    padding:.55rem 1rem;border-radius:8px;border:none;cursor:pointer;
    background:var(--indigo);color:#0b1020;font-weight:600;
  }
  button.secondary{background:transparent;color:var(--indigo);border:1px solid var(--indigo)}
  button.danger{background:transparent;color:var(--red);border:1px solid var(--red)}
  button:disabled{opacity:.5;cursor:default}
  .metrics{display:grid;grid-template-columns:repeat(auto-fill,minmax(170px,1fr));gap:.8rem}
  .metric .v{font-size:1.35rem;font-weight:700;color:var(--emerald)}
  .metric .k{font-size:.8rem;color:var(--text-secondary)}
  table{width:100%;border-collapse:collapse;font-size:.9rem}
  th,td{text-align:left;padding:.45rem .4rem;border-bottom:1px solid var(--border-subtle)}
  th{color:var(--text-secondary);font-weight:500}
  #status{min-height:1.4rem;margin-top:.6rem;font-size:.9rem}
  #status.error{color:var(--red)}
  .hidden{display:none}
</style>
</head>
<body>
<div class="container">
  <h1>Invoicing ROI Simulator</h1>
  <p class="sub">Estimate what automating accounts-payable invoice processing saves you.</p>

  <form id="roi-form" class="card">
    <div class="grid">
      <label>Scenario name
        <input type="text" name="scenario_name" placeholder="e.g. Q4 pilot">
      </label>
      {% for name, label, step in fields %}
      <label>{{ label }}
        <input type="number" step="{{ step }}" name="{{ name }}" value="{{ defaults[name] }}" required>
      </label>
      {% endfor %}
    </div>
    <div class="actions">
      <button type="submit" id="run-btn">Run simulation</button>
      <button type="button" class="secondary" id="save-btn">Save scenario</button>
    </div>
    <div id="status"></div>
  </form>

  <div id="results" class="card hidden">
    <h2 style="font-size:1.1rem;margin-bottom:.8rem">Results</h2>
    <div class="metrics">
      <div class="metric"><div class="v" id="r-monthly"></div><div class="k">Monthly savings</div></div>
      <div class="metric"><div class="v" id="r-cumulative"></div><div class="k">Cumulative savings</div></div>
      <div class="metric"><div class="v" id="r-net"></div><div class="k">Net savings</div></div>
      <div class="metric"><div class="v" id="r-payback"></div><div class="k">Payback period</div></div>
      <div class="metric"><div class="v" id="r-roi"></div><div class="k">ROI</div></div>
    </div>
    <div class="actions">
      <input type="email" id="email" placeholder="you@company.com" style="max-width:260px">
      <button type="button" class="secondary" id="report-btn">Download PDF report</button>
    </div>
  </div>

  <div class="card">
    <h2 style="font-size:1.1rem;margin-bottom:.8rem">Saved scenarios</h2>
    <table>
      <thead><tr><th>Name</th><th>Monthly savings</th><th>Payback</th><th>ROI</th><th>Created</th><th></th></tr></thead>
      <tbody id="scenario-rows"><tr><td colspan="6">Loading…</td></tr></tbody>
    </table>
  </div>
</div>

<script>
(function(){
  var form = document.getElementById('roi-form');
  var statusEl = document.getElementById('status');
  var numericFields = {{ field_names|tojson }};
  var lastResults = null, lastInputs = null;

  function money(v){ return v === null ? 'n/a' : '$' + Number(v).toLocaleString(undefined,{maximumFractionDigits:0}); }
  function months(v){ return v === null ? 'never' : Number(v).toFixed(1) + ' months'; }
  function pct(v){ return v === null ? 'n/a' : Number(v).toFixed(1) + '%'; }

  function setStatus(msg, isError){
    statusEl.textContent = msg || '';
    statusEl.className = isError ? 'error' : '';
  }

  function collect(){
    var data = {};
    numericFields.forEach(function(n){ data[n] = parseFloat(form.elements[n].value); });
    data.scenario_name = form.elements['scenario_name'].value.trim();
    return data;
  }

  function call(method, url, body){
    var opts = {method: method, headers: {'Content-Type': 'application/json'}};
    if (body !== undefined) opts.body = JSON.stringify(body);
    return fetch(url, opts).then(function(res){
      return res.json().then(function(json){
        if (!json.success) throw new Error(json.error || ('HTTP ' + res.status));
        return json;
      });
    });
  }

  function showResults(r){
    lastResults = r;
    document.getElementById('r-monthly').textContent = money(r.monthly_savings);
    document.getElementById('r-cumulative').textContent = money(r.cumulative_savings);
    document.getElementById('r-net').textContent = money(r.net_savings);
    document.getElementById('r-payback').textContent = months(r.payback_months);
    document.getElementById('r-roi').textContent = pct(r.roi_percentage);
    document.getElementById('results').classList.remove('hidden');
  }

  function simulate(){
    lastInputs = collect();
    return call('POST', '/simulate', lastInputs).then(function(json){
      showResults(json.results);
    });
  }

  function refreshList(){
    return call('GET', '/scenarios').then(function(json){
      var tbody = document.getElementById('scenario-rows');
      tbody.innerHTML = '';
      if (!json.scenarios.length){
        tbody.innerHTML = '<tr><td colspan="6">No saved scenarios yet.</td></tr>';
        return;
      }
      json.scenarios.forEach(function(s){
        var tr = document.createElement('tr');
        [s.scenario_name, money(s.monthly_savings), months(s.payback_months),
         pct(s.roi_percentage), (s.created_at || '').slice(0, 16).replace('T', ' ')]
          .forEach(function(text){
            var td = document.createElement('td'); td.textContent = text; tr.appendChild(td);
          });
        var td = document.createElement('td');
        var load = document.createElement('button');
        load.type = 'button'; load.className = 'secondary'; load.textContent = 'Load';
        load.onclick = function(){ loadScenario(s.id); };
        var del = document.createElement('button');
        del.type = 'button'; del.className = 'danger'; del.textContent = 'Delete';
        del.style.marginLeft = '.4rem';
        del.onclick = function(){ deleteScenario(s.id); };
        td.appendChild(load); td.appendChild(del); tr.appendChild(td);
        tbody.appendChild(tr);
      });
    }).catch(function(err){ setStatus(err.message, true); });
  }

  function loadScenario(id){
    call('GET', '/scenarios/' + id).then(function(json){
      var s = json.scenario;
      form.elements['scenario_name'].value = s.scenario_name;
      numericFields.forEach(function(n){ form.elements[n].value = s[n]; });
      return simulate();
    }).then(function(){ setStatus('Loaded scenario.'); })
      .catch(function(err){ setStatus(err.message, true); });
  }

  function deleteScenario(id){
    if (!confirm('Delete this scenario?')) return;
    call('DELETE', '/scenarios/' + id).then(function(){
      setStatus('Scenario deleted.');
      return refreshList();
    }).catch(function(err){ setStatus(err.message, true); });
  }

  form.addEventListener('submit', function(e){
    e.preventDefault();
    var btn = document.getElementById('run-btn');
    btn.disabled = true; btn.textContent = 'Calculating...';
    simulate().then(function(){ setStatus(''); })
      .catch(function(err){ setStatus(err.message, true); })
      .then(function(){ btn.disabled = false; btn.textContent = 'Run simulation'; });
  });

  document.getElementById('save-btn').addEventListener('click', function(){
    call('POST', '/scenarios', collect()).then(function(json){
      showResults(json.scenario_results);
      setStatus('Saved "' + json.scenario.scenario_name + '".');
      return refreshList();
    }).catch(function(err){ setStatus(err.message, true); });
  });

  document.getElementById('report-btn').addEventListener('click', function(){
    if (!lastResults){ setStatus('Run a simulation first.', true); return; }
    var body = {
      email: document.getElementById('email').value.trim(),
      results: lastResults,
      inputs: lastInputs,
      scenario_name: lastInputs && lastInputs.scenario_name
    };
    call('POST', '/report/generate', body).then(function(json){
      var bytes = atob(json.pdf_base64), arr = new Uint8Array(bytes.length);
      for (var i = 0; i < bytes.length; i++) arr[i] = bytes.charCodeAt(i);
      var url = URL.createObjectURL(new Blob([arr], {type: 'application/pdf'}));
      var a = document.createElement('a');
      a.href = url; a.download = json.filename; a.click();
      URL.revokeObjectURL(url);
      setStatus('Report downloaded.');
    }).catch(function(err){ setStatus(err.message, true); });
  });

  refreshList();
})();
</script>
</body>
</html>
"""

FORM_FIELDS = [
    ("monthly_invoice_volume", "Monthly invoice volume", "1"),
    ("num_ap_staff", "Number of AP staff", "1"),
    ("avg_hours_per_invoice", "Avg hours per invoice", "0.01"),
    ("hourly_wage", "Hourly wage", "0.01"),
    ("error_rate_manual", "Manual error rate (%)", "0.01"),
    ("error_cost", "Cost per error", "0.01"),
    ("time_horizon_months", "Time horizon (months)", "1"),
    ("one_time_implementation_cost", "One-time implementation cost", "1"),
]


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@api.route("/", methods=["GET"])
def index():
    return render_template_string(
        HTML_TEMPLATE,
        fields=FORM_FIELDS,
        field_names=[name for name, _, _ in FORM_FIELDS],
        defaults=cfg.DEFAULT_INPUTS,
    )


@api.route("/health", methods=["GET"])
def health():
    return ok(message="Backend is running!")


@api.route("/simulate", methods=["POST"])
def simulate():
    try:
        inputs = ROIInputs.from_mapping(_json_body())
        results = run_simulation(inputs)
    except InvalidInputError as e:
        return fail(str(e), 400)
    return ok(inputs=inputs.to_dict(), results=results.to_dict())


@api.route("/scenarios", methods=["POST"])
def create_scenario():
    try:
        data = _json_body()
        name = str(data.get("scenario_name") or "").strip()
        if not name:
            raise InvalidInputError("scenario_name is required")
        inputs = ROIInputs.from_mapping(data)
        results = run_simulation(inputs)
    except InvalidInputError as e:
        return fail(str(e), 400)

    try:
        scenario = store.create_scenario(name, inputs, results)
    except SQLAlchemyError:
        store.db.session.rollback()
        logger.exception("Failed to save scenario %r", name)
        return fail("Database error", 500)
    return ok(201, scenario=scenario.to_dict(), scenario_results=results.to_dict())


@api.route("/scenarios", methods=["GET"])
def list_scenarios():
    try:
        rows = store.list_scenarios()
    except SQLAlchemyError:
        store.db.session.rollback()
        logger.exception("Failed to list scenarios")
        return fail("Database error", 500)
    return ok(count=len(rows), scenarios=[s.to_summary() for s in rows])


@api.route("/scenarios/<int:scenario_id>", methods=["GET"])
def get_scenario(scenario_id: int):
    try:
        scenario = store.get_scenario(scenario_id)
    except SQLAlchemyError:
        store.db.session.rollback()
        logger.exception("Failed to read scenario %d", scenario_id)
        return fail("Database error", 500)
    if scenario is None:
        return fail("Scenario not found", 404)
    return ok(scenario=scenario.to_dict())


@api.route("/scenarios/<int:scenario_id>", methods=["DELETE"])
def delete_scenario(scenario_id: int):
    try:
        deleted = store.delete_scenario(scenario_id)
    except SQLAlchemyError:
        store.db.session.rollback()
        logger.exception("Failed to delete scenario %d", scenario_id)
        return fail("Database error", 500)
    if not deleted:
        return fail("Scenario not found", 404)
    return ok(message="Scenario deleted", id=scenario_id)


@api.route("/scenarios/<int:scenario_id>/report", methods=["GET"])
def download_scenario_report(scenario_id: int):
    try:
        scenario = store.get_scenario(scenario_id)
    except SQLAlchemyError:
        store.db.session.rollback()
        logger.exception("Failed to read scenario %d", scenario_id)
        return fail("Database error", 500)
    if scenario is None:
        return fail("Scenario not found", 404)
    email = request.args.get("email", "not_provided@example.com")
    try:
        inputs = scenario.to_inputs()
        blob = report.generate_pdf(run_simulation(inputs), email, inputs, scenario.scenario_name)
    except RENDER_ERRORS:
        logger.exception("Failed to render report for scenario %d", scenario_id)
        return fail("Report generation failed", 500)
    return send_file(
        io.BytesIO(blob),
        as_attachment=True,
        download_name=f"scenario_{scenario_id}_{cfg.REPORT_FILENAME}",
        mimetype="application/pdf",
    )


@api.route("/report/generate", methods=["POST"])
def generate_report():
    try:
        data = _json_body()
        email = str(data.get("email") or "").strip()
        if not email or "@" not in email:
            raise InvalidInputError("A valid email address is required")
        if not isinstance(data.get("results"), dict):
            raise InvalidInputError("results are required")
        results = _results_from_mapping(data["results"])
        inputs: Optional[ROIInputs] = None
        if isinstance(data.get("inputs"), dict):
            inputs = ROIInputs.from_mapping(data["inputs"])
            run_simulation(inputs)
    except InvalidInputError as e:
        return fail(str(e), 400)

    try:
        blob = report.generate_pdf(results, email, inputs, data.get("scenario_name") or None)
    except RENDER_ERRORS:
        logger.exception("Failed to render report for %s", email)
        return fail("Report generation failed", 500)
    return ok(filename=cfg.REPORT_FILENAME, pdf_base64=report.encode_pdf(blob))


# ═══════════════════════════════════════════════════════════════════
# App factory
# ═══════════════════════════════════════════════════════════════════

def _handle_http_error(e: HTTPException):
    return fail(e.description or e.name, e.code or 500)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app, bind the scenario store and create the table."""
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = cfg.DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if overrides:
        app.config.update(overrides)

    CORS(app, origins=cfg.CORS_ORIGINS)
    store.db.init_app(app)
    app.register_blueprint(api)
    app.register_error_handler(HTTPException, _handle_http_error)

    with app.app_context():
        store.db.create_all()
    return app


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(host: str = cfg.HOST, port: int = cfg.PORT, debug: bool = cfg.DEBUG) -> None:
    """Build an app with ``create_app`` and start the Flask development server."""
    app = create_app()
    logger.info("Starting web app at http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    logging.basicConfig(level=cfg.LOG_LEVEL)
    run_web()

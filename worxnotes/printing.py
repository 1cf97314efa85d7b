"""
Condensed print layout for a repair sheet.
"""
from typing import Optional

from jinja2 import DictLoader, Environment, select_autoescape

from worxnotes.schemas.repair_sheet import EMPTY_PLACEHOLDER, RepairSheet, format_timestamp

PRINT_HTML = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>RO# {{ sheet.ro_number }}</title>
<style>
  body { font-family: Arial, sans-serif; font-size: 11px; margin: 12px; }
  h1 { font-size: 16px; margin: 0 0 4px; }
  .meta span { margin-right: 12px; }
  .notes p { white-space: pre-wrap; margin: 2px 0 6px; }
  .groups { display: flex; gap: 12px; }
  .group { flex: 1; border: 1px solid #999; padding: 4px 6px; }
  .group h3 { font-size: 12px; margin: 0 0 4px; }
  .group table { width: 100%; border-collapse: collapse; }
  .group td { padding: 1px 2px; }
  .diagnostic { page-break-before: auto; margin-top: 10px; }
  .diagnostic pre { font-size: 9px; white-space: pre-wrap; border-top: 1px solid #999; }
</style>
</head>
<body>
<h1>RO#: {{ sheet.ro_number }}</h1>
<div class="meta">
  <span>{{ sheet.customer_display_name }}</span>
  <span>Tech: {{ sheet.technician_name }}</span>
  {% if sheet.vehicle_mileage_in is not none %}<span>Mileage In: {{ "{:,}".format(sheet.vehicle_mileage_in) }}</span>{% endif %}
  {% if sheet.vehicle_mileage_out is not none %}<span>Mileage Out: {{ "{:,}".format(sheet.vehicle_mileage_out) }}</span>{% endif %}
  <span>{{ created }}</span>
</div>
<div class="notes">
  <strong>Customer Concern</strong><p>{{ sheet.customer_concern or placeholder }}</p>
  <strong>Recommendations</strong><p>{{ sheet.recommendations or placeholder }}</p>
  <strong>Shop Recommendations</strong><p>{{ sheet.shop_recommendations or placeholder }}</p>
</div>
<div class="groups">
  <div class="group">
    <h3>Tire Tread</h3>
    <table>
      <tr><td>LF {{ sheet.tire_tread.lf }}/32</td><td>RF {{ sheet.tire_tread.rf }}/32</td></tr>
      <tr><td>LR {{ sheet.tire_tread.lr }}/32</td><td>RR {{ sheet.tire_tread.rr }}/32</td></tr>
    </table>
  </div>
  <div class="group">
    <h3>Brake Pads</h3>
    <table>
      <tr><td>LF {{ brakes.lf }}</td><td>RF {{ brakes.rf }}</td></tr>
      <tr><td>LR {{ brakes.lr }}</td><td>RR {{ brakes.rr }}</td></tr>
    </table>
  </div>
  <div class="group">
    <h3>Tire Pressure (PSI)</h3>
    <table>
      <tr><td>In FL {{ sheet.tire_pressure.front_left_in }}</td><td>In FR {{ sheet.tire_pressure.front_right_in }}</td><td>Out F {{ sheet.tire_pressure.front_out }}</td></tr>
      <tr><td>In RL {{ sheet.tire_pressure.rear_left_in }}</td><td>In RR {{ sheet.tire_pressure.rear_right_in }}</td><td>Out R {{ sheet.tire_pressure.rear_out }}</td></tr>
    </table>
  </div>
</div>
{% if diagnostic_text %}
<div class="diagnostic">
  <strong>Diagnostic File: {{ sheet.diagnostic_file_name or "diagnostic.txt" }}</strong>
  <pre>{{ diagnostic_text }}</pre>
</div>
{% endif %}
</body>
</html>
"""

_env = Environment(
    loader=DictLoader({"print.html": PRINT_HTML}),
    autoescape=select_autoescape(default=True, default_for_string=True),
)


def brake_pad_display(sheet: RepairSheet) -> dict[str, str]:
    """Each brake reading with its axle's unit appended, e.g. ``{"lf": "8 MM"}``."""
    pads = sheet.brake_pads
    front = sheet.front_brake_pad_unit.value
    rear = sheet.rear_brake_pad_unit.value
    return {
        "lf": f"{pads.lf} {front}",
        "rf": f"{pads.rf} {front}",
        "lr": f"{pads.lr} {rear}",
        "rr": f"{pads.rr} {rear}",
    }


def render_print(sheet: RepairSheet, diagnostic_text: Optional[str] = None) -> str:
    return _env.get_template("print.html").render(
        sheet=sheet,
        brakes=brake_pad_display(sheet),
        created=format_timestamp(sheet.created_at),
        placeholder=EMPTY_PLACEHOLDER,
        diagnostic_text=diagnostic_text,
    )

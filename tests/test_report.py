import base64
from dataclasses import replace

import report
from simulation import run_simulation


def test_generate_pdf_is_single_page(default_inputs):
    blob = report.generate_pdf(run_simulation(default_inputs), "ap@example.com",
                               default_inputs, "Pilot")
    assert blob.startswith(b"%PDF")
    assert b"/Count 1 " in blob


def test_generate_pdf_results_only(default_inputs):
    blob = report.generate_pdf(run_simulation(default_inputs), "ap@example.com")
    assert blob.startswith(b"%PDF")


def test_generate_pdf_when_never_paying_back(default_inputs):
    inputs = replace(default_inputs, num_ap_staff=0, error_rate_manual=0)
    blob = report.generate_pdf(run_simulation(inputs), "ap@example.com", inputs)
    assert blob.startswith(b"%PDF")


def test_encode_pdf_round_trips():
    assert base64.b64decode(report.encode_pdf(b"%PDF-1.4 test")) == b"%PDF-1.4 test"


def test_display_formatters():
    assert report.money(34100) == "$34,100"
    assert report.money(None) == "n/a"
    assert report.months(1.46) == "1.5 months"
    assert report.months(None) == "never"
    assert report.percent(2355.2) == "2,355.2%"

# File: tests/test_report.py
import json

import pytest

from lib_scout.aggregator import SignalReport
from lib_scout.report import render_html, render_json


@pytest.fixture()
def report() -> SignalReport:
    return SignalReport(
        query="<b>frameworks</b>",
        references=["/static/vue.min.js", "/app.js"],
        libraries=["Vue.js"],
        pages_fetched=1,
        failures={"http://dead.test": "timeout after 10.0 s"},
    )


def test_render_json_creates_parent_dirs(tmp_path, report):
    out = render_json(report, tmp_path / "nested" / "report.json")
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["libraries"] == ["Vue.js"]
    assert data["references"] == ["/static/vue.min.js", "/app.js"]


def test_render_html_with_bundled_template(tmp_path, report):
    out = render_html(report, None, tmp_path / "report.html")
    page = out.read_text(encoding="utf-8")
    assert "/static/vue.min.js" in page
    assert "Vue.js" in page
    assert "http://dead.test" in page
    # the query is escaped, not injected
    assert "&lt;b&gt;frameworks&lt;/b&gt;" in page


def test_render_html_with_custom_template(tmp_path, report):
    tpl_dir = tmp_path / "templates"
    tpl_dir.mkdir()
    (tpl_dir / "report.html.j2").write_text(
        "{{ query }}|{{ references | length }}|{{ libraries | join(',') }}", encoding="utf-8"
    )
    out = render_html(report, tpl_dir, tmp_path / "custom.html")
    assert out.read_text(encoding="utf-8") == "&lt;b&gt;frameworks&lt;/b&gt;|2|Vue.js"

# File: tests/test_scanner.py
import json

from lib_scout.aggregator import SignalReport, aggregate_report
from lib_scout.config import DEFAULT_KNOWN_LIBRARIES
from lib_scout.crawler.models import CandidateURL, FetchFailure, PageBatch, PageData
from lib_scout.scanner import classify_libraries, scan_pages, script_sources


def test_blank_src_dropped_and_order_kept():
    body = '<script src="/a.js"></script><script></script><script src="b.js">'
    assert scan_pages([body]) == ["/a.js", "b.js"]


def test_whitespace_src_is_blank():
    assert script_sources('<script src="  "></script><script src="c.js"></script>') == ["c.js"]


def test_page_order_then_element_order():
    pages = [
        '<script src="1a.js"></script><script src="1b.js"></script>',
        "<p>no scripts</p>",
        '<script src="2a.js"></script>',
    ]
    assert scan_pages(pages) == ["1a.js", "1b.js", "2a.js"]


def test_no_pages_no_references():
    assert scan_pages([]) == []


def test_duplicates_across_pages_are_kept():
    body = '<script src="/jquery.js"></script>'
    assert scan_pages([body, body]) == ["/jquery.js", "/jquery.js"]


def test_classify_known_libraries_in_first_seen_order():
    refs = [
        "https://cdn.example.com/jquery-3.7.1.min.js",
        "/static/react-dom.production.min.js",
        "/static/React.min.js",
        "/app.js",
    ]
    assert classify_libraries(refs, DEFAULT_KNOWN_LIBRARIES) == ["jQuery", "React"]


def test_classify_nothing_known():
    assert classify_libraries(["/app.js", "/vendor.js"], DEFAULT_KNOWN_LIBRARIES) == []


def test_aggregate_report_carries_failures(mock_page_data):
    ok = CandidateURL.build("alpha.test")
    bad = CandidateURL.build("dead.test")
    batch = PageBatch(
        {
            ok: mock_page_data,
            bad: FetchFailure(str(bad), "Cannot connect"),
        }
    )
    refs = scan_pages(batch.bodies())
    report = aggregate_report("react sites", refs, batch, DEFAULT_KNOWN_LIBRARIES)

    assert isinstance(report, SignalReport)
    assert report.references == ["/static/react.min.js"]
    assert report.libraries == ["React"]
    assert report.pages_fetched == 1
    assert report.failures == {"http://dead.test": "Cannot connect"}


def test_aggregate_report_without_library_lookup():
    batch = PageBatch({CandidateURL.build("a.test"): PageData("http://a.test", "")})
    report = aggregate_report("q", ["/react.js"], batch)
    assert report.libraries == []


def test_report_json_roundtrips_fields():
    report = SignalReport(query="q", references=["/a.js"], libraries=[], pages_fetched=1)
    data = json.loads(report.json(pretty=True))
    assert data == {
        "query": "q",
        "references": ["/a.js"],
        "libraries": [],
        "pages_fetched": 1,
        "failures": {},
    }

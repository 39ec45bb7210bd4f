from stpcable.errors import CYCLIC_REFERENCE, DEGENERATE_SPLINE, UNRESOLVED_REFERENCE, DiagnosticCollector
from stpcable.io.entities import parse_entities
from stpcable.splines import SplineCurve, extract_splines


def test_single_spline_from_two_points():
    store = parse_entities([
        "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
        "#2=CARTESIAN_POINT('',(1.0,0.0,0.0));",
        "#3=B_SPLINE_CURVE('',#1,#2);",
    ])
    splines = extract_splines(store)
    assert len(splines) == 1
    spline = splines[0]
    assert spline.positions == ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    assert spline.start == (0.0, 0.0, 0.0)
    assert spline.end == (1.0, 0.0, 0.0)
    assert spline.entity_id == 3


def test_spline_subtypes_are_extracted_in_declaration_order():
    store = parse_entities([
        "#10=CARTESIAN_POINT('',(0.0,0.0,0.0));",
        "#11=CARTESIAN_POINT('',(1.0,0.0,0.0));",
        "#20=B_SPLINE_CURVE_WITH_KNOTS('',1,(#11,#10),.UNSPECIFIED.,.F.,.F.,(2,2),(0.,1.),.UNSPECIFIED.);",
        "#5=LINE('',#10,#11);",
        "#6=B_SPLINE_CURVE('',#10,#11);",
    ])
    splines = extract_splines(store)
    assert [s.entity_id for s in splines] == [20, 6]
    assert splines[0].start == (1.0, 0.0, 0.0)


def test_missing_reference_shortens_spline():
    store = parse_entities([
        "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
        "#2=CARTESIAN_POINT('',(1.0,0.0,0.0));",
        "#3=B_SPLINE_CURVE('',(#1,#99,#2));",
    ])
    collector = DiagnosticCollector()
    splines = extract_splines(store, collector)
    assert len(splines[0]) == 2
    assert len(collector.with_code(UNRESOLVED_REFERENCE)) == 1


def test_degenerate_spline_is_kept():
    store = parse_entities(["#3=B_SPLINE_CURVE('',3,(),.F.);"])
    collector = DiagnosticCollector()
    splines = extract_splines(store, collector)
    assert len(splines) == 1
    assert splines[0].is_degenerate
    assert splines[0].start is None
    assert splines[0].end is None
    assert collector.with_code(DEGENERATE_SPLINE)[0].entity_id == 3


def test_cyclic_spline_is_skipped():
    store = parse_entities([
        "#1=CARTESIAN_POINT('',(0.0,0.0,0.0));",
        "#2=WRAPPER('',#4);",
        "#3=B_SPLINE_CURVE('',#1,#2);",
        "#4=WRAPPER('',#2);",
        "#5=B_SPLINE_CURVE('',#1,#1);",
    ])
    collector = DiagnosticCollector()
    splines = extract_splines(store, collector)
    assert [s.entity_id for s in splines] == [5]
    assert len(collector.with_code(CYCLIC_REFERENCE)) == 1
    assert collector.has_errors


def test_spline_curve_len():
    assert len(SplineCurve(((0.0, 0.0, 0.0),) * 3)) == 3

from datetime import date

from apnealog.history import SessionFilter, location_options, session_rows
from apnealog.models import Dive, Measurement, Session


def _sessions():
    return [
        Session(id=1, date=date(2024, 1, 10), type="pool", discipline="STA", location="City Pool"),
        Session(id=2, date=date(2024, 2, 5), type="open_water", discipline="CWT", location="Blue Hole"),
        Session(id=3, date=date(2024, 2, 5), type="pool", discipline="DYN", location="city pool "),
        Session(id=4, date=date(2024, 3, 1), type="open_water", discipline="FIM", location=""),
    ]


def _dives():
    return [
        Dive(id=1, session_id=1, measurement=Measurement.time(150)),
        Dive(id=2, session_id=1, measurement=Measurement.time(210)),
        Dive(id=3, session_id=2, measurement=Measurement.depth(18)),
        Dive(id=4, session_id=2, measurement=Measurement.depth(25)),
        Dive(id=5, session_id=3, measurement=Measurement.distance(60)),
    ]


def test_rows_newest_first_with_best_values():
    rows = session_rows(_sessions(), _dives())

    assert [row.session.id for row in rows] == [4, 2, 3, 1]
    by_id = {row.session.id: row for row in rows}
    assert by_id[1].dive_count == 2
    assert by_id[1].best == Measurement.time(210)
    assert by_id[2].best == Measurement.depth(25)
    assert by_id[3].best == Measurement.distance(60)
    assert by_id[4].dive_count == 0
    assert by_id[4].best is None


def test_filters_combine():
    location = SessionFilter(location="CITY")
    assert [r.session.id for r in session_rows(_sessions(), _dives(), location)] == [3, 1]

    pool_dyn = SessionFilter(type="pool", discipline="DYN")
    assert [r.session.id for r in session_rows(_sessions(), _dives(), pool_dyn)] == [3]

    february = SessionFilter(date_from=date(2024, 2, 1), date_to=date(2024, 2, 5))
    assert [r.session.id for r in session_rows(_sessions(), _dives(), february)] == [2, 3]


def test_location_options_unique_and_sorted():
    assert location_options(_sessions()) == ["Blue Hole", "City Pool", "city pool"]

import pytest

from app.db.models.driver import Driver
from app.db.models.team import Team
from app.schemas.race import LapRecord
from app.services.openf1 import UpstreamError
from app.services.season_stats import fastest_lap_driver, sync_season_stats

DATE = "2024-03-02T16:00:00+00:00"


def position(number, pos):
    return {"driver_number": number, "position": pos, "date": DATE}


def lap(number, lap_number, duration):
    return {"driver_number": number, "lap_number": lap_number, "lap_duration": duration}


@pytest.fixture
def season(db, openf1):
    red_bull = Team(name="Red Bull Racing")
    ferrari = Team(name="Ferrari")
    db.add_all([red_bull, ferrari])
    db.flush()
    db.add_all([
        Driver(driver_id=1, driver_number=1, code="VER", forename="Max", surname="Verstappen", team_id=red_bull.id),
        Driver(driver_id=11, driver_number=11, code="PER", forename="Sergio", surname="Perez", team_id=red_bull.id),
        Driver(driver_id=16, driver_number=16, code="LEC", forename="Charles", surname="Leclerc", team_id=ferrari.id),
        Driver(driver_id=99, driver_number=99, code="OLD", forename="Viejo", surname="Piloto", points=50, wins=2),
    ])
    db.commit()

    openf1.sessions = [
        {"session_key": 1, "session_name": "Race", "year": 2024},
        {"session_key": 2, "session_name": "Race", "year": 2024},
        {"session_key": 3, "session_name": "Sprint", "year": 2024},
    ]
    openf1.session_positions = {
        "1": [position(1, 1), position(16, 2), position(11, 3)],
        "2": [position(16, 1), position(1, 2), position(11, 4)],
        "3": [position(11, 1)],
    }
    openf1.session_laps = {
        "1": [lap(1, 1, 90.0), lap(16, 1, 89.5), lap(11, 1, 91.0)],
        "2": [lap(1, 1, 88.0), lap(16, 1, 89.0), lap(11, 1, -1.0), lap(11, 2, None)],
        "3": [lap(11, 1, 80.0)],
    }
    return openf1


def test_fastest_lap_driver_ignores_invalid_laps():
    laps = [
        LapRecord(driver_number=1, lap_number=1, lap_duration=90.0),
        LapRecord(driver_number=2, lap_number=1, lap_duration=-5.0),
        LapRecord(driver_number=3, lap_number=1, lap_duration=None),
        LapRecord(driver_number=4, lap_number=1, lap_duration=89.9),
    ]
    assert fastest_lap_driver(laps) == 4
    assert fastest_lap_driver([]) is None


def test_driver_stats_from_race_sessions(db, season):
    assert sync_season_stats(db, season, 2024) == 2

    drivers = {d.driver_number: d for d in db.query(Driver).all()}

    ver = drivers[1]
    assert (ver.points, ver.wins, ver.podiums, ver.fastest_laps) == (43, 1, 2, 1)
    assert ver.avg_position == 1.5

    lec = drivers[16]
    assert (lec.points, lec.wins, lec.podiums, lec.fastest_laps) == (43, 1, 2, 1)

    per = drivers[11]
    assert (per.points, per.wins, per.podiums, per.fastest_laps) == (27, 0, 1, 0)
    assert per.avg_position == 3.5

    # Sin carreras en el año: vuelve a cero
    old = drivers[99]
    assert (old.points, old.wins, old.podiums, old.avg_position) == (0, 0, 0, 0)


def test_team_stats_are_sum_of_drivers(db, season):
    sync_season_stats(db, season, 2024)

    teams = {t.name: t for t in db.query(Team).all()}
    assert (teams["Red Bull Racing"].points, teams["Red Bull Racing"].wins,
            teams["Red Bull Racing"].podiums, teams["Red Bull Racing"].fastest_laps) == (70, 1, 3, 1)
    assert (teams["Ferrari"].points, teams["Ferrari"].wins,
            teams["Ferrari"].podiums, teams["Ferrari"].fastest_laps) == (43, 1, 2, 1)


def test_stats_visible_through_api(client, db, season):
    sync_season_stats(db, season, 2024)

    stats = client.get("/driver-stats/1").json()
    assert stats["points"] == 43
    assert stats["wins"] == 1
    # Empate a puntos: se ordena por apellido
    assert [d["code"] for d in client.get("/drivers").json()][:3] == ["LEC", "VER", "PER"]


def test_failed_download_writes_nothing(db, season):
    season.fail.add("laps")

    with pytest.raises(UpstreamError):
        sync_season_stats(db, season, 2024)

    db.expire_all()
    old = db.query(Driver).filter(Driver.driver_number == 99).one()
    assert (old.points, old.wins) == (50, 2)
    assert db.query(Driver).filter(Driver.driver_number == 1).one().points == 0

import pytest

from app.services.activity_files import ActivityFileError, haversine, parse_fit, parse_gpx

GPX = """<gpx version="1.1" creator="test"
     xmlns="http://www.topografix.com/GPX/1/1"
     xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">
  <trk>
    <name>Morning Run</name>
    <type>running</type>
    <trkseg>
      <trkpt lat="45.0000" lon="7.0000">
        <ele>100</ele><time>2025-01-01T07:00:00Z</time>
        <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>140</gpxtpx:hr></gpxtpx:TrackPointExtension></extensions>
      </trkpt>
      <trkpt lat="45.0050" lon="7.0000"><ele>110</ele><time>2025-01-01T07:03:00Z</time></trkpt>
      <trkpt lat="45.0100" lon="7.0000"><ele>105</ele><time>2025-01-01T07:06:00Z</time></trkpt>
      <trkpt lat="45.0100" lon="7.0000"><ele>105</ele><time>2025-01-01T07:10:00Z</time></trkpt>
    </trkseg>
  </trk>
</gpx>
"""


def test_haversine_one_hundredth_degree_of_latitude():
    assert haversine(45.0, 7.0, 45.01, 7.0) == pytest.approx(1112, abs=2)


def test_parse_gpx_summary():
    record = parse_gpx(GPX)
    assert record.distance_meters == pytest.approx(1112, abs=2)
    # the final 4 minutes standing still are not moving time
    assert record.moving_time_seconds == 360
    assert record.elevation_gain_meters == 10
    assert record.activity_type == "Run"
    assert record.has_gps
    assert record.has_heart_rate
    assert record.source == "gpx"
    assert record.name == "Morning Run"


def test_parse_gpx_rejects_garbage():
    with pytest.raises(ActivityFileError):
        parse_gpx("this is not xml")


def test_parse_fit_rejects_garbage():
    with pytest.raises(ActivityFileError):
        parse_fit(b"not a fit file at all")


def test_upload_route_checks_against_challenge(client, make):
    strength = make.domain()
    c = make.challenge(
        "10K", grading_type="DISTANCE", domains=[(strength, 100)],
        proof_types=["GARMIN"], min_distance=10000, requires_heart_rate=True,
    )
    r = client.post(
        "/activities/parse",
        params={"challenge_id": c.id},
        files={"file": ("morning.gpx", GPX.encode(), "application/gpx+xml")},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["activity"]["name"] == "morning"
    assert body["validation"]["valid"] is False
    assert body["validation"]["errors"] == ["Distance must be at least 10.0 km (got 1.1 km)"]
    assert body["auto_filled_value"] == pytest.approx(1112, abs=2)


def test_upload_route_rejects_other_extensions(client):
    r = client.post("/activities/parse", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400

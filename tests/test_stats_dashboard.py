# tests/test_stats_dashboard.py
"""Per-QR statistics and the dashboard overview"""

import datetime

from qrify.extensions import db
from qrify.models.scan_log import ScanLog


def _scan(qr, when, ip="1.1.1.1", device="mobile", country="India"):
    db.session.add(ScanLog(
        qr_code_id=qr.id, ip_address=ip, device_type=device, country=country, scanned_at=when,
    ))


def test_stats(client, user, make_qr):
    qr = make_qr(user)
    day1 = datetime.datetime(2025, 3, 1, 10, 0)
    day2 = datetime.datetime(2025, 3, 2, 10, 0)
    _scan(qr, day2, ip="2.2.2.2", device="desktop", country="Germany")
    _scan(qr, day1)
    _scan(qr, day1 + datetime.timedelta(hours=1))
    _scan(qr, day1, ip="3.3.3.3", device=None, country=None)
    db.session.commit()

    res = client.get(f"/api/qr/stats/{qr.id}")

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["totalScans"] == 4
    assert data["uniqueScans"] == 3
    assert data["scansByDate"] == [
        {"date": "2025-03-01", "count": 3},
        {"date": "2025-03-02", "count": 1},
    ]
    assert data["deviceBreakdown"] == {"mobile": 2, "desktop": 1, "unknown": 1}
    assert data["countryBreakdown"][0] == {"country": "India", "count": 2}
    assert {"country": "Unknown", "count": 1} in data["countryBreakdown"]


def test_stats_top_ten_countries(client, user, make_qr):
    qr = make_qr(user)
    now = datetime.datetime(2025, 3, 1)
    for i in range(12):
        for _ in range(i + 1):
            _scan(qr, now, country=f"C{i:02d}")
    db.session.commit()

    data = client.get(f"/api/qr/stats/{qr.id}").get_json()["data"]

    assert len(data["countryBreakdown"]) == 10
    assert data["countryBreakdown"][0] == {"country": "C11", "count": 12}


def test_stats_invalid_and_missing(client):
    assert client.get("/api/qr/stats/not-a-number").status_code == 400
    assert client.get("/api/qr/stats/999").status_code == 404


def test_dashboard_overview(client, auth, user, make_qr):
    active = make_qr(user, qr_name="Active", scan_count=7)
    make_qr(user, qr_name="Parked", is_active=False, scan_count=3)
    _scan(active, datetime.datetime.utcnow())
    _scan(active, datetime.datetime.utcnow() - datetime.timedelta(days=3))
    db.session.commit()

    res = client.get("/api/dashboard/overview", headers=auth)

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["totalQRCodes"] == 2
    assert data["totalScans"] == 10
    assert data["activeQRCodes"] == 1
    assert data["inactiveQRCodes"] == 1
    assert data["scansToday"] == 1
    assert len(data["recentScans"]) == 2
    assert data["recentScans"][0]["qrName"] == "Active"


def test_dashboard_empty(client, auth):
    data = client.get("/api/dashboard/overview", headers=auth).get_json()["data"]

    assert data == {
        "totalQRCodes": 0,
        "totalScans": 0,
        "activeQRCodes": 0,
        "inactiveQRCodes": 0,
        "scansToday": 0,
        "recentScans": [],
    }


def test_admin_can_view_other_dashboard(client, user, admin, make_qr, auth_for):
    make_qr(user)

    as_admin = client.get(f"/api/dashboard/overview?userId={user.id}", headers=auth_for(admin))
    as_user = client.get(f"/api/dashboard/overview?userId={admin.id}", headers=auth_for(user))

    assert as_admin.get_json()["data"]["totalQRCodes"] == 1
    # Non-admins always get their own numbers
    assert as_user.get_json()["data"]["totalQRCodes"] == 1

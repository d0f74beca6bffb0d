# tests/test_admin.py
"""Admin console endpoints and the admin scripts"""

import importlib.util
import os

from qrify.extensions import db
from qrify.models.qr_code import QRCode
from qrify.models.scan_log import ScanLog
from qrify.models.user import User

SCRIPTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "scripts")


def _load_script(name):
    spec = importlib.util.spec_from_file_location(name, os.path.join(SCRIPTS_DIR, f"{name}.py"))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_admin_routes_require_admin(client, auth):
    assert client.get("/api/admin/users", headers=auth).status_code == 403
    assert client.get("/api/admin/qrs", headers=auth).status_code == 403
    assert client.post("/api/admin/purge-invalid-qrs", headers=auth).status_code == 403
    assert client.get("/api/admin/users").status_code == 401


def test_list_users_without_passwords(client, admin, user, auth_for):
    res = client.get("/api/admin/users", headers=auth_for(admin))

    assert res.status_code == 200
    users = res.get_json()["data"]
    assert {u["email"] for u in users} == {"admin@example.com", "user@example.com"}
    assert all("password" not in u for u in users)


def test_update_user_role_and_plan(client, admin, user, auth_for):
    res = client.patch(
        "/api/admin/users",
        json={"userId": user.id, "role": "admin", "subscriptionPlan": "business"},
        headers=auth_for(admin),
    )

    assert res.status_code == 200
    db.session.expire_all()
    updated = db.session.get(User, user.id)
    assert updated.role == "admin"
    assert updated.subscription_plan == "business"


def test_update_user_validates_values(client, admin, user, auth_for):
    bad_role = client.patch("/api/admin/users", json={"userId": user.id, "role": "root"}, headers=auth_for(admin))
    bad_plan = client.patch(
        "/api/admin/users", json={"userId": user.id, "subscriptionPlan": "gold"}, headers=auth_for(admin)
    )
    missing = client.patch("/api/admin/users", json={"userId": 9999, "role": "user"}, headers=auth_for(admin))

    assert bad_role.status_code == 400
    assert bad_plan.status_code == 400
    assert missing.status_code == 404


def test_list_all_qrs_with_owner(client, admin, user, make_qr, auth_for):
    make_qr(user)
    make_qr(admin)

    res = client.get("/api/admin/qrs", headers=auth_for(admin))

    qrs = res.get_json()["data"]
    assert len(qrs) == 2
    owners = {q["owner"]["email"] for q in qrs}
    assert owners == {"user@example.com", "admin@example.com"}


def test_purge_invalid_qrs(client, admin, user, make_qr, auth_for):
    good = make_qr(user)
    no_code = make_qr(user, short_url=None)
    empty_code = make_qr(user, short_url="")
    no_data = make_qr(user, original_data=None)
    db.session.add(ScanLog(qr_code_id=no_data.id))
    db.session.commit()
    bad_ids = [no_code.id, empty_code.id, no_data.id]

    res = client.post("/api/admin/purge-invalid-qrs", headers=auth_for(admin))

    assert res.status_code == 200
    assert res.get_json()["deletedCount"] == 3
    assert res.get_json()["message"] == "Purged 3 invalid QR codes."
    db.session.expire_all()
    assert QRCode.query.filter(QRCode.id.in_(bad_ids)).count() == 0
    assert db.session.get(QRCode, good.id) is not None
    assert ScanLog.query.count() == 0


def test_create_admin_script(app, user):
    script = _load_script("create_admin")

    assert script.create_admin("boss@example.com", "secret123", "Boss") == "created"
    assert script.create_admin("boss@example.com", "secret123") == "exists"
    assert script.create_admin("user@example.com", "ignored") == "promoted"

    assert User.query.filter_by(email="boss@example.com").one().role == "admin"
    assert db.session.get(User, user.id).role == "admin"


def test_make_admin_script(app, user, capsys):
    script = _load_script("make_admin")

    assert script.make_admin("nobody@example.com") is None
    assert "user@example.com" in capsys.readouterr().out

    promoted = script.make_admin("USER@example.com")
    assert promoted.id == user.id
    assert promoted.role == "admin"

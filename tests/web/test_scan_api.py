from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from src.school_attendance.school_attendance.academic_years.service import AcademicYearService
from src.school_attendance.school_attendance.attendance import controller as attendance_controller
from src.school_attendance.school_attendance.core.enums import Role
from src.school_attendance.school_attendance.core.exceptions import PersistenceError
from src.school_attendance.school_attendance.main import create_app
from src.school_attendance.school_attendance.students.service import ClassService, StudentService
from src.school_attendance.school_attendance.users.model import User
from src.school_attendance.school_attendance.users.service import AuthService, UserService

from conftest import InMemoryAcademicYears, InMemoryUsers

AUTH = {"Authorization": "Bearer test-scanner-key"}


@pytest.fixture
def container(students_repo, classes_repo, attendance_repo, settings_service, attendance_service, report_service):
    users = InMemoryUsers(
        [
            User(user_id=1, full_name="Admin", username="admin", password_hash=generate_password_hash("secret1"), role=Role.ADMIN),
            User(user_id=2, full_name="Guru Piket", username="piket", password_hash=generate_password_hash("secret2"), role=Role.STAFF),
        ]
    )
    return SimpleNamespace(
        auth_service=AuthService(users),
        user_service=UserService(users),
        student_service=StudentService(students_repo, classes_repo),
        class_service=ClassService(classes_repo),
        settings_service=settings_service,
        attendance_service=attendance_service,
        report_service=report_service,
        academic_year_service=AcademicYearService(InMemoryAcademicYears()),
    )


@pytest.fixture
def client(monkeypatch, container, fixed_now):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setattr(attendance_controller, "now_local", lambda: fixed_now)
    app = create_app(container=container)
    return app.test_client()


def _login_as(client, *, user_id: int, role: Role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["name"] = "Tester"
        sess["role"] = role.value


def test_api_scan_requires_key_or_session(client):
    assert client.post("/api/scan", json={"nis": "1001"}).status_code == 401
    assert client.post("/api/scan", json={"nis": "1001"}, headers={"Authorization": "Bearer wrong"}).status_code == 401


def test_api_scan_first_then_duplicate(client):
    resp = client.post("/api/scan", json={"nis": "1001"}, headers=AUTH)
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["kind"] == "success"
    assert body["result"] == "ACCEPTED"
    assert body["status"] == "PRESENT"
    assert body["time"] == "07:05:12"
    assert body["student"]["class_name"] == "7A"
    assert body["reset_after_seconds"] == 5

    again = client.post("/api/scan", json={"student_id": "1001"}, headers=AUTH).get_json()
    assert again["result"] == "ALREADY_CHECKED_IN"
    assert again["kind"] == "warning"
    assert again["time"] == "07:05:12"


def test_api_scan_unknown_and_empty(client):
    unknown = client.post("/api/scan", json={"nis": "nope"}, headers=AUTH)
    assert unknown.status_code == 404
    assert unknown.get_json()["kind"] == "danger"

    empty = client.post("/api/scan", json={}, headers=AUTH)
    assert empty.status_code == 400


def test_api_scan_accepts_logged_in_session(client):
    _login_as(client, user_id=2, role=Role.STAFF)

    assert client.post("/api/scan", json={"nis": "1002"}).status_code == 200


def test_api_scan_persistence_failure_is_reported(client, container, monkeypatch):
    def boom(*args, **kwargs):
        raise PersistenceError("server has gone away")

    monkeypatch.setattr(container.attendance_service, "resolve_scan", boom)

    resp = client.post("/api/scan", json={"nis": "1001"}, headers=AUTH)

    assert resp.status_code == 503
    assert resp.get_json()["kind"] == "danger"
    assert resp.get_json()["success"] is False


def test_daily_csv_export(client, attendance_service, fixed_now):
    attendance_service.resolve_scan("1001", fixed_now.time(), fixed_now.date())
    _login_as(client, user_id=2, role=Role.STAFF)

    resp = client.get("/reports/daily.csv?date=2024-03-04")
    text = resp.data.decode("utf-8")

    assert resp.status_code == 200
    assert text.startswith("\ufeffNIS,Nama Siswa,Kelas,Status,Jam Masuk,Jam Pulang,Keterangan")
    assert "1001,Budi Santoso,7A,Hadir,07:05:12,-," in text
    assert "1002,Ani Lestari,7A,Alpa,-,-,Tanpa Keterangan" in text


def test_staff_cannot_open_settings(client):
    _login_as(client, user_id=2, role=Role.STAFF)

    assert client.get("/settings").status_code == 403


def test_login_sets_session(client):
    resp = client.post("/", data={"username": "admin", "password": "secret1"})

    assert resp.status_code == 302
    with client.session_transaction() as sess:
        assert sess["role"] == "admin"
        assert sess.permanent is True


def test_login_wrong_password_stays_on_page(client):
    resp = client.post("/", data={"username": "admin", "password": "nope"})

    assert resp.status_code == 200
    with client.session_transaction() as sess:
        assert "user_id" not in sess


def _png_upload(name: str) -> tuple:
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), "white").save(buf, format="PNG")
    buf.seek(0)
    return buf, name


def test_scan_image_with_unreadable_payload_is_rejected(client, attendance_repo, monkeypatch):
    monkeypatch.setattr(attendance_controller, "decode_barcodes", lambda img: [SimpleNamespace(data=b"\xff\xfe\xfd")])
    _login_as(client, user_id=2, role=Role.STAFF)

    resp = client.post("/scan/image", data={"image": _png_upload("scan.png")}, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "danger"
    assert not attendance_repo.rows


def test_scan_image_resolves_decoded_id(client, monkeypatch):
    monkeypatch.setattr(attendance_controller, "decode_barcodes", lambda img: [SimpleNamespace(data=b"1002")])
    _login_as(client, user_id=2, role=Role.STAFF)

    resp = client.post("/scan/image", data={"image": _png_upload("scan.png")}, content_type="multipart/form-data")

    assert resp.status_code == 200
    assert resp.get_json()["student"]["id"] == "1002"


def test_manual_entry_for_unknown_student_is_flashed_as_danger(client):
    _login_as(client, user_id=2, role=Role.STAFF)

    resp = client.post(
        "/attendance/manual",
        data={"student_id": "nope", "att_date": "2024-03-04", "status": "SICK"},
    )
    html = resp.data.decode("utf-8")

    assert resp.status_code == 200
    assert '<div class="alert alert-danger d-print-none">Siswa tidak terdaftar</div>' in html


def test_uploaded_files_require_login(client):
    resp = client.get("/uploads/photos/1001.jpg")

    assert resp.status_code == 302


def test_logo_upload_appears_on_id_cards(client, container, tmp_path):
    client.application.config["UPLOAD_FOLDER"] = str(tmp_path)
    container.settings_service.update_identity(
        school_name="SMP Negeri 1",
        app_name=None,
        school_address="Jl. Pendidikan No. 1",
        school_city="Surakarta",
    )
    _login_as(client, user_id=1, role=Role.ADMIN)

    resp = client.post("/settings/logo", data={"logo": _png_upload("logo.png")}, content_type="multipart/form-data")

    assert resp.status_code == 302
    assert (tmp_path / "school-logo.jpg").exists()
    assert container.settings_service.get_settings().logo_url == "/uploads/photos/school-logo.jpg"

    cards = client.get("/students/cards").data.decode("utf-8")
    assert 'src="/uploads/photos/school-logo.jpg"' in cards
    assert "Jl. Pendidikan No. 1, Surakarta" in cards
    assert client.get("/uploads/photos/school-logo.jpg").status_code == 200

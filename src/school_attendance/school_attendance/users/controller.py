from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import admin_required
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, PersistenceError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            username = request.form.get("username", "")
            password = request.form.get("password", "")

            try:
                s_user = container.auth_service.authenticate(username, password)

                session.clear()
                # Lifetime is the idle window; the cookie is refreshed on every request.
                session.permanent = True
                session["user_id"] = s_user.user_id
                session["name"] = s_user.full_name
                session["role"] = s_user.role.value

                logger.info("login ok user_id=%s role=%s", s_user.user_id, s_user.role.value)
                flash("Login berhasil!", "success")
                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                logger.info("login rejected username=%r", username)
                flash(str(e), "danger")
            except Exception as e:
                logger.exception("login failed")
                if bool(app.config.get("DEBUG", False)):
                    flash(f"Kesalahan sistem saat login: {e}", "danger")
                else:
                    flash("Kesalahan sistem saat login", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("Anda telah keluar.", "info")
        return redirect(url_for("login"))

    @app.route("/admin/users", endpoint="admin_users")
    @admin_required
    def admin_users():
        users = container.user_service.list_users()
        return render_template("admin/users.html", users=users, roles=list(Role), active_page="admin_users")

    @app.route("/admin/users/add", methods=["POST"], endpoint="add_user")
    @admin_required
    def add_user():
        try:
            container.user_service.create_account(
                full_name=request.form.get("full_name", ""),
                username=request.form.get("username", ""),
                password=request.form.get("password", ""),
                role=request.form.get("role", Role.STAFF.value),
            )
            flash("Akun berhasil ditambahkan!", "success")
        except ValidationError as e:
            flash(str(e), "danger")
        except PersistenceError:
            logger.exception("create user failed")
            flash("Akun tidak tersimpan, coba lagi", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:user_id>/role", methods=["POST"], endpoint="change_user_role")
    @admin_required
    def change_user_role(user_id: int):
        try:
            container.user_service.change_role(
                current_role=Role(session.get("role")),
                user_id=user_id,
                role=request.form.get("role", ""),
            )
            flash("Peran akun diperbarui.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except PersistenceError:
            logger.exception("change role failed user_id=%s", user_id)
            flash("Perubahan tidak tersimpan, coba lagi", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/delete/<int:user_id>", methods=["POST"], endpoint="delete_user")
    @admin_required
    def delete_user(user_id: int):
        try:
            container.user_service.delete_user(
                current_role=Role(session.get("role")),
                current_user_id=int(session["user_id"]),
                user_id=user_id,
            )
            flash("Akun dihapus.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except PersistenceError:
            logger.exception("delete user failed user_id=%s", user_id)
            flash("Akun gagal dihapus", "danger")

        return redirect(url_for("admin_users"))

from functools import wraps

from flask import make_response, jsonify, flash, redirect, url_for
from flask_babel import gettext as _

from domain.ui_errors import UiError


def nocache(view):
    @wraps(view)
    def _wrapped(*args, **kwargs):
        rv = view(*args, **kwargs)
        if isinstance(rv, tuple):
            data, status, headers = (rv + (None, None))[0:3]
            resp = make_response(data, status, headers)
        else:
            resp = make_response(rv)
        resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
        return resp

    return _wrapped


# api 공통 응답
def _json_ok(payload=None, status=200):
    payload = payload or {}
    resp = make_response(jsonify({"ok": True, **payload}), status)
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    return resp


def _json_err(code, message=None, status=400):
    resp = make_response(jsonify({"ok": False, "error": code, "message": message}), status)
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    return resp


# 화면 안내 (toast)
def flash_ui_error(err: UiError):
    flash(f"{_(err.title)}: {_(err.message)}", err.severity)


def redirect_ui_error(err: UiError, fallback: str):
    """안내 후 UiError 가 지정한 화면(없으면 fallback)으로 이동"""
    flash_ui_error(err)
    return redirect(url_for(err.redirect_to or fallback))

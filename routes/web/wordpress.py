# routes/web/wordpress.py
from flask import Blueprint, render_template, redirect, url_for, flash, g, current_app, abort
from flask_babel import gettext as _

from auth.guards import login_required
from domain.schema import wordpress_selection_schema
from security.security import require_safe_input
from services import content
from services.api_client import ApiError, AuthenticationRequired

wordpress_bp = Blueprint("wordpress", __name__, url_prefix="/wordpress-management")

LOADERS = {
    "categories": (content.get_categories, "Failed to fetch categories"),
    "tags": (content.get_tags, "Failed to fetch tags"),
    "posts": (content.get_posts, "Failed to fetch posts"),
}


def _load(kind: str):
    """목록 하나 조회. 실패하면 (None, 메시지)"""
    loader, message = LOADERS[kind]
    try:
        return loader(), None
    except AuthenticationRequired:
        raise
    except ApiError as e:
        current_app.logger.warning("[WORDPRESS] %s load failed: %s", kind, e.message)
        return None, _(message)


@wordpress_bp.route("", methods=["GET"])
@login_required
def management():
    categories, cat_error = _load("categories")
    tags, tag_error = _load("tags")
    posts, post_error = _load("posts")
    for err in (cat_error, tag_error, post_error):
        if err:
            flash(err, "error")

    category, selected_tags = content.stored_selection()
    return render_template(
        "wordpress/management.html",
        categories=categories if categories is not None else content.stored_categories(),
        tags=tags if tags is not None else content.stored_tags(),
        posts=posts or [],
        selected_category=category,
        selected_tags=selected_tags,
    )


@wordpress_bp.route("/select", methods=["POST"])
@login_required
@require_safe_input(wordpress_selection_schema, form=True)
def select():
    if g.input_errors:
        flash(_("Invalid selection"), "error")
        return redirect(url_for("wordpress.management"))

    data = g.safe_input
    content.store_selection(data.get("category"), data.get("tags") or [])
    flash(_("Publish settings saved"), "success")
    return redirect(url_for("wordpress.management"))


@wordpress_bp.route("/refresh/<kind>", methods=["POST"])
@login_required
def refresh(kind):
    if kind not in LOADERS:
        abort(404)
    result, error = _load(kind)
    if error:
        flash(error, "error")
    else:
        flash(_("Refreshed %(kind)s", kind=kind), "success")
    return redirect(url_for("wordpress.management"))

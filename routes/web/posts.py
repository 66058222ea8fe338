# routes/web/posts.py
from flask import Blueprint, render_template, request, redirect, url_for, flash, g, current_app
from flask_babel import gettext as _

from auth.entitlements import get_subscription_state
from auth.guards import active_plan_required, login_required, feature_required, resolve_plan, feature_allowed
from core.extensions import limiter
from core.http_utils import redirect_ui_error
from domain.policies import FEATURE_URL_PARAPHRASE
from domain.ui_errors import FEATURE_LOCKED
from domain.schema import editor_schema, paraphrase_post_schema, url_paraphrase_schema
from security.security import require_safe_input
from services import content
from services.content import ContentError
from utils.text import split_title, word_count

posts_bp = Blueprint("posts", __name__)


def _content_error(e: ContentError, title: str, fallback: str):
    """ContentError 안내. 구독/한도 오류는 정해진 화면으로"""
    if e.ui is not None:
        return redirect_ui_error(e.ui, "subscribe.pricing")
    flash(f"{_(title)}: {e.message}", "error")
    return redirect(url_for(fallback))


# -------------------- 글 가져오기 --------------------
@posts_bp.route("/make-post", methods=["GET"])
@login_required
def make_post():
    return render_template(
        "posts/make_post.html",
        posts=content.stored_fetched_posts(),
        state=get_subscription_state(),
    )


@posts_bp.route("/make-post/fetch", methods=["POST"])
@login_required
@limiter.limit("20/minute")
def fetch_posts():
    try:
        posts = content.fetch_news()
    except ContentError as e:
        return _content_error(e, "Error fetching posts", "posts.make_post")

    flash(_("Posts fetched successfully. Retrieved %(count)d posts.", count=len(posts)), "success")
    return redirect(url_for("posts.make_post"))


@posts_bp.route("/make-post/paraphrase", methods=["POST"])
@active_plan_required
@require_safe_input(paraphrase_post_schema, form=True)
@limiter.limit("20/minute")
def paraphrase_post():
    if g.input_errors:
        flash(_("Please choose a post to paraphrase."), "error")
        return redirect(url_for("posts.make_post"))

    data = g.safe_input
    try:
        content.paraphrase(data["title"], data["url"])
    except ContentError as e:
        return _content_error(e, "Paraphrasing error", "posts.make_post")
    return redirect(url_for("posts.editor"))


# -------------------- 편집기 --------------------
def _render_editor(result, body_content=None, errors=None, status=200):
    text = result.content if body_content is None else body_content
    category, selected_tags = content.stored_selection()
    title, _body = split_title(text)
    return render_template(
        "posts/paraphrase.html",
        content=text,
        title=title,
        words=word_count(text),
        original_url=result.url,
        original_title=result.title,
        seo=result.seo,
        state=get_subscription_state(),
        categories=content.stored_categories(),
        tags=content.stored_tags(),
        selected_category=category,
        selected_tags=selected_tags,
        default_word_length=current_app.config.get("DEFAULT_WORD_LENGTH", 500),
        errors=errors or {},
    ), status


@posts_bp.route("/paraphrase", methods=["GET", "POST"])
@login_required
@require_safe_input(editor_schema, form=True, raw_fields={"content"})
def editor():
    result = content.get_stored_result()
    if result is None:
        flash(_("No content found. Please paraphrase a post first."), "error")
        return redirect(url_for("posts.make_post"))

    if g.safe_input is None:
        return _render_editor(result)

    data = g.safe_input
    text = data.get("content", "")
    if g.input_errors:
        return _render_editor(result, text, g.input_errors, 400)

    action = data["action"]
    if action == "save":
        content.save_edited_content(text)
        flash(_("Content saved"), "success")
        return redirect(url_for("posts.editor"))

    if action == "reparaphrase":
        return _reparaphrase(result, text, data)
    return _publish(result, text, data)


def _reparaphrase(result, text, data):
    if not get_subscription_state().has_active_plan:
        flash(_("Subscription required. Your subscription has expired. Please renew to use this feature."), "error")
        return redirect(url_for("subscribe.pricing"))
    if not text.strip():
        return _render_editor(result, text, {"content": _("Please enter some content to paraphrase.")}, 400)

    try:
        content.reparaphrase(
            text,
            data.get("word_length") or current_app.config.get("DEFAULT_WORD_LENGTH", 500),
            keyword=data.get("keyword", ""),
            url=result.url,
            title=result.title,
        )
    except ContentError as e:
        if e.ui is not None:
            return redirect_ui_error(e.ui, "subscribe.pricing")
        flash(f"{_('Error')}: {e.message}", "error")
        return _render_editor(result, text, status=400)

    flash(_("Content paraphrased successfully"), "success")
    return redirect(url_for("posts.editor"))


def _publish(result, text, data):
    status = "draft" if data["action"] == "draft" else data.get("status", "publish")
    title = (data.get("title") or split_title(text)[0]).strip()
    errors = {}
    if not title:
        errors["title"] = _("Please enter a title for your post.")
    if not text.strip():
        errors["content"] = _("Please enter some content for your post.")
    if errors:
        return _render_editor(result, text, errors, 400)

    image = request.files.get("image")
    try:
        content.publish(
            title=title,
            content=text,
            status=status,
            categories=data.get("categories") or [],
            tags=data.get("tags") or [],
            image=image,
        )
    except ContentError as e:
        if e.ui is not None:
            return redirect_ui_error(e.ui, "subscribe.pricing")
        flash(f"{_('Error')}: {e.message}", "error")
        return _render_editor(result, text, status=400)

    if status == "draft":
        flash(_("Draft saved to WordPress"), "success")
    else:
        flash(_("Content published successfully"), "success")
    return redirect(url_for("wordpress.management"))


# -------------------- URL 패러프레이즈 --------------------
@posts_bp.route("/url-paraphraser", methods=["GET", "POST"])
@login_required
@require_safe_input(url_paraphrase_schema, form=True)
@feature_required(FEATURE_URL_PARAPHRASE, redirect_to="posts.url_paraphraser", error=FEATURE_LOCKED)
@limiter.limit("20/minute", methods=["POST"])
def url_paraphraser():
    locked = not feature_allowed(resolve_plan(), FEATURE_URL_PARAPHRASE)
    if g.safe_input is None:
        return render_template("posts/url_paraphraser.html", locked=locked, url="", errors={})

    url = g.safe_input.get("url", "")
    if g.input_errors:
        return render_template("posts/url_paraphraser.html", locked=locked, url=url, errors=g.input_errors), 400

    try:
        content.paraphrase_url(url)
    except ContentError as e:
        if e.ui is not None:
            return redirect_ui_error(e.ui, "subscribe.pricing")
        flash(f"{_('Error')}: {e.message}", "error")
        return render_template("posts/url_paraphraser.html", locked=locked, url=url, errors={}), 400

    flash(_("Success. URL content paraphrased successfully"), "success")
    return redirect(url_for("posts.editor"))


@posts_bp.route("/url-paraphrase", methods=["GET"])
def url_paraphrase_redirect():
    return redirect(url_for("posts.url_paraphraser"), code=301)

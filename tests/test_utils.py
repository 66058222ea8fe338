"""Helpers: text, dates, currency, error classification, input validation."""
import pytest

from core.context import format_currency
from core.i18n import select_locale
from domain.models import ParaphraseResult, Subscription, UserActivity, WordPressPost, title_from_url
from domain.schema import contact_schema, editor_schema
from domain.ui_errors import (
    DAILY_LIMIT_REACHED,
    FREE_TRIAL_USED,
    SUBSCRIPTION_REQUIRED,
    classify_backend_error,
)
from security.security import _normalize, collect_errors
from services import content
from utils.retry import _retry, backoff_delays
from utils.text import is_local_path, split_title, word_count
from utils.time_utils import INVALID_DATE, format_date, parse_iso


class TestText:

    def test_split_title_uses_first_two_lines(self):
        title, body = split_title("Big News\nToday\nFirst paragraph.\n\nSecond.")
        assert title == "Big News\nToday"
        assert body == "First paragraph.\n\nSecond."

    def test_split_title_short_content(self):
        assert split_title("Only a title") == ("Only a title", "")
        assert split_title("") == ("", "")

    def test_word_count(self):
        assert word_count("  one two\nthree\t four ") == 4
        assert word_count("") == 0
        assert word_count(None) == 0

    @pytest.mark.parametrize("target, ok", [
        ("/dashboard", True),
        ("/pricing?plan_id=2", True),
        ("", False),
        ("//evil.example.com", False),
        ("https://evil.example.com", False),
        ("/\\evil.example.com", False),
    ])
    def test_is_local_path(self, target, ok):
        assert is_local_path(target) is ok


class TestModels:

    def test_title_from_url(self):
        assert title_from_url("https://blog.example.com/2025/01/hello-world/") == "Hello World"
        assert title_from_url("https://blog.example.com/") == ""
        assert title_from_url("not a url") == "not a url"

    def test_wordpress_posts_from_index_map(self):
        posts = WordPressPost.list_from_map({"0": "https://b.example.com/a-post", "1": "https://b.example.com/b"})
        assert [(p.id, p.title) for p in posts] == [(0, "A Post"), (1, "B")]
        assert WordPressPost.list_from_map(["x"]) == []

    def test_paraphrase_result_content_keys(self):
        assert ParaphraseResult.from_api({"Paraphrased": "a"}).content == "a"
        assert ParaphraseResult.from_api({"paraphrased_content": "b"}).content == "b"
        assert ParaphraseResult.from_api({"Post": "c"}).content == "c"
        result = ParaphraseResult.from_api({"content": "d", "originalUrl": "https://x.example.com", "originalTitle": "X"})
        assert (result.content, result.url, result.title) == ("d", "https://x.example.com", "X")

    def test_activity_uses_first_row(self):
        assert UserActivity.from_api([{"fetched_posts": 4}, {"fetched_posts": 9}]).fetched_posts == 4
        assert UserActivity.from_api([]).fetched_posts == 0
        assert UserActivity.from_api({"fetched_posts": 4}).fetched_posts == 0

    def test_requests_remaining_never_negative(self):
        sub = Subscription.from_api({"status": "active", "plan": {"id": 1, "name": "Basic", "daily_limit": 10},
                                     "requests_today": 14})
        assert sub.requests_remaining == 0
        assert Subscription.from_api({"status": "active"}).requests_remaining == 0


class TestFormatting:

    @pytest.mark.parametrize("value, expected", [
        ("5000.00", "₦5,000"),
        (10000, "₦10,000"),
        ("2000.4", "₦2,000"),
        ("2500.50", "₦2,501"),
        ("2499.5", "₦2,500"),
        ("free", "₦free"),
    ])
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_format_date(self, app):
        with app.test_request_context("/"):
            assert format_date("2025-01-31T12:00:00Z") == "January 31, 2025"
            assert format_date("2025-03-05") == "March 5, 2025"
            assert format_date("yesterday-ish") == INVALID_DATE
            assert format_date("") == INVALID_DATE

    def test_locale_falls_back_to_default(self, app):
        with app.test_request_context("/?lang=en-US"):
            assert select_locale() == "en"
        with app.test_request_context("/", headers={"Accept-Language": "fr-FR,fr;q=0.9"}):
            assert select_locale() == "en"

    def test_parse_iso_assumes_utc(self):
        dt = parse_iso("2025-01-31T12:00:00")
        assert dt.tzinfo is not None
        assert dt.utcoffset().total_seconds() == 0
        assert parse_iso(None) is None


class TestErrorClassification:

    def test_known_backend_messages(self):
        assert classify_backend_error(429, "Your daily request limit is reached") is DAILY_LIMIT_REACHED
        assert classify_backend_error(403, "User has already used free trial. No access!") is FREE_TRIAL_USED

    def test_subscription_messages(self):
        assert classify_backend_error(403, "No active Subscription found") is SUBSCRIPTION_REQUIRED
        assert classify_backend_error(200, "subscription expired") is SUBSCRIPTION_REQUIRED

    def test_other_messages(self):
        assert classify_backend_error(500, "Scraper offline") is None
        assert classify_backend_error(500, None) is None


class TestInputValidation:

    def test_custom_messages(self):
        errors = collect_errors({"subject": "Hi", "message": "short", "email": "x", "name": "A"}, contact_schema)
        assert errors == {
            "subject": "Subject must be at least 3 characters.",
            "message": "Message must be at least 10 characters.",
            "email": "Please enter a valid email address.",
            "name": "Name must be at least 2 characters.",
        }

    def test_required_fields(self):
        errors = collect_errors({}, contact_schema)
        assert set(errors) == {"subject", "message", "email", "name"}
        assert errors["name"] == "This field is required."

    def test_normalize_arrays_and_optional_blanks(self):
        payload = _normalize({"action": "publish", "content": "x", "categories": "5", "tags": "", "keyword": ""},
                             editor_schema)
        assert payload == {"action": "publish", "content": "x", "categories": ["5"], "tags": []}
        assert collect_errors(payload, editor_schema) == {}

    def test_single_category_only(self):
        payload = _normalize({"action": "publish", "content": "x", "categories": ["1", "2"]}, editor_schema)
        assert "categories" in collect_errors(payload, editor_schema)


class TestRetry:

    def test_backoff_is_capped(self):
        delays = backoff_delays(0.5, max_delay=3)
        assert [next(delays) for _ in range(5)] == [0.5, 1.0, 2.0, 3, 3]

    def test_retry_until_success(self):
        attempts = []
        slept = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("down")
            return "ok"

        assert _retry(flaky, tries=3, base_delay=1, exceptions=(ConnectionError,), sleep=slept.append) == "ok"
        assert slept == [1, 2]

    def test_retry_raises_last_error(self):
        def broken():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            _retry(broken, tries=2, base_delay=0, exceptions=(ConnectionError,), sleep=lambda s: None)


class TestRecentPosts:

    def test_newest_first_deduped_and_capped(self, app):
        app.config["RECENT_POSTS_MAX"] = 3
        with app.test_request_context("/"):
            for i in range(5):
                content.add_recent_post(f"Post {i}", f"https://n.example.com/{i}")
            posts = content.add_recent_post("Post 2 again", "https://n.example.com/2")

            assert [p["title"] for p in posts] == ["Post 2 again", "Post 4", "Post 3"]
            assert content.recent_posts() == posts

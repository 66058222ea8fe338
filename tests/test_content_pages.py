"""Fetch, paraphrase, editor, publish, WordPress management and dashboard pages."""
from conftest import USER, flash_text, login_session, subscription

FETCHED = {
    "Lagos startups raise record funding": "https://news.example.com/lagos-startups",
    "New rail line opens": "https://news.example.com/rail-line",
}
PARAPHRASED = "Startups in Lagos Hit a Record\n\nFunding rounds grew sharply this quarter.\nInvestors stayed keen."


def paraphrase_first_post(client, backend):
    backend.set("POST", "/paraphrase/", json={"Paraphrased": PARAPHRASED, "seo": {"keyword": "lagos"}})
    return client.post("/make-post/paraphrase", data={
        "title": "Lagos startups raise record funding",
        "url": "https://news.example.com/lagos-startups",
    })


class TestFetchPosts:

    def test_fetched_posts_are_listed(self, logged_in, backend):
        backend.set("POST", "/fetch-news/", json=FETCHED)

        resp = logged_in.post("/make-post/fetch")
        assert resp.status_code == 302
        assert resp.headers["Location"] == "/make-post"
        assert "Retrieved 2 posts" in flash_text(logged_in)

        body = logged_in.get("/make-post").get_data(as_text=True)
        assert "Lagos startups raise record funding" in body
        assert 'value="https://news.example.com/rail-line"' in body

    def test_subscription_error_goes_to_pricing(self, logged_in, backend):
        backend.set("POST", "/fetch-news/", status=403, json={"detail": "Active subscription required"})
        resp = logged_in.post("/make-post/fetch")
        assert resp.headers["Location"] == "/pricing"
        assert "Subscription required" in flash_text(logged_in)

    def test_free_trial_used_goes_to_pricing(self, logged_in, backend):
        backend.set("POST", "/fetch-news/", status=429, json={"error": "User has already used free trial. No access!"})
        resp = logged_in.post("/make-post/fetch")
        assert resp.headers["Location"] == "/pricing"
        assert "Free Trial Used" in flash_text(logged_in)

    def test_other_errors_stay_on_page(self, logged_in, backend):
        backend.set("POST", "/fetch-news/", status=500, json={"detail": "Scraper offline"})
        resp = logged_in.post("/make-post/fetch")
        assert resp.headers["Location"] == "/make-post"
        assert "Error fetching posts: Scraper offline" in flash_text(logged_in)

    def test_non_json_body_is_reported(self, logged_in, backend):
        backend.set("POST", "/fetch-news/", text="<html>gateway</html>")
        logged_in.post("/make-post/fetch")
        assert "Invalid response format from server" in flash_text(logged_in)


class TestParaphrase:

    def test_requires_active_plan(self, logged_in, backend):
        backend.set("GET", "/subscription/details/", json=subscription(status="expired"))
        resp = paraphrase_first_post(logged_in, backend)
        assert resp.headers["Location"] == "/pricing"
        assert backend.calls_to("POST", "/paraphrase/") == []

    def test_result_opens_in_editor(self, logged_in, backend):
        resp = paraphrase_first_post(logged_in, backend)
        assert resp.status_code == 302
        assert resp.headers["Location"] == "/paraphrase"
        assert backend.calls_to("POST", "/paraphrase/")[0].json == {
            "title": "Lagos startups raise record funding",
            "url": "https://news.example.com/lagos-startups",
        }

        body = logged_in.get("/paraphrase").get_data(as_text=True)
        assert "<h1>Startups in Lagos Hit a Record</h1>" in body
        assert "Funding rounds grew sharply this quarter." in body
        assert 'href="https://news.example.com/lagos-startups"' in body
        assert "<dt>keyword</dt><dd>lagos</dd>" in body

    def test_daily_limit_goes_to_pricing(self, logged_in, backend):
        backend.set("POST", "/paraphrase/", json={"error": "Your daily request limit is reached"})
        resp = logged_in.post("/make-post/paraphrase", data={
            "title": "New rail line opens", "url": "https://news.example.com/rail-line",
        })
        assert resp.headers["Location"] == "/pricing"
        assert "Daily limit reached" in flash_text(logged_in)

    def test_paraphrase_adds_recent_post(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        body = logged_in.get("/dashboard").get_data(as_text=True)
        assert "Lagos startups raise record funding" in body

    def test_editor_without_content_redirects(self, logged_in):
        resp = logged_in.get("/paraphrase")
        assert resp.headers["Location"] == "/make-post"
        assert "No content found" in flash_text(logged_in)


class TestEditor:

    def test_save_keeps_source(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        resp = logged_in.post("/paraphrase", data={"action": "save", "content": "Edited Title\n\nEdited body"})
        assert resp.headers["Location"] == "/paraphrase"

        body = logged_in.get("/paraphrase").get_data(as_text=True)
        assert "<h1>Edited Title</h1>" in body
        assert 'href="https://news.example.com/lagos-startups"' in body

    def test_reparaphrase_sends_word_length(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        backend.set("POST", "/reparaphrase/", json={"paraphrased_content": "Shorter Title\n\nShort body."})

        resp = logged_in.post("/paraphrase", data={
            "action": "reparaphrase", "content": PARAPHRASED, "word_length": "300", "keyword": "funding",
        })
        assert resp.headers["Location"] == "/paraphrase"
        sent = backend.calls_to("POST", "/reparaphrase/")[0].json
        assert sent["word_length"] == 300
        assert sent["keyword"] == "funding"
        assert sent["url"] == "https://news.example.com/lagos-startups"
        assert "<h1>Shorter Title</h1>" in logged_in.get("/paraphrase").get_data(as_text=True)

    def test_publish_sends_body_without_title_lines(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        backend.set("POST", "/publish/", status=201, json={"id": 55, "link": "https://blog.example.com/?p=55"})

        resp = logged_in.post("/paraphrase", data={
            "action": "publish",
            "content": PARAPHRASED,
            "title": "Startups in Lagos Hit a Record",
            "categories": "5",
            "tags": ["1", "2"],
            "status": "publish",
        })

        assert resp.status_code == 302
        assert resp.headers["Location"] == "/wordpress-management"
        sent = backend.calls_to("POST", "/publish/")[0].kwargs["data"]
        assert ("title", "Startups in Lagos Hit a Record") in sent
        assert ("content", "Funding rounds grew sharply this quarter.\nInvestors stayed keen.") in sent
        assert ("status", "publish") in sent
        assert ("categories", "5") in sent
        assert [v for k, v in sent if k == "tags"] == ["1", "2"]
        assert "Content published successfully" in flash_text(logged_in)

    def test_draft_action_forces_draft_status(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        backend.set("POST", "/publish/", status=201, json={"id": 56})

        logged_in.post("/paraphrase", data={"action": "draft", "content": PARAPHRASED, "status": "publish"})

        sent = backend.calls_to("POST", "/publish/")[0].kwargs["data"]
        assert ("status", "draft") in sent
        assert ("title", "Startups in Lagos Hit a Record") in sent

    def test_publish_error_keeps_editor(self, logged_in, backend):
        paraphrase_first_post(logged_in, backend)
        backend.set("POST", "/publish/", status=400, json={"detail": "WordPress rejected the credentials"})

        resp = logged_in.post("/paraphrase", data={"action": "publish", "content": PARAPHRASED})
        assert resp.status_code == 400
        assert "WordPress rejected the credentials" in resp.get_data(as_text=True)


class TestUrlParaphraser:

    def test_locked_banner_for_pro(self, logged_in):
        body = logged_in.get("/url-paraphraser").get_data(as_text=True)
        assert 'id="feature-locked"' in body

    def test_pro_plan_cannot_submit(self, logged_in, backend):
        resp = logged_in.post("/url-paraphraser", data={"url": "https://news.example.com/rail-line"})
        assert resp.headers["Location"] == "/url-paraphraser"
        assert "Feature locked" in flash_text(logged_in)
        assert backend.calls_to("POST", "/paraphrase/") == []

    def test_ultimate_plan_paraphrases_url(self, logged_in, backend):
        backend.set("GET", "/subscription/details/", json=subscription("Ultimate"))
        backend.set("POST", "/paraphrase/", json={"Paraphrased": "Rail Line Opens\n\nTrains run daily."})

        resp = logged_in.post("/url-paraphraser", data={"url": "https://news.example.com/rail-line"})

        assert resp.headers["Location"] == "/paraphrase"
        assert backend.calls_to("POST", "/paraphrase/")[0].json == {"url": "https://news.example.com/rail-line"}
        body = logged_in.get("/paraphrase").get_data(as_text=True)
        assert "<h1>Rail Line Opens</h1>" in body
        assert 'href="https://news.example.com/rail-line"' in body

    def test_ultimate_keeps_backend_title_and_seo(self, logged_in, backend):
        backend.set("GET", "/subscription/details/", json=subscription("Ultimate"))
        backend.set("POST", "/paraphrase/", json={
            "Paraphrased": "Rail Line Opens\n\nTrains run daily.",
            "title": "Backend Title",
            "seo": {"seo_score": 80},
        })

        logged_in.post("/url-paraphraser", data={"url": "https://news.example.com/rail-line"})
        body = logged_in.get("/paraphrase").get_data(as_text=True)

        assert ">Backend Title</a>" in body
        assert 'class="seo"' in body
        assert "<dt>seo_score</dt><dd>80</dd>" in body

    def test_ultimate_invalid_url(self, logged_in, backend):
        backend.set("GET", "/subscription/details/", json=subscription("Ultimate"))
        resp = logged_in.post("/url-paraphraser", data={"url": "not a url"})
        assert resp.status_code == 400
        assert "Please enter a valid URL." in resp.get_data(as_text=True)
        assert 'id="feature-locked"' not in resp.get_data(as_text=True)

    def test_legacy_path_redirects(self, client):
        resp = client.get("/url-paraphrase")
        assert resp.status_code == 301
        assert resp.headers["Location"] == "/url-paraphraser"


class TestWordPressManagement:

    def _wordpress(self, backend, categories=None):
        backend.set("GET", "/get-categories/", json=categories or {"1": "News", "2": "Tech"})
        backend.set("GET", "/get-tags/", json={"3": "python", "4": "lagos"})
        backend.set("GET", "/get-posts/", json={"0": "https://blog.example.com/2025/01/hello-world/"})

    def test_lists_categories_tags_and_posts(self, logged_in, backend):
        self._wordpress(backend)
        body = logged_in.get("/wordpress-management").get_data(as_text=True)
        assert "Tech" in body
        assert "python" in body
        assert ">Hello World</a>" in body

    def test_category_error_is_reported(self, logged_in, backend):
        self._wordpress(backend, categories={"Message": "Error"})
        body = logged_in.get("/wordpress-management").get_data(as_text=True)
        assert "Failed to fetch categories" in body
        assert "No categories found." in body

    def test_selection_is_remembered(self, logged_in, backend):
        self._wordpress(backend)
        resp = logged_in.post("/wordpress-management/select", data={"category": "2", "tags": ["4"]})
        assert resp.headers["Location"] == "/wordpress-management"

        body = logged_in.get("/wordpress-management").get_data(as_text=True)
        assert 'name="category" value="2" checked' in body
        assert 'name="tags" value="4" checked' in body

    def test_unknown_refresh_kind(self, logged_in):
        assert logged_in.post("/wordpress-management/refresh/users").status_code == 404


class TestDashboard:

    def test_shows_stats_and_subscription(self, logged_in, backend):
        resp = logged_in.get("/dashboard")
        body = resp.get_data(as_text=True)
        assert "no-store" in resp.headers["Cache-Control"]
        assert '<span id="total-posts">12</span>' in body
        assert '<span id="total-paraphrased">5</span>' in body
        assert '<span id="expires">January 31, 2025</span>' in body
        assert "3 / 50" in body

    def test_never_subscribed_goes_to_pricing(self, client, backend):
        backend.set("GET", "/users/user/", json={**USER, "has_subscribed": False})
        login_session(client, subscribed=False)
        resp = client.get("/dashboard")
        assert resp.headers["Location"] == "/pricing"

    def test_unauthorized_user_fetch_logs_out(self, logged_in, backend):
        backend.set("GET", "/users/user/", status=401, json={"detail": "User not found"})
        resp = logged_in.get("/dashboard")
        assert resp.headers["Location"] == "/auth/login"
        with logged_in.session_transaction() as sess:
            assert "authToken" not in sess

    def test_activity_failure_shows_zeroes(self, logged_in, backend):
        backend.set("GET", "/details/", status=500, json={"detail": "boom"})
        body = logged_in.get("/dashboard").get_data(as_text=True)
        assert '<span id="total-posts">0</span>' in body

    def test_refresh_subscription_refetches(self, logged_in, backend):
        logged_in.get("/dashboard")
        before = len(backend.calls_to("GET", "/subscription/details/"))
        resp = logged_in.post("/dashboard/refresh-subscription")
        assert resp.headers["Location"] == "/dashboard"
        assert len(backend.calls_to("GET", "/subscription/details/")) == before + 1

    def test_profile_update(self, logged_in, backend):
        backend.set("PUT", "/users/update/", json={**USER, "username": "alice2"})
        resp = logged_in.post("/dashboard/profile", data={
            "username": "alice2",
            "email": "alice@example.com",
            "wordpress_username": "alice_wp",
            "wordpress_url": "https://blog.example.com",
            "current_password": "",
            "new_password": "",
            "wordpress_password": "",
        })
        assert resp.headers["Location"] == "/dashboard/profile"
        assert backend.calls_to("PUT", "/users/update/")[0].json["username"] == "alice2"
        with logged_in.session_transaction() as sess:
            assert sess["userData"]["username"] == "alice2"

    def test_profile_update_failure(self, logged_in, backend):
        backend.set("PUT", "/users/update/", status=400, json={"email": ["Enter a valid email address."]})
        resp = logged_in.post("/dashboard/profile", data={
            "username": "alice",
            "email": "alice@example.com",
            "wordpress_username": "alice_wp",
            "wordpress_url": "https://blog.example.com",
        })
        body = resp.get_data(as_text=True)
        assert resp.status_code == 400
        assert "Failed to update profile" in body
        assert 'data-field="email">Enter a valid email address.' in body


class TestContact:

    FORM = {
        "name": "Alice",
        "email": "alice@example.com",
        "subject": "Billing",
        "message": "Please help me with my invoice.",
    }

    def test_validation(self, client, backend):
        resp = client.post("/contact", data={**self.FORM, "subject": "Hi", "message": "short"})
        body = resp.get_data(as_text=True)
        assert resp.status_code == 400
        assert "Subject must be at least 3 characters." in body
        assert "Message must be at least 10 characters." in body
        assert backend.calls_to("POST", "/contact/") == []

    def test_sent(self, client, backend):
        backend.set("POST", "/contact/", status=201, json={"ok": True})
        resp = client.post("/contact", data=self.FORM)
        assert resp.headers["Location"] == "/contact"
        assert backend.calls_to("POST", "/contact/")[0].json["subject"] == "Billing"

    def test_failure(self, client, backend):
        backend.set("POST", "/contact/", status=500, json={"detail": "mail down"})
        resp = client.post("/contact", data=self.FORM)
        assert resp.status_code == 400
        assert "Something went wrong. Please try again." in resp.get_data(as_text=True)


class TestSubscriptionApi:

    def test_refresh_requires_login(self, client):
        resp = client.post("/api/subscription/refresh")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "login_required"

    def test_refresh_returns_state(self, logged_in, backend):
        data = logged_in.post("/api/subscription/refresh").get_json()
        assert data["ok"] is True
        assert data["has_active_plan"] is True
        assert data["subscription"]["plan"] == "Pro"
        assert data["subscription"]["requests_remaining"] == 47
        assert data["subscription"]["expires_display"] == "January 31, 2025"

import secrets
from flask import g, current_app


def init_security_headers(app):

    @app.before_request
    def _make_csp_nonce():
        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def add_security_headers(resp):
        cfg = current_app.config
        nonce = getattr(g, "csp_nonce", "")

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        if cfg.get("ENV") != "development":
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=15552000; includeSubDomains; preload"
            )
        resp.headers.setdefault("X-Frame-Options", "DENY")

        # -----------------------------
        # CSP 구성 요소 누적
        # -----------------------------
        script_src = [
            "'self'",
            f"'nonce-{nonce}'",
        ]

        # 가져온 글/WordPress 대표 이미지는 외부 도메인
        img_src = [
            "'self'",
            "data:",
            "https:",
        ]

        # 사용법 페이지 YouTube 영상
        frame_src = [
            "https://www.youtube.com",
            "https://www.youtube-nocookie.com",
        ]

        connect_src = [
            "'self'",
        ]

        form_action = [
            "'self'",
        ]

        # -----------------------------
        # Paystack 결제창 허용
        # -----------------------------
        if cfg.get("PAYMENTS_ENABLED"):
            script_src += ["https://js.paystack.co"]
            frame_src += ["https://checkout.paystack.com"]
            form_action += ["https://checkout.paystack.com"]

        csp = (
            "default-src 'self'; "
            f"script-src {' '.join(script_src)}; "
            f"img-src {' '.join(img_src)}; "
            "style-src 'self' 'unsafe-inline'; "
            f"frame-src {' '.join(frame_src)}; "
            f"connect-src {' '.join(connect_src)}; "
            f"form-action {' '.join(form_action)}; "
        )

        resp.headers["Content-Security-Policy"] = csp
        return resp

    @app.context_processor
    def _inject_nonce():
        return {"csp_nonce": getattr(g, "csp_nonce", "")}

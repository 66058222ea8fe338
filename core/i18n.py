from flask import request, current_app

LANG_COOKIE = "lang"


def _base_language(code) -> str:
    # en-US, en_GB -> en
    return (code or "").strip().lower().replace("_", "-").split("-")[0]


def select_locale() -> str:
    """
    날짜/통화 표기에 쓸 언어.
    ?lang= → lang 쿠키 → Accept-Language → BABEL_DEFAULT_LOCALE
    """
    supported = current_app.config.get("LANGUAGES", ["en"])

    for candidate in (request.args.get("lang"), request.cookies.get(LANG_COOKIE)):
        code = _base_language(candidate)
        if code in supported:
            return code

    best = request.accept_languages.best_match(supported)
    return best or current_app.config.get("BABEL_DEFAULT_LOCALE", supported[0])

from flask import request, g, abort, current_app

from auth.entitlements import load_current_user


def load_user():
    load_current_user()


# -------------------- 보안 훅 --------------------
def guard_payload_size():
    # 대표 이미지 업로드(publish)만 큰 본문 허용
    limit = current_app.config.get("MAX_UPLOAD_BYTES", 8 * 1024 * 1024)
    if request.path != "/paraphrase":
        limit = min(limit, 256 * 1024)
    if request.content_length and request.content_length > limit:
        abort(413)


# -------------------- 400 디버그 로깅 --------------------
def log_bad_requests(resp):
    if resp.status_code != 400:
        return resp
    # 본문에는 비밀번호/토큰이 들어갈 수 있어 키만 남긴다
    current_app.logger.debug(
        "[400 DEBUG] %s %s content_type=%s args=%s form_keys=%s",
        request.method,
        request.path,
        request.content_type,
        request.args.to_dict(),
        sorted(request.form.keys()),
    )
    return resp


def register_hooks(app):
    app.before_request(load_user)
    app.before_request(guard_payload_size)
    app.after_request(log_bad_requests)

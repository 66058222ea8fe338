from flask import Blueprint, current_app

api_health_bp = Blueprint("api_health", __name__)


# 로드밸런서 헬스체크. 백엔드 호출 없이 설정만 확인
@api_health_bp.route("/health")
def health():
    return {"ok": True, "backend_configured": bool(current_app.config.get("BACKEND_API_BASE"))}, 200

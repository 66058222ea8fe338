"""
security.py: 폼 입력 정리 및 JSON Schema 검증
BlogScribe (Flask)

입력값은 백엔드로 그대로 전달되므로 HTML escape 는 하지 않는다(렌더링 시 Jinja autoescape).
"""
import re
from functools import wraps

from flask import request, abort, g, current_app
from jsonschema import Draft7Validator

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


# -------------------- 유틸 함수 --------------------
def _form_to_dict(formdata):
    """MultiDict → 일반 dict 변환 (getlist 포함)"""
    result = {}
    for k in formdata.keys():
        vals = formdata.getlist(k)
        result[k] = vals if len(vals) > 1 else (vals[0] if vals else None)
    return result


def _sanitize_payload(value, strip=True):
    """문자열/리스트/딕셔너리를 재귀적으로 정리 (제어문자 제거 + 공백 trim)"""
    if isinstance(value, str):
        value = _CONTROL_RE.sub("", value)
        return value.strip() if strip else value
    elif isinstance(value, list):
        return [_sanitize_payload(v, strip=strip) for v in value]
    elif isinstance(value, dict):
        return {k: _sanitize_payload(v, strip=strip) for k, v in value.items()}
    return value


def _field_message(schema: dict, field: str, validator: str, default: str) -> str:
    prop = (schema.get("properties") or {}).get(field) or {}
    return (prop.get("messages") or {}).get(validator) or default


def collect_errors(data: dict, schema: dict) -> dict:
    """
    JSON Schema 검증 결과를 {필드: 첫 번째 메시지} 로 변환.
    required 위반은 누락된 필드마다 메시지를 단다.
    """
    errors = {}
    if not schema:
        return errors

    for err in Draft7Validator(schema).iter_errors(data):
        if err.validator == "required":
            for field in err.validator_value:
                if field not in (err.instance or {}):
                    errors.setdefault(field, "This field is required.")
            continue

        field = str(err.path[0]) if err.path else "__all__"
        errors.setdefault(field, _field_message(schema, field, err.validator, err.message))
    return errors


def _normalize(payload: dict, schema: dict) -> dict:
    props = (schema or {}).get("properties") or {}
    required = set((schema or {}).get("required") or [])

    out = {}
    for key, val in payload.items():
        prop = props.get(key) or {}
        # 배열 필드: 단일 값도 리스트로
        if prop.get("type") == "array":
            if val in (None, ""):
                val = []
            elif isinstance(val, str):
                val = [val]
            val = [v for v in val if v]
        # 선택 필드의 빈 문자열은 미입력으로 본다
        elif val == "" and key not in required:
            continue
        out[key] = val
    return out


# -------------------- 메인 데코레이터 --------------------
def require_safe_input(json_schema=None, *, form=True, raw_fields=None, bool_fields=None,
                       only_methods=("POST", "PUT", "PATCH")):
    """
    입력 정리 + 검증 데코레이터
      - json_schema : JSON 스키마(dict)
      - form=True   : request.form 검사 (HTML 폼), False 면 JSON 본문
      - raw_fields  : trim 하지 않을 필드 (비밀번호, 본문 등)
      - bool_fields : 체크박스 필드 (미전송 → False)
    결과
      - g.safe_input  : 정리된 dict (검증 대상 메서드가 아니면 None)
      - g.input_errors: {필드: 메시지} (오류 없으면 빈 dict)
    """
    raw_fields = set(raw_fields or [])
    bool_fields = set(bool_fields or [])
    only_methods = tuple(only_methods or ())

    def deco(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            g.input_errors = {}
            if only_methods and request.method.upper() not in only_methods:
                g.safe_input = None
                return f(*args, **kwargs)

            if form:
                payload = _form_to_dict(request.form)
            else:
                if not request.is_json:
                    abort(400, description="JSON request required.")
                payload = request.get_json(silent=True) or {}
                if not isinstance(payload, dict):
                    abort(400, description="JSON object required.")

            # 체크박스 보정
            for b in bool_fields:
                v = payload.get(b)
                payload[b] = isinstance(v, str) and v.lower() in ("on", "true", "1", "yes")

            safe = {k: _sanitize_payload(v, strip=(k not in raw_fields)) for k, v in payload.items()}
            safe = _normalize(safe, json_schema)

            g.input_errors = collect_errors(safe, json_schema)
            g.safe_input = safe
            if g.input_errors:
                current_app.logger.info("[INPUT] %s rejected fields=%s", request.path, sorted(g.input_errors))
            return f(*args, **kwargs)

        return wrapped

    return deco

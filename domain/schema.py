from domain.policies import PUBLISH_STATUSES

EMAIL_RE = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_RE = r"^https?://[^\s/$.?#].[^\s]*$"

# 각 property 의 "messages" 는 jsonschema 가 무시하는 확장 키.
# 검증 실패 시 화면에 보여줄 문구 (validator 이름 -> 문구)

# -------------------- 인증 --------------------
login_schema = {
    "type": "object",
    "properties": {
        "username": {
            "type": "string", "minLength": 3,
            "messages": {"minLength": "Username must be at least 3 characters."},
        },
        "password": {
            "type": "string", "minLength": 6,
            "messages": {"minLength": "Password must be at least 6 characters."},
        },
    },
    "required": ["username", "password"],
    "additionalProperties": True,
}

register_schema = {
    "type": "object",
    "properties": {
        "username": {"type": "string", "minLength": 1, "maxLength": 150},
        "email": {
            "type": "string", "pattern": EMAIL_RE, "maxLength": 254,
            "messages": {"pattern": "Please enter a valid email address."},
        },
        "password": {"type": "string", "minLength": 1, "maxLength": 128},
        "wordpress_username": {"type": "string", "minLength": 1},
        "wordpress_password": {"type": "string", "minLength": 1},
        "wordpress_url": {
            "type": "string", "pattern": URL_RE,
            "messages": {"pattern": "Please enter a valid URL."},
        },
        "agree": {"type": ["string", "boolean", "null"]},
    },
    "required": ["username", "email", "password", "wordpress_username", "wordpress_password", "wordpress_url"],
    "additionalProperties": True,
}

email_schema = {
    "type": "object",
    "properties": {
        "email": {
            "type": "string", "pattern": EMAIL_RE,
            "messages": {"pattern": "Please enter a valid email address."},
        },
    },
    "required": ["email"],
    "additionalProperties": True,
}

password_reset_schema = {
    "type": "object",
    "properties": {
        "password": {
            "type": "string", "minLength": 8,
            "messages": {"minLength": "Password must be at least 8 characters."},
        },
        "confirm_password": {
            "type": "string", "minLength": 8,
            "messages": {"minLength": "Password must be at least 8 characters."},
        },
    },
    "required": ["password", "confirm_password"],
    "additionalProperties": True,
}

profile_schema = {
    "type": "object",
    "properties": {
        "username": {"type": "string", "minLength": 1, "maxLength": 150},
        "email": {
            "type": "string", "pattern": EMAIL_RE,
            "messages": {"pattern": "Please enter a valid email address."},
        },
        "current_password": {"type": ["string", "null"]},
        "new_password": {"type": ["string", "null"]},
        "wordpress_username": {"type": "string", "minLength": 1},
        "wordpress_url": {
            "type": "string", "pattern": URL_RE,
            "messages": {"pattern": "Please enter a valid URL."},
        },
        "wordpress_password": {"type": ["string", "null"]},
    },
    "required": ["username", "email", "wordpress_username", "wordpress_url"],
    "additionalProperties": True,
}

# -------------------- 문의 --------------------
contact_schema = {
    "type": "object",
    "properties": {
        "subject": {
            "type": "string", "minLength": 3, "maxLength": 100,
            "messages": {
                "minLength": "Subject must be at least 3 characters.",
                "maxLength": "Subject must not exceed 100 characters.",
            },
        },
        "message": {
            "type": "string", "minLength": 10, "maxLength": 1000,
            "messages": {
                "minLength": "Message must be at least 10 characters.",
                "maxLength": "Message must not exceed 1000 characters.",
            },
        },
        "email": {
            "type": "string", "pattern": EMAIL_RE,
            "messages": {"pattern": "Please enter a valid email address."},
        },
        "name": {
            "type": "string", "minLength": 2, "maxLength": 50,
            "messages": {
                "minLength": "Name must be at least 2 characters.",
                "maxLength": "Name must not exceed 50 characters.",
            },
        },
    },
    "required": ["subject", "message", "email", "name"],
    "additionalProperties": True,
}

# -------------------- 글 / 패러프레이즈 --------------------
paraphrase_post_schema = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1, "maxLength": 500},
        "url": {"type": "string", "pattern": URL_RE},
    },
    "required": ["title", "url"],
    "additionalProperties": True,
}

url_paraphrase_schema = {
    "type": "object",
    "properties": {
        "url": {
            "type": "string", "minLength": 1, "pattern": URL_RE,
            "messages": {
                "minLength": "Please enter a URL to paraphrase.",
                "pattern": "Please enter a valid URL.",
            },
        },
    },
    "required": ["url"],
    "additionalProperties": True,
}

editor_schema = {
    "type": "object",
    "properties": {
        "action": {"type": "string", "enum": ["save", "reparaphrase", "publish", "draft"]},
        "content": {"type": "string", "maxLength": 200000},
        "title": {"type": ["string", "null"], "maxLength": 1000},
        "word_length": {
            "type": "string", "pattern": r"^\d{2,5}$",
            "messages": {"pattern": "Word length must be a number."},
        },
        "keyword": {"type": ["string", "null"], "maxLength": 200},
        "categories": {"type": "array", "items": {"type": "string"}, "maxItems": 1},
        "tags": {"type": "array", "items": {"type": "string"}},
        "status": {"type": "string", "enum": list(PUBLISH_STATUSES)},
    },
    "required": ["action", "content"],
    "additionalProperties": True,
}

wordpress_selection_schema = {
    "type": "object",
    "properties": {
        "category": {"type": ["string", "null"], "maxLength": 50},
        "tags": {"type": "array", "items": {"type": "string", "maxLength": 50}},
    },
    "additionalProperties": True,
}

# -------------------- 결제 --------------------
subscribe_schema = {
    "type": "object",
    "properties": {
        "plan_id": {"type": "string", "pattern": r"^\d{1,9}$"},
    },
    "required": ["plan_id"],
    "additionalProperties": True,
}

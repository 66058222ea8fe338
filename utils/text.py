# utils/text.py
import re


def word_count(text: str) -> int:
    return len([w for w in (text or "").split() if w])


def split_title(content: str):
    """본문 앞 두 줄을 제목으로, 나머지를 본문으로"""
    lines = (content or "").split("\n")
    title = "\n".join(lines[:2]).strip()
    body = "\n".join(lines[2:]).strip()
    return title, body


def slug_to_title(slug: str) -> str:
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), slug.replace("-", " "))


def is_local_path(target: str) -> bool:
    # open redirect 방지: 같은 사이트 내부 경로만 허용
    return bool(target) and target.startswith("/") and not target.startswith("//") and "\\" not in target

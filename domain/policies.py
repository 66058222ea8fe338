# policies.py
PLANS = ("Basic", "Pro", "Ultimate")

FEATURE_FETCH_POSTS = "posts.fetch"
FEATURE_PARAPHRASE = "paraphrase"
FEATURE_REPARAPHRASE = "paraphrase.again"
FEATURE_PUBLISH = "wordpress.publish"
FEATURE_URL_PARAPHRASE = "paraphrase.url"

ALL_FEATURES = frozenset({
    FEATURE_FETCH_POSTS,
    FEATURE_PARAPHRASE,
    FEATURE_REPARAPHRASE,
    FEATURE_PUBLISH,
    FEATURE_URL_PARAPHRASE,
})

FEATURES_BY_PLAN = {
    "Basic": {FEATURE_FETCH_POSTS, FEATURE_PARAPHRASE, FEATURE_REPARAPHRASE, FEATURE_PUBLISH},
    "Pro": {FEATURE_FETCH_POSTS, FEATURE_PARAPHRASE, FEATURE_REPARAPHRASE, FEATURE_PUBLISH},
    "Ultimate": {"*"},  # 모든 기능 허용
}

# 홈/요금제 카드에서 강조할 플랜
FEATURED_PLAN = "Pro"

PUBLISH_STATUSES = ("publish", "draft")

# routes/__init__.py
from .web.auth import auth_bp
from .web.password_reset import password_reset_bp
from .web.email_verify import email_verify_bp
from .web.dashboard import dashboard_bp
from .web.subscribe import subscribe_bp
from .web.posts import posts_bp
from .web.wordpress import wordpress_bp
from .web.pages import pages_bp
from .api.auth_status import api_auth_status_bp
from .api.subscription import api_subscription_bp
from .api.health import api_health_bp


def register_routes(app):
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(password_reset_bp)
    app.register_blueprint(email_verify_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(subscribe_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(wordpress_bp)

    app.register_blueprint(api_auth_status_bp)
    app.register_blueprint(api_subscription_bp)
    app.register_blueprint(api_health_bp)

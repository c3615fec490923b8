"""Routes package for the couple games application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .auth import auth_bp
    from .public import public_bp
    from .user import user_bp
    from .coordinator import coordinator_bp
    from .super import super_bp
    from .admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(public_bp, url_prefix='/api/public')
    app.register_blueprint(user_bp, url_prefix='/api/user')
    app.register_blueprint(coordinator_bp, url_prefix='/api/coordinator')
    app.register_blueprint(super_bp, url_prefix='/api/super')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

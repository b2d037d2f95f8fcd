from .admin_routes import admin_bp
from .public_routes import public_bp
from .player_routes import player_bp

def register_routes(app):
    app.register_blueprint(public_bp, url_prefix="/api")
    app.register_blueprint(player_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/admin")

from .index import index_bp
from .admin import admin_bp
from .auth import auth_bp
from .submission import submission_bp

def register_blueprints(app):
    app.register_blueprint(index_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(submission_bp)

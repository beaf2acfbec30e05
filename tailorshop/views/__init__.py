from .auth import auth_bp
from .catalog import catalog_bp
from .customers import customer_bp
from .orders import order_bp, uploads_bp


def register_routes(app):
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(uploads_bp)

from .auth import auth_bp
from .users import users_bp
from .students import students_bp
from .payments import payments_bp
from .cards import cards_bp
from .public import public_bp
from .base_route import base_bp

def register_routes(app):
    app.register_blueprint(base_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(students_bp, url_prefix='/students')
    app.register_blueprint(payments_bp, url_prefix='/payments')
    app.register_blueprint(cards_bp, url_prefix='/cards')
    app.register_blueprint(public_bp, url_prefix='/public')

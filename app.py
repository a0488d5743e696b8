import logging
import os
import sqlite3

from flask import Flask, request, session

# --- Importaciones Locales ---
from config import config_dict
from application.services.account_service import AccountService
from domain.models import AssetKind
from infrastructure.persistence.repository import SQLiteRepository
from presentation import auth, equipos, hardware, incidencias, mantenimientos, software, ubicaciones, usuarios


def configurar_logging(app):
    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))


def seed_admin(app, repository):
    creado = AccountService(repository, app.config['ALLOWED_EMAIL_DOMAIN']).ensure_admin(
        app.config['ADMIN_USERNAME'], app.config['ADMIN_EMAIL'], app.config['ADMIN_PASSWORD']
    )
    if creado:
        app.logger.warning("Administrador inicial '%s' creado. ¡Cambia la contraseña por defecto!",
                           app.config['ADMIN_EMAIL'])


def create_app(config_name=None, repository=None, **overrides):
    config = config_dict[config_name or os.environ.get('FLASK_CONFIG', 'default')]

    app = Flask(__name__)
    app.config.from_object(config)
    app.config.update(overrides)
    configurar_logging(app)

    # --- Base de Datos ---
    if repository is None:
        repository = SQLiteRepository(app.config['DB_FILE'])
    repository.init_schema()
    app.extensions['repository'] = repository
    seed_admin(app, repository)

    # --- Rutas ---
    app.register_blueprint(auth.bp)
    app.register_blueprint(equipos.bp)
    app.register_blueprint(hardware.bp)
    app.register_blueprint(software.bp)
    app.register_blueprint(ubicaciones.bp)
    app.register_blueprint(usuarios.bp)
    for kind in (AssetKind.EQUIPO, AssetKind.HARDWARE):
        app.register_blueprint(incidencias.crear_blueprint(kind))
        app.register_blueprint(mantenimientos.crear_blueprint(kind))

    @app.context_processor
    def usuario_en_plantillas():
        return {'usuario_actual': session.get('user')}

    # --- Errores ---
    @app.errorhandler(sqlite3.Error)
    def error_base_datos(e):
        app.logger.exception("Error de base de datos en %s %s", request.method, request.path)
        return 'Error al procesar la solicitud', 500

    # --- Comandos ---
    @app.cli.command('crear-admin')
    def crear_admin():
        """Crea el administrador inicial definido en la configuración."""
        seed_admin(app, repository)
        print(f"Administrador: {app.config['ADMIN_EMAIL']}")

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=5000)

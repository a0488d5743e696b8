import sqlite3
import time

import pytest

from app import create_app
from application.services.account_service import AccountService
from domain.models import Equipment, Hardware, Location, UserRole
from infrastructure.persistence.repository import SQLiteRepository

DOMINIO = 'educa.madrid.org'
CLAVE = 'secreta123'


@pytest.fixture
def repo(tmp_path):
    repository = SQLiteRepository(str(tmp_path / 'inventario_test.db'))
    repository.init_schema()
    return repository


@pytest.fixture
def app(repo):
    return create_app('testing', repository=repo)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def cuentas(repo):
    return AccountService(repo, DOMINIO)


@pytest.fixture
def tecnico(cuentas):
    return cuentas.crear('tecnico', f'tecnico@{DOMINIO}', CLAVE, UserRole.TECNICO)


@pytest.fixture
def usuario(cuentas):
    return cuentas.crear('usuario', f'usuario@{DOMINIO}', CLAVE, UserRole.USUARIO)


@pytest.fixture
def admin(repo, app):
    return repo.get_user_by_email(app.config['ADMIN_EMAIL'])


def iniciar_sesion(client, user, created_at=None):
    """Deja en la cookie de sesión al usuario indicado, como hace /login."""
    with client.session_transaction() as sess:
        sess['user'] = user.to_session()
        sess['created_at'] = created_at if created_at is not None else time.time()


@pytest.fixture
def ubicacion(repo):
    return repo.create_location(Location(nombre_ubicacion='Aula 1', departamento_responsable='Informática'))


@pytest.fixture
def equipo(repo, ubicacion):
    return repo.create_equipment(Equipment(id_ubicacion=ubicacion.id_ubicacion, tipo='Portátil',
                                           marca='Dell', modelo='Latitude 5420', estado='operativo'))


@pytest.fixture
def componente(repo, ubicacion):
    return repo.create_hardware(Hardware(id_ubicacion=ubicacion.id_ubicacion, tipo_componente='Impresora',
                                         marca='HP', modelo='LaserJet'))


def incidencias_de(repo, kind, asset_id):
    """Incidencias de un activo leídas directamente de la base de datos."""
    conn = sqlite3.connect(repo.db_path)
    conn.row_factory = sqlite3.Row
    try:
        filas = conn.execute(f"SELECT * FROM Incidencias WHERE {kind.column} = ?", (asset_id,)).fetchall()
        return [dict(f) for f in filas]
    finally:
        conn.close()

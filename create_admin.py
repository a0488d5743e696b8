# create_admin.py

import getpass
import logging
import sys

from config import config_dict
from application.services.account_service import AccountService
from database_setup import crear_tablas
from infrastructure.persistence.repository import SQLiteRepository

def crear_admin_inicial(email=None, password=None, db_file=None):
    """
    Crea un administrador en la base de datos si su correo no existe.
    Sin argumentos usa ADMIN_EMAIL / ADMIN_PASSWORD de la configuración.
    """
    config = config_dict['default']
    repository = SQLiteRepository(db_file or config.DB_FILE)
    servicio = AccountService(repository, config.ALLOWED_EMAIL_DOMAIN)
    email = email or config.ADMIN_EMAIL
    creado = servicio.ensure_admin(config.ADMIN_USERNAME, email, password or config.ADMIN_PASSWORD)
    if creado:
        print(f"Usuario administrador '{email}' creado con éxito.")
    else:
        print(f"El usuario '{email}' ya existe. No se realizaron cambios.")
    return creado

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    # 1. Asegurarse de que la estructura de la base de datos exista
    crear_tablas()
    # 2. Intentar crear el usuario administrador
    if len(sys.argv) > 1:
        crear_admin_inicial(sys.argv[1], getpass.getpass("Contraseña: "))
    else:
        crear_admin_inicial()

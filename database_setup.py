# database_setup.py

import logging
import sqlite3

from config import config_dict
from infrastructure.persistence.repository import SQLiteRepository

logger = logging.getLogger(__name__)

def crear_tablas(db_file=None):
    """
    Crea las tablas del inventario si no existen:
    Usuarios, Ubicaciones, Equipos, Hardware, Software, Incidencias y Mantenimiento.
    """
    db_file = db_file or config_dict['default'].DB_FILE
    try:
        SQLiteRepository(db_file).init_schema()
        logger.info("Tablas listas y verificadas en %s", db_file)
    except sqlite3.Error:
        logger.exception("Ocurrió un error en la base de datos %s", db_file)
        raise

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    crear_tablas()

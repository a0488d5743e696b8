import os
from dotenv import load_dotenv

# Cargar variables del archivo .env
load_dotenv()

class Config:
    """Configuración base que se usa en producción y desarrollo."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'clave-por-defecto-insegura'
    TESTING = False

    # Base de Datos
    DB_FILE = os.environ.get('DB_NAME', 'inventario.db')

    # Sesión: expiración deslizante
    SESSION_TIMEOUT_MINUTES = int(os.environ.get('SESSION_TIMEOUT_MINUTES') or 30)
    PERMANENT_SESSION_LIFETIME = SESSION_TIMEOUT_MINUTES * 60

    # Registro abierto solo para este dominio
    ALLOWED_EMAIL_DOMAIN = os.environ.get('ALLOWED_EMAIL_DOMAIN', 'educa.madrid.org')

    # Administrador inicial
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@educa.madrid.org')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'cambiar-esta-clave')

    # Carga masiva
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Constantes del Negocio (Listas maestras)
    ROLES = ["admin", "tecnico", "usuario"]
    PRIORIDADES = ["baja", "media", "alta", "urgente"]
    ESTADOS_INCIDENCIA = ["abierta", "en progreso", "cerrada", "cancelada"]
    ESTADOS_MANTENIMIENTO = ["pendiente", "completado", "cancelado"]
    TIPOS_MANTENIMIENTO = ["preventivo", "correctivo"]

class DevelopmentConfig(Config):
    DEBUG = True

class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True

class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'clave-de-pruebas'
    ADMIN_PASSWORD = 'admin-pruebas'

# Diccionario para seleccionar configuración fácilmente
config_dict = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

# Listas maestras accesibles sin instanciar la configuración
ROLES = Config.ROLES
PRIORIDADES = Config.PRIORIDADES
ESTADOS_INCIDENCIA = Config.ESTADOS_INCIDENCIA
ESTADOS_MANTENIMIENTO = Config.ESTADOS_MANTENIMIENTO
TIPOS_MANTENIMIENTO = Config.TIPOS_MANTENIMIENTO

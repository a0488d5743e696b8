import logging
import re
import sqlite3
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from domain.models import User, UserRole
from infrastructure.persistence.repository import SQLiteRepository

logger = logging.getLogger(__name__)

class AccountError(Exception):
    """Error de validación en el alta o edición de cuentas."""

class AccountService:
    def __init__(self, repository: SQLiteRepository, allowed_domain: str):
        self.repository = repository
        self.email_regex = re.compile(r'^[a-zA-Z0-9._%+-]+@' + re.escape(allowed_domain) + r'$')
        self.allowed_domain = allowed_domain

    def registrar(self, username: str, email: str, password: str) -> User:
        """Autoregistro: solo correos del dominio permitido y siempre con rol 'usuario'."""
        email = (email or '').strip()
        if not self.email_regex.match(email):
            raise AccountError(f'Solo se permite el registro con correos de {self.allowed_domain}')
        if not password:
            raise AccountError('La contraseña es obligatoria.')
        return self.crear(username, email, password, UserRole.USUARIO)

    def crear(self, username: str, email: str, password: str, rol: UserRole) -> User:
        user = User(username=(username or '').strip(), email=email.strip(),
                    password=generate_password_hash(password), rol=rol)
        try:
            return self.repository.create_user(user)
        except sqlite3.IntegrityError:
            raise AccountError('Ya existe una cuenta con ese correo.')

    def autenticar(self, email: str, password: str) -> Optional[User]:
        user = self.repository.get_user_by_email((email or '').strip())
        if not user or not check_password_hash(user.password, password or ''):
            return None
        if not user.activo:
            raise AccountError('Tu cuenta está desactivada. Contacta con un administrador.')
        self.repository.touch_last_access(user.id)
        return user

    def actualizar(self, user_id: int, username: str, email: str, rol: str,
                   activo: bool = True, password: Optional[str] = None) -> Optional[User]:
        user = self.repository.get_user_by_id(user_id)
        if not user:
            return None
        try:
            user.rol = UserRole(rol)
        except ValueError:
            raise AccountError(f'Rol no válido: {rol}')
        user.username = (username or '').strip()
        user.email = (email or '').strip()
        user.activo = activo
        if password:
            user.password = generate_password_hash(password)
        try:
            self.repository.update_user(user)
        except sqlite3.IntegrityError:
            raise AccountError('Ya existe una cuenta con ese correo.')
        return user

    def ensure_admin(self, username: str, email: str, password: str) -> bool:
        """Crea el administrador inicial si su correo no existe. Devuelve True si lo creó."""
        if self.repository.get_user_by_email(email):
            return False
        self.repository.create_user(User(username=username, email=email,
                                         password=generate_password_hash(password),
                                         rol=UserRole.ADMIN))
        logger.info("Administrador inicial '%s' creado.", email)
        return True

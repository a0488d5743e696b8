"""Política de acceso: validez de la sesión y comprobación de rol.

Las funciones de este módulo no tocan la sesión de Flask. Devuelven una
``Admission`` que la capa web aplica: refrescar la marca de tiempo, destruir
la sesión, mostrar el mensaje y redirigir.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

LOGIN_ENDPOINT = 'auth.logup'
HOME_ENDPOINT = 'auth.index'

class RejectReason(Enum):
    NO_SESSION = "no_session"
    ACCOUNT_DELETED = "account_deleted"
    EXPIRED = "expired"
    FORBIDDEN = "forbidden"

MESSAGES = {
    RejectReason.NO_SESSION: 'Debes iniciar sesión para acceder a esta página.',
    RejectReason.ACCOUNT_DELETED: 'Tu cuenta ha sido eliminada. Por favor, vuelve a iniciar sesión.',
    RejectReason.EXPIRED: 'Tu sesión ha expirado. Por favor, vuelve a iniciar sesión.',
    RejectReason.FORBIDDEN: 'No tienes permisos para acceder a esta página.',
}

@dataclass(frozen=True)
class Admission:
    admitted: bool
    refreshed_at: Optional[float] = None
    reason: Optional[RejectReason] = None
    destroy_session: bool = False

    @property
    def message(self) -> Optional[str]:
        return MESSAGES.get(self.reason)

    @property
    def redirect_endpoint(self) -> Optional[str]:
        if self.admitted:
            return None
        return HOME_ENDPOINT if self.reason is RejectReason.FORBIDDEN else LOGIN_ENDPOINT

    @classmethod
    def admit(cls, refreshed_at: Optional[float] = None) -> 'Admission':
        return cls(admitted=True, refreshed_at=refreshed_at)

    @classmethod
    def reject(cls, reason: RejectReason) -> 'Admission':
        destroy = reason in (RejectReason.ACCOUNT_DELETED, RejectReason.EXPIRED)
        return cls(admitted=False, reason=reason, destroy_session=destroy)


def evaluate_session(session_user: Optional[dict], created_at: Optional[float], now: float,
                     find_user: Callable[[int], object], timeout_seconds: float) -> Admission:
    if not session_user:
        return Admission.reject(RejectReason.NO_SESSION)

    if find_user(session_user.get('id')) is None:
        return Admission.reject(RejectReason.ACCOUNT_DELETED)

    if created_at is None:
        created_at = now
    if now - created_at > timeout_seconds:
        return Admission.reject(RejectReason.EXPIRED)

    return Admission.admit(refreshed_at=now)


def check_role(role: Optional[str], allowed: Iterable[str]) -> Admission:
    if role in set(allowed):
        return Admission.admit()
    return Admission.reject(RejectReason.FORBIDDEN)

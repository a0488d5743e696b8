import logging
from typing import Optional

from domain.models import IncidentStatus, Maintenance, derive_incident_status
from infrastructure.persistence.repository import SQLiteRepository

logger = logging.getLogger(__name__)

class MaintenanceService:
    def __init__(self, repository: SQLiteRepository):
        self.repository = repository

    def _propagate_status(self, maintenance: Maintenance) -> IncidentStatus:
        """Aplica el estado derivado a todas las incidencias del mismo activo."""
        nuevo_estado = derive_incident_status(maintenance.estado)
        actualizadas = self.repository.set_incident_status_for_asset(
            maintenance.asset_kind, maintenance.asset_id, nuevo_estado
        )
        logger.info(
            "Mantenimiento %s (%s) -> %s incidencias de %s=%s pasan a '%s'",
            maintenance.id_mantenimiento, maintenance.estado, actualizadas,
            maintenance.asset_kind.column, maintenance.asset_id, nuevo_estado.value
        )
        return nuevo_estado

    def registrar(self, maintenance: Maintenance) -> Maintenance:
        # Dos escrituras independientes: si la segunda falla, el mantenimiento queda guardado.
        self.repository.create_maintenance(maintenance)
        self._propagate_status(maintenance)
        return maintenance

    def actualizar(self, maintenance: Maintenance) -> Optional[Maintenance]:
        if not self.repository.update_maintenance(maintenance):
            return None
        self._propagate_status(maintenance)
        return maintenance

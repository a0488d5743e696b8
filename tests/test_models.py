import pytest

from domain.models import (
    AssetKind, Equipment, Incident, IncidentStatus, Maintenance, User, UserRole,
    derive_incident_status, editable_values,
)


@pytest.mark.parametrize('estado, esperado', [
    ('completado', IncidentStatus.CERRADA),
    ('pendiente', IncidentStatus.EN_PROGRESO),
    ('cancelado', IncidentStatus.CANCELADA),
    ('en revisión', IncidentStatus.ABIERTA),
    ('', IncidentStatus.ABIERTA),
    (None, IncidentStatus.ABIERTA),
])
def test_derive_incident_status(estado, esperado):
    assert derive_incident_status(estado) is esperado


def test_asset_kind_of_incident_and_maintenance():
    incidencia = Incident(descripcion_incidencia='No arranca', id_usuario=1, id_ubicacion=1, id_hardware=4)
    assert incidencia.asset_kind is AssetKind.HARDWARE
    assert incidencia.asset_id == 4

    mantenimiento = Maintenance(tipo='preventivo', id_usuario=1, id_ubicacion=1, id_equipo=7)
    assert mantenimiento.asset_kind is AssetKind.EQUIPO
    assert mantenimiento.asset_id == 7


def test_editable_values_skips_key_and_audit_columns():
    valores = editable_values(Equipment(id_ubicacion=1, marca='Dell', id_equipo=9, fecha_creacion='2024-01-01'))
    assert 'id_equipo' not in valores
    assert 'fecha_creacion' not in valores
    assert 'fecha_modificacion' not in valores
    assert valores['marca'] == 'Dell'
    assert valores['id_ubicacion'] == 1


def test_user_to_session_only_exposes_public_fields():
    user = User(id=3, username='ana', email='ana@educa.madrid.org', password='hash', rol=UserRole.TECNICO)
    assert user.to_session() == {'id': 3, 'username': 'ana', 'email': 'ana@educa.madrid.org', 'rol': 'tecnico'}

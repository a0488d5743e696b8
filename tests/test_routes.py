import io
import time

from domain.models import AssetKind, Incident, Maintenance
from conftest import CLAVE, DOMINIO, incidencias_de, iniciar_sesion


def _texto(response):
    return response.get_data(as_text=True)


# --- Autenticación ---
def test_root_redirects_to_login_page(client):
    response = client.get('/')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/logup')


def test_signup_rejects_foreign_domain(client, repo):
    response = client.post('/signup', data={'username': 'x', 'email': 'x@gmail.com', 'password': CLAVE},
                           follow_redirects=True)
    assert f'Solo se permite el registro con correos de {DOMINIO}' in _texto(response)
    assert repo.get_user_by_email('x@gmail.com') is None


def test_signup_and_login(client, repo):
    client.post('/signup', data={'username': 'luis', 'email': f'luis@{DOMINIO}', 'password': CLAVE})

    response = client.post('/login', data={'email': f'luis@{DOMINIO}', 'password': CLAVE})

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/index')
    with client.session_transaction() as sess:
        assert sess['user']['rol'] == 'usuario'
        assert 'created_at' in sess
    assert repo.get_user_by_email(f'luis@{DOMINIO}').fecha_ultimo_acceso is not None


def test_login_with_bad_credentials(client, usuario):
    response = client.post('/login', data={'email': usuario.email, 'password': 'mal'}, follow_redirects=True)
    assert 'Credenciales inválidas' in _texto(response)


def test_seeded_admin_can_log_in(client, app):
    response = client.post('/login', data={'email': app.config['ADMIN_EMAIL'],
                                           'password': app.config['ADMIN_PASSWORD']})
    assert response.headers['Location'].endswith('/index')


def test_logout_clears_session(client, usuario):
    iniciar_sesion(client, usuario)
    client.get('/logout')
    with client.session_transaction() as sess:
        assert 'user' not in sess


# --- Control de acceso ---
def test_protected_page_without_session(client):
    response = client.get('/equipos/listar')
    assert response.headers['Location'].endswith('/logup')


def test_forbidden_role_goes_back_home(client, usuario):
    iniciar_sesion(client, usuario)
    response = client.get('/equipos/listar', follow_redirects=True)
    assert response.request.path == '/index'
    assert 'No tienes permisos para acceder a esta página.' in _texto(response)


def test_expired_session_is_destroyed(client, tecnico):
    iniciar_sesion(client, tecnico, created_at=time.time() - 31 * 60)
    response = client.get('/equipos/listar')
    assert response.headers['Location'].endswith('/logup')
    with client.session_transaction() as sess:
        assert 'user' not in sess


def test_deleted_account_session_is_destroyed(client, repo, usuario):
    iniciar_sesion(client, usuario)
    repo.delete_user(usuario.id)
    response = client.get('/index', follow_redirects=True)
    assert 'Tu cuenta ha sido eliminada' in _texto(response)
    with client.session_transaction() as sess:
        assert 'user' not in sess


def test_activity_refreshes_session_timestamp(client, tecnico):
    antes = time.time() - 20 * 60
    iniciar_sesion(client, tecnico, created_at=antes)
    assert client.get('/index').status_code == 200
    with client.session_transaction() as sess:
        assert sess['created_at'] > antes


# --- Equipos ---
def test_create_and_filter_equipment(client, repo, tecnico, ubicacion):
    iniciar_sesion(client, tecnico)
    for marca in ('Dell', 'Lenovo'):
        response = client.post('/equipos/alta', data={'marca': marca, 'modelo': 'X',
                                                      'id_ubicacion': ubicacion.id_ubicacion})
        assert response.headers['Location'].endswith('/equipos/listar')

    response = client.get('/equipos/listar?marca=Dell')

    assert response.status_code == 200
    assert 'Dell' in _texto(response)
    assert 'Lenovo' not in _texto(response)


def test_equipment_without_location_is_flashed(client, repo, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.post('/equipos/alta', data={'marca': 'Dell'}, follow_redirects=True)
    assert 'Faltan campos obligatorios' in _texto(response)
    assert repo.list_equipment() == []


def test_edit_missing_equipment_returns_404(client, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.get('/equipos/actualizar/12345')
    assert response.status_code == 404
    assert _texto(response) == 'Equipo no encontrado'


def test_equipment_by_location_json(client, usuario, ubicacion, equipo):
    iniciar_sesion(client, usuario)
    response = client.get(f'/equipos/ubicacion/{ubicacion.id_ubicacion}')
    assert response.status_code == 200
    assert [e['id_equipo'] for e in response.get_json()] == [equipo.id_equipo]


def test_upload_without_file(client, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.post('/equipos/upload', data={}, follow_redirects=True)
    assert 'No se ha subido ningún archivo' in _texto(response)


def test_upload_unsupported_format(client, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.post('/equipos/upload', data={'file': (io.BytesIO(b'hola'), 'equipos.txt')},
                           content_type='multipart/form-data', follow_redirects=True)
    assert 'Formato de archivo no soportado' in _texto(response)


def test_upload_csv(client, repo, tecnico, ubicacion):
    iniciar_sesion(client, tecnico)
    csv = f"marca,modelo,id_ubicacion\nAcer,Aspire,{ubicacion.id_ubicacion}\n".encode('utf-8')
    response = client.post('/equipos/upload', data={'file': (io.BytesIO(csv), 'equipos.csv')},
                           content_type='multipart/form-data', follow_redirects=True)
    assert 'Equipos cargados exitosamente' in _texto(response)
    assert [e['marca'] for e in repo.list_equipment()] == ['Acer']


# --- Incidencias y mantenimiento ---
def test_user_reports_incident_with_own_id(client, repo, usuario, ubicacion, equipo):
    iniciar_sesion(client, usuario)
    response = client.post('/incidencias_equipos/alta', data={
        'descripcion_incidencia': 'No enciende', 'fecha_reporte': '2024-05-01', 'prioridad': 'alta',
        'id_ubicacion': ubicacion.id_ubicacion, 'id_equipo': equipo.id_equipo,
    })
    assert response.headers['Location'].endswith('/incidencias_equipos/listar')

    incidencia = incidencias_de(repo, AssetKind.EQUIPO, equipo.id_equipo)[0]
    assert incidencia['id_usuario'] == usuario.id
    assert incidencia['estado'] == 'abierta'


def test_completed_maintenance_through_web_closes_incidents(client, repo, tecnico, ubicacion, equipo):
    ids = [repo.create_incident(Incident(descripcion_incidencia=d, id_usuario=tecnico.id,
                                         id_ubicacion=ubicacion.id_ubicacion,
                                         id_equipo=equipo.id_equipo)).id_incidencia
           for d in ('Pantalla', 'Ventilador')]
    iniciar_sesion(client, tecnico)

    client.post('/mantenimiento_equipos/alta', data={
        'tipo': 'correctivo', 'estado': 'completado', 'fecha_mantenimiento': '2024-05-02',
        'id_ubicacion': ubicacion.id_ubicacion, 'id_equipo': equipo.id_equipo,
    })

    assert [repo.get_incident(i).estado for i in ids] == ['cerrada', 'cerrada']


def test_maintenance_listing_is_forbidden_for_users(client, usuario):
    iniciar_sesion(client, usuario)
    response = client.get('/mantenimiento_hardware/listar')
    assert response.headers['Location'].endswith('/index')


def test_maintenance_listing_shows_related_incidents(client, repo, tecnico, ubicacion, componente):
    repo.create_incident(Incident(descripcion_incidencia='Atasco de papel', id_usuario=tecnico.id,
                                  id_ubicacion=ubicacion.id_ubicacion, id_hardware=componente.id_hardware))
    repo.create_maintenance(Maintenance(tipo='preventivo', id_usuario=tecnico.id,
                                        id_ubicacion=ubicacion.id_ubicacion, estado='pendiente',
                                        id_hardware=componente.id_hardware))
    iniciar_sesion(client, tecnico)

    response = client.get('/mantenimiento_hardware/listar?estado=pendiente')

    assert 'Atasco de papel' in _texto(response)


# --- Ubicaciones ---
def test_location_cascade_delete(client, repo, tecnico, ubicacion, equipo, componente):
    iniciar_sesion(client, tecnico)
    response = client.post(f'/ubicaciones/eliminar/{ubicacion.id_ubicacion}', follow_redirects=True)
    assert 'Ubicación eliminada exitosamente' in _texto(response)
    assert repo.list_equipment() == []
    assert repo.list_hardware() == []


def test_location_hardware_json(client, tecnico, ubicacion, componente):
    iniciar_sesion(client, tecnico)
    response = client.get(f'/ubicaciones/{ubicacion.id_ubicacion}/hardware')
    assert [h['id_hardware'] for h in response.get_json()] == [componente.id_hardware]


# --- Usuarios ---
def test_admin_cannot_delete_itself(client, repo, admin):
    iniciar_sesion(client, admin)
    response = client.post(f'/usuarios/eliminar/{admin.id}', follow_redirects=True)
    assert 'No puedes eliminar tu propia cuenta.' in _texto(response)
    assert repo.get_user_by_id(admin.id) is not None


def test_admin_creates_user_with_hashed_password(client, repo, admin):
    iniciar_sesion(client, admin)
    client.post('/usuarios/alta', data={'username': 'marta', 'email': f'marta@{DOMINIO}',
                                        'password': CLAVE, 'rol': 'tecnico'})
    creada = repo.get_user_by_email(f'marta@{DOMINIO}')
    assert creada.rol.value == 'tecnico'
    assert creada.password != CLAVE


def test_user_with_incidents_cannot_be_deleted(client, repo, admin, usuario, ubicacion, equipo):
    repo.create_incident(Incident(descripcion_incidencia='Ratón', id_usuario=usuario.id,
                                  id_ubicacion=ubicacion.id_ubicacion, id_equipo=equipo.id_equipo))
    iniciar_sesion(client, admin)
    response = client.post(f'/usuarios/eliminar/{usuario.id}', follow_redirects=True)
    assert 'no se puede eliminar' in _texto(response)
    assert repo.get_user_by_id(usuario.id) is not None


def test_users_page_requires_admin(client, tecnico):
    iniciar_sesion(client, tecnico)
    assert client.get('/usuarios/listar').headers['Location'].endswith('/index')


def test_upload_empty_csv_is_flashed(client, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.post('/equipos/upload', data={'file': (io.BytesIO(b''), 'vacio.csv')},
                           content_type='multipart/form-data')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/equipos/listar')
    with client.session_transaction() as sess:
        assert ('danger', 'No se pudo leer el archivo. Revisa que no esté vacío ni dañado.') in sess['_flashes']


def test_upload_corrupt_xlsx_is_flashed(client, repo, tecnico):
    iniciar_sesion(client, tecnico)
    response = client.post('/equipos/upload', data={'file': (io.BytesIO(b'no es un zip'), 'equipos.xlsx')},
                           content_type='multipart/form-data', follow_redirects=True)
    assert response.status_code == 200
    assert 'No se pudo leer el archivo' in _texto(response)
    assert repo.list_equipment() == []


def _incidencia_de_equipo(repo, user, ubicacion, equipo):
    return repo.create_incident(Incident(descripcion_incidencia='Pantalla rota', id_usuario=user.id,
                                         id_ubicacion=ubicacion.id_ubicacion, id_equipo=equipo.id_equipo))


def test_hardware_incident_routes_ignore_equipment_incidents(client, repo, tecnico, ubicacion, equipo, componente):
    incidencia = _incidencia_de_equipo(repo, tecnico, ubicacion, equipo)
    iniciar_sesion(client, tecnico)
    url = f'/incidencias_hardware/actualizar/{incidencia.id_incidencia}'

    assert client.get(url).status_code == 404
    response = client.post(url, data={
        'descripcion_incidencia': 'Movida', 'id_ubicacion': ubicacion.id_ubicacion,
        'id_hardware': componente.id_hardware,
    })

    assert response.status_code == 404
    guardada = repo.get_incident(incidencia.id_incidencia)
    assert guardada.id_equipo == equipo.id_equipo
    assert guardada.id_hardware is None


def test_hardware_incident_delete_ignores_equipment_incidents(client, repo, tecnico, ubicacion, equipo):
    incidencia = _incidencia_de_equipo(repo, tecnico, ubicacion, equipo)
    iniciar_sesion(client, tecnico)

    response = client.post(f'/incidencias_hardware/eliminar/{incidencia.id_incidencia}')

    assert response.status_code == 404
    assert repo.get_incident(incidencia.id_incidencia) is not None


def test_equipment_maintenance_routes_ignore_hardware_maintenance(client, repo, tecnico, ubicacion, equipo,
                                                                  componente):
    incidencia = _incidencia_de_equipo(repo, tecnico, ubicacion, equipo)
    mantenimiento = repo.create_maintenance(Maintenance(tipo='preventivo', id_usuario=tecnico.id,
                                                        id_ubicacion=ubicacion.id_ubicacion, estado='pendiente',
                                                        id_hardware=componente.id_hardware))
    iniciar_sesion(client, tecnico)
    url = f'/mantenimiento_equipos/actualizar/{mantenimiento.id_mantenimiento}'

    assert client.get(url).status_code == 404
    response = client.post(url, data={
        'tipo': 'correctivo', 'estado': 'completado', 'id_ubicacion': ubicacion.id_ubicacion,
        'id_equipo': equipo.id_equipo,
    })

    assert response.status_code == 404
    guardado = repo.get_maintenance(mantenimiento.id_mantenimiento)
    assert guardado.id_hardware == componente.id_hardware
    assert guardado.id_equipo is None
    assert repo.get_incident(incidencia.id_incidencia).estado == 'abierta'
    assert client.post(f'/mantenimiento_equipos/eliminar/{mantenimiento.id_mantenimiento}').status_code == 404
    assert repo.get_maintenance(mantenimiento.id_mantenimiento) is not None

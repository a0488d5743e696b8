import sqlite3

from flask import Blueprint, flash, redirect, render_template, request, url_for

from application.services.deletion_service import DeletionService
from domain.models import AssetKind, Incident, IncidentStatus
from presentation.forms import FilterField, build_predicates, entero, texto
from presentation.security import TODOS, current_user, get_repository, roles_required
from config import ESTADOS_INCIDENCIA, PRIORIDADES

FILTROS = {
    AssetKind.EQUIPO: [
        FilterField('fecha_reporte', 'fecha_reporte'),
        FilterField('estado', 'estado'),
        FilterField('prioridad', 'prioridad'),
        FilterField('id_ubicacion', 'id_ubicacion'),
        FilterField('fecha_creacion', 'fecha_creacion'),
        FilterField('fecha_modificacion', 'fecha_modificacion'),
    ],
    AssetKind.HARDWARE: [
        FilterField('fecha_reporte', 'fecha_reporte', '>='),
        FilterField('estado', 'estado'),
        FilterField('prioridad', 'prioridad'),
        FilterField('id_ubicacion', 'id_ubicacion'),
        FilterField('fecha_creacion', 'fecha_creacion', '>='),
        FilterField('fecha_modificacion', 'fecha_modificacion', '>='),
    ],
}

ETIQUETAS = {AssetKind.EQUIPO: 'Equipo', AssetKind.HARDWARE: 'Hardware'}


def _opciones_activo(repo, kind: AssetKind):
    if kind is AssetKind.EQUIPO:
        return repo.list_equipment_options()
    return repo.list_hardware_options()


def _desde_formulario(form, kind: AssetKind, incidencia_id=None) -> Incident:
    id_usuario = entero(form, 'id_usuario')
    if id_usuario is None:
        id_usuario = current_user()['id']
    return Incident(
        id_incidencia=incidencia_id,
        descripcion_incidencia=texto(form, 'descripcion_incidencia'),
        fecha_reporte=texto(form, 'fecha_reporte'),
        estado=texto(form, 'estado') or IncidentStatus.ABIERTA.value,
        prioridad=texto(form, 'prioridad'),
        id_ubicacion=entero(form, 'id_ubicacion'),
        id_usuario=id_usuario,
        **{kind.column: entero(form, kind.column)}
    )


def crear_blueprint(kind: AssetKind) -> Blueprint:
    nombre = 'incidencias_equipos' if kind is AssetKind.EQUIPO else 'incidencias_hardware'
    bp = Blueprint(nombre, __name__, url_prefix=f'/{nombre}')

    def _formulario(incidencia):
        repo = get_repository()
        return render_template(
            'incidencias/formulario.html', incidencia=incidencia, blueprint=nombre,
            etiqueta=ETIQUETAS[kind], campo_activo=kind.column, activos=_opciones_activo(repo, kind),
            usuarios=repo.list_users(), ubicaciones=repo.list_locations(),
            estados=ESTADOS_INCIDENCIA, prioridades=PRIORIDADES,
        )

    def _cargar(incidencia_id):
        incidencia = get_repository().get_incident(incidencia_id)
        # Cada blueprint solo ve las incidencias de su tipo de activo
        if incidencia is None or incidencia.asset_kind is not kind:
            return None
        return incidencia

    @bp.route('/alta', methods=['GET', 'POST'])
    @roles_required(*TODOS)
    def alta():
        if request.method == 'POST':
            try:
                get_repository().create_incident(_desde_formulario(request.form, kind))
            except sqlite3.IntegrityError:
                flash('Faltan campos obligatorios en la incidencia.', 'danger')
                return redirect(url_for(f'{nombre}.alta'))
            flash('Incidencia registrada correctamente.', 'success')
            return redirect(url_for(f'{nombre}.listar'))
        return _formulario(None)

    @bp.route('/listar')
    @roles_required(*TODOS)
    def listar():
        repo = get_repository()
        incidencias = repo.list_incidents(kind, build_predicates(request.args, FILTROS[kind]))
        return render_template(
            'incidencias/listar.html', incidencias=incidencias, blueprint=nombre,
            etiqueta=ETIQUETAS[kind], ubicaciones=repo.list_locations(), filtros=request.args,
            estados=ESTADOS_INCIDENCIA, prioridades=PRIORIDADES,
        )

    @bp.route('/actualizar/<int:incidencia_id>', methods=['GET', 'POST'])
    @roles_required(*TODOS)
    def actualizar(incidencia_id):
        repo = get_repository()
        incidencia = _cargar(incidencia_id)
        if not incidencia:
            return 'Incidencia no encontrada', 404

        if request.method == 'POST':
            try:
                repo.update_incident(_desde_formulario(request.form, kind, incidencia_id))
            except sqlite3.IntegrityError:
                flash('Faltan campos obligatorios en la incidencia.', 'danger')
                return redirect(url_for(f'{nombre}.actualizar', incidencia_id=incidencia_id))
            flash('Incidencia actualizada correctamente.', 'success')
            return redirect(url_for(f'{nombre}.listar'))
        return _formulario(incidencia)

    @bp.route('/eliminar/<int:incidencia_id>', methods=['POST'])
    @roles_required(*TODOS)
    def eliminar(incidencia_id):
        if not _cargar(incidencia_id):
            return 'Incidencia no encontrada', 404
        DeletionService(get_repository()).eliminar_incidencia(incidencia_id)
        flash('Incidencia eliminada exitosamente', 'success')
        return redirect(url_for(f'{nombre}.listar'))

    return bp

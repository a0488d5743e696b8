import sqlite3

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for

from application.services.deletion_service import DeletionService
from domain.models import Location
from presentation.forms import texto
from presentation.security import GESTION, TODOS, get_repository, roles_required

bp = Blueprint('ubicaciones', __name__, url_prefix='/ubicaciones')

def _desde_formulario(form, ubicacion_id=None) -> Location:
    return Location(
        id_ubicacion=ubicacion_id,
        nombre_ubicacion=texto(form, 'nombre_ubicacion'),
        departamento_responsable=texto(form, 'departamento_responsable'),
    )

@bp.route('/alta', methods=['GET', 'POST'])
@roles_required(*GESTION)
def alta():
    if request.method == 'POST':
        try:
            get_repository().create_location(_desde_formulario(request.form))
        except sqlite3.IntegrityError:
            flash('El nombre de la ubicación es obligatorio.', 'danger')
            return redirect(url_for('ubicaciones.alta'))
        flash('Ubicación registrada correctamente.', 'success')
        return redirect(url_for('ubicaciones.listar'))
    return render_template('ubicaciones/formulario.html', ubicacion=None)

@bp.route('/listar')
@roles_required(*TODOS)
def listar():
    return render_template('ubicaciones/listar.html', ubicaciones=get_repository().list_locations())

@bp.route('/actualizar/<int:ubicacion_id>', methods=['GET', 'POST'])
@roles_required(*GESTION)
def actualizar(ubicacion_id):
    repo = get_repository()
    ubicacion = repo.get_location(ubicacion_id)
    if not ubicacion:
        return 'Ubicación no encontrada', 404

    if request.method == 'POST':
        try:
            repo.update_location(_desde_formulario(request.form, ubicacion_id))
        except sqlite3.IntegrityError:
            flash('El nombre de la ubicación es obligatorio.', 'danger')
            return redirect(url_for('ubicaciones.actualizar', ubicacion_id=ubicacion_id))
        flash('Ubicación actualizada correctamente.', 'success')
        return redirect(url_for('ubicaciones.listar'))
    return render_template('ubicaciones/formulario.html', ubicacion=ubicacion)

@bp.route('/eliminar/<int:ubicacion_id>', methods=['POST'])
@roles_required(*GESTION)
def eliminar(ubicacion_id):
    DeletionService(get_repository()).eliminar_ubicacion(ubicacion_id)
    flash('Ubicación eliminada exitosamente', 'success')
    return redirect(url_for('ubicaciones.listar'))

@bp.route('/<int:ubicacion_id>/equipos')
@roles_required(*GESTION)
def equipos(ubicacion_id):
    try:
        return jsonify(get_repository().list_equipment_by_location(ubicacion_id))
    except sqlite3.Error:
        current_app.logger.exception("Error al obtener los equipos de la ubicación %s", ubicacion_id)
        return jsonify({'error': 'Error al obtener los equipos'}), 500

@bp.route('/<int:ubicacion_id>/hardware')
@roles_required(*GESTION)
def hardware(ubicacion_id):
    try:
        return jsonify(get_repository().list_hardware_by_location(ubicacion_id))
    except sqlite3.Error:
        current_app.logger.exception("Error al obtener el hardware de la ubicación %s", ubicacion_id)
        return jsonify({'error': 'Error al obtener el hardware'}), 500

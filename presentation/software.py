import sqlite3

from flask import Blueprint, flash, redirect, render_template, request, url_for

from domain.models import Software
from presentation.forms import FilterField, build_predicates, campos_texto, columnas_de
from presentation.security import GESTION, get_repository, roles_required

bp = Blueprint('software', __name__, url_prefix='/software')

CAMPOS = columnas_de(Software)

# Solo igualdad, sobre la parte de fecha
FILTROS = [
    FilterField('fecha_vencimiento', 'fecha_vencimiento'),
    FilterField('fecha_creacion', 'fecha_creacion'),
    FilterField('fecha_modificacion', 'fecha_modificacion'),
]

def _desde_formulario(form, software_id=None) -> Software:
    return Software(id_software=software_id, **campos_texto(form, CAMPOS))

@bp.route('/alta', methods=['GET', 'POST'])
@roles_required(*GESTION)
def alta():
    if request.method == 'POST':
        try:
            get_repository().create_software(_desde_formulario(request.form))
        except sqlite3.IntegrityError:
            flash('El nombre del software es obligatorio.', 'danger')
            return redirect(url_for('software.alta'))
        flash('Software registrado correctamente.', 'success')
        return redirect(url_for('software.listar'))
    return render_template('software/formulario.html', software=None)

@bp.route('/listar')
@roles_required(*GESTION)
def listar():
    software = get_repository().list_software(build_predicates(request.args, FILTROS))
    return render_template(
        'software/listar.html',
        software=software,
        fecha_vencimiento=request.args.get('fecha_vencimiento', ''),
        fecha_creacion=request.args.get('fecha_creacion', ''),
        fecha_modificacion=request.args.get('fecha_modificacion', ''),
    )

@bp.route('/actualizar/<int:software_id>', methods=['GET', 'POST'])
@roles_required(*GESTION)
def actualizar(software_id):
    repo = get_repository()
    software = repo.get_software(software_id)
    if not software:
        return 'Software no encontrado', 404

    if request.method == 'POST':
        try:
            repo.update_software(_desde_formulario(request.form, software_id))
        except sqlite3.IntegrityError:
            flash('El nombre del software es obligatorio.', 'danger')
            return redirect(url_for('software.actualizar', software_id=software_id))
        flash('Software actualizado correctamente.', 'success')
        return redirect(url_for('software.listar'))
    return render_template('software/formulario.html', software=software)

@bp.route('/eliminar/<int:software_id>', methods=['POST'])
@roles_required(*GESTION)
def eliminar(software_id):
    get_repository().delete_software(software_id)
    flash('Software eliminado exitosamente', 'success')
    return redirect(url_for('software.listar'))

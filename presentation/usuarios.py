import sqlite3

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from application.services.account_service import AccountError, AccountService
from domain.models import UserRole
from presentation.security import SOLO_ADMIN, current_user, get_repository, roles_required
from config import ROLES

bp = Blueprint('usuarios', __name__, url_prefix='/usuarios')

def _cuentas() -> AccountService:
    return AccountService(get_repository(), current_app.config['ALLOWED_EMAIL_DOMAIN'])

@bp.route('/alta', methods=['GET', 'POST'])
@roles_required(*SOLO_ADMIN)
def alta():
    if request.method == 'POST':
        form = request.form
        try:
            rol = UserRole(form.get('rol', 'usuario'))
            if not form.get('password') or not form.get('email'):
                raise AccountError('Correo y contraseña son obligatorios.')
            _cuentas().crear(form.get('username'), form['email'], form['password'], rol)
        except ValueError:
            flash('Rol no válido.', 'danger')
            return redirect(url_for('usuarios.alta'))
        except AccountError as e:
            flash(str(e), 'danger')
            return redirect(url_for('usuarios.alta'))
        flash('Usuario creado correctamente.', 'success')
        return redirect(url_for('usuarios.listar'))
    return render_template('usuarios/formulario.html', usuario=None, roles=ROLES)

@bp.route('/listar')
@roles_required(*SOLO_ADMIN)
def listar():
    return render_template('usuarios/listar.html', usuarios=get_repository().list_users())

@bp.route('/actualizar/<int:user_id>', methods=['GET', 'POST'])
@roles_required(*SOLO_ADMIN)
def actualizar(user_id):
    repo = get_repository()
    usuario = repo.get_user_by_id(user_id)
    if not usuario:
        return 'Usuario no encontrado', 404

    if request.method == 'POST':
        form = request.form
        try:
            _cuentas().actualizar(user_id, form.get('username'), form.get('email'), form.get('rol'),
                                  activo=form.get('activo') is not None, password=form.get('password'))
        except AccountError as e:
            flash(str(e), 'danger')
            return redirect(url_for('usuarios.actualizar', user_id=user_id))
        flash('Usuario actualizado correctamente.', 'success')
        return redirect(url_for('usuarios.listar'))
    return render_template('usuarios/formulario.html', usuario=usuario, roles=ROLES)

@bp.route('/eliminar/<int:user_id>', methods=['POST'])
@roles_required(*SOLO_ADMIN)
def eliminar(user_id):
    if user_id == current_user()['id']:
        flash('No puedes eliminar tu propia cuenta.', 'warning')
        return redirect(url_for('usuarios.listar'))
    try:
        get_repository().delete_user(user_id)
    except sqlite3.IntegrityError:
        flash('El usuario tiene incidencias o mantenimientos asociados y no se puede eliminar.', 'danger')
        return redirect(url_for('usuarios.listar'))
    flash('Usuario eliminado correctamente.', 'success')
    return redirect(url_for('usuarios.listar'))

# create_admin.py
"""
创建/重置后台管理员：
  flask --app app:create_app create-admin admin@example.com --password 'superpassword123'
"""
import click
from flask.cli import with_appcontext

from extensions import db
from models.admin_user import AdminUser


def create_admin(email: str, password: str) -> tuple[AdminUser, bool]:
    """返回 (user, created)；已存在则重置密码并重新启用。"""
    email = email.strip().lower()
    u = AdminUser.query.filter_by(email=email).first()
    created = u is None
    if created:
        u = AdminUser(email=email)
        db.session.add(u)
    u.set_password(password)
    u.is_active = True
    db.session.commit()
    return u, created


@click.command("create-admin")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin_command(email, password):
    if not password:
        raise click.BadParameter("password must not be empty", param_hint="--password")
    u, created = create_admin(email, password)
    if created:
        click.echo(f"✅ 管理员创建成功：{u.email}")
    else:
        click.echo(f"ℹ️ 管理员已存在，密码已重置：{u.email}")
